"""Persistence: JSON document store and typed records."""

from packman.store.config_store import ConfigStore
from packman.store.documents import DocumentStore, StoreCorrupted
from packman.store.records import (
    DependencyRecord,
    HistoryRecord,
    IgnoreRecord,
    ProjectRecord,
    StoreError,
)

__all__ = [
    "ConfigStore",
    "DependencyRecord",
    "DocumentStore",
    "HistoryRecord",
    "IgnoreRecord",
    "ProjectRecord",
    "StoreCorrupted",
    "StoreError",
]
