"""Typed access to the workspace config store.

The workspace store holds the project definition, the scanned dependency
graph and the ignore list. Release history lives in a separate store (see
`packman.release.ledger`).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from packman.core.config import ProjectConfig
from packman.core.result import Err, Ok, Result
from packman.release.model import AssemblyDescriptor
from packman.store.documents import DocumentStore
from packman.store.records import (
    DependencyRecord,
    IgnoreRecord,
    ProjectRecord,
    StoreError,
)

__all__ = ["ConfigStore"]

logger = logging.getLogger(__name__)


class ConfigStore:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    # -- project -----------------------------------------------------------

    def load_project(self) -> Result[ProjectConfig | None, StoreError]:
        doc = self._store.find_one({"scheme": ProjectRecord.SCHEME})
        if doc is None:
            return Ok(None)
        return ProjectRecord.from_document(doc).map(lambda record: record.config)

    def save_project(self, config: ProjectConfig) -> None:
        """Store the project, replacing any previous definition."""
        self._store.remove({"scheme": ProjectRecord.SCHEME}, multi=True)
        self._store.insert(ProjectRecord(config).to_document())
        logger.debug("Project saved: %s (%s)", config.project_name, config.local_path)

    def delete_project(self) -> int:
        removed = self._store.remove({"scheme": ProjectRecord.SCHEME}, multi=True)
        logger.info("Project definition removed")
        return removed

    # -- dependencies --------------------------------------------------------

    def load_dependencies(self) -> Result[list[AssemblyDescriptor], StoreError]:
        descriptors: list[AssemblyDescriptor] = []
        for doc in self._store.find({"scheme": DependencyRecord.SCHEME}):
            match DependencyRecord.from_document(doc):
                case Err(e):
                    return Err(e)
                case Ok(record):
                    descriptors.append(record.descriptor)
        return Ok(descriptors)

    def replace_dependencies(self, descriptors: Sequence[AssemblyDescriptor]) -> None:
        removed = self._store.remove({"scheme": DependencyRecord.SCHEME}, multi=True)
        logger.info("Removed %d stored dependency records", removed)
        self._store.insert_many(DependencyRecord(d).to_document() for d in descriptors)
        logger.info("Stored %d dependency records", len(descriptors))

    # -- ignore list ---------------------------------------------------------

    def load_ignore_patterns(self) -> Result[list[str], StoreError]:
        patterns: list[str] = []
        for doc in self._store.find({"scheme": IgnoreRecord.SCHEME}):
            match IgnoreRecord.from_document(doc):
                case Err(e):
                    return Err(e)
                case Ok(record):
                    patterns.append(record.pattern)
        return Ok(patterns)

    def replace_ignore_patterns(self, patterns: Sequence[str]) -> None:
        self._store.remove({"scheme": IgnoreRecord.SCHEME}, multi=True)
        self._store.insert_many(IgnoreRecord(p).to_document() for p in patterns)
        logger.info("Stored %d ignore entries", len(patterns))

    # -- all -----------------------------------------------------------------

    def format(self) -> int:
        """Remove every record of every kind."""
        removed = self._store.remove({}, multi=True)
        logger.info("Config store formatted (%d records removed)", removed)
        return removed
