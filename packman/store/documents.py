"""Schemaless JSON document store.

A store is one JSON file holding a list of documents. Every document has an
`_id` and a `scheme` tag naming the record kind. Queries are mappings of field
to expected value, or field to `{"$in": [...]}`.

Writes are serialised with a lock and replace the file atomically. There are
no cross-call transactions: two processes sharing a store (the release history
can live on a network share) may interleave.
"""

from __future__ import annotations

import json
import threading
import uuid
from collections.abc import Iterable, Mapping
from pathlib import Path

from packman.core.structured import StrDict, as_obj_list, as_str_dict
from packman.platform.files import atomic_write_text

__all__ = ["DocumentStore", "StoreCorrupted", "matches"]

Query = Mapping[str, object]


class StoreCorrupted(Exception):
    """The store file exists but is not a JSON list of objects."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


def matches(doc: Mapping[str, object], query: Query) -> bool:
    """True if every query field matches the document."""
    for key, expected in query.items():
        actual = doc.get(key)
        condition = as_str_dict(expected)
        if condition is not None and "$in" in condition:
            candidates = as_obj_list(condition["$in"]) or []
            if actual not in candidates:
                return False
        elif actual != expected:
            return False
    return True


class DocumentStore:
    """File-backed document collection.

    Attributes:
        path: JSON file location (created on first write)
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.Lock()

    def insert(self, doc: Mapping[str, object]) -> StrDict:
        """Insert a document, assigning an `_id`. Returns the stored copy."""
        stored: StrDict = {"_id": uuid.uuid4().hex, **doc}
        with self._lock:
            docs = self._load()
            docs.append(stored)
            self._save(docs)
        return dict(stored)

    def insert_many(self, docs: Iterable[Mapping[str, object]]) -> list[StrDict]:
        """Insert several documents in one write."""
        stored = [{"_id": uuid.uuid4().hex, **doc} for doc in docs]
        if not stored:
            return []
        with self._lock:
            current = self._load()
            current.extend(stored)
            self._save(current)
        return [dict(d) for d in stored]

    def find(
        self,
        query: Query | None = None,
        *,
        sort: str | None = None,
        descending: bool = False,
    ) -> list[StrDict]:
        """Return copies of all matching documents."""
        with self._lock:
            docs = self._load()
        found = [dict(d) for d in docs if matches(d, query or {})]
        if sort is not None:
            found.sort(key=lambda d: _sort_key(d.get(sort)), reverse=descending)
        return found

    def find_one(self, query: Query | None = None) -> StrDict | None:
        found = self.find(query)
        return found[0] if found else None

    def remove(self, query: Query | None = None, *, multi: bool = False) -> int:
        """Remove the first (or, with multi, every) matching document.

        Returns:
            Number of documents removed.
        """
        with self._lock:
            docs = self._load()
            kept: list[StrDict] = []
            removed = 0
            for doc in docs:
                if matches(doc, query or {}) and (multi or removed == 0):
                    removed += 1
                    continue
                kept.append(doc)
            if removed:
                self._save(kept)
        return removed

    def update(self, query: Query, fields: Mapping[str, object], *, multi: bool = False) -> int:
        """Set `fields` on the first (or, with multi, every) matching document.

        Returns:
            Number of documents updated.
        """
        with self._lock:
            docs = self._load()
            updated = 0
            for doc in docs:
                if not matches(doc, query):
                    continue
                if updated and not multi:
                    break
                doc.update(fields)
                updated += 1
            if updated:
                self._save(docs)
        return updated

    def _load(self) -> list[StrDict]:
        if not self.path.exists():
            return []
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return []
        try:
            data: object = json.loads(text)
        except json.JSONDecodeError as e:
            raise StoreCorrupted(self.path, f"invalid JSON: {e}") from e

        items = as_obj_list(data)
        if items is None:
            raise StoreCorrupted(self.path, "root must be a JSON list")

        docs: list[StrDict] = []
        for item in items:
            doc = as_str_dict(item)
            if doc is None:
                raise StoreCorrupted(self.path, "every document must be a JSON object")
            docs.append(doc)
        return docs

    def _save(self, docs: list[StrDict]) -> None:
        atomic_write_text(self.path, json.dumps(docs, indent=2, ensure_ascii=False) + "\n")


def _sort_key(value: object) -> tuple[int, object]:
    # None sorts first; mixed types never compare directly.
    if value is None:
        return (0, 0)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (1, value)
    return (2, str(value))
