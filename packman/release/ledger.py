"""Release history: which revisions have already shipped.

One `history` record per revision. The ledger store lives in the release
manager directory rather than in the workspace, so a team pointing at the same
directory shares one history.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from pathlib import Path

from packman.core.result import Err, Ok, Result
from packman.store.documents import DocumentStore
from packman.store.records import HistoryRecord, StoreError
from packman.svn.model import LogEntry

__all__ = ["LEDGER_FILE_NAME", "ReleaseLedger"]

logger = logging.getLogger(__name__)

LEDGER_FILE_NAME = "packman_release.json"

_SCHEME = {"scheme": HistoryRecord.SCHEME}


def _now() -> datetime:
    return datetime.now().astimezone()


class ReleaseLedger:
    """Per-revision release state.

    Attributes:
        store: Document store holding the history records
    """

    def __init__(self, store: DocumentStore, *, clock: Callable[[], datetime] = _now) -> None:
        self.store = store
        self._clock = clock

    @classmethod
    def open(cls, release_manager_path: Path) -> ReleaseLedger:
        return cls(DocumentStore(release_manager_path / LEDGER_FILE_NAME))

    def sync(self, commits: Sequence[LogEntry]) -> int:
        """Record every commit not yet known as unreleased.

        Returns:
            Number of records inserted.
        """
        known = {doc.get("revision") for doc in self.store.find(_SCHEME)}
        fresh: dict[int, HistoryRecord] = {}
        for commit in commits:
            if commit.revision in known or commit.revision in fresh:
                continue
            fresh[commit.revision] = HistoryRecord(revision=commit.revision, summary=commit.summary)

        self.store.insert_many(record.to_document() for record in fresh.values())
        logger.info("History sync: %d new of %d commits", len(fresh), len(commits))
        return len(fresh)

    def history(self) -> Result[list[HistoryRecord], StoreError]:
        """All records, newest revision first."""
        records: list[HistoryRecord] = []
        for doc in self.store.find(_SCHEME, sort="revision", descending=True):
            match HistoryRecord.from_document(doc):
                case Err(e):
                    return Err(e)
                case Ok(record):
                    records.append(record)
        return Ok(records)

    def mark_released(self, revisions: Iterable[int]) -> int:
        revs = sorted(set(revisions))
        if not revs:
            return 0
        stamp = self._clock().isoformat()
        count = self.store.update(
            {**_SCHEME, "revision": {"$in": revs}},
            {"released_at": stamp},
            multi=True,
        )
        logger.info("Marked released: %s (%d records)", revs, count)
        return count

    def mark_unreleased(self, revisions: Iterable[int]) -> int:
        revs = sorted(set(revisions))
        if not revs:
            return 0
        count = self.store.update(
            {**_SCHEME, "revision": {"$in": revs}},
            {"released_at": None},
            multi=True,
        )
        logger.info("Marked unreleased: %s (%d records)", revs, count)
        return count

    def unreleased_commits(self, latest: Sequence[LogEntry]) -> Result[list[LogEntry], StoreError]:
        """Commits of `latest` whose record exists and is not released, in input order."""
        match self.history():
            case Err(e):
                return Err(e)
            case Ok(records):
                pending = {r.revision for r in records if not r.is_released}
        return Ok([commit for commit in latest if commit.revision in pending])

    def reconcile(self, checked: Iterable[int]) -> Result[tuple[list[int], list[int]], StoreError]:
        """Make the released set equal `checked`.

        Returns:
            (newly released, newly unreleased) revisions, ascending.
        """
        wanted = set(checked)
        match self.history():
            case Err(e):
                return Err(e)
            case Ok(records):
                released = sorted(r.revision for r in records if not r.is_released and r.revision in wanted)
                cleared = sorted(r.revision for r in records if r.is_released and r.revision not in wanted)

        self.mark_released(released)
        self.mark_unreleased(cleared)
        return Ok((released, cleared))
