"""Tests for packman.release.ledger module."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from packman.core.result import Ok
from packman.release.ledger import LEDGER_FILE_NAME, ReleaseLedger
from packman.store.documents import DocumentStore
from packman.svn.model import LogEntry

STAMP = datetime(2024, 5, 3, 9, 30, tzinfo=UTC)


def _commit(revision: int, message: str = "") -> LogEntry:
    return LogEntry(
        revision=revision,
        author="alice",
        date=datetime(2024, 5, 1, tzinfo=UTC),
        message=message or f"change {revision}\ndetails",
    )


@pytest.fixture
def ledger(tmp_path: Path) -> ReleaseLedger:
    return ReleaseLedger(DocumentStore(tmp_path / LEDGER_FILE_NAME), clock=lambda: STAMP)


class TestSync:
    def test_sync_twice_keeps_one_record_per_revision(self, ledger: ReleaseLedger) -> None:
        commits = [_commit(3), _commit(2), _commit(1)]

        assert ledger.sync(commits) == 3
        assert ledger.sync(commits) == 0

        records = ledger.history().unwrap()
        assert [r.revision for r in records] == [3, 2, 1]
        assert records[0].summary == "change 3"
        assert not any(r.is_released for r in records)

    def test_duplicates_within_batch(self, ledger: ReleaseLedger) -> None:
        assert ledger.sync([_commit(5), _commit(5)]) == 1

    def test_sync_keeps_release_state(self, ledger: ReleaseLedger) -> None:
        ledger.sync([_commit(1)])
        ledger.mark_released([1])
        ledger.sync([_commit(1), _commit(2)])

        released = {r.revision: r.is_released for r in ledger.history().unwrap()}
        assert released == {1: True, 2: False}


class TestMarking:
    def test_mark_and_unmark(self, ledger: ReleaseLedger) -> None:
        ledger.sync([_commit(1), _commit(2), _commit(3)])

        assert ledger.mark_released([1, 3, 3]) == 2
        records = {r.revision: r for r in ledger.history().unwrap()}
        assert records[1].released_at == STAMP
        assert records[2].released_at is None

        assert ledger.mark_unreleased([1]) == 1
        assert not {r.revision: r for r in ledger.history().unwrap()}[1].is_released

    def test_unknown_revisions_ignored(self, ledger: ReleaseLedger) -> None:
        assert ledger.mark_released([99]) == 0
        assert ledger.mark_released([]) == 0


class TestQueries:
    def test_unreleased_commits(self, ledger: ReleaseLedger) -> None:
        latest = [_commit(4), _commit(3), _commit(2)]
        ledger.sync(latest)
        ledger.mark_released([3])

        pending = ledger.unreleased_commits(latest + [_commit(1)])

        assert isinstance(pending, Ok)
        assert [c.revision for c in pending.value] == [4, 2]

    def test_reconcile(self, ledger: ReleaseLedger) -> None:
        ledger.sync([_commit(1), _commit(2), _commit(3)])
        ledger.mark_released([1, 2])

        result = ledger.reconcile([2, 3])

        assert result == Ok(([3], [1]))
        state = {r.revision: r.is_released for r in ledger.history().unwrap()}
        assert state == {1: False, 2: True, 3: True}

    def test_open_uses_release_manager_dir(self, tmp_path: Path) -> None:
        ledger = ReleaseLedger.open(tmp_path / "share")
        ledger.sync([_commit(1)])
        assert (tmp_path / "share" / LEDGER_FILE_NAME).is_file()
