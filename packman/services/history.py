from __future__ import annotations

import logging

from packman.core.config import ProjectConfig
from packman.core.result import Err, Ok, Result
from packman.release.ledger import ReleaseLedger
from packman.store.records import StoreError
from packman.svn.client import SvnClient
from packman.svn.model import LogEntry, SvnError

__all__ = ["HistoryService"]

logger = logging.getLogger(__name__)


class HistoryService:
    """Keeps the release ledger in step with the repository log."""

    def __init__(self, *, project: ProjectConfig, svn: SvnClient, ledger: ReleaseLedger) -> None:
        self._project = project
        self._svn = svn
        self._ledger = ledger

    @property
    def ledger(self) -> ReleaseLedger:
        return self._ledger

    def latest(self) -> Result[list[LogEntry], SvnError]:
        """The newest `max_log` commits, newest first."""
        return self._svn.log("HEAD:1", limit=self._project.svn.max_log)

    def sync(self) -> Result[list[LogEntry], SvnError]:
        """Record the latest commits in the ledger and return them."""
        latest = self.latest()
        if isinstance(latest, Err):
            return latest
        self._ledger.sync(latest.value)
        return latest

    def pending(self) -> Result[list[LogEntry], SvnError | StoreError]:
        """Latest commits not released yet, newest first."""
        latest = self.sync()
        if isinstance(latest, Err):
            return latest
        match self._ledger.unreleased_commits(latest.value):
            case Err(e):
                return Err(e)
            case Ok(commits):
                logger.info("%d of %d latest commits pending", len(commits), len(latest.value))
                return Ok(commits)
