"""Detect pending revisions that touch assemblies of this release.

Shipping an assembly also ships every change made to it so far, including
changes from revisions not selected for this release. Such overlaps are
reported so the operator can decide whether to proceed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from packman.core.result import Err, Ok, Result
from packman.release.classify import PathClassifier
from packman.release.errors import ResolveError
from packman.release.model import Conflict
from packman.release.resolver import ReleaseAssemblyResolver
from packman.svn.model import LogEntry

__all__ = ["ConflictDetector"]

logger = logging.getLogger(__name__)


class ConflictDetector:
    def __init__(self, classifier: PathClassifier, resolver: ReleaseAssemblyResolver) -> None:
        self.classifier = classifier
        self.resolver = resolver

    def detect(
        self,
        release_targets: frozenset[str],
        pending: Sequence[LogEntry],
    ) -> Result[list[Conflict], ResolveError]:
        """One Conflict per pending commit sharing assemblies with the release."""
        conflicts: list[Conflict] = []
        for commit in pending:
            sources = self.classifier.classify([commit]).buildable_source
            if not sources:
                logger.info("r%d has no source changes, skipping conflict check", commit.revision)
                continue

            resolved = self.resolver.resolve(sources)
            if isinstance(resolved, Err):
                return resolved

            shared = resolved.value & release_targets
            if shared:
                logger.info("r%d also changes [%s]", commit.revision, ", ".join(sorted(shared)))
                conflicts.append(
                    Conflict(revision=commit.revision, summary=commit.summary, assemblies=shared)
                )
        return Ok(conflicts)
