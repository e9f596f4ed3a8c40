"""Release package flow.

    prepare out dir -> svn log of the selected revisions -> revisions.txt
    -> classify -> resolve release targets -> conflict check
    -> fetch targets -> concurrent copy/export -> manifest.tsv -> ledger

Every step returns a Result; the first Err ends the flow and is handed back
unchanged to the caller. A failed assembly leaves the partial package on disk.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from packman.core.config import Config, ProjectConfig
from packman.core.result import Err, Ok, Result
from packman.release.assembler import (
    PackageAssembler,
    PackageLayout,
    collect_fetch_targets,
    packed_files,
    write_manifest,
    write_revision_log,
)
from packman.release.classify import PathClassifier
from packman.release.conflicts import ConflictDetector
from packman.release.errors import PackCancelled, PackError
from packman.release.graph import ProjectDependencyGraph
from packman.release.ledger import ReleaseLedger
from packman.release.model import ClassifiedChangeSet, Conflict
from packman.release.resolver import ReleaseAssemblyResolver
from packman.store.config_store import ConfigStore
from packman.svn.client import SvnClient
from packman.svn.model import LogEntry

__all__ = ["ConfirmConflicts", "PackOutcome", "PackService"]

logger = logging.getLogger(__name__)

ConfirmConflicts = Callable[[Sequence[Conflict]], bool]


def _always(_conflicts: Sequence[Conflict]) -> bool:
    return True


@dataclass(frozen=True, slots=True)
class PackOutcome:
    layout: PackageLayout
    entries: list[LogEntry]
    changes: ClassifiedChangeSet
    release_targets: frozenset[str]
    fetched: list[Path]
    files: list[str]
    conflicts: list[Conflict]


class PackService:
    def __init__(
        self,
        *,
        project: ProjectConfig,
        config: Config,
        store: ConfigStore,
        svn: SvnClient,
        ledger: ReleaseLedger,
        protected: Sequence[Path] = (),
        max_workers: int | None = None,
    ) -> None:
        self._project = project
        self._config = config
        self._store = store
        self._svn = svn
        self._ledger = ledger
        self._protected = tuple(protected)
        self._max_workers = max_workers

    def pack(
        self,
        revisions: Sequence[int],
        *,
        out_dir: Path,
        pending: Sequence[LogEntry] = (),
        confirm: ConfirmConflicts = _always,
    ) -> Result[PackOutcome, PackError]:
        """Build the release package for `revisions` into `out_dir`.

        Args:
            revisions: Revisions to ship (order and duplicates don't matter)
            out_dir: Package directory; recreated from scratch, so it must hold
                none of the project paths nor the `protected` ones
            pending: Unreleased commits; those not selected are checked for conflicts
            confirm: Asked whether to go on when conflicts are found
        """
        selected = sorted(set(revisions))
        if not selected:
            raise ValueError("no revision selected")

        project = self._project
        assembler = PackageAssembler(
            self._svn,
            local_root=project.local_path,
            server_root=project.server_path,
            max_workers=self._max_workers,
        )

        prepared = assembler.prepare(
            out_dir, protected=(project.release_manager_path, *self._protected)
        )
        if isinstance(prepared, Err):
            return prepared
        layout = prepared.value

        logs = self._svn.log_revisions(selected)
        if isinstance(logs, Err):
            logger.error("svn log failed: %s", logs.error.message)
            return logs
        entries = logs.value
        write_revision_log(entries, layout.revision_log_path)

        classifier = PathClassifier(project.project_name, project.local_path)
        changes = classifier.classify(entries)
        logger.info(
            "Classified: %d copied, %d merge added, %d merge modified, %d sources",
            len(changes.direct_copy),
            len(changes.merge_added),
            len(changes.merge_modified),
            len(changes.buildable_source),
        )

        descriptors = self._store.load_dependencies()
        if isinstance(descriptors, Err):
            return descriptors
        resolver = ReleaseAssemblyResolver(ProjectDependencyGraph(descriptors.value))

        targets = resolver.resolve(changes.buildable_source)
        if isinstance(targets, Err):
            return targets
        release_targets = targets.value

        others = [c for c in pending if c.revision not in selected]
        detected = ConflictDetector(classifier, resolver).detect(release_targets, others)
        if isinstance(detected, Err):
            return detected
        conflicts = detected.value
        if conflicts and not confirm(conflicts):
            logger.info("Packaging cancelled on %d conflicts", len(conflicts))
            return Err(PackCancelled(conflicts=tuple(conflicts)))

        ignore = self._store.load_ignore_patterns()
        if isinstance(ignore, Err):
            return ignore
        fetch = collect_fetch_targets(project.server_path, release_targets, ignore.value)
        if isinstance(fetch, Err):
            return fetch

        assembled = assembler.assemble(selected, changes, fetch.value, layout)
        if isinstance(assembled, Err):
            return assembled

        files = packed_files(layout)
        write_manifest(files, layout.manifest_path)
        self._ledger.mark_released(selected)

        logger.info("Package ready: %s (%d files)", layout.root, len(files))
        return Ok(
            PackOutcome(
                layout=layout,
                entries=entries,
                changes=changes,
                release_targets=release_targets,
                fetched=fetch.value,
                files=files,
                conflicts=conflicts,
            )
        )
