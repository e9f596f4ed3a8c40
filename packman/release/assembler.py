"""Release package assembly.

Package layout:

    <out>/
      revisions.txt     one block per packaged revision
      manifest.tsv      directory<TAB>file for everything under release/ and diff/new/
      release/          ready-to-deploy files (built assemblies + as-is files)
      diff/base/        merge files as of the revision before the first one packaged
      diff/new/         merge files as of the last revision packaged

Built assemblies are copied from the build server; every other file is
exported from svn at a fixed revision. All copies and exports run
concurrently; the first failure fails the package and whatever was already
written stays on disk for inspection.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from packman.core.result import Err, Ok, Result
from packman.platform.files import atomic_write_text, copy_file, list_files, recreate_dir
from packman.release.errors import AssemblyFailed, IgnorePatternInvalid, PackageInitFailed
from packman.release.model import ClassifiedChangeSet
from packman.svn.model import LogEntry, SvnError

__all__ = [
    "Exporter",
    "PackageAssembler",
    "PackageLayout",
    "collect_fetch_targets",
    "format_revision_log",
    "packed_files",
    "write_manifest",
    "write_revision_log",
]

logger = logging.getLogger(__name__)

REVISION_LOG_NAME = "revisions.txt"
MANIFEST_NAME = "manifest.tsv"
PROTECTED_DIR_HINT = "Choose a package directory that holds no project data"

_ARTIFACT_SUFFIXES = frozenset({".dll", ".exe"})
_SKIPPED_DIRS = frozenset({"debug", "obj", "batch"})
_DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


class Exporter(Protocol):
    """The slice of SvnClient the assembler needs."""

    def export(self, path: Path, *, revision: int, destination: Path) -> Result[None, SvnError]: ...


@dataclass(frozen=True, slots=True)
class PackageLayout:
    root: Path

    @property
    def release_dir(self) -> Path:
        return self.root / "release"

    @property
    def diff_dir(self) -> Path:
        return self.root / "diff"

    @property
    def diff_base_dir(self) -> Path:
        return self.diff_dir / "base"

    @property
    def diff_new_dir(self) -> Path:
        return self.diff_dir / "new"

    @property
    def revision_log_path(self) -> Path:
        return self.root / REVISION_LOG_NAME

    @property
    def manifest_path(self) -> Path:
        return self.root / MANIFEST_NAME


def collect_fetch_targets(
    server_root: Path,
    assemblies: Iterable[str],
    ignore_patterns: Sequence[str] = (),
) -> Result[list[Path], IgnorePatternInvalid]:
    """Built assemblies on the server that belong to this release.

    Candidates are `.dll`/`.exe` files outside the top-level `src/` tree and
    outside any debug/obj/batch directory. A candidate is dropped when an
    ignore pattern matches its server-relative path, and kept when one of the
    assembly file names occurs in that path.
    """
    compiled: list[re.Pattern[str]] = []
    for pattern in ignore_patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            return Err(IgnorePatternInvalid(pattern=pattern, reason=str(e)))

    names = sorted(set(assemblies))
    if not names:
        return Ok([])

    targets: list[Path] = []
    for path in sorted(server_root.rglob("*")):
        if path.suffix.lower() not in _ARTIFACT_SUFFIXES or not path.is_file():
            continue
        rel = path.relative_to(server_root)
        if rel.parts[0] == "src":
            continue
        if any(part.lower() in _SKIPPED_DIRS for part in rel.parts[:-1]):
            continue
        rel_str = rel.as_posix()
        if any(p.search(rel_str) for p in compiled):
            logger.debug("ignored: %s", rel_str)
            continue
        if any(name in rel_str for name in names):
            targets.append(path)

    logger.info("%d fetch targets for %d assemblies", len(targets), len(names))
    return Ok(targets)


@dataclass(frozen=True, slots=True)
class _Task:
    step: str
    target: Path
    run: Callable[[], Result[Path, str]]


class PackageAssembler:
    """Writes the package tree for a set of revisions.

    Attributes:
        exporter: svn export capability
        local_root: Working copy root; exported paths keep their position below it
        server_root: Build server root; fetched assemblies keep their position below it
        max_workers: Thread pool size (None: executor default)
    """

    def __init__(
        self,
        exporter: Exporter,
        *,
        local_root: Path,
        server_root: Path,
        max_workers: int | None = None,
    ) -> None:
        self.exporter = exporter
        self.local_root = local_root
        self.server_root = server_root
        self.max_workers = max_workers

    def prepare(
        self, out_dir: Path, *, protected: Iterable[Path] = ()
    ) -> Result[PackageLayout, PackageInitFailed]:
        """Recreate `out_dir` empty. Packages are never built incrementally.

        `out_dir` must not be, or contain, the checkout, the server root or any
        of the `protected` paths: recreating it would delete them.
        """
        target = out_dir.resolve()
        for path in (self.local_root, self.server_root, *protected):
            kept = path.resolve()
            if target == kept or target in kept.parents:
                logger.error("Refusing to recreate %s: it holds %s", out_dir, kept)
                return Err(
                    PackageInitFailed(
                        path=out_dir,
                        reason=f"it contains {kept}",
                        hint=PROTECTED_DIR_HINT,
                    )
                )

        try:
            recreate_dir(out_dir)
        except OSError as e:
            logger.error("Package directory could not be recreated: %s", e)
            return Err(PackageInitFailed(path=out_dir, reason=str(e)))
        return Ok(PackageLayout(root=out_dir))

    def assemble(
        self,
        revisions: Sequence[int],
        changes: ClassifiedChangeSet,
        fetch_targets: Sequence[Path],
        layout: PackageLayout,
    ) -> Result[PackageLayout, AssemblyFailed]:
        """Copy and export everything into `layout` concurrently."""
        if not revisions:
            raise ValueError("at least one revision is required")

        newest = max(revisions)
        before_oldest = min(revisions) - 1

        tasks: list[_Task] = []
        tasks += [
            self._fetch_task(src, layout.release_dir / src.relative_to(self.server_root))
            for src in fetch_targets
        ]
        tasks += [
            self._export_task("export-release", path, newest, layout.release_dir)
            for path in changes.direct_copy
        ]
        tasks += [
            self._export_task("export-new", path, newest, layout.diff_new_dir)
            for path in changes.merge_required
        ]
        tasks += [
            self._export_task("export-base", path, before_oldest, layout.diff_base_dir)
            for path in changes.merge_modified
        ]

        logger.info(
            "Assembling %s: %d fetches, %d exports (r%d, base r%d)",
            layout.root,
            len(fetch_targets),
            len(tasks) - len(fetch_targets),
            newest,
            before_oldest,
        )

        failure = self._run_all(tasks)
        if failure is not None:
            logger.error("Package assembly failed at %s %s: %s", failure.step, failure.target, failure.message)
            return Err(failure)
        return Ok(layout)

    def _fetch_task(self, src: Path, dest: Path) -> _Task:
        def run() -> Result[Path, str]:
            return Ok(copy_file(src, dest))

        return _Task(step="fetch", target=src, run=run)

    def _export_task(self, step: str, path: Path, revision: int, dest_root: Path) -> _Task:
        dest = dest_root / path.relative_to(self.local_root)

        def run() -> Result[Path, str]:
            dest.parent.mkdir(parents=True, exist_ok=True)
            match self.exporter.export(path, revision=revision, destination=dest):
                case Err(e):
                    return Err(e.message if e.code is None else f"{e.code}: {e.message}")
                case Ok(_):
                    return Ok(dest)

        return _Task(step=step, target=path, run=run)

    def _run_all(self, tasks: list[_Task]) -> AssemblyFailed | None:
        if not tasks:
            return None

        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        futures: dict[Future[Result[Path, str]], _Task] = {
            executor.submit(task.run): task for task in tasks
        }
        try:
            pending = set(futures)
            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    failure = _failure_of(futures[future], future)
                    if failure is not None:
                        return failure
            return None
        finally:
            # In-flight siblings keep running; they are just not awaited.
            executor.shutdown(wait=False)


def _failure_of(task: _Task, future: Future[Result[Path, str]]) -> AssemblyFailed | None:
    error = future.exception()
    if error is not None:
        return AssemblyFailed(step=task.step, target=task.target, message=str(error))
    result = future.result()
    if isinstance(result, Err):
        return AssemblyFailed(step=task.step, target=task.target, message=result.error)
    return None


def packed_files(layout: PackageLayout) -> list[str]:
    """Relative POSIX paths of every file under release/ and diff/new/, sorted."""
    files = [p.as_posix() for p in list_files(layout.release_dir)]
    files += [p.as_posix() for p in list_files(layout.diff_new_dir)]
    return sorted(files)


def write_manifest(files: Sequence[str], path: Path) -> None:
    """Tab-separated directory and file name, one packed file per line."""
    lines = []
    for f in files:
        directory, _, name = f.rpartition("/")
        lines.append(f"{directory or '.'}\t{name}\n")
    atomic_write_text(path, "".join(lines))


def format_revision_log(entries: Sequence[LogEntry]) -> str:
    blocks: list[str] = []
    for entry in entries:
        lines = [
            f"Revision: {entry.revision}",
            f"Author: {entry.author}",
            f"Date: {entry.date.astimezone().strftime(_DATE_FORMAT)}",
            "Message:",
            entry.message.strip(),
            "---",
            *(f"{change.action} : {change.path}" for change in entry.paths),
        ]
        blocks.append("\n".join(lines))
    return "\n\n\n\n".join(blocks) + "\n"


def write_revision_log(entries: Sequence[LogEntry], path: Path) -> None:
    atomic_write_text(path, format_revision_log(entries))
