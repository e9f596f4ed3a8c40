"""Changed-path classification.

Decides, for every path touched by the selected commits, how it is
released. Rules are evaluated in order; the first match wins:

1. deleted                                   -> not released
2. XML (by extension)                        -> merge review (added/modified)
3. under /schema/, except the project's own
   full-schema script, ecbeing.sql, .xls, .txt -> copied as-is
4. under /web/, except dll/exe/xml           -> copied as-is
5. VB/C# sources                             -> rebuilt assemblies
6. anything else                             -> not released
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from pathlib import Path, PurePosixPath

from packman.release.model import ClassifiedChangeSet
from packman.svn.model import Action, ChangedPath, LogEntry

__all__ = ["PathClassifier", "unique_changes"]

logger = logging.getLogger(__name__)

_XML = re.compile("xml", re.IGNORECASE)
_WEB_BINARY = re.compile("dll|exe|xml", re.IGNORECASE)
_SOURCE = re.compile("vb|cs", re.IGNORECASE)


def unique_changes(entries: Sequence[LogEntry]) -> list[ChangedPath]:
    """Flatten commits, keeping the first occurrence of each (action, path)."""
    seen: set[tuple[Action, str]] = set()
    unique: list[ChangedPath] = []
    for entry in entries:
        for change in entry.paths:
            key = (change.action, change.path)
            if key in seen:
                continue
            seen.add(key)
            unique.append(change)
    return unique


def _dedupe(paths: Iterable[Path]) -> tuple[Path, ...]:
    return tuple(dict.fromkeys(paths))


class PathClassifier:
    """Buckets svn changes of a project checkout.

    Attributes:
        project_name: Project code; `<project>.sql` under schema/ is never copied
        local_root: Root of the local working copy
    """

    def __init__(self, project_name: str, local_root: Path) -> None:
        self.project_name = project_name
        self.local_root = local_root
        self._schema_excluded = re.compile(
            rf"{re.escape(project_name)}\.sql|ecbeing\.sql|\.xls|\.txt",
            re.IGNORECASE,
        )

    def to_local(self, svn_path: str) -> Path:
        """Map a repository path onto the local working copy.

        The segments after the first one equal to the local root's directory
        name are joined onto the local root. Without such a segment the whole
        repository path is joined.
        """
        segments = [s for s in svn_path.split("/") if s]
        anchor = self.local_root.name
        if anchor in segments:
            segments = segments[segments.index(anchor) + 1 :]
        return self.local_root.joinpath(*segments)

    def classify(self, entries: Sequence[LogEntry]) -> ClassifiedChangeSet:
        """Classify every unique change of `entries`, in input order."""
        direct_copy: list[Path] = []
        merge_added: list[Path] = []
        merge_modified: list[Path] = []
        sources: list[Path] = []

        for change in unique_changes(entries):
            if change.action is Action.DELETE:
                logger.debug("deleted: %s", change.path)
                continue

            local = self.to_local(change.path)
            suffix = PurePosixPath(change.path).suffix
            name = PurePosixPath(change.path).name

            if _XML.search(suffix):
                if change.action is Action.ADD:
                    logger.debug("xml (added): %s", change.path)
                    merge_added.append(local)
                else:
                    logger.debug("xml (modified): %s", change.path)
                    merge_modified.append(local)
                continue

            if "/schema/" in change.path and not self._schema_excluded.search(name):
                logger.debug("schema: %s", change.path)
                direct_copy.append(local)
                continue

            if "/web/" in change.path and not _WEB_BINARY.search(suffix):
                logger.debug("web: %s", change.path)
                direct_copy.append(local)
                continue

            if _SOURCE.search(suffix):
                logger.debug("source: %s", change.path)
                sources.append(local)
                continue

            logger.debug("not released: %s", change.path)

        added = _dedupe(merge_added)
        added_set = set(added)
        modified = _dedupe(p for p in merge_modified if p not in added_set)

        return ClassifiedChangeSet(
            direct_copy=_dedupe(direct_copy),
            merge_added=added,
            merge_modified=modified,
            buildable_source=_dedupe(sources),
        )
