"""Changed sources to release targets.

A source belongs to the nearest project file above it; by convention the
project file is named after its assembly. The owning assemblies are then
expanded through the dependency graph.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from packman.core.result import Err, Ok, Result
from packman.release.errors import (
    AssemblyNotScanned,
    DescriptorAmbiguous,
    DescriptorNotFound,
    ResolveError,
)
from packman.release.graph import ProjectDependencyGraph

__all__ = ["DESCRIPTOR_SUFFIXES", "ReleaseAssemblyResolver", "find_owning_descriptor"]

logger = logging.getLogger(__name__)

DESCRIPTOR_SUFFIXES = frozenset({".vbproj", ".csproj"})


def find_owning_descriptor(source: Path) -> Result[Path, ResolveError]:
    """Walk upward from `source` to the first directory holding a project file.

    The walk ends after checking the filesystem root, or `.` for a relative
    `source`. A directory holding several project files is ambiguous and
    fails rather than guessing.
    """
    current = source
    while True:
        if current.is_dir():
            candidates = sorted(
                p for p in current.iterdir() if p.suffix.lower() in DESCRIPTOR_SUFFIXES and p.is_file()
            )
            if len(candidates) == 1:
                return Ok(candidates[0])
            if candidates:
                return Err(
                    DescriptorAmbiguous(
                        directory=current,
                        candidates=tuple(p.name for p in candidates),
                    )
                )

        parent = current.parent
        if parent == current:
            return Err(DescriptorNotFound(source=source))
        current = parent


class ReleaseAssemblyResolver:
    """Maps buildable sources to the full set of assemblies to ship."""

    def __init__(self, graph: ProjectDependencyGraph) -> None:
        self.graph = graph

    def owning_assemblies(self, sources: Iterable[Path]) -> Result[frozenset[str], ResolveError]:
        """Assembly names owning `sources`; each must be a node of the graph."""
        names: set[str] = set()
        for source in sources:
            match find_owning_descriptor(source):
                case Err(e):
                    logger.error("No project file for %s: %s", source, e)
                    return Err(e)
                case Ok(descriptor):
                    if descriptor.stem not in self.graph:
                        logger.error("%s owns %s but has no dependency record", descriptor.stem, source)
                        return Err(AssemblyNotScanned(assembly=descriptor.stem, descriptor=descriptor))
                    names.add(descriptor.stem)
        return Ok(frozenset(names))

    def resolve(self, sources: Iterable[Path]) -> Result[frozenset[str], ResolveError]:
        """Release target set (`name+extension`) for the changed sources."""
        owners = self.owning_assemblies(sources)
        if isinstance(owners, Err):
            return owners

        targets = self.graph.resolve_dependencies(owners.value)
        logger.info(
            "Changed assemblies [%s] -> release targets [%s]",
            ", ".join(sorted(owners.value)),
            ", ".join(sorted(targets)),
        )
        return Ok(targets)
