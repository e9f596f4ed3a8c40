"""Release domain model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

__all__ = [
    "AssemblyDescriptor",
    "ClassifiedChangeSet",
    "Conflict",
    "OutputKind",
]


class OutputKind(Enum):
    """Compiled artifact kind; the value is the file extension."""

    LIBRARY = ".dll"
    EXECUTABLE = ".exe"

    @property
    def extension(self) -> str:
        return self.value

    @classmethod
    def from_output_type(cls, value: str | None) -> OutputKind | None:
        """Map a project file `OutputType` to a kind; None if unsupported."""
        match (value or "").strip():
            case "Library":
                return cls.LIBRARY
            case "Exe" | "Executable":
                return cls.EXECUTABLE
            case _:
                return None

    @classmethod
    def from_extension(cls, extension: str) -> OutputKind | None:
        for kind in cls:
            if kind.value == extension.lower():
                return kind
        return None


@dataclass(frozen=True, slots=True)
class AssemblyDescriptor:
    """One compiled assembly and the assemblies it references.

    References keep declaration order: project references first, then
    binary references. They may name assemblies that are not part of the
    scanned graph (framework or vendor binaries); those are treated as leaves.
    """

    name: str
    output_kind: OutputKind
    references: tuple[str, ...] = ()

    @property
    def file_name(self) -> str:
        """Name plus extension, e.g. `Shop.Core.dll`."""
        return self.name + self.output_kind.extension


@dataclass(frozen=True, slots=True)
class ClassifiedChangeSet:
    """Changed files bucketed by how they are released.

    All paths are local working-copy paths. Buckets are pairwise disjoint,
    keep first-seen order, and never contain deleted paths.

    Attributes:
        direct_copy: Exported as-is into the package
        merge_added: New XML files, exported for review
        merge_modified: Changed XML files, exported before/after for merge
        buildable_source: Sources whose owning assemblies must be shipped
    """

    direct_copy: tuple[Path, ...] = ()
    merge_added: tuple[Path, ...] = ()
    merge_modified: tuple[Path, ...] = ()
    buildable_source: tuple[Path, ...] = ()

    @property
    def merge_required(self) -> tuple[Path, ...]:
        return self.merge_added + self.merge_modified

    @property
    def is_empty(self) -> bool:
        return not (
            self.direct_copy or self.merge_added or self.merge_modified or self.buildable_source
        )


@dataclass(frozen=True, slots=True)
class Conflict:
    """A pending revision that touches assemblies shipped by this release."""

    revision: int
    summary: str
    assemblies: frozenset[str]
