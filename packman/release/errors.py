"""Error types for the release pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from packman.release.model import Conflict
from packman.store.records import StoreError
from packman.svn.model import SvnError, SvnNotInstalled

__all__ = [
    "AssemblyFailed",
    "AssemblyNotScanned",
    "DescriptorAmbiguous",
    "DescriptorInvalid",
    "DescriptorNotFound",
    "IgnoreFileMissing",
    "IgnorePatternInvalid",
    "PackError",
    "PackCancelled",
    "PackageInitFailed",
    "ProjectMissing",
    "ResolveError",
    "ScanError",
    "UnknownOutputKind",
]


@dataclass(frozen=True, slots=True)
class UnknownOutputKind:
    """A project file declares an output type other than Library/Exe."""

    assembly: str
    value: str
    path: Path


@dataclass(frozen=True, slots=True)
class DescriptorInvalid:
    """A project file is not parseable or lacks an assembly name."""

    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class DescriptorNotFound:
    """No ancestor directory of a changed source holds a project file."""

    source: Path


@dataclass(frozen=True, slots=True)
class DescriptorAmbiguous:
    """The nearest directory with project files holds more than one."""

    directory: Path
    candidates: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class AssemblyNotScanned:
    """A changed source belongs to a project file missing from the dependency records."""

    assembly: str
    descriptor: Path
    hint: str = "Run: packman deps scan"


@dataclass(frozen=True, slots=True)
class IgnoreFileMissing:
    path: Path
    hint: str = "Write one module pattern per line, then import again"


@dataclass(frozen=True, slots=True)
class IgnorePatternInvalid:
    pattern: str
    reason: str


@dataclass(frozen=True, slots=True)
class PackageInitFailed:
    """The package directory could not be recreated."""

    path: Path
    reason: str
    hint: str = "Close any file opened from the package directory and retry"


@dataclass(frozen=True, slots=True)
class AssemblyFailed:
    """One operation of the concurrent package assembly failed.

    Attributes:
        step: "fetch", "export-release", "export-new" or "export-base"
        target: File that failed
        message: Underlying error text
    """

    step: str
    target: Path
    message: str


@dataclass(frozen=True, slots=True)
class PackCancelled:
    """The operator declined to ship despite conflicting pending revisions."""

    conflicts: tuple[Conflict, ...]


@dataclass(frozen=True, slots=True)
class ProjectMissing:
    hint: str = "Run: packman init"


ScanError = UnknownOutputKind | DescriptorInvalid

ResolveError = DescriptorNotFound | DescriptorAmbiguous | AssemblyNotScanned

PackError = (
    UnknownOutputKind
    | DescriptorInvalid
    | DescriptorNotFound
    | DescriptorAmbiguous
    | AssemblyNotScanned
    | IgnoreFileMissing
    | IgnorePatternInvalid
    | PackageInitFailed
    | AssemblyFailed
    | PackCancelled
    | ProjectMissing
    | SvnError
    | SvnNotInstalled
    | StoreError
)
