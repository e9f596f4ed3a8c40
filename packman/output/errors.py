"""Error presentation and exit code mapping for the release pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

from packman.core.errors import ErrorCode
from packman.output.console import Style
from packman.release.errors import (
    AssemblyFailed,
    AssemblyNotScanned,
    DescriptorAmbiguous,
    DescriptorInvalid,
    DescriptorNotFound,
    IgnoreFileMissing,
    IgnorePatternInvalid,
    PackageInitFailed,
    PackCancelled,
    PackError,
    ProjectMissing,
    UnknownOutputKind,
)
from packman.store.records import StoreError
from packman.svn.model import SvnError, SvnNotInstalled

if TYPE_CHECKING:
    from packman.output.console import ConsoleProtocol

__all__ = ["pack_error_exit_code", "print_pack_error"]


def print_pack_error(error: PackError, console: ConsoleProtocol) -> None:
    match error:
        case UnknownOutputKind(assembly=assembly, value=value, path=path):
            console.error(f"{assembly}: unknown output type {value!r}")
            console.print(f"in {path}", Style.DIM)
        case DescriptorInvalid(path=path, reason=reason):
            console.error(f"invalid project file: {path} ({reason})")
        case DescriptorNotFound(source=source):
            console.error(f"no project file found above {source}")
        case DescriptorAmbiguous(directory=directory, candidates=candidates):
            console.error(f"several project files in {directory}: {', '.join(candidates)}")
        case AssemblyNotScanned(assembly=assembly, descriptor=descriptor, hint=hint):
            console.error(f"{assembly} has no dependency record ({descriptor})")
            console.print(f"hint: {hint}", Style.DIM)
        case IgnoreFileMissing(path=path, hint=hint):
            console.error(f"ignore file not found: {path}")
            console.print(f"hint: {hint}", Style.DIM)
        case IgnorePatternInvalid(pattern=pattern, reason=reason):
            console.error(f"invalid ignore pattern {pattern!r}: {reason}")
        case PackageInitFailed(path=path, reason=reason, hint=hint):
            console.error(f"cannot recreate package directory {path}: {reason}")
            console.print(f"hint: {hint}", Style.DIM)
        case AssemblyFailed(step=step, target=target, message=message):
            console.error(f"{step} failed for {target}: {message}")
            console.print("partial package left in place", Style.DIM)
        case PackCancelled(conflicts=conflicts):
            console.warning(f"packaging cancelled ({len(conflicts)} conflicting revisions)")
        case ProjectMissing(hint=hint):
            console.error("no project configured")
            console.print(f"hint: {hint}", Style.DIM)
        case SvnError(command=command, message=message, code=code):
            prefix = f"svn {command}" if code is None else f"svn {command} ({code})"
            console.error(f"{prefix}: {message}")
        case SvnNotInstalled(command=command, hint=hint):
            console.error(f"svn command not found: {command}")
            console.print(f"hint: {hint}", Style.DIM)
        case StoreError(scheme=scheme, message=message):
            console.error(f"corrupted {scheme} record: {message}")


def pack_error_exit_code(error: PackError) -> int:
    match error:
        case IgnoreFileMissing() | IgnorePatternInvalid() | PackCancelled() | ProjectMissing():
            return int(ErrorCode.USER_ERROR)
        case (
            UnknownOutputKind()
            | DescriptorInvalid()
            | DescriptorNotFound()
            | DescriptorAmbiguous()
            | AssemblyNotScanned()
            | SvnNotInstalled()
        ):
            return int(ErrorCode.ENV_ERROR)
        case SvnError():
            return int(ErrorCode.VCS_ERROR)
        case AssemblyFailed():
            return int(ErrorCode.PACKAGE_ERROR)
        case PackageInitFailed() | StoreError():
            return int(ErrorCode.IO_ERROR)
    return int(ErrorCode.PACKAGE_ERROR)
