"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from packman.core.config import ProjectConfig
from packman.core.result import Err, Ok, Result
from packman.output.errors import pack_error_exit_code, print_pack_error
from packman.release.errors import PackError
from packman.services.project import ProjectService
from packman.svn.client import SvnClient
from packman.svn.model import SvnNotInstalled

if TYPE_CHECKING:
    from packman.cli.context import CLIContext

T = TypeVar("T")


def exit_on_error(result: Result[T, PackError], ctx: CLIContext) -> T:
    """Unwrap `result`, or print the error and exit with its code.

    Replaces the common pattern:
        match result:
            case Err(e):
                print_pack_error(e, ctx.console)
                raise typer.Exit(code=pack_error_exit_code(e))
            case Ok(value):
                ...
    """
    match result:
        case Err(error):
            fail(error, ctx)
        case Ok(value):
            return value


def fail(error: PackError, ctx: CLIContext) -> NoReturn:
    print_pack_error(error, ctx.console)
    raise typer.Exit(code=pack_error_exit_code(error))


def require_project(ctx: CLIContext) -> ProjectConfig:
    service = ProjectService(store=ctx.store, config=ctx.config)
    return exit_on_error(service.load(), ctx)


def require_svn(client: SvnClient, ctx: CLIContext) -> SvnClient:
    """Return `client`, or exit when its svn executable is not installed."""
    if not client.is_available():
        fail(SvnNotInstalled(command=client.command), ctx)
    return client


def parse_revisions(values: list[str]) -> list[int]:
    """Revisions from arguments; each argument may hold a comma-separated list."""
    revisions: list[int] = []
    for value in values:
        for part in value.split(","):
            part = part.strip().lstrip("r")
            if not part:
                continue
            if not part.isdigit():
                raise typer.BadParameter(f"not a revision number: {part!r}")
            revisions.append(int(part))
    return revisions
