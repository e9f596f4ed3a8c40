from __future__ import annotations

from collections.abc import Sequence

import typer

from packman.cli.commands._helpers import exit_on_error, parse_revisions, require_project, require_svn
from packman.cli.context import CLIContext, build_context
from packman.output.console import Style
from packman.release.ledger import ReleaseLedger
from packman.services.history import HistoryService
from packman.services.project import svn_client_for
from packman.store.records import HistoryRecord
from packman.svn.model import LogEntry

history_app = typer.Typer(add_completion=False)

_DATE_FORMAT = "%Y/%m/%d %H:%M"


def history_service(ctx: CLIContext, *, online: bool = False) -> HistoryService:
    """History service for the project; `online` commands first check that svn is installed."""
    project = require_project(ctx)
    svn = svn_client_for(project, ctx.config)
    if online:
        require_svn(svn, ctx)
    return HistoryService(
        project=project,
        svn=svn,
        ledger=ReleaseLedger.open(project.release_manager_path),
    )


def print_commits(ctx: CLIContext, commits: Sequence[LogEntry]) -> None:
    rows = [
        [str(c.revision), c.author, c.date.astimezone().strftime(_DATE_FORMAT), c.summary]
        for c in commits
    ]
    ctx.console.table(["Revision", "Author", "Date", "Summary"], rows)


def _print_records(ctx: CLIContext, records: Sequence[HistoryRecord]) -> None:
    rows = [
        [
            str(r.revision),
            r.released_at.astimezone().strftime(_DATE_FORMAT) if r.released_at else "",
            r.summary,
        ]
        for r in records
    ]
    ctx.console.table(["Revision", "Released", "Summary"], rows)


@history_app.callback(invoke_without_command=True)
def history(typer_ctx: typer.Context) -> None:
    """Release history of the project (default: list)."""
    if typer_ctx.invoked_subcommand is None:
        list_cmd()


@history_app.command("list")
def list_cmd() -> None:
    """Show recorded revisions, newest first."""
    ctx = build_context()
    service = history_service(ctx)
    records = exit_on_error(service.ledger.history(), ctx)
    if not records:
        ctx.console.info("history is empty (run `packman history sync`)")
        return
    _print_records(ctx, records)


@history_app.command("sync")
def sync_cmd() -> None:
    """Record the latest commits in the history."""
    ctx = build_context()
    service = history_service(ctx, online=True)
    latest = exit_on_error(service.latest(), ctx)
    added = service.ledger.sync(latest)
    ctx.console.success(f"{added} new revisions recorded ({len(latest)} fetched)")


@history_app.command("mark")
def mark_cmd(
    revisions: list[str] = typer.Argument(..., help="Revisions to mark released"),
) -> None:
    """Mark revisions as released."""
    ctx = build_context()
    count = history_service(ctx).ledger.mark_released(parse_revisions(revisions))
    ctx.console.success(f"{count} revisions marked released")


@history_app.command("unmark")
def unmark_cmd(
    revisions: list[str] = typer.Argument(..., help="Revisions to mark unreleased"),
) -> None:
    """Mark revisions as not released."""
    ctx = build_context()
    count = history_service(ctx).ledger.mark_unreleased(parse_revisions(revisions))
    ctx.console.success(f"{count} revisions marked unreleased")


@history_app.command("set")
def set_cmd(
    revisions: list[str] = typer.Argument(None, help="Every revision that is released"),
) -> None:
    """Make exactly REVISIONS the released ones; every other record becomes unreleased."""
    ctx = build_context()
    ledger = history_service(ctx).ledger
    released, cleared = exit_on_error(ledger.reconcile(parse_revisions(revisions or [])), ctx)
    if released:
        ctx.console.print(f"released: {', '.join(map(str, released))}")
    if cleared:
        ctx.console.print(f"unreleased: {', '.join(map(str, cleared))}")
    if not released and not cleared:
        ctx.console.print("nothing changed", Style.DIM)


def pending() -> None:
    """List unreleased commits among the latest ones."""
    ctx = build_context()
    commits = exit_on_error(history_service(ctx, online=True).pending(), ctx)
    if not commits:
        ctx.console.info("no pending commits")
        return
    print_commits(ctx, commits)
