from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import typer

from packman.cli.commands._helpers import exit_on_error, parse_revisions, require_project, require_svn
from packman.cli.commands.history import print_commits
from packman.cli.context import CLIContext, build_context
from packman.core.errors import ErrorCode
from packman.output.console import Style
from packman.release.ledger import ReleaseLedger
from packman.release.model import Conflict
from packman.services.history import HistoryService
from packman.services.pack import PackOutcome, PackService
from packman.services.project import svn_client_for


def pack(
    revisions: list[str] | None = typer.Argument(
        None, help="Revisions to ship (default: choose among pending commits)"
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Go on despite conflicting pending revisions"),
    out: Path | None = typer.Option(None, "--out", help="Package directory (default: releasePackage)"),
) -> None:
    """Build a release package for the selected revisions."""
    ctx = build_context()
    project = require_project(ctx)
    svn = require_svn(svn_client_for(project, ctx.config), ctx)
    ledger = ReleaseLedger.open(project.release_manager_path)

    history = HistoryService(project=project, svn=svn, ledger=ledger)
    pending = exit_on_error(history.pending(), ctx)

    selected = parse_revisions(revisions or [])
    if not selected:
        if not pending:
            ctx.console.info("no pending commits to release")
            return
        print_commits(ctx, pending)
        selected = parse_revisions([typer.prompt("Revisions to pack (comma-separated)")])
        if not selected:
            ctx.console.error("no revision selected")
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    def confirm(conflicts: Sequence[Conflict]) -> bool:
        _print_conflicts(ctx, conflicts)
        if yes:
            return True
        return typer.confirm("Pack anyway?", default=False)

    service = PackService(
        project=project,
        config=ctx.config,
        store=ctx.store,
        svn=svn,
        ledger=ledger,
        protected=(ctx.workspace.state_dir,),
    )
    out_dir = ctx.workspace.root / (out or Path(ctx.config.paths.package))
    outcome = exit_on_error(
        service.pack(selected, out_dir=out_dir, pending=pending, confirm=confirm),
        ctx,
    )
    _print_outcome(ctx, outcome)


def _print_conflicts(ctx: CLIContext, conflicts: Sequence[Conflict]) -> None:
    ctx.console.warning("pending revisions also change assemblies of this release:")
    for c in conflicts:
        ctx.console.print(f"  r{c.revision} {c.summary} [{', '.join(sorted(c.assemblies))}]")


def _print_outcome(ctx: CLIContext, outcome: PackOutcome) -> None:
    console = ctx.console
    changes = outcome.changes
    revs = ", ".join(f"r{e.revision}" for e in outcome.entries)
    console.header(f"Package {outcome.layout.root}")
    console.print(f"revisions:   {revs}", Style.DIM)
    console.print(f"assemblies:  {', '.join(sorted(outcome.release_targets)) or '-'}")
    console.print(f"fetched:     {len(outcome.fetched)}")
    console.print(f"copied:      {len(changes.direct_copy)}")
    console.print(f"merge:       {len(changes.merge_added)} added, {len(changes.merge_modified)} modified")
    missing = sorted(outcome.release_targets - {p.name for p in outcome.fetched})
    if missing:
        console.warning(f"not found on server: {', '.join(missing)}")
    console.success(f"{len(outcome.files)} files packed")
