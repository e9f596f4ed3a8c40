from __future__ import annotations

from pathlib import Path

import typer

from packman.cli.commands._helpers import exit_on_error
from packman.cli.context import build_context
from packman.output.console import Style
from packman.services.project import ProjectService

ignore_app = typer.Typer(add_completion=False, no_args_is_help=True)


@ignore_app.command("import")
def import_cmd(
    file: Path | None = typer.Argument(None, help="Ignore list (default: workspace .packIgnore)"),
) -> None:
    """Replace the stored ignore list with the patterns of FILE."""
    ctx = build_context()
    path = ctx.workspace.root / (file or Path(ctx.config.paths.ignore_file))

    service = ProjectService(store=ctx.store, config=ctx.config)
    patterns = exit_on_error(service.import_ignore(path), ctx)

    for pattern in patterns:
        ctx.console.print(f"  {pattern}", Style.DIM)
    ctx.console.success(f"{len(patterns)} ignore patterns imported from {path}")


@ignore_app.command("list")
def list_cmd() -> None:
    """Show the stored ignore list."""
    ctx = build_context()
    patterns = exit_on_error(ctx.store.load_ignore_patterns(), ctx)
    if not patterns:
        ctx.console.info("ignore list is empty")
        return
    for pattern in patterns:
        ctx.console.print(pattern)
