from __future__ import annotations

import os
from pathlib import Path

import typer

from packman import __version__
from packman.cli.commands.deps import deps_app
from packman.cli.commands.history import history_app, pending
from packman.cli.commands.ignore import ignore_app
from packman.cli.commands.pack import pack
from packman.cli.commands.project import init, project_app, reset, show
from packman.core.errors import ErrorCode
from packman.core.workspace import ENV_WORKSPACE


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(init)
app.command()(show)
app.command()(reset)
app.command()(pending)
app.command()(pack)

# Sub-apps
app.add_typer(project_app, name="project", help="Project definition.")
app.add_typer(deps_app, name="deps", help="Assembly dependency graph.")
app.add_typer(ignore_app, name="ignore", help="Assemblies never fetched from the server.")
app.add_typer(history_app, name="history", help="Release history.")


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    workspace: Path | None = typer.Option(
        None,
        "--workspace",
        help="Workspace root (overrides auto detection)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if workspace is not None:
        try:
            root = workspace.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --workspace: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not root.is_dir():
            typer.echo(f"error: --workspace '{root}' is not a directory", err=True)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        os.environ[ENV_WORKSPACE] = str(root)


def main() -> None:
    app()
