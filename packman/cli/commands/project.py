from __future__ import annotations

import os
from pathlib import Path

import typer

from packman.cli.commands._helpers import require_project
from packman.cli.context import build_context, open_context
from packman.core.config import (
    DEFAULT_MAX_LOG,
    ENV_LOCAL_SRC_ROOT,
    ENV_RELEASE_MANAGER_DIR,
    ENV_REMOTE_SRC_ROOT,
    ProjectConfig,
    SvnConfig,
    prompt_default,
)
from packman.core.workspace import ENV_WORKSPACE, Workspace
from packman.output.console import Style
from packman.services.project import ProjectService

project_app = typer.Typer(add_completion=False, no_args_is_help=True)


def _ask(value: str | None, label: str, default: str = "", *, hide: bool = False) -> str:
    if value is not None:
        return value
    return typer.prompt(label, default=default or None, hide_input=hide)


def _path(value: str) -> Path:
    return Path(value).expanduser().resolve()


def init(
    name: str | None = typer.Option(None, "--name", help="Project code"),
    local: str | None = typer.Option(None, "--local", help="Local working copy root"),
    server: str | None = typer.Option(None, "--server", help="Build server root"),
    release_manager: str | None = typer.Option(
        None, "--release-manager", help="Shared release history directory"
    ),
    username: str | None = typer.Option(None, "--username", help="svn user"),
    password: str | None = typer.Option(None, "--password", help="svn password"),
    max_log: int = typer.Option(DEFAULT_MAX_LOG, "--max-log", help="Latest commits to consider"),
) -> None:
    """Create the workspace here and define the project (prompts for missing values)."""
    root = Path(os.environ.get(ENV_WORKSPACE) or Path.cwd()).expanduser().resolve()
    workspace = Workspace(root=root)
    workspace.ensure()
    ctx = open_context(workspace)

    project_name = _ask(name, "Project name")
    project = ProjectConfig(
        project_name=project_name,
        local_path=_path(_ask(local, "Local path", prompt_default(ENV_LOCAL_SRC_ROOT, project_name))),
        server_path=_path(_ask(server, "Server path", prompt_default(ENV_REMOTE_SRC_ROOT, project_name))),
        release_manager_path=_path(
            _ask(
                release_manager,
                "Release manager path",
                prompt_default(ENV_RELEASE_MANAGER_DIR, project_name),
            )
        ),
        svn=SvnConfig(
            username=_ask(username, "svn username"),
            password=_ask(password, "svn password", hide=True),
            max_log=max_log,
        ),
    )

    ProjectService(store=ctx.store, config=ctx.config).save(project)
    ctx.console.success(f"project {project.project_name} saved in {workspace.root}")
    if not project.local_path.is_dir():
        ctx.console.warning(f"local path does not exist yet: {project.local_path}")


def show() -> None:
    """Show the project definition (password masked)."""
    ctx = build_context()
    project = require_project(ctx)
    console = ctx.console
    console.header(project.project_name)
    console.print(f"workspace:       {ctx.workspace.root}", Style.DIM)
    console.print(f"local path:      {project.local_path}")
    console.print(f"server path:     {project.server_path}")
    console.print(f"release manager: {project.release_manager_path}")
    console.print(f"svn username:    {project.svn.username}")
    console.print(f"svn password:    {'*' * 8 if project.svn.password else ''}")
    console.print(f"max log:         {project.svn.max_log}")


@project_app.command("delete")
def delete_cmd(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Remove the project definition."""
    ctx = build_context()
    if not yes:
        typer.confirm("Delete the project definition?", abort=True)
    removed = ProjectService(store=ctx.store, config=ctx.config).delete()
    if removed:
        ctx.console.success("project deleted")
    else:
        ctx.console.info("no project defined")


def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Remove every record of the config store (project, dependencies, ignore list)."""
    ctx = build_context()
    if not yes:
        typer.confirm("Remove all stored configuration?", abort=True)
    removed = ProjectService(store=ctx.store, config=ctx.config).reset()
    ctx.console.success(f"config store formatted ({removed} records removed)")
