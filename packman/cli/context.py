from __future__ import annotations

from dataclasses import dataclass

import typer

from packman.core.config import Config, load_config_or_default
from packman.core.errors import ErrorCode
from packman.core.result import Err
from packman.core.workspace import Workspace, detect_workspace
from packman.output.console import ConsoleProtocol, RichConsole
from packman.platform.runlog import configure_logging
from packman.store.config_store import ConfigStore
from packman.store.documents import DocumentStore


@dataclass(frozen=True, slots=True)
class CLIContext:
    workspace: Workspace
    config: Config
    console: ConsoleProtocol
    store: ConfigStore


def open_context(workspace: Workspace) -> CLIContext:
    """Context for a known workspace; starts the run log."""
    config_result = load_config_or_default(workspace.config_path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    config = config_result.value

    configure_logging(workspace.log_dir, config.log.level)

    return CLIContext(
        workspace=workspace,
        config=config,
        console=RichConsole(),
        store=ConfigStore(DocumentStore(workspace.store_path)),
    )


def build_context() -> CLIContext:
    workspace_result = detect_workspace()
    if isinstance(workspace_result, Err):
        typer.echo(f"error: {workspace_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    return open_context(workspace_result.value)
