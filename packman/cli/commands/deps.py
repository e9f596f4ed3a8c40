from __future__ import annotations

import typer

from packman.cli.commands._helpers import exit_on_error, require_project
from packman.cli.context import build_context
from packman.services.project import ProjectService

deps_app = typer.Typer(add_completion=False, no_args_is_help=True)


@deps_app.command("scan")
def scan_cmd() -> None:
    """Rescan project files of the working copy and store the dependency graph."""
    ctx = build_context()
    project = require_project(ctx)
    service = ProjectService(store=ctx.store, config=ctx.config)

    descriptors = exit_on_error(service.scan_dependencies(project), ctx)
    ctx.console.success(f"{len(descriptors)} assemblies stored from {project.local_path}")


@deps_app.command("list")
def list_cmd() -> None:
    """List stored assemblies and what they reference."""
    ctx = build_context()
    descriptors = exit_on_error(ctx.store.load_dependencies(), ctx)
    if not descriptors:
        ctx.console.info("no dependency records (run `packman deps scan`)")
        return

    rows = [
        [d.file_name, ", ".join(d.references)]
        for d in sorted(descriptors, key=lambda d: d.name)
    ]
    ctx.console.table(["Assembly", "References"], rows)
