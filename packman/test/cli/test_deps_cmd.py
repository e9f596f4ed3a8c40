from __future__ import annotations

from pathlib import Path

import pytest
import typer

from packman.cli.context import CLIContext
from packman.core.config import Config, ProjectConfig, SvnConfig
from packman.core.errors import ErrorCode
from packman.core.workspace import Workspace
from packman.output.console import MockConsole
from packman.store.config_store import ConfigStore
from packman.store.documents import DocumentStore

CORE = (
    "<Project><PropertyGroup><AssemblyName>Shop.Core</AssemblyName>"
    "<OutputType>Library</OutputType></PropertyGroup></Project>"
)
APP = (
    "<Project><PropertyGroup><AssemblyName>Shop.App</AssemblyName>"
    "<OutputType>Exe</OutputType></PropertyGroup>"
    "<ItemGroup><ProjectReference Include='..\\Core\\Core.vbproj'><Name>Shop.Core</Name></ProjectReference>"
    "</ItemGroup></Project>"
)


@pytest.fixture
def ctx(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> CLIContext:
    import packman.cli.commands.deps as deps_cmd
    import packman.cli.commands.ignore as ignore_cmd

    local = tmp_path / "shop"
    for name, text in (("Core", CORE), ("App", APP)):
        (local / "src" / name).mkdir(parents=True)
        (local / "src" / name / f"{name}.vbproj").write_text(text, encoding="utf-8")

    store = ConfigStore(DocumentStore(tmp_path / "db.json"))
    store.save_project(
        ProjectConfig(
            project_name="SHOP",
            local_path=local,
            server_path=tmp_path / "server",
            release_manager_path=tmp_path / "share",
            svn=SvnConfig(username="", password=""),
        )
    )
    ctx = CLIContext(workspace=Workspace(root=tmp_path), config=Config(), console=MockConsole(), store=store)
    monkeypatch.setattr(deps_cmd, "build_context", lambda: ctx)
    monkeypatch.setattr(ignore_cmd, "build_context", lambda: ctx)
    return ctx


def _console(ctx: CLIContext) -> MockConsole:
    assert isinstance(ctx.console, MockConsole)
    return ctx.console


def test_scan_and_list(ctx: CLIContext) -> None:
    import packman.cli.commands.deps as deps_cmd

    deps_cmd.scan_cmd()
    deps_cmd.list_cmd()

    console = _console(ctx)
    assert console.has_success()
    assert console.find("Shop.App.exe\tShop.Core")
    assert console.find("Shop.Core.dll\t")


def test_list_without_records(ctx: CLIContext) -> None:
    import packman.cli.commands.deps as deps_cmd

    deps_cmd.list_cmd()

    assert _console(ctx).find("no dependency records")


def test_scan_unknown_output_type(ctx: CLIContext, tmp_path: Path) -> None:
    import packman.cli.commands.deps as deps_cmd

    (tmp_path / "shop" / "src" / "App" / "App.vbproj").write_text(
        APP.replace("<OutputType>Exe</OutputType>", "<OutputType>Module</OutputType>"),
        encoding="utf-8",
    )

    with pytest.raises(typer.Exit) as exc:
        deps_cmd.scan_cmd()

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)
    assert _console(ctx).find("Shop.App: unknown output type 'Module'")


def test_ignore_import_and_list(ctx: CLIContext, tmp_path: Path) -> None:
    import packman.cli.commands.ignore as ignore_cmd

    path = tmp_path / "patterns.txt"
    path.write_text("Vendor\\.\nLegacy\n", encoding="utf-8")

    ignore_cmd.import_cmd(path)
    ignore_cmd.list_cmd()

    console = _console(ctx)
    assert console.has_success()
    assert console.find("Legacy")
    assert console.find("Vendor\\.")


def test_ignore_import_missing_default_file(ctx: CLIContext) -> None:
    import packman.cli.commands.ignore as ignore_cmd

    with pytest.raises(typer.Exit) as exc:
        ignore_cmd.import_cmd(None)

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert _console(ctx).find("ignore file not found")
