"""Tests for packman.services.project module."""

from __future__ import annotations

from pathlib import Path

import pytest

from packman.core.config import Config, ProjectConfig, SvnConfig
from packman.core.result import Err, Ok
from packman.release.errors import (
    IgnoreFileMissing,
    IgnorePatternInvalid,
    ProjectMissing,
    UnknownOutputKind,
)
from packman.services.project import ProjectService, parse_ignore_list, svn_client_for
from packman.store.config_store import ConfigStore
from packman.store.documents import DocumentStore


@pytest.fixture
def store(tmp_path: Path) -> ConfigStore:
    return ConfigStore(DocumentStore(tmp_path / "db.json"))


@pytest.fixture
def service(store: ConfigStore) -> ProjectService:
    return ProjectService(store=store, config=Config())


def _project(local: Path) -> ProjectConfig:
    return ProjectConfig(
        project_name="SHOP",
        local_path=local,
        server_path=local.parent / "server",
        release_manager_path=local.parent / "share",
        svn=SvnConfig(username="alice", password=""),
    )


def _vbproj(name: str, output_type: str = "Library") -> str:
    return (
        "<Project><PropertyGroup>"
        f"<AssemblyName>{name}</AssemblyName><OutputType>{output_type}</OutputType>"
        "</PropertyGroup></Project>"
    )


class TestProjectDefinition:
    def test_load_missing(self, service: ProjectService) -> None:
        assert service.load() == Err(ProjectMissing())

    def test_save_load_delete(self, service: ProjectService, tmp_path: Path) -> None:
        project = _project(tmp_path / "shop")
        service.save(project)

        assert service.load() == Ok(project)
        assert service.delete() == 1
        assert isinstance(service.load(), Err)

    def test_svn_client_for(self, tmp_path: Path) -> None:
        client = svn_client_for(_project(tmp_path / "shop"), Config())

        assert client.cwd == tmp_path / "shop"
        assert client.command == "svn"
        assert client._auth_args() == ["--username", "alice", "--non-interactive"]


class TestScanDependencies:
    def test_replaces_stored_records(
        self, service: ProjectService, store: ConfigStore, tmp_path: Path
    ) -> None:
        local = tmp_path / "shop"
        (local / "src" / "Core").mkdir(parents=True)
        (local / "src" / "Core" / "Core.vbproj").write_text(_vbproj("Core"), encoding="utf-8")

        result = service.scan_dependencies(_project(local))

        assert isinstance(result, Ok)
        assert [d.name for d in store.load_dependencies().unwrap()] == ["Core"]

    def test_failed_scan_keeps_old_records(
        self, service: ProjectService, store: ConfigStore, tmp_path: Path
    ) -> None:
        local = tmp_path / "shop"
        (local / "src" / "Bad").mkdir(parents=True)
        (local / "src" / "Bad" / "Bad.vbproj").write_text(_vbproj("Bad", "Module"), encoding="utf-8")
        store.replace_dependencies([])

        result = service.scan_dependencies(_project(local))

        assert isinstance(result, Err)
        assert isinstance(result.error, UnknownOutputKind)
        assert store.load_dependencies() == Ok([])


class TestIgnoreList:
    def test_parse_drops_blank_lines(self) -> None:
        assert parse_ignore_list("Vendor\\.\n\n  Legacy  \n") == Ok(["Vendor\\.", "Legacy"])

    def test_parse_invalid_pattern(self) -> None:
        result = parse_ignore_list("ok\nbad(\n")
        assert isinstance(result, Err)
        assert isinstance(result.error, IgnorePatternInvalid)

    def test_import_replaces(self, service: ProjectService, store: ConfigStore, tmp_path: Path) -> None:
        store.replace_ignore_patterns(["old"])
        path = tmp_path / ".packIgnore"
        path.write_text("Vendor\nThirdParty\n", encoding="utf-8")

        assert service.import_ignore(path) == Ok(["Vendor", "ThirdParty"])
        assert store.load_ignore_patterns() == Ok(["Vendor", "ThirdParty"])

    def test_import_missing_file(self, service: ProjectService, tmp_path: Path) -> None:
        path = tmp_path / "nope"
        assert service.import_ignore(path) == Err(IgnoreFileMissing(path=path))

    def test_other_os_errors_propagate(self, service: ProjectService, tmp_path: Path) -> None:
        with pytest.raises(IsADirectoryError):
            service.import_ignore(tmp_path)
