"""Tests for packman.release.graph module."""

from __future__ import annotations

from pathlib import Path

import pytest

from packman.core.config import ScanConfig
from packman.core.result import Err, Ok
from packman.release.errors import DescriptorInvalid, UnknownOutputKind
from packman.release.graph import (
    ProjectDependencyGraph,
    find_descriptor_files,
    parse_descriptor,
    scan_descriptors,
)
from packman.release.model import AssemblyDescriptor, OutputKind

MSBUILD_NS = "http://schemas.microsoft.com/developer/msbuild/2003"


def _vbproj(
    name: str,
    output_type: str = "Library",
    *,
    project_refs: tuple[str, ...] = (),
    hint_paths: tuple[str, ...] = (),
) -> str:
    refs = "".join(
        f'<ProjectReference Include="..\\{r}\\{r}.vbproj"><Name>{r}</Name></ProjectReference>'
        for r in project_refs
    )
    hints = "".join(
        f'<Reference Include="x"><HintPath>{h}</HintPath></Reference>' for h in hint_paths
    )
    return (
        f'<?xml version="1.0" encoding="utf-8"?>'
        f'<Project ToolsVersion="4.0" xmlns="{MSBUILD_NS}">'
        f"<PropertyGroup><Configuration>Debug</Configuration></PropertyGroup>"
        f"<PropertyGroup><AssemblyName>{name}</AssemblyName><OutputType>{output_type}</OutputType></PropertyGroup>"
        f"<ItemGroup>{hints}</ItemGroup>"
        f"<ItemGroup>{refs}</ItemGroup>"
        f"</Project>"
    )


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _lib(name: str, *refs: str) -> AssemblyDescriptor:
    return AssemblyDescriptor(name, OutputKind.LIBRARY, refs)


def _exe(name: str, *refs: str) -> AssemblyDescriptor:
    return AssemblyDescriptor(name, OutputKind.EXECUTABLE, refs)


class TestParseDescriptor:
    def test_namespaced_project(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "App.vbproj",
            _vbproj(
                "Shop.App",
                "Exe",
                project_refs=("Shop.Util",),
                hint_paths=("..\\lib\\Vendor.Pdf.dll",),
            ),
        )

        result = parse_descriptor(path)

        assert result == Ok(_exe("Shop.App", "Shop.Util", "Vendor.Pdf"))

    def test_references_keep_declaration_order(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "App.vbproj",
            _vbproj(
                "Shop.App",
                "Exe",
                project_refs=("Shop.Zeta", "Shop.Alpha"),
                hint_paths=("..\\lib\\Shop.Alpha.dll", "..\\lib\\Vendor.Pdf.dll"),
            ),
        )

        descriptor = parse_descriptor(path).unwrap()

        assert descriptor.references == ("Shop.Zeta", "Shop.Alpha", "Vendor.Pdf")

    def test_executable_spelling(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "a.csproj", _vbproj("Tool", "Executable"))
        assert parse_descriptor(path) == Ok(_exe("Tool"))

    def test_unknown_output_kind(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "a.vbproj", _vbproj("Svc", "WinExe"))

        result = parse_descriptor(path)

        assert result == Err(UnknownOutputKind(assembly="Svc", value="WinExe", path=path))

    def test_malformed_xml(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "a.vbproj", "<Project>")

        result = parse_descriptor(path)

        assert isinstance(result, Err)
        assert isinstance(result.error, DescriptorInvalid)

    def test_missing_assembly_name(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "a.vbproj", "<Project><PropertyGroup/></Project>")

        result = parse_descriptor(path)

        assert isinstance(result, Err)
        assert "AssemblyName" in result.error.reason  # type: ignore[union-attr]


class TestScan:
    def test_globs_and_exclusions(self, tmp_path: Path) -> None:
        _write(tmp_path / "src" / "Core" / "Core.vbproj", _vbproj("Core"))
        _write(tmp_path / "src" / "App" / "App.csproj", _vbproj("App", "Exe"))
        _write(tmp_path / "src" / "Core.Tests" / "Core.Tests.vbproj", _vbproj("Core.Tests"))
        _write(tmp_path / "other" / "Stray.vbproj", _vbproj("Stray"))

        config = ScanConfig(exclude_keywords=("Tests",))
        files = find_descriptor_files(tmp_path, config)

        assert [p.name for p in files] == ["App.csproj", "Core.vbproj"]

    def test_first_error_aborts(self, tmp_path: Path) -> None:
        _write(tmp_path / "src" / "A" / "A.vbproj", _vbproj("A"))
        _write(tmp_path / "src" / "B" / "B.vbproj", _vbproj("B", "Unknown"))

        result = scan_descriptors(tmp_path, ScanConfig())

        assert isinstance(result, Err)
        assert isinstance(result.error, UnknownOutputKind)


class TestResolveDependencies:
    @pytest.fixture
    def graph(self) -> ProjectDependencyGraph:
        return ProjectDependencyGraph(
            [
                _lib("Core"),
                _lib("Util", "Core"),
                _exe("App", "Util", "System.Data"),
                _lib("Other"),
            ]
        )

    def test_transitive_dependents(self, graph: ProjectDependencyGraph) -> None:
        assert graph.resolve_dependencies({"Core"}) == {"Core.dll", "Util.dll", "App.exe"}

    def test_leaf_dependent_only(self, graph: ProjectDependencyGraph) -> None:
        assert graph.resolve_dependencies({"App"}) == {"App.exe"}

    def test_superset_of_targets_in_graph(self, graph: ProjectDependencyGraph) -> None:
        targets = {"Util", "Other"}
        names = {n.removesuffix(".dll").removesuffix(".exe") for n in graph.resolve_dependencies(targets)}
        assert targets <= names

    def test_idempotent(self, graph: ProjectDependencyGraph) -> None:
        first = graph.resolve_dependencies({"Util"})
        second = graph.resolve_dependencies({n.rsplit(".", 1)[0] for n in first})
        assert first == second

    def test_monotonic(self, graph: ProjectDependencyGraph) -> None:
        assert graph.resolve_dependencies({"Util"}) <= graph.resolve_dependencies({"Util", "Other"})

    def test_external_references_never_propagate(self, graph: ProjectDependencyGraph) -> None:
        assert graph.resolve_dependencies({"System.Data"}) == frozenset()

    def test_empty_targets(self, graph: ProjectDependencyGraph) -> None:
        assert graph.resolve_dependencies(set()) == frozenset()

    def test_cycle_terminates(self) -> None:
        graph = ProjectDependencyGraph([_lib("A", "B"), _lib("B", "A"), _lib("C", "B")])

        assert graph.resolve_dependencies({"A"}) == {"A.dll", "B.dll", "C.dll"}
        assert graph.resolve_dependencies({"Z"}) == frozenset()

    def test_cycle_follows_declaration_order(self) -> None:
        # Y is reached while X is still in progress, so it is settled as not
        # needing release before X finds its target T.
        graph = ProjectDependencyGraph([_lib("X", "Y", "T"), _lib("Y", "X"), _lib("T")])

        assert graph.resolve_dependencies({"T"}) == {"X.dll", "T.dll"}

    def test_self_reference(self) -> None:
        graph = ProjectDependencyGraph([_lib("A", "A")])
        assert graph.resolve_dependencies(set()) == frozenset()

    def test_calls_are_independent(self, graph: ProjectDependencyGraph) -> None:
        graph.resolve_dependencies({"Core"})
        assert graph.resolve_dependencies({"Other"}) == {"Other.dll"}

    def test_duplicate_names_keep_first(self) -> None:
        graph = ProjectDependencyGraph([_lib("A"), _exe("A")])
        assert len(graph) == 1
        assert graph.get("A") == _lib("A")


def test_scan_to_closure_end_to_end(tmp_path: Path) -> None:
    _write(tmp_path / "src" / "Core" / "Core.vbproj", _vbproj("Core"))
    _write(tmp_path / "src" / "Util" / "Util.vbproj", _vbproj("Util", project_refs=("Core",)))
    _write(
        tmp_path / "src" / "App" / "App.vbproj",
        _vbproj("App", "Exe", hint_paths=("..\\..\\bin\\Util.dll",)),
    )

    descriptors = scan_descriptors(tmp_path, ScanConfig()).unwrap()
    graph = ProjectDependencyGraph(descriptors)

    assert "App" in graph
    assert graph.resolve_dependencies({"Core"}) == {"Core.dll", "Util.dll", "App.exe"}
