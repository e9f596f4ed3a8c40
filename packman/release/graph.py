"""Assembly dependency graph.

Built from the project files (`*.vbproj` / `*.csproj`) of the local checkout.
Each project file yields one node: the assembly name, its output kind and the
names it references, both through project references and through binary
references (the HintPath basename without extension).

The graph answers one question: given the assemblies whose sources changed,
which assemblies must ship? An assembly ships if it changed itself or if it
references, directly or transitively, an assembly that changed.

Usage:
    match scan_descriptors(checkout, config.scan):
        case Ok(descriptors):
            graph = ProjectDependencyGraph(descriptors)
            graph.resolve_dependencies({"Shop.Util"})
            # frozenset({"Shop.Util.dll", "Shop.App.exe"})
        case Err(e):
            print_pack_error(e, console)
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from enum import Enum, auto
from pathlib import Path, PureWindowsPath

from packman.core.config import ScanConfig
from packman.core.result import Err, Ok, Result
from packman.release.errors import DescriptorInvalid, ScanError, UnknownOutputKind
from packman.release.model import AssemblyDescriptor, OutputKind

__all__ = [
    "ProjectDependencyGraph",
    "VisitState",
    "find_descriptor_files",
    "parse_descriptor",
    "scan_descriptors",
]

logger = logging.getLogger(__name__)


def _local(tag: str) -> str:
    """Element tag without its XML namespace."""
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local(child.tag) == name]


def _child_text(element: ET.Element, name: str) -> str | None:
    for child in _children(element, name):
        text = (child.text or "").strip()
        if text:
            return text
    return None


def parse_descriptor(path: Path) -> Result[AssemblyDescriptor, ScanError]:
    """Parse one project file.

    The first PropertyGroup carrying an AssemblyName provides the name and
    the OutputType. Project references of every ItemGroup come first, then
    HintPath references; a name referenced twice is kept once.
    """
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        return Err(DescriptorInvalid(path=path, reason=f"invalid XML: {e}"))

    name: str | None = None
    output_type: str | None = None
    for group in _children(root, "PropertyGroup"):
        name = _child_text(group, "AssemblyName")
        if name:
            output_type = _child_text(group, "OutputType")
            break

    if not name:
        return Err(DescriptorInvalid(path=path, reason="no AssemblyName declared"))

    kind = OutputKind.from_output_type(output_type)
    if kind is None:
        return Err(UnknownOutputKind(assembly=name, value=output_type or "", path=path))

    groups = _children(root, "ItemGroup")
    project_refs = [
        _child_text(ref, "Name") for group in groups for ref in _children(group, "ProjectReference")
    ]
    binary_refs = [
        _child_text(ref, "HintPath") for group in groups for ref in _children(group, "Reference")
    ]
    references = [r for r in project_refs if r]
    references += [PureWindowsPath(h).stem for h in binary_refs if h]

    logger.debug("%s => [%s]", name, ", ".join(references))
    return Ok(
        AssemblyDescriptor(
            name=name,
            output_kind=kind,
            references=tuple(dict.fromkeys(references)),
        )
    )


def find_descriptor_files(root: Path, config: ScanConfig) -> list[Path]:
    """Project files under `root` matching the scan globs, minus excluded ones."""
    found: set[Path] = set()
    for pattern in config.descriptor_globs:
        found.update(p for p in root.glob(pattern) if p.is_file())
    return sorted(
        p for p in found if not any(keyword in str(p) for keyword in config.exclude_keywords)
    )


def scan_descriptors(root: Path, config: ScanConfig) -> Result[list[AssemblyDescriptor], ScanError]:
    """Parse every project file of the checkout.

    The first failing file aborts the scan; nothing partial is returned.
    """
    files = find_descriptor_files(root, config)
    logger.info("Scanning %d project files under %s", len(files), root)

    descriptors: list[AssemblyDescriptor] = []
    for path in files:
        logger.debug("Parsing %s", path)
        match parse_descriptor(path):
            case Err(e):
                logger.error("Dependency scan aborted: %s", e)
                return Err(e)
            case Ok(descriptor):
                descriptors.append(descriptor)
    return Ok(descriptors)


class VisitState(Enum):
    """Per-node traversal state of one resolve call."""

    UNVISITED = auto()
    IN_PROGRESS = auto()
    RESOLVED_TRUE = auto()
    RESOLVED_FALSE = auto()


class ProjectDependencyGraph:
    """Assemblies keyed by name, with reference edges.

    The graph is immutable once built. Traversal state is created per
    resolve call and never stored on the instance, so concurrent calls
    are independent.
    """

    def __init__(self, descriptors: Iterable[AssemblyDescriptor]) -> None:
        self._nodes: dict[str, AssemblyDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in self._nodes:
                logger.warning("Duplicate assembly %s ignored", descriptor.name)
                continue
            self._nodes[descriptor.name] = descriptor

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    @property
    def descriptors(self) -> list[AssemblyDescriptor]:
        return list(self._nodes.values())

    def get(self, name: str) -> AssemblyDescriptor | None:
        return self._nodes.get(name)

    def resolve_dependencies(self, targets: Iterable[str]) -> frozenset[str]:
        """Release closure of `targets` as `name+extension` identifiers.

        An assembly is included if it is a target or transitively references
        one. References to assemblies outside the graph never propagate.
        A node re-entered while its own traversal is still in progress counts
        as not requiring release at that point, which keeps cycles finite.
        """
        wanted = frozenset(targets)
        states: dict[str, VisitState] = {}
        return frozenset(
            node.file_name
            for node in self._nodes.values()
            if self._needs_release(node.name, wanted, states)
        )

    def _needs_release(
        self,
        name: str,
        targets: frozenset[str],
        states: dict[str, VisitState],
    ) -> bool:
        state = states.get(name, VisitState.UNVISITED)
        if state is VisitState.RESOLVED_TRUE:
            return True
        if state in (VisitState.RESOLVED_FALSE, VisitState.IN_PROGRESS):
            return False

        states[name] = VisitState.IN_PROGRESS

        if name in targets:
            logger.debug("%s is a release target", name)
            states[name] = VisitState.RESOLVED_TRUE
            return True

        node = self._nodes[name]
        required = any(
            self._needs_release(ref, targets, states)
            for ref in node.references
            if ref in self._nodes
        )

        if required:
            logger.debug("%s references a release target", name)
        states[name] = VisitState.RESOLVED_TRUE if required else VisitState.RESOLVED_FALSE
        return required
