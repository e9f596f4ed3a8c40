"""Project setup flows: definition, dependency scan and ignore list."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from packman.core.config import Config, ProjectConfig
from packman.core.result import Err, Ok, Result
from packman.release.errors import (
    IgnoreFileMissing,
    IgnorePatternInvalid,
    ProjectMissing,
    ScanError,
)
from packman.release.graph import scan_descriptors
from packman.release.model import AssemblyDescriptor
from packman.store.config_store import ConfigStore
from packman.store.records import StoreError
from packman.svn.client import SvnClient

__all__ = ["ProjectService", "parse_ignore_list", "svn_client_for"]

logger = logging.getLogger(__name__)


def svn_client_for(project: ProjectConfig, config: Config) -> SvnClient:
    """svn client bound to the project's working copy and credentials."""
    return SvnClient(
        project.local_path,
        username=project.svn.username or None,
        password=project.svn.password or None,
        command=config.svn.command,
    )


def parse_ignore_list(text: str) -> Result[list[str], IgnorePatternInvalid]:
    """One regular expression per line; blank lines are dropped."""
    patterns: list[str] = []
    for line in text.splitlines():
        pattern = line.strip()
        if not pattern:
            continue
        try:
            re.compile(pattern)
        except re.error as e:
            return Err(IgnorePatternInvalid(pattern=pattern, reason=str(e)))
        patterns.append(pattern)
    return Ok(patterns)


class ProjectService:
    def __init__(self, *, store: ConfigStore, config: Config) -> None:
        self._store = store
        self._config = config

    def load(self) -> Result[ProjectConfig, ProjectMissing | StoreError]:
        match self._store.load_project():
            case Err(e):
                return Err(e)
            case Ok(None):
                return Err(ProjectMissing())
            case Ok(project):
                return Ok(project)

    def save(self, project: ProjectConfig) -> None:
        self._store.save_project(project)
        logger.info("Project %s initialised at %s", project.project_name, project.local_path)

    def delete(self) -> int:
        return self._store.delete_project()

    def reset(self) -> int:
        return self._store.format()

    def scan_dependencies(self, project: ProjectConfig) -> Result[list[AssemblyDescriptor], ScanError]:
        """Rescan the checkout and replace the stored dependency graph.

        Stored records are kept untouched when the scan fails.
        """
        result = scan_descriptors(project.local_path, self._config.scan)
        if isinstance(result, Err):
            return result
        self._store.replace_dependencies(result.value)
        return result

    def import_ignore(self, path: Path) -> Result[list[str], IgnoreFileMissing | IgnorePatternInvalid]:
        """Replace the stored ignore list with the patterns of `path`."""
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.error("Ignore file not found: %s", path)
            return Err(IgnoreFileMissing(path=path))

        parsed = parse_ignore_list(text)
        if isinstance(parsed, Err):
            return parsed
        self._store.replace_ignore_patterns(parsed.value)
        return parsed
