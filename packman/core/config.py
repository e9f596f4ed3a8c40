"""Typed configuration.

Two layers:

- `Config`: tool settings read from the optional `packman.toml` at the
  workspace root (package directory, descriptor scan globs, svn binary, log
  level).
- `ProjectConfig`: the project being released (source checkout, build server
  location, release history location, svn credentials). It is entered once
  via `packman init` and persisted in the workspace store.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_table

__all__ = [
    "Config",
    "ConfigError",
    "LogConfig",
    "PathsConfig",
    "ProjectConfig",
    "ScanConfig",
    "SvnConfig",
    "SvnToolConfig",
    "DEFAULT_MAX_LOG",
    "load_config",
    "load_config_or_default",
    "prompt_default",
]

DEFAULT_MAX_LOG = 30
DEFAULT_DESCRIPTOR_GLOBS = ("src/**/*.vbproj", "src/**/*.csproj")

# Environment variables providing `packman init` defaults.
ENV_LOCAL_SRC_ROOT = "PACKMAN_LOCAL_SRC_ROOT"
ENV_REMOTE_SRC_ROOT = "PACKMAN_REMOTE_SRC_ROOT"
ENV_RELEASE_MANAGER_DIR = "PACKMAN_RELEASE_MANAGER_DIR"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class PathsConfig:
    """Paths relative to the workspace root."""

    package: str = "releasePackage"
    ignore_file: str = ".packIgnore"


@dataclass(frozen=True, slots=True)
class ScanConfig:
    """Project descriptor discovery.

    Globs are evaluated relative to the project's local checkout. Any
    descriptor path containing one of `exclude_keywords` is skipped
    (template projects and the like).
    """

    descriptor_globs: tuple[str, ...] = DEFAULT_DESCRIPTOR_GLOBS
    exclude_keywords: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class SvnToolConfig:
    command: str = "svn"


@dataclass(frozen=True, slots=True)
class LogConfig:
    level: str = "INFO"


@dataclass(frozen=True, slots=True)
class Config:
    """Main tool configuration container."""

    paths: PathsConfig = field(default_factory=PathsConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    svn: SvnToolConfig = field(default_factory=SvnToolConfig)
    log: LogConfig = field(default_factory=LogConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        paths: StrDict = get_table(data, "paths") or {}
        scan: StrDict = get_table(data, "scan") or {}
        svn: StrDict = get_table(data, "svn") or {}
        log: StrDict = get_table(data, "log") or {}

        globs = get_str_list(scan, "descriptor_globs")
        excludes = get_str_list(scan, "exclude_keywords")

        level = (get_str(log, "level") or "INFO").upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            raise ValueError(f"unknown log level: {level}")

        return cls(
            paths=PathsConfig(
                package=get_str(paths, "package") or "releasePackage",
                ignore_file=get_str(paths, "ignore_file") or ".packIgnore",
            ),
            scan=ScanConfig(
                descriptor_globs=tuple(globs) if globs else DEFAULT_DESCRIPTOR_GLOBS,
                exclude_keywords=tuple(excludes) if excludes else (),
            ),
            svn=SvnToolConfig(command=get_str(svn, "command") or "svn"),
            log=LogConfig(level=level),
        )


@dataclass(frozen=True, slots=True)
class SvnConfig:
    """Subversion credentials and history window.

    Attributes:
        username: Forwarded to svn as --username.
        password: Forwarded to svn as --password.
        max_log: Number of latest commits considered for history/pending lists.
    """

    username: str
    password: str
    max_log: int = DEFAULT_MAX_LOG


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    """The project being released.

    Attributes:
        project_name: Short project code, also used for the `{name}.sql` rule.
        local_path: Root of the local working copy (contains `web/`, `src/`).
        server_path: Build server location holding compiled assemblies.
        release_manager_path: Directory holding the shared release history.
        svn: Subversion credentials.
    """

    project_name: str
    local_path: Path
    server_path: Path
    release_manager_path: Path
    svn: SvnConfig


def prompt_default(env_var: str, project_name: str) -> str:
    """Default value for an init prompt, from the environment.

    `{project}` inside the variable is replaced by the lower-cased project name.
    """
    raw = os.environ.get(env_var, "")
    return raw.replace("{project}", project_name.lower())


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse `packman.toml`.

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config if the file exists, defaults otherwise.

    A present but invalid file is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
