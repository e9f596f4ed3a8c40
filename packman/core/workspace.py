"""Workspace detection and paths.

The workspace is the directory `packman` keeps its state in. It is
identified by a `.packman/` state directory created by `packman init`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "Workspace",
    "WorkspaceError",
    "ENV_WORKSPACE",
    "detect_workspace",
    "find_workspace_upward",
    "is_workspace_root",
]

ENV_WORKSPACE = "PACKMAN_WORKSPACE"
_STATE_DIR = ".packman"


@dataclass(frozen=True)
class WorkspaceError:
    """Error when workspace cannot be detected."""

    message: str
    searched_from: Path | None = None


@dataclass(frozen=True, slots=True)
class Workspace:
    """A packman workspace.

    Layout:
    - .packman/db.json   config store (project, dependencies, ignore list)
    - .packman/logs/     one log file per run
    - packman.toml       optional tool config
    - .packIgnore        default ignore list location
    - releasePackage/    default package output
    """

    root: Path

    @property
    def state_dir(self) -> Path:
        return self.root / _STATE_DIR

    @property
    def store_path(self) -> Path:
        return self.state_dir / "db.json"

    @property
    def log_dir(self) -> Path:
        return self.state_dir / "logs"

    @property
    def config_path(self) -> Path:
        return self.root / "packman.toml"

    def ensure(self) -> None:
        """Create the state directory if missing."""
        self.state_dir.mkdir(parents=True, exist_ok=True)


def is_workspace_root(path: Path) -> bool:
    return (path / _STATE_DIR).is_dir()


def find_workspace_upward(start: Path) -> Path | None:
    """Search `start` and its parents for a workspace root."""
    current = start.resolve()
    for candidate in (current, *current.parents):
        if is_workspace_root(candidate):
            return candidate
    return None


def detect_workspace(start: Path | None = None) -> Result[Workspace, WorkspaceError]:
    """Locate the workspace.

    Order: PACKMAN_WORKSPACE environment variable, then upward search from
    `start` (default: current directory).
    """
    env = os.environ.get(ENV_WORKSPACE)
    if env:
        root = Path(env).expanduser().resolve()
        if is_workspace_root(root):
            return Ok(Workspace(root=root))
        return Err(
            WorkspaceError(
                f"{ENV_WORKSPACE}={env} is not a packman workspace (missing {_STATE_DIR}/)",
                searched_from=root,
            )
        )

    origin = start or Path.cwd()
    found = find_workspace_upward(origin)
    if found is None:
        return Err(
            WorkspaceError(
                "No packman workspace found (run `packman init` first)",
                searched_from=origin,
            )
        )
    return Ok(Workspace(root=found))
