"""Subversion log data model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

__all__ = ["Action", "ChangedPath", "LogEntry", "SvnError", "SvnNotInstalled"]


class Action(Enum):
    """Change action letters as reported by `svn log -v`."""

    ADD = "A"
    MODIFY = "M"
    DELETE = "D"
    REPLACE = "R"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ChangedPath:
    """One path touched by a commit.

    Attributes:
        path: Repository-relative, slash-separated path (e.g. /trunk/web/a.aspx)
        action: What the commit did to it
        kind: "file", "dir" or "" when svn does not report it
    """

    path: str
    action: Action
    kind: str = ""
    text_mods: bool = False
    prop_mods: bool = False


@dataclass(frozen=True, slots=True)
class LogEntry:
    """A single commit."""

    revision: int
    author: str
    date: datetime
    message: str
    paths: tuple[ChangedPath, ...] = field(default_factory=tuple)

    @property
    def summary(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0].strip()


@dataclass(frozen=True, slots=True)
class SvnError:
    """Error from an svn invocation.

    Attributes:
        command: svn subcommand ("log", "export", ...)
        message: stderr text (or a synthesized message)
        code: svn error token such as "E160013", when present in stderr
        returncode: Process exit code, -1 when svn could not be started
    """

    command: str
    message: str
    code: str | None = None
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class SvnNotInstalled:
    """The svn executable could not be found."""

    command: str
    hint: str = "Install the Subversion command-line client and put svn on PATH"
