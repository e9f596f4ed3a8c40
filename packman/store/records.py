"""Typed records persisted in a DocumentStore.

Every record kind is tagged by its document `scheme` and queried by it.
Reads are validated per kind so a hand-edited or outdated store fails
loudly instead of leaking half-typed dicts.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import ClassVar

from packman.core.config import DEFAULT_MAX_LOG, ProjectConfig, SvnConfig
from packman.core.result import Err, Ok, Result
from packman.core.structured import StrDict, get_int, get_str, get_str_list, get_table
from packman.release.model import AssemblyDescriptor, OutputKind

__all__ = [
    "DependencyRecord",
    "HistoryRecord",
    "IgnoreRecord",
    "ProjectRecord",
    "StoreError",
]


@dataclass(frozen=True, slots=True)
class StoreError:
    """A stored document failed validation."""

    scheme: str
    message: str


@dataclass(frozen=True, slots=True)
class ProjectRecord:
    config: ProjectConfig

    SCHEME: ClassVar[str] = "project"

    def to_document(self) -> StrDict:
        c = self.config
        return {
            "scheme": self.SCHEME,
            "project_name": c.project_name,
            "local_path": str(c.local_path),
            "server_path": str(c.server_path),
            "release_manager_path": str(c.release_manager_path),
            "svn": {
                "username": c.svn.username,
                "password": c.svn.password,
                "max_log": c.svn.max_log,
            },
        }

    @classmethod
    def from_document(cls, doc: Mapping[str, object]) -> Result[ProjectRecord, StoreError]:
        svn = get_table(doc, "svn") or {}
        fields = {
            "project_name": get_str(doc, "project_name"),
            "local_path": get_str(doc, "local_path"),
            "server_path": get_str(doc, "server_path"),
            "release_manager_path": get_str(doc, "release_manager_path"),
            "svn.username": get_str(svn, "username"),
            "svn.password": get_str(svn, "password"),
        }
        missing = [k for k, v in fields.items() if v is None]
        if missing:
            return Err(StoreError(cls.SCHEME, f"missing fields: {', '.join(missing)}"))

        return Ok(
            cls(
                ProjectConfig(
                    project_name=str(fields["project_name"]),
                    local_path=Path(str(fields["local_path"])),
                    server_path=Path(str(fields["server_path"])),
                    release_manager_path=Path(str(fields["release_manager_path"])),
                    svn=SvnConfig(
                        username=str(fields["svn.username"]),
                        password=str(fields["svn.password"]),
                        max_log=get_int(svn, "max_log") or DEFAULT_MAX_LOG,
                    ),
                )
            )
        )


@dataclass(frozen=True, slots=True)
class DependencyRecord:
    descriptor: AssemblyDescriptor

    SCHEME: ClassVar[str] = "dependency"

    def to_document(self) -> StrDict:
        d = self.descriptor
        return {
            "scheme": self.SCHEME,
            "name": d.name,
            "ext": d.output_kind.extension,
            "reference_names": list(d.references),
        }

    @classmethod
    def from_document(cls, doc: Mapping[str, object]) -> Result[DependencyRecord, StoreError]:
        name = get_str(doc, "name")
        if name is None:
            return Err(StoreError(cls.SCHEME, "missing assembly name"))
        kind = OutputKind.from_extension(get_str(doc, "ext") or "")
        if kind is None:
            return Err(StoreError(cls.SCHEME, f"{name}: unknown extension {doc.get('ext')!r}"))
        refs = get_str_list(doc, "reference_names")
        if refs is None:
            return Err(StoreError(cls.SCHEME, f"{name}: reference_names must be a string list"))
        return Ok(cls(AssemblyDescriptor(name=name, output_kind=kind, references=tuple(refs))))


@dataclass(frozen=True, slots=True)
class IgnoreRecord:
    """One ignore-list entry (a regular expression)."""

    pattern: str

    SCHEME: ClassVar[str] = "ignore"

    def to_document(self) -> StrDict:
        return {"scheme": self.SCHEME, "name": self.pattern}

    @classmethod
    def from_document(cls, doc: Mapping[str, object]) -> Result[IgnoreRecord, StoreError]:
        pattern = doc.get("name")
        if not isinstance(pattern, str) or not pattern:
            return Err(StoreError(cls.SCHEME, "ignore entry must be a non-empty string"))
        return Ok(cls(pattern))


@dataclass(frozen=True, slots=True)
class HistoryRecord:
    """Release state of one revision.

    `released_at` is None until the revision is packaged or marked released.
    """

    revision: int
    summary: str
    released_at: datetime | None = None

    SCHEME: ClassVar[str] = "history"

    @property
    def is_released(self) -> bool:
        return self.released_at is not None

    def to_document(self) -> StrDict:
        return {
            "scheme": self.SCHEME,
            "revision": self.revision,
            "summary": self.summary,
            "released_at": self.released_at.isoformat() if self.released_at else None,
        }

    @classmethod
    def from_document(cls, doc: Mapping[str, object]) -> Result[HistoryRecord, StoreError]:
        revision = get_int(doc, "revision")
        if revision is None:
            return Err(StoreError(cls.SCHEME, "revision must be an integer"))

        raw = doc.get("released_at")
        released_at: datetime | None = None
        if raw is not None:
            if not isinstance(raw, str):
                return Err(StoreError(cls.SCHEME, f"r{revision}: released_at must be a string"))
            try:
                released_at = datetime.fromisoformat(raw)
            except ValueError:
                return Err(StoreError(cls.SCHEME, f"r{revision}: invalid released_at {raw!r}"))

        summary = doc.get("summary")
        return Ok(
            cls(
                revision=revision,
                summary=summary if isinstance(summary, str) else "",
                released_at=released_at,
            )
        )
