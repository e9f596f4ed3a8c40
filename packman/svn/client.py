"""Subversion command-line client.

All operations return Result types. svn is considered failed when it exits
non-zero *or* writes anything to stderr (svn reports some errors, like a
missing path in a multi-target export, with exit code 0).

Usage:
    client = SvnClient(checkout, username="alice", password="...")

    match client.log("HEAD:1", limit=30):
        case Ok(entries):
            for entry in entries:
                print(entry.revision, entry.summary)
        case Err(e):
            print(f"svn failed ({e.code}): {e.message}")
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime
from pathlib import Path

from packman.core.result import Err, Ok, Result
from packman.platform.process import run as run_process
from packman.svn.model import Action, ChangedPath, LogEntry, SvnError

__all__ = ["SvnClient", "parse_log_xml", "extract_error_code"]

logger = logging.getLogger(__name__)

_ERROR_CODE = re.compile(r"(?<=svn: )E\d+")
_EPOCH = datetime.fromtimestamp(0, UTC)


def extract_error_code(stderr: str) -> str | None:
    """Return the first `E<digits>` token following `svn: `, if any."""
    match = _ERROR_CODE.search(stderr)
    return match.group(0) if match else None


def _parse_bool(value: str | None) -> bool:
    return (value or "").strip().lower() == "true"


def _parse_date(text: str | None) -> datetime:
    if not text:
        return _EPOCH
    return datetime.fromisoformat(text.strip())


def parse_log_xml(xml_text: str) -> list[LogEntry]:
    """Parse `svn log --xml -v` output.

    Raises:
        ValueError: on malformed XML or unknown change actions
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise ValueError(f"invalid svn log XML: {e}") from e

    entries: list[LogEntry] = []
    for node in root.iter("logentry"):
        paths: list[ChangedPath] = []
        for p in node.iterfind("paths/path"):
            paths.append(
                ChangedPath(
                    path=(p.text or "").strip(),
                    action=Action(p.get("action", "")),
                    kind=p.get("kind", ""),
                    text_mods=_parse_bool(p.get("text-mods")),
                    prop_mods=_parse_bool(p.get("prop-mods")),
                )
            )

        entries.append(
            LogEntry(
                revision=int(node.get("revision", "0")),
                author=node.findtext("author") or "",
                date=_parse_date(node.findtext("date")),
                message=node.findtext("msg") or "",
                paths=tuple(paths),
            )
        )
    return entries


class SvnClient:
    """Thin wrapper over the `svn` binary, bound to a working copy.

    Attributes:
        cwd: Working copy root; relative paths are resolved against it
        command: svn executable name or path
    """

    def __init__(
        self,
        cwd: Path,
        *,
        username: str | None = None,
        password: str | None = None,
        command: str = "svn",
    ) -> None:
        self.cwd = cwd
        self.command = command
        self._username = username
        self._password = password

    def is_available(self) -> bool:
        """False only when the svn executable cannot be found."""
        result = run_process([self.command, "--version", "--quiet"], cwd=None)
        match result:
            case Err(e):
                return not e.not_found
            case Ok(_):
                return True

    def log(self, revision: int | str, *, limit: int | None = None) -> Result[list[LogEntry], SvnError]:
        """Fetch log entries, newest first for descending ranges.

        Args:
            revision: A single revision number or an svn range such as "HEAD:1"
            limit: Maximum number of entries (svn -l)
        """
        args = ["log", "-v", "--xml", "-r", str(revision)]
        if limit is not None:
            args += ["-l", str(limit)]

        result = self._run(args)
        if isinstance(result, Err):
            return result

        try:
            return Ok(parse_log_xml(result.value))
        except ValueError as e:
            return Err(SvnError(command="log", message=str(e)))

    def log_revisions(self, revisions: list[int]) -> Result[list[LogEntry], SvnError]:
        """Fetch one log entry per revision, concurrently, in input order."""
        if not revisions:
            return Ok([])

        with ThreadPoolExecutor() as executor:
            results = list(executor.map(self.log, revisions))

        entries: list[LogEntry] = []
        for revision, result in zip(revisions, results, strict=True):
            match result:
                case Err(_):
                    return result
                case Ok(found):
                    if not found:
                        return Err(SvnError(command="log", message=f"revision {revision} not found"))
                    entries.append(found[0])
        return Ok(entries)

    def export(self, path: Path, *, revision: int, destination: Path) -> Result[None, SvnError]:
        """Materialize `path` as of `revision` at `destination`.

        Fails if the path did not exist at that revision.
        """
        result = self._run(["export", "-r", str(revision), str(path), str(destination)])
        if isinstance(result, Err):
            return result
        return Ok(None)

    def _auth_args(self) -> list[str]:
        args: list[str] = []
        if self._username:
            args += ["--username", self._username]
        if self._password:
            args += ["--password", self._password]
        if args:
            args.append("--non-interactive")
        return args

    def _run(self, args: list[str]) -> Result[str, SvnError]:
        subcommand = args[0]
        logger.debug("svn %s", " ".join(args))
        result = run_process([self.command, *args, *self._auth_args()], cwd=self.cwd)
        match result:
            case Err(e):
                stderr = e.stderr.strip()
                return Err(
                    SvnError(
                        command=subcommand,
                        message=stderr or f"svn {subcommand} failed",
                        code=extract_error_code(stderr),
                        returncode=e.returncode,
                    )
                )
            case Ok(output):
                stderr = output.stderr.strip()
                if stderr:
                    return Err(
                        SvnError(
                            command=subcommand,
                            message=stderr,
                            code=extract_error_code(stderr),
                            returncode=0,
                        )
                    )
                return Ok(output.stdout)
