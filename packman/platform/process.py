"""Subprocess execution with Result-based error handling.

This is the only module allowed to call `subprocess` directly. Callers get
both output streams back because some tools (svn) report failures on stderr
while still exiting 0.

Usage:
    match run(["svn", "info"], cwd=checkout):
        case Ok(output):
            print(output.stdout)
        case Err(error):
            print(f"Failed: {error.stderr}")
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from packman.core.result import Err, Ok, Result

__all__ = ["ProcessError", "ProcessOutput", "run"]


@dataclass(frozen=True, slots=True)
class ProcessOutput:
    """Captured output of a process that exited 0."""

    stdout: str
    stderr: str


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code, -1 when the process could not be started.
        stdout: Standard output (may be empty).
        stderr: Standard error, or the OS error text when not started.
        not_found: True when the executable itself does not exist.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    not_found: bool = False

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:2])
        if len(self.command) > 2:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def run(
    cmd: list[str],
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
) -> Result[ProcessOutput, ProcessError]:
    """Execute a command and capture its output.

    There is no timeout: a hanging tool blocks its caller.

    Returns:
        Ok(ProcessOutput) on exit 0, Err(ProcessError) otherwise.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            env=env,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except FileNotFoundError as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=str(e),
                not_found=True,
            )
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout or "",
                stderr=proc.stderr or "",
            )
        )

    return Ok(ProcessOutput(stdout=proc.stdout or "", stderr=proc.stderr or ""))
