"""Tests for packman.platform.process module."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from packman.core.result import Err, Ok
from packman.platform.process import ProcessError, ProcessOutput, run


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestProcessError:
    """Test ProcessError dataclass."""

    def test_str_short_command(self) -> None:
        error = ProcessError(command=("svn", "log"), returncode=1, stdout="", stderr="")
        assert str(error) == "svn log failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("svn", "export", "-r", "12", "a", "b"),
            returncode=1,
            stdout="",
            stderr="",
        )
        assert str(error) == "svn export ... failed (exit 1)"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    """Test run with subprocess mocked."""

    @patch("subprocess.run")
    def test_success_returns_both_streams(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = _completed(stdout="out", stderr="warn")

        result = run(["svn", "info"], cwd=tmp_path)

        assert result == Ok(ProcessOutput(stdout="out", stderr="warn"))
        args, kwargs = mock_run.call_args
        assert args[0] == ["svn", "info"]
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["capture_output"] is True
        assert kwargs["check"] is False

    @patch("subprocess.run")
    def test_nonzero_exit(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(returncode=1, stderr="svn: E155007: not a working copy")

        result = run(["svn", "info"])

        assert isinstance(result, Err)
        assert result.error.returncode == 1
        assert "E155007" in result.error.stderr
        assert not result.error.not_found

    @patch("subprocess.run", side_effect=FileNotFoundError("svn"))
    def test_command_not_found(self, _mock_run: MagicMock) -> None:
        result = run(["svn", "--version"])

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert result.error.not_found

    @patch("subprocess.run", side_effect=PermissionError("denied"))
    def test_other_os_error(self, _mock_run: MagicMock) -> None:
        result = run(["svn"])

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert not result.error.not_found
        assert "denied" in result.error.stderr
