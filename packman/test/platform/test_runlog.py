"""Tests for packman.platform.runlog module."""

from __future__ import annotations

import logging
import re
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

from packman.platform.runlog import LogFormatter, configure_logging


@pytest.fixture
def packman_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger("packman")
    saved = (list(logger.handlers), logger.level)
    yield logger
    for handler in list(logger.handlers):
        if handler not in saved[0]:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(saved[1])


def _record(msg: str, level: int = logging.INFO, exc_info: object = None) -> logging.LogRecord:
    return logging.LogRecord("packman.test", level, __file__, 1, msg, None, exc_info)  # type: ignore[arg-type]


class TestLogFormatter:
    def test_fields(self) -> None:
        line = LogFormatter().format(_record("Packing r12"))
        assert re.fullmatch(
            r"time:\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}\tlevel:info\tmessage:Packing r12",
            line,
        )

    def test_stack_on_one_line(self) -> None:
        try:
            raise RuntimeError("bad")
        except RuntimeError:
            record = _record("failed", logging.ERROR, sys.exc_info())

        line = LogFormatter().format(record)

        assert "\tlevel:error\t" in line
        assert "\tstack:Traceback" in line
        assert "\n" not in line


class TestConfigureLogging:
    def test_writes_per_run_file(self, tmp_path: Path, packman_logger: logging.Logger) -> None:
        path = configure_logging(tmp_path / "logs", "DEBUG")
        logging.getLogger("packman.release.graph").debug("hello %s", "log")
        for handler in packman_logger.handlers:
            handler.flush()

        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}\.log", path.name)
        assert "message:hello log" in path.read_text(encoding="utf-8")

    def test_replaces_previous_file_handler(
        self, tmp_path: Path, packman_logger: logging.Logger
    ) -> None:
        configure_logging(tmp_path / "one")
        configure_logging(tmp_path / "two")

        files = [h for h in packman_logger.handlers if isinstance(h, logging.FileHandler)]
        assert len(files) == 1
        assert Path(files[0].baseFilename).parent == tmp_path / "two"
