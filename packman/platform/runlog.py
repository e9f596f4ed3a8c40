"""Run log configuration.

Each CLI invocation writes one log file named after its start time, with
tab-separated `key:value` fields so the file greps and imports cleanly:

    time:2024/05/01 10:22:03<TAB>level:info<TAB>message:Packing revisions 120, 121
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

__all__ = ["LogFormatter", "configure_logging"]

_TIME_FORMAT = "%Y/%m/%d %H:%M:%S"
_FILE_TIME_FORMAT = "%Y-%m-%d_%H-%M-%S"


class LogFormatter(logging.Formatter):
    """Single-line tab-separated formatter."""

    def format(self, record: logging.LogRecord) -> str:
        time = datetime.fromtimestamp(record.created).strftime(_TIME_FORMAT)
        line = f"time:{time}\tlevel:{record.levelname.lower()}\tmessage:{record.getMessage()}"
        if record.exc_info:
            stack = self.formatException(record.exc_info)
            line += "\tstack:" + " ".join(s.strip() for s in stack.splitlines())
        return line


def configure_logging(log_dir: Path, level: str = "INFO") -> Path:
    """Attach a per-run file handler to the `packman` logger.

    Returns:
        Path of the log file for this run.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    path = log_dir / f"{datetime.now().strftime(_FILE_TIME_FORMAT)}.log"

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(LogFormatter())

    root = logging.getLogger("packman")
    for existing in list(root.handlers):
        if isinstance(existing, logging.FileHandler):
            root.removeHandler(existing)
            existing.close()
    root.addHandler(handler)
    root.setLevel(level.upper())
    return path
