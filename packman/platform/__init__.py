"""Platform abstraction layer."""

from .files import atomic_write_text, copy_file, list_files, recreate_dir
from .runlog import configure_logging
from .process import ProcessError, ProcessOutput, run

__all__ = [
    # files
    "atomic_write_text",
    "copy_file",
    "list_files",
    "recreate_dir",
    # logging
    "configure_logging",
    # process
    "ProcessError",
    "ProcessOutput",
    "run",
]
