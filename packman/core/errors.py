"""Error codes for CLI exit status.

Every command maps its failure onto one of these codes so scripts wrapping
`packman` can tell a bad revision number from a broken svn checkout.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: User error (bad input, cancelled confirmation, missing ignore file)
    - 2: Environment error (no workspace, no project, svn not installed)
    - 3: VCS error (svn log/export failed)
    - 4: Package error (dependency resolution or package assembly failed)
    - 5: I/O error (store unreadable, package directory locked)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    VCS_ERROR = 3
    PACKAGE_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
