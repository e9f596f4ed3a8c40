"""Application services for the packman CLI.

Services coordinate the release domain (release/), the svn client and the
stores. They return Results and never print.
"""

from packman.services.history import HistoryService
from packman.services.pack import PackOutcome, PackService
from packman.services.project import ProjectService, parse_ignore_list, svn_client_for

__all__ = [
    "HistoryService",
    "PackOutcome",
    "PackService",
    "ProjectService",
    "parse_ignore_list",
    "svn_client_for",
]
