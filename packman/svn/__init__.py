"""Subversion operations.

Usage:
    from packman.svn import SvnClient

    client = SvnClient(checkout, username="alice", password="secret")
    entries = client.log_revisions([120, 121])
"""

from packman.svn.client import SvnClient, extract_error_code, parse_log_xml
from packman.svn.model import Action, ChangedPath, LogEntry, SvnError, SvnNotInstalled

__all__ = [
    "Action",
    "ChangedPath",
    "LogEntry",
    "SvnClient",
    "SvnError",
    "SvnNotInstalled",
    "extract_error_code",
    "parse_log_xml",
]
