"""packman: release packaging for Subversion-hosted .NET projects."""

__version__ = "0.1.0"
