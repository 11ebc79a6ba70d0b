"""
listme.errors
=============

Exception taxonomy. Only :class:`ConfigurationError` is fatal; every other
error is contained at the boundary of a single file (or a single
enrichment step) and reported as a diagnostic.
"""
from __future__ import annotations

__all__ = [
    "ListmeError",
    "ConfigurationError",
    "TraversalError",
    "ScanIOError",
    "BlameUnavailable",
    "BlameLookupError",
    "IgnoreLoadError",
]


class ListmeError(Exception):
    """Base class for every error raised by *listme*."""


class ConfigurationError(ListmeError, ValueError):
    """Invalid search parameters (bad tag syntax, missing root path, …)."""


class TraversalError(ListmeError, OSError):
    """A directory entry could not be read while walking the tree."""


class ScanIOError(ListmeError, OSError):
    """A file could not be stat'ed, opened or read by a scan worker."""


class BlameUnavailable(ListmeError):
    """``git blame`` failed for a file (untracked, no repository, no git)."""


class BlameLookupError(ListmeError, IndexError):
    """A line number outside the blamed file was requested."""


class IgnoreLoadError(ListmeError):
    """The ignore-pattern set of a repository could not be loaded."""
