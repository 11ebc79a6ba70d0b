"""
listme.models
=============

Immutable value objects flowing through the scan pipeline::

    walker ─ScanJob─▶ workers ─ScanResult─▶ sink ─AnnotatedResult─▶ printer
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple, Optional, Tuple

from .errors import BlameLookupError

if TYPE_CHECKING:
    from .matcher import MarkerMatcher

__all__ = [
    "ScanJob",
    "MatchedLine",
    "ScanResult",
    "LineBlame",
    "FileBlame",
    "AnnotatedLine",
    "AnnotatedResult",
]


@dataclass(frozen=True)
class ScanJob:
    """One regular file waiting to be scanned by exactly one worker."""

    path: Path
    matcher: MarkerMatcher


@dataclass(frozen=True)
class MatchedLine:
    """A tagged comment found on line *number* (1-based)."""

    number: int
    tag: str
    text: str


@dataclass(frozen=True)
class ScanResult:
    """
    All matches of one file, ascending by line number.

    Only ever built with at least one line.
    """

    path: Path
    lines: Tuple[MatchedLine, ...]

    @property
    def max_line_number(self) -> int:
        return self.lines[-1].number if self.lines else 0


@dataclass(frozen=True)
class LineBlame:
    """Authorship of a single line. ``timestamp == 0`` means *unknown*."""

    author: str
    timestamp: int = 0

    def age(self, now: Optional[float] = None) -> Optional[timedelta]:
        """Time elapsed since the commit, or ``None`` when it is unknown."""
        if not self.timestamp:
            return None
        now = time.time() if now is None else now
        return timedelta(seconds=now - self.timestamp)


@dataclass(frozen=True)
class FileBlame:
    """Per-line blame of one file, index-aligned to line numbers."""

    lines: Tuple[LineBlame, ...]

    def __len__(self) -> int:
        return len(self.lines)

    def blame_line(self, number: int) -> LineBlame:
        if number < 1 or number > len(self.lines):
            raise BlameLookupError(
                f"line {number} out of range (file has {len(self.lines)} lines)"
            )
        return self.lines[number - 1]


class AnnotatedLine(NamedTuple):
    match: MatchedLine
    blame: Optional[LineBlame] = None


@dataclass(frozen=True)
class AnnotatedResult:
    """A :class:`ScanResult` enriched with optional per-line blame."""

    path: Path
    lines: Tuple[AnnotatedLine, ...]

    @property
    def match_count(self) -> int:
        return len(self.lines)

    @property
    def max_line_number(self) -> int:
        return self.lines[-1].match.number if self.lines else 0
