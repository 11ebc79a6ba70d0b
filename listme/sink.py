"""
listme.sink
===========

Enriches completed scan results with per-line blame before they are handed
to the presentation layer. Blame is fetched once per file, on the consumer
thread, never inside the scan workers.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional

from .blame import blame_file
from .errors import BlameLookupError, BlameUnavailable
from .models import AnnotatedLine, AnnotatedResult, FileBlame, ScanResult

__all__ = ["ResultSink"]

LOGGER = logging.getLogger(__name__)

BlameFn = Callable[[Path], FileBlame]


class ResultSink:
    """Turns :class:`ScanResult` objects into :class:`AnnotatedResult` objects."""

    def __init__(self, blame: BlameFn = blame_file, with_blame: bool = True) -> None:
        self._blame = blame
        self._with_blame = with_blame

    def annotate(self, result: ScanResult) -> AnnotatedResult:
        """
        Attach blame to every matched line of *result*.

        A failing ``git blame`` leaves the whole file without authorship; a
        line outside the blamed range leaves only that line without it.
        """
        file_blame = self._file_blame(result.path) if self._with_blame else None
        lines: List[AnnotatedLine] = []
        for match in result.lines:
            if file_blame is None:
                lines.append(AnnotatedLine(match))
                continue
            try:
                lines.append(AnnotatedLine(match, file_blame.blame_line(match.number)))
            except BlameLookupError as exc:
                LOGGER.error("%s:%d: %s", result.path, match.number, exc)
                lines.append(AnnotatedLine(match))
        return AnnotatedResult(path=result.path, lines=tuple(lines))

    def process(self, results: Iterable[ScanResult]) -> Iterator[AnnotatedResult]:
        """Annotate *results* one file at a time, in arrival order."""
        for result in results:
            yield self.annotate(result)

    def _file_blame(self, path: Path) -> Optional[FileBlame]:
        try:
            return self._blame(path)
        except BlameUnavailable as exc:
            LOGGER.warning("No blame for %s: %s", path, exc)
            return None
