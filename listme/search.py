"""
listme.search
=============

Wires the pipeline together::

    walker → jobs → workers → results → sink (blame) → caller
"""
from __future__ import annotations

import logging
from typing import Iterator, Optional

from .blame import blame_file
from .config import SearchParams
from .ignore import IgnoreFilter
from .matcher import MarkerMatcher
from .models import AnnotatedResult
from .scanner import TagScanner
from .sink import BlameFn, ResultSink

__all__ = ["search"]

LOGGER = logging.getLogger(__name__)


def search(params: SearchParams, blame: Optional[BlameFn] = None) -> Iterator[AnnotatedResult]:
    """
    Scan ``params.path`` and yield annotated results as files complete.

    Time   O(S + B)  S = bytes scanned, B = blame output of matched files
    """
    matcher = MarkerMatcher(params.tags)
    ignore_filter = IgnoreFilter.for_path(params.path)
    scanner = TagScanner(
        params.path,
        matcher,
        ignore_filter=ignore_filter,
        workers=params.workers,
        glob=params.glob,
    )
    sink = ResultSink(blame or blame_file, with_blame=params.with_blame)

    LOGGER.debug("Searching %s for %s with %d workers", params.path, ", ".join(params.tags), params.workers)
    results = scanner.scan()
    try:
        yield from sink.process(results)
    finally:
        results.close()
