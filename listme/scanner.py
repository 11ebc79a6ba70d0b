"""
listme.scanner
==============

Walks the target path and scans every regular file for tagged comments
with a fixed pool of worker threads.

Pipeline
--------
* one **walker** thread: synchronous depth-first traversal, one
  :class:`ScanJob` per regular file;
* **N workers** pulling jobs from a bounded queue, emitting a
  :class:`ScanResult` for every file with at least one match;
* the **consumer** (whoever iterates :meth:`TagScanner.scan`) receives the
  results in completion order. No order is guaranteed across files.

``queue.Queue`` doubles as the pending-job counter: ``put`` increments it
before any worker can see the job and ``task_done`` decrements it, so
``jobs.join()`` returns only once every submitted file has been handled.

Time / Space complexity
-----------------------
* Scanning : **O(S)** S = total size (bytes) of the scanned text.
* Memory   : **O(W + M)** W = workers, M = matches held by in-flight results.
"""
from __future__ import annotations

import fnmatch
import logging
import os
import queue
import stat
import threading
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from .errors import ConfigurationError, ScanIOError, TraversalError
from .ignore import GIT_DIR, IgnoreFilter
from .matcher import MarkerMatcher
from .models import MatchedLine, ScanJob, ScanResult
from .sniff import is_likely_text

__all__ = ["TagScanner", "scan_file", "walk", "DEFAULT_WORKERS"]

LOGGER = logging.getLogger(__name__)

#: Work is dominated by open/read latency, not CPU
DEFAULT_WORKERS: int = 128

TextPredicate = Callable[[bytes], bool]

_DONE = object()


# ───────────────────────────────── traversal ─────────────────────────────── #

def walk(
    root: str | Path,
    glob: str = "*",
    stop: Optional[threading.Event] = None,
) -> Iterator[Path]:
    """
    Yield every regular file below *root* (or *root* itself if it is a file).

    Symlinked directories are not followed and ``.git`` is never entered.
    Unreadable entries are logged and skipped; traversal goes on.
    """
    root = Path(root)
    if not root.is_dir():
        yield root
        return

    pending: List[Path] = [root]
    while pending:
        if stop is not None and stop.is_set():
            return
        directory = pending.pop()
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as exc:
            _report(TraversalError(f"cannot read directory {directory}: {exc}"))
            continue

        subdirs: List[Path] = []
        for entry in entries:
            if stop is not None and stop.is_set():
                return
            try:
                if entry.is_dir(follow_symlinks=False):
                    if entry.name != GIT_DIR:
                        subdirs.append(Path(entry.path))
                elif entry.is_file():
                    if fnmatch.fnmatch(entry.name, glob):
                        yield Path(entry.path)
                elif entry.is_symlink() and not os.path.exists(entry.path):
                    _report(TraversalError(f"broken symbolic link {entry.path}"))
            except OSError as exc:
                _report(TraversalError(f"cannot inspect {entry.path}: {exc}"))
        # reversed so that the alphabetically first directory is popped first
        pending.extend(reversed(subdirs))


def _report(exc: Exception) -> None:
    LOGGER.error("%s", exc)


# ───────────────────────────────── scanning ──────────────────────────────── #

def scan_file(
    path: str | Path,
    matcher: MarkerMatcher,
    ignore_filter: Optional[IgnoreFilter] = None,
    is_text: TextPredicate = is_likely_text,
) -> Optional[ScanResult]:
    """
    Scan one file line by line.

    Scanning stops at the first line that does not look like text. Returns
    ``None`` when the file is ignored or has no match.

    Raises
    ------
    ScanIOError
        If the file cannot be stat'ed, opened or read.
    """
    path = Path(path)
    try:
        info = os.stat(path)
    except FileNotFoundError as exc:
        raise ScanIOError(f"{path} does not exist.") from exc
    except OSError as exc:
        raise ScanIOError(f"Error checking {path}: {exc}") from exc

    if ignore_filter is not None and ignore_filter.should_ignore(path, stat.S_ISDIR(info.st_mode)):
        LOGGER.debug("Skipping %s due to .gitignore", path)
        return None

    lines: List[MatchedLine] = []
    try:
        with open(path, "rb") as fh:
            for number, raw in enumerate(fh, start=1):
                data = raw.rstrip(b"\r\n")
                if not is_text(data):
                    LOGGER.debug("Skipping non-text content of %s (line %d)", path, number)
                    break
                found = matcher.scan_line(number, data.decode("utf-8", errors="replace"))
                if found is not None:
                    lines.append(found)
    except OSError as exc:
        raise ScanIOError(f"Couldn't read {path}: {exc}") from exc

    if not lines:
        return None
    return ScanResult(path=path, lines=tuple(lines))


# ───────────────────────────────── worker pool ───────────────────────────── #

class TagScanner:
    """Facade that scans a directory tree with a pool of worker threads."""

    def __init__(
        self,
        root: str | Path,
        matcher: MarkerMatcher,
        ignore_filter: Optional[IgnoreFilter] = None,
        workers: int = DEFAULT_WORKERS,
        glob: str = "*",
        is_text: TextPredicate = is_likely_text,
    ) -> None:
        if workers < 1:
            raise ConfigurationError(f"workers must be at least 1, got {workers}")
        self._root = Path(root)
        self._matcher = matcher
        self._filter = ignore_filter
        self._workers = workers
        self._glob = glob
        self._is_text = is_text
        self._stop = threading.Event()

    # public API ------------------------------------------------------------ #
    def scan(self) -> Iterator[ScanResult]:
        """
        Yield one :class:`ScanResult` per file with matches, as they complete.

        A result counts as pending until the consumer asks for the next one.
        Closing the iterator early cancels the rest of the scan.
        """
        self._stop.clear()
        jobs: queue.Queue = queue.Queue(maxsize=self._workers)
        results: queue.Queue = queue.Queue(maxsize=self._workers)

        pool = [
            threading.Thread(
                target=self._work, args=(jobs, results), name=f"listme-worker-{n}", daemon=True
            )
            for n in range(self._workers)
        ]
        walker = threading.Thread(
            target=self._walk, args=(jobs, results), name="listme-walker", daemon=True
        )
        for thread in pool:
            thread.start()
        walker.start()

        finished = False
        try:
            while True:
                item = results.get()
                try:
                    if item is _DONE:
                        finished = True
                        return
                    yield item
                finally:
                    results.task_done()
        finally:
            if not finished:
                self._stop.set()
                self._drain(results, walker)
            walker.join()
            for thread in pool:
                thread.join()

    def cancel(self) -> None:
        """Stop traversal and skip every job not yet started."""
        self._stop.set()

    # internals ------------------------------------------------------------- #
    def _walk(self, jobs: queue.Queue, results: queue.Queue) -> None:
        try:
            for path in walk(self._root, self._glob, self._stop):
                jobs.put(ScanJob(path, self._matcher))
        except Exception:
            LOGGER.exception("Traversal of %s aborted", self._root)
        finally:
            jobs.join()
            for _ in range(self._workers):
                jobs.put(_DONE)
            results.put(_DONE)

    def _work(self, jobs: queue.Queue, results: queue.Queue) -> None:
        while True:
            job = jobs.get()
            try:
                if job is _DONE:
                    return
                if self._stop.is_set():
                    continue
                result = scan_file(job.path, job.matcher, self._filter, self._is_text)
                if result is not None:
                    results.put(result)
            except ScanIOError as exc:
                LOGGER.error("%s", exc)
            except Exception:
                LOGGER.exception("Unexpected error while scanning %s", job.path)
            finally:
                jobs.task_done()

    @staticmethod
    def _drain(results: queue.Queue, walker: threading.Thread) -> None:
        # keeps workers from blocking on a full result queue after cancellation
        while walker.is_alive():
            try:
                results.get(timeout=0.05)
            except queue.Empty:
                continue
            results.task_done()
