"""
listme.blame
============

Per-line authorship through ``git blame --line-porcelain``.

Everything that knows about git's output format lives here; the rest of the
package only sees :class:`~listme.models.FileBlame` or a
:class:`~listme.errors.BlameUnavailable` error.

Line-porcelain output repeats the full commit header for every line::

    <sha> <orig-line> <final-line> 1
    author Jane Doe
    author-mail <jane@example.com>
    author-time 1700000000
    ...
    <TAB><line content>
"""
from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from typing import Iterable, List, Optional

from .errors import BlameUnavailable
from .models import FileBlame, LineBlame

__all__ = ["blame_file", "parse_line_porcelain"]

LOGGER = logging.getLogger(__name__)

GIT_EXECUTABLE: str = "git"
_AUTHOR = "author "
_AUTHOR_TIME = "author-time "


def parse_line_porcelain(lines: Iterable[str]) -> List[LineBlame]:
    """
    Rebuild one :class:`LineBlame` per source line from a porcelain stream.

    Records without an ``author-time`` keep a timestamp of ``0``; the last
    record is flushed even when the stream ends without a separator.

    Time   O(L)  L = lines of output
    Memory O(N)  N = lines of the blamed file
    """
    blames: List[LineBlame] = []
    author: Optional[str] = None
    timestamp = 0
    for raw in lines:
        line = raw.rstrip("\r\n")
        if line.startswith(_AUTHOR):
            if author is not None:
                blames.append(LineBlame(author, timestamp))
            author, timestamp = line[len(_AUTHOR):], 0
        elif line.startswith(_AUTHOR_TIME) and author is not None:
            try:
                timestamp = int(line[len(_AUTHOR_TIME):])
            except ValueError:
                LOGGER.debug("Unparseable author-time line: %r", line)
    if author is not None:
        blames.append(LineBlame(author, timestamp))
    return blames


def blame_file(path: str | os.PathLike) -> FileBlame:
    """
    Blame every line of *path*.

    Runs git from the file's directory with ``-C`` so the process working
    directory is never changed.

    Raises
    ------
    BlameUnavailable
        If git is not installed or exits non-zero (untracked file, no
        repository, …).
    """
    absolute = os.path.abspath(path)
    cmd = [
        GIT_EXECUTABLE, "-C", os.path.dirname(absolute),
        "blame", "--line-porcelain", "--", absolute,
    ]
    # stderr goes to a file so a chatty git can never block on a full pipe
    with tempfile.TemporaryFile() as stderr_file:
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=stderr_file,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise BlameUnavailable(f"cannot run {GIT_EXECUTABLE}: {exc}") from exc

        with proc:
            blames = parse_line_porcelain(proc.stdout)
            returncode = proc.wait()

        if returncode != 0:
            stderr_file.seek(0)
            stderr = stderr_file.read().decode("utf-8", errors="replace")
            raise BlameUnavailable(
                f"git blame failed for {absolute} (exit {returncode}): {stderr.strip()}"
            )
    return FileBlame(tuple(blames))
