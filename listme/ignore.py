"""
listme.ignore
=============

Honours the ``.gitignore`` rules of the repository enclosing the scanned
path. Outside a repository nothing is ignored: that is a supported mode,
not an error.

Every ``.gitignore`` between the repository root and the scanned path (and
below it) is read, its patterns are re-rooted at the directory holding the
file, and the whole set is compiled into one ordered ``pathspec.PathSpec``,
so the last matching pattern wins exactly as it does in git.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

import pathspec

from .errors import IgnoreLoadError

__all__ = ["IgnoreFilter", "find_repository_root"]

LOGGER = logging.getLogger(__name__)

GIT_DIR = ".git"
IGNORE_FILE = ".gitignore"


# ───────────────────────────────── helpers ───────────────────────────────── #

def _absolute(path: str | Path) -> Path:
    return Path(os.path.abspath(path))


def find_repository_root(path: str | Path) -> Optional[Path]:
    """First directory at or above *path* that contains ``.git``."""
    start = _absolute(path)
    if not start.is_dir():
        start = start.parent
    for candidate in (start, *start.parents):
        if (candidate / GIT_DIR).exists():
            return candidate
    return None


def _rooted(line: str, base: str) -> Optional[str]:
    """Rewrite one pattern of ``<base>/.gitignore`` relative to the repo root."""
    pattern = line.rstrip("\n").rstrip()
    if not pattern or pattern.startswith("#"):
        return None
    if not base:
        return pattern
    negate = pattern.startswith("!")
    body = pattern[1:] if negate else pattern
    # a slash anywhere but at the end anchors the pattern to its directory
    if "/" in body.rstrip("/"):
        body = f"{base}/{body.lstrip('/')}"
    else:
        body = f"{base}/**/{body}"
    return ("!" if negate else "") + body


def _ignore_files(root: Path, target: Path) -> Iterator[Path]:
    """``.gitignore`` files relevant to *target*, outermost first."""
    for directory, dirs, files in os.walk(root, onerror=_log_walk_error):
        current = Path(directory)
        dirs[:] = sorted(
            d for d in dirs
            if d != GIT_DIR and _related(current / d, target)
        )
        if IGNORE_FILE in files:
            yield current / IGNORE_FILE


def _related(directory: Path, target: Path) -> bool:
    return directory == target or directory in target.parents or target in directory.parents


def _log_walk_error(exc: OSError) -> None:
    LOGGER.debug("Skipping unreadable directory while loading ignore files: %s", exc)


# ───────────────────────────────── filter ────────────────────────────────── #

class IgnoreFilter:
    """Returns *True* for paths that must be skipped according to .gitignore."""

    def __init__(self, root: Optional[Path] = None, patterns: Sequence[str] = ()) -> None:
        self.root = root
        self.patterns: List[str] = list(patterns)
        self._spec = pathspec.PathSpec.from_lines("gitwildmatch", self.patterns)

    @classmethod
    def empty(cls) -> "IgnoreFilter":
        return cls()

    @classmethod
    def for_path(cls, path: str | Path) -> "IgnoreFilter":
        """Load the rules of the repository enclosing *path*, if any."""
        root = find_repository_root(path)
        if root is None:
            LOGGER.debug("%s is not inside a git repository; nothing is ignored", path)
            return cls.empty()
        try:
            ignore_filter = cls(root, cls._load_patterns(root, _absolute(path)))
        except (IgnoreLoadError, ValueError) as exc:
            LOGGER.error("Cannot load ignore rules of %s: %s; nothing is ignored", root, exc)
            return cls.empty()
        LOGGER.debug("Loaded %d ignore patterns from %s", len(ignore_filter.patterns), root)
        return ignore_filter

    @staticmethod
    def _load_patterns(root: Path, target: Path) -> List[str]:
        sources: List[Tuple[Path, str]] = []
        exclude = root / GIT_DIR / "info" / "exclude"
        if exclude.is_file():
            sources.append((exclude, ""))
        for ignore_file in _ignore_files(root, target):
            base = ignore_file.parent.relative_to(root).as_posix()
            sources.append((ignore_file, "" if base == "." else base))

        patterns: List[str] = []
        for source, base in sources:
            try:
                lines = source.read_text(encoding="utf-8", errors="replace").splitlines()
            except OSError as exc:
                raise IgnoreLoadError(f"cannot read {source}: {exc}") from exc
            patterns.extend(p for p in (_rooted(line, base) for line in lines) if p)
        return patterns

    # public API ------------------------------------------------------------ #
    def should_ignore(self, path: str | Path, is_dir: bool = False) -> bool:
        """Check whether *path* is excluded. Paths outside the repo never are."""
        if self.root is None or not self.patterns:
            return False
        try:
            rel = _absolute(path).relative_to(self.root)
        except ValueError:
            return False
        if rel == Path("."):
            return False
        posix = rel.as_posix()
        return self._spec.match_file(posix + "/" if is_dir else posix)
