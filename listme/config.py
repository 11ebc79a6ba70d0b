"""
listme.config
=============

Defaults and the validated parameter object of a search. Everything that
can make a run fail is checked here, before any file is touched.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Tuple

from .errors import ConfigurationError
from .matcher import validate_tags
from .pretty import Style
from .scanner import DEFAULT_WORKERS

__all__ = ["SearchParams", "DEFAULT_TAGS", "DEFAULT_AGE_LIMIT", "DEFAULT_GLOB"]

#: Tags searched for when none are given
DEFAULT_TAGS: Tuple[str, ...] = ("BUG", "FIXME", "XXX", "TODO", "HACK", "OPTIMIZE", "NOTE")
#: Commits older than this many days are flagged
DEFAULT_AGE_LIMIT: int = 60
#: File-name pattern matching every file
DEFAULT_GLOB: str = "*"


@dataclass(frozen=True)
class SearchParams:
    path: Path
    tags: Tuple[str, ...] = DEFAULT_TAGS
    workers: int = DEFAULT_WORKERS
    style: Style = Style.FULL
    age_limit: int = DEFAULT_AGE_LIMIT
    full_path: bool = False
    no_summary: bool = False
    no_author: bool = False
    glob: str = DEFAULT_GLOB

    @classmethod
    def create(
        cls,
        path: str | Path,
        tags: Iterable[str] = DEFAULT_TAGS,
        workers: int = DEFAULT_WORKERS,
        style: Style = Style.FULL,
        age_limit: int = DEFAULT_AGE_LIMIT,
        full_path: bool = False,
        no_summary: bool = False,
        no_author: bool = False,
        glob: str = DEFAULT_GLOB,
    ) -> "SearchParams":
        """
        Validate and build the parameters of one run.

        Raises
        ------
        ConfigurationError
            On invalid tags, a missing path or a non-positive worker count
            or age limit.
        """
        root = Path(path)
        if not root.exists():
            raise ConfigurationError(f"{root} does not exist")
        if workers < 1:
            raise ConfigurationError(f"workers must be at least 1, got {workers}")
        if age_limit < 1:
            raise ConfigurationError(f"age limit must be at least 1 day, got {age_limit}")
        return cls(
            path=root,
            tags=tuple(validate_tags(tags)),
            workers=workers,
            style=style,
            age_limit=age_limit,
            full_path=full_path,
            no_summary=no_summary,
            no_author=no_author,
            glob=glob or DEFAULT_GLOB,
        )

    @property
    def with_blame(self) -> bool:
        """Blame is only worth fetching when it is going to be shown."""
        return not self.no_author and self.style is not Style.PLAIN
