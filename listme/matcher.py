"""
listme.matcher
==============

Builds one composite regular expression out of the configured marker tags
and extracts ``(tag, text)`` from a single line of source code.

A tag is only recognised at the start of a line or right after a comment
leader, so ``x = 1  # TODO: fix`` matches while prose such as
``this is a TODO item`` does not. The heuristic is permissive on purpose:
tag words inside string literals (``"# TODO: x"``) are still picked up.
"""
from __future__ import annotations

import re
from typing import Iterable, List, NamedTuple, Optional, Tuple

from .errors import ConfigurationError
from .models import MatchedLine

__all__ = ["MarkerMatcher", "MatchedTag", "strip_closers", "validate_tags"]

_TAG_SYNTAX = re.compile(r"[A-Za-z0-9]+")

#: Comment openers, one token each; runs such as ``###`` or ``{{!--`` are
#: matched by repeating single tokens so every prefix parses one way only
COMMENT_LEADERS: List[str] = [
    r"\{\{!", r"\{#", r"<!--", r'"""', r"'''",
    r"//", r"/\*", r"\*", r"#", r"--", r";", r"%",
]
#: Suffixes stripped from the end of the comment text, tried in order
COMMENT_CLOSERS: Tuple[str, ...] = (
    "-->", "*/", "--}}", "#}}", "}}", "#}", "#", '"""', "'''",
)


class MatchedTag(NamedTuple):
    tag: str
    text: str


def validate_tags(tags: Iterable[str]) -> List[str]:
    """
    Return *tags* de-duplicated (first occurrence wins).

    Raises
    ------
    ConfigurationError
        If no tag is given, or a tag is empty or not purely alphanumeric.
    """
    unique: List[str] = []
    for tag in tags:
        if not _TAG_SYNTAX.fullmatch(tag or ""):
            raise ConfigurationError(
                f"invalid tag {tag!r}: tags must be non-empty and contain "
                "only alphanumeric characters"
            )
        if tag not in unique:
            unique.append(tag)
    if not unique:
        raise ConfigurationError("at least one tag is required")
    return unique


def build_pattern(tags: Iterable[str]) -> re.Pattern:
    leader = "|".join(COMMENT_LEADERS)
    alternatives = "|".join(re.escape(tag) for tag in validate_tags(tags))
    return re.compile(
        rf"(?:^|{leader})(?:[ \t]|{leader})*"
        rf"({alternatives})[\s:;-]+(\S.*)"
    )


def strip_closers(text: str) -> str:
    """Drop trailing whitespace and comment closers (``-->``, ``*/``, ``#}``, …)."""
    text = text.rstrip()
    while True:
        for closer in COMMENT_CLOSERS:
            if text.endswith(closer):
                text = text[: -len(closer)].rstrip()
                break
        else:
            return text


class MarkerMatcher:
    """Stateless after construction; safe to share between worker threads."""

    def __init__(self, tags: Iterable[str]) -> None:
        self.tags = validate_tags(tags)
        self.pattern = build_pattern(self.tags)

    def match(self, line: str) -> Optional[MatchedTag]:
        """First tagged comment on *line*, or ``None``. One match per line."""
        found = self.pattern.search(strip_closers(line))
        if found is None:
            return None
        return MatchedTag(found.group(1), found.group(2))

    def scan_line(self, number: int, line: str) -> Optional[MatchedLine]:
        found = self.match(line)
        if found is None:
            return None
        return MatchedLine(number=number, tag=found.tag, text=found.text)

    def __repr__(self) -> str:
        return f"MarkerMatcher({self.tags!r})"
