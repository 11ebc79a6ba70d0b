"""
listme.pretty
=============

Rich rendering of annotated results.

Display rules per tag are an explicit ``{tag: TagStyle}`` mapping handed to
:class:`Printer`, so callers can restyle or add tags without touching
module state.

Styles
------
* ``FULL``  : colours, symbols, blame and a summary panel.
* ``BW``    : bold only, no colours.
* ``PLAIN`` : no styling, symbols or blame; meant for pipes and scripts.
"""
from __future__ import annotations

import enum
import os
import time
from collections import Counter
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import List, Mapping, Optional

from rich import box
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from .errors import ConfigurationError
from .models import AnnotatedLine, AnnotatedResult, LineBlame

__all__ = [
    "Style",
    "TagStyle",
    "Printer",
    "DEFAULT_TAG_STYLES",
    "get_style",
    "pad_line_number",
    "truncate_name",
]

#: Longest author name shown before words are cut down to initials
MAX_AUTHOR_LENGTH: int = 22

FILENAME_STYLE = "bold #0087d7"
OLD_COMMIT_STYLE = "bold #dadada on #d70000"


class Style(enum.Enum):
    FULL = "full"
    BW = "bw"
    PLAIN = "plain"


@dataclass(frozen=True)
class TagStyle:
    """How one tag is displayed: a leading symbol and a rich style string."""

    symbol: str
    style: str = ""


DEFAULT_TAG_STYLES: Mapping[str, TagStyle] = {
    "TODO": TagStyle("✓", "#5fafaf"),
    "XXX": TagStyle("✘", "#000000 on #d7af00"),
    "FIXME": TagStyle("⚠", "#ff0000"),
    "OPTIMIZE": TagStyle("⚡", "#d75f00"),
    "BUG": TagStyle("☢", "#eeeeee on #870000"),
    "NOTE": TagStyle("✐", "#87af87"),
    "HACK": TagStyle("✄", "#d7d700"),
}
FALLBACK_TAG_STYLE = TagStyle("⚠")


# ───────────────────────────────── helpers ───────────────────────────────── #

def get_style(bw: bool, plain: bool, is_terminal: bool = True) -> Style:
    """Pick the output style; plain is the default when output is redirected."""
    if bw and plain:
        raise ConfigurationError("--bw and --plain are mutually exclusive")
    if plain:
        return Style.PLAIN
    if bw:
        return Style.BW
    return Style.FULL if is_terminal else Style.PLAIN


def pad_line_number(number: int, max_number: int) -> str:
    """``[Line  7]`` with the number right-aligned to the width of *max_number*."""
    width = len(str(max(number, max_number)))
    return f"[Line {number:>{width}}]"


def truncate_name(name: str, max_length: int = MAX_AUTHOR_LENGTH) -> str:
    """
    Shorten *name* by reducing words to their initial, last word first,
    until it fits in *max_length* characters.

    >>> truncate_name("Jonathan Alexander Montgomery Smith")
    'Jonathan Alexander M S'
    """
    total = len(name)
    kept: List[str] = []
    for word in reversed(name.split()):
        if total > max_length:
            kept.append(word[0])
            total -= len(word) - 1
        else:
            kept.append(word)
    return " ".join(reversed(kept))


# ───────────────────────────────── printer ───────────────────────────────── #

class Printer:
    """Renders one :class:`AnnotatedResult` at a time on a rich console."""

    def __init__(
        self,
        console: Console,
        style: Style = Style.FULL,
        tag_styles: Mapping[str, TagStyle] = DEFAULT_TAG_STYLES,
        age_limit: int = 60,
        full_path: bool = False,
        summary: bool = True,
        now: Optional[float] = None,
    ) -> None:
        self._console = console
        self._style = style
        self._tag_styles = tag_styles
        self._max_age = timedelta(days=age_limit)
        self._full_path = full_path
        self._summary = summary and style is not Style.PLAIN
        self._now = now

    # public API ------------------------------------------------------------ #
    def print(self, result: AnnotatedResult) -> None:
        """Print the whole block of one file in a single write."""
        self._console.print(self.render(result))
        self._console.print()

    def render(self, result: AnnotatedResult) -> RenderableType:
        parts: List[RenderableType] = [self._header(result)]
        if self._summary:
            parts.append(self._summary_panel(result))
        for line in result.lines:
            parts.append(self._line(line, result.max_line_number))
        return Group(*parts)

    # internals ------------------------------------------------------------- #
    def display_path(self, path: Path) -> str:
        if self._full_path:
            return os.path.abspath(path)
        try:
            return os.path.relpath(path)
        except ValueError:              # different drive on Windows
            return str(path)

    def _tag_style(self, tag: str) -> TagStyle:
        return self._tag_styles.get(tag, FALLBACK_TAG_STYLE)

    def _header(self, result: AnnotatedResult) -> Text:
        count = result.match_count
        noun = "comment" if count == 1 else "comments"
        style = {Style.FULL: FILENAME_STYLE, Style.BW: "bold"}.get(self._style, "")
        return Text(f"• {self.display_path(result.path)} ({count} {noun})", style=style)

    def _summary_panel(self, result: AnnotatedResult) -> Panel:
        counts = Counter(line.match.tag for line in result.lines)
        body = Text()
        for tag, count in counts.most_common():
            if body.plain:
                body.append("  ")
            body.append(self._tag_label(tag))
            body.append(f": {count}")
        return Panel(body, box=box.ROUNDED, expand=False)

    def _tag_label(self, tag: str) -> Text:
        if self._style is Style.PLAIN:
            return Text(tag)
        rule = self._tag_style(tag)
        label = f"{rule.symbol} {tag}" if rule.symbol else tag
        if self._style is Style.FULL:
            return Text(label, style=f"bold {rule.style}".strip())
        return Text(label, style="bold")

    def _line(self, line: AnnotatedLine, max_number: int) -> Text:
        match = line.match
        text_style = self._tag_style(match.tag).style if self._style is Style.FULL else ""
        rendered = Text.assemble(
            pad_line_number(match.number, max_number),
            " ",
            self._tag_label(match.tag),
            " ",
            (match.text, text_style),
        )
        if line.blame is not None and self._style is not Style.PLAIN:
            rendered.append(" ")
            rendered.append(self._blame(line.blame))
        return rendered

    def _blame(self, blame: LineBlame) -> Text:
        author = truncate_name(blame.author)
        age = blame.age(self._now if self._now is not None else time.time())
        if age is not None and age > self._max_age:
            style = OLD_COMMIT_STYLE if self._style is Style.FULL else "bold"
            return Text(f"[☠ OLD {author}]", style=style)
        return Text(f"[{author}]")
