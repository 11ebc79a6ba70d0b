"""
listme/cli.py
=============

Command-line interface for **listme**: summarise the FIXME, TODO, XXX (and
other tags) comments of a file tree so you don't forget them.

Features
--------
* Recursive, gitignore-aware search with a pool of worker threads
* Author and age of every tagged line from ``git blame``; old ones flagged
* Full colour, black-and-white (``-b``) or plain (``-p``) output; plain is
  used automatically when output is redirected
* Diagnostics go to *stderr*, results to *stdout*
"""

from __future__ import annotations

import logging
import re
import sys
from pathlib import Path
from typing import Sequence, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler

from .config import DEFAULT_AGE_LIMIT, DEFAULT_GLOB, DEFAULT_TAGS, SearchParams
from .errors import ConfigurationError
from .pretty import Printer, get_style
from .scanner import DEFAULT_WORKERS
from .search import search

# ---------------------------------------------------------------------------

console = Console(highlight=False, soft_wrap=True)
LOGGER = logging.getLogger("listme")


# ──────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────
def _configure_logging(verbose: bool, debug: bool) -> None:
    """ERROR by default, WARNING with ``-v``, DEBUG with ``-d``; always on stderr."""
    level = logging.ERROR
    if verbose:
        level = logging.WARNING
    if debug:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            RichHandler(console=Console(stderr=True), show_time=False, show_path=False)
        ],
        force=True,
    )


def _split_tags(
    ctx: click.Context, param: click.Parameter, value: Sequence[str]
) -> Tuple[str, ...]:
    """Accept ``-T TODO -T FIXME`` as well as ``-T "TODO FIXME"`` or ``-T TODO,FIXME``."""
    if not value:
        return DEFAULT_TAGS
    return tuple(tag for chunk in value for tag in re.split(r"[\s,]+", chunk) if tag)


# ──────────────────────────────────────────────────────────────────────────
# Main command
# ──────────────────────────────────────────────────────────────────────────
@click.command()
@click.argument("path", type=click.Path(path_type=Path), default=".")
@click.option(
    "-T", "--tags", multiple=True, callback=_split_tags,
    help=f"Tags to search for, separated by spaces or commas [default: {' '.join(DEFAULT_TAGS)}]",
)
@click.option(
    "-g", "--glob", default=DEFAULT_GLOB, show_default=True,
    help="Glob pattern on file names, e.g. '*.go' (quote it)",
)
@click.option(
    "-l", "--age-limit", default=DEFAULT_AGE_LIMIT, type=int, show_default=True,
    help="Age limit for commits in days; older commits are marked",
)
@click.option("-F", "--full-path", is_flag=True, help="Print the full absolute path of files")
@click.option("-A", "--no-author", is_flag=True, help="Do not print git author information")
@click.option("-S", "--no-summary", is_flag=True, help="Do not print the summary box of each file")
@click.option("-b", "--bw", is_flag=True, help="Use black and white style")
@click.option(
    "-p", "--plain", is_flag=True,
    help="Use plain style, for machine consumption (default when redirecting output)",
)
@click.option(
    "-w", "--workers", default=DEFAULT_WORKERS, type=int, show_default=True,
    help="[debug] Number of search workers; there's likely no need to change this",
)
@click.option("-v", "--verbose", is_flag=True, help="Show warnings")
@click.option("-d", "--debug", is_flag=True, help="Show debug messages")
def cli(
    path: Path,
    tags: Tuple[str, ...],
    glob: str,
    age_limit: int,
    full_path: bool,
    no_author: bool,
    no_summary: bool,
    bw: bool,
    plain: bool,
    workers: int,
    verbose: bool,
    debug: bool,
) -> None:
    """
    Summarise FIXME, TODO, XXX (and other tags) comments below PATH.

    PATH may be a folder or a single file; folders are searched recursively.
    """
    _configure_logging(verbose, debug)

    try:
        style = get_style(bw, plain, console.is_terminal)
        params = SearchParams.create(
            path,
            tags=tags,
            workers=workers,
            style=style,
            age_limit=age_limit,
            full_path=full_path,
            no_summary=no_summary,
            no_author=no_author,
            glob=glob,
        )
    except ConfigurationError as exc:
        raise click.UsageError(str(exc)) from exc

    printer = Printer(
        console,
        style=params.style,
        age_limit=params.age_limit,
        full_path=params.full_path,
        summary=not params.no_summary,
    )

    files = comments = 0
    for result in search(params):
        printer.print(result)
        files += 1
        comments += result.match_count
    LOGGER.debug("Found %d comments in %d files", comments, files)


if __name__ == "__main__":
    try:
        cli()
    except KeyboardInterrupt:
        Console(stderr=True).print("\nInterrupted", style="cyan")
        sys.exit(130)
