"""CLI/bootstrap helpers for the arxivlens application."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Callable
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import httpx
from platformdirs import user_log_dir
from rich.console import Console
from rich.markup import escape as escape_markup

from arxivlens.action_messages import build_actionable_error
from arxivlens.config import AppConfig, load_config
from arxivlens.errors import FeedParseError, InvalidCategoryError, NoDataError
from arxivlens.highlight import FieldMatchers
from arxivlens.models import ARXIV_API_MAX_RESULTS_LIMIT, CONFIG_APP_NAME, Feed, QueryDescriptor
from arxivlens.query import build_query, format_query_label
from arxivlens.services.arxiv_api_service import fetch_feed
from arxivlens.widgets.listing import render_paper_option

logger = logging.getLogger(__name__)


def _describe_http_status_error(exc: httpx.HTTPStatusError) -> str:
    status_code = exc.response.status_code
    if status_code == 429:
        return "Error: arXiv API rate limit reached (HTTP 429). Wait a few seconds and retry."
    if status_code >= 500:
        return f"Error: arXiv API is unavailable right now (HTTP {status_code}). Retry later."
    return (
        f"Error: arXiv API rejected the request (HTTP {status_code}). "
        "Check --category/--author/--query and retry."
    )


def _fetch_for_listing(
    descriptor: QueryDescriptor,
    fetch_fn: Callable[[QueryDescriptor], Feed],
) -> Feed | int:
    """Fetch one page for --list. Returns the feed or an exit code."""
    try:
        return fetch_fn(descriptor)
    except httpx.HTTPStatusError as exc:
        print(_describe_http_status_error(exc), file=sys.stderr)
    except (httpx.HTTPError, OSError):
        print("Error: Failed to fetch papers from arXiv API (network or I/O error).", file=sys.stderr)
    except NoDataError:
        print(
            build_actionable_error(
                "read results",
                why="the arXiv API returned an empty response",
                next_step="retry in a few seconds",
            ),
            file=sys.stderr,
        )
    except FeedParseError as exc:
        print(
            build_actionable_error("read results", why=str(exc), next_step="retry later"),
            file=sys.stderr,
        )
    return 1


def print_feed(feed: Feed, config: AppConfig, descriptor: QueryDescriptor, console: Console) -> None:
    """Print every paper of a feed with pinned authors and keywords highlighted."""
    matchers = FieldMatchers.from_terms(config.search_terms())
    console.print(f"[bold]{escape_markup(format_query_label(descriptor))}[/]", highlight=False)
    for paper in feed.papers:
        console.print()
        console.print(render_paper_option(paper, matchers, show_preview=True), highlight=False)
    if feed.dropped_count:
        console.print(f"\n[dim]{feed.dropped_count} malformed entries skipped[/]", highlight=False)


# Debug log: rotated so a long --debug session cannot fill the disk
DEBUG_LOG_FILENAME = "arxivlens-debug.log"
DEBUG_LOG_MAX_BYTES = 2 * 1024 * 1024
DEBUG_LOG_BACKUP_COUNT = 2
DEBUG_LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-7s %(name)s: %(message)s"


def _configure_logging(debug: bool) -> Path | None:
    """Route arxivlens and httpx logs to a rotating file when --debug is set.

    The TUI owns the terminal, so nothing is ever logged to stderr; without
    --debug logging is switched off. Returns the log file path, if any.
    """
    if not debug:
        logging.disable(logging.CRITICAL)
        return None

    log_path = Path(user_log_dir(CONFIG_APP_NAME)) / DEBUG_LOG_FILENAME
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_path,
        maxBytes=DEBUG_LOG_MAX_BYTES,
        backupCount=DEBUG_LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(DEBUG_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    for name, level in (("arxivlens", logging.DEBUG), ("httpx", logging.INFO)):
        target = logging.getLogger(name)
        target.addHandler(handler)
        target.setLevel(level)
    return log_path


def _configure_color_mode(color_mode: str) -> None:
    """Turn --color into the NO_COLOR / FORCE_COLOR hints Rich and Textual read.

    "auto" keeps a NO_COLOR the user exported but drops an inherited FORCE_COLOR.
    """
    os.environ.pop("FORCE_COLOR", None)
    if color_mode == "always":
        os.environ.pop("NO_COLOR", None)
        os.environ["FORCE_COLOR"] = "1"
    elif color_mode == "never":
        os.environ["NO_COLOR"] = "1"


def _validate_interactive_tty() -> bool:
    """The browser needs a terminal on stdin and stdout; pipes should use --list."""
    return all(stream is not None and stream.isatty() for stream in (sys.stdin, sys.stdout))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="arxivlens",
        description="Browse recent arXiv abstracts with pinned authors and keywords highlighted",
    )
    parser.add_argument("-a", "--author", default=None, help="Only show papers by this author")
    parser.add_argument(
        "-c",
        "--category",
        default=None,
        help="arXiv category to browse, e.g. quant-ph or cs.AI (default: config value)",
    )
    parser.add_argument("-q", "--query", default=None, help="Free text matched against all fields")
    parser.add_argument("--start", type=int, default=0, help="Offset of the first result (default: 0)")
    parser.add_argument(
        "--max-results",
        type=int,
        default=None,
        help=f"Page size (1-{ARXIV_API_MAX_RESULTS_LIMIT}; default: config value)",
    )
    parser.add_argument(
        "--new-only",
        action="store_true",
        help="Only show first versions, hiding replacements",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the papers to stdout instead of starting the TUI",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to file (~/.config/arxivlens/debug.log)",
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Color output mode (default: auto)",
    )
    return parser


def main(
    argv: list[str] | None = None,
    *,
    load_config_fn: Callable[[], AppConfig] = load_config,
    fetch_fn: Callable[[QueryDescriptor], Feed] = fetch_feed,
    configure_logging_fn: Callable[[bool], Path | None] = _configure_logging,
    configure_color_mode_fn: Callable[[str], None] = _configure_color_mode,
    validate_interactive_tty_fn: Callable[[], bool] = _validate_interactive_tty,
    console: Console | None = None,
    app_factory: Callable[..., Any] | None = None,
) -> int:
    """Main entry point. Returns exit code."""
    args = _build_parser().parse_args(argv)

    configure_color_mode_fn(args.color)
    log_path = configure_logging_fn(args.debug)
    logger.debug("arxivlens starting, argv=%s, debug log=%s", argv, log_path)

    config = load_config_fn()
    try:
        descriptor = build_query(
            args.category if args.category is not None else config.category,
            args.author,
            args.query,
            args.start,
            args.max_results if args.max_results is not None else config.max_results,
        )
    except InvalidCategoryError as exc:
        print(
            build_actionable_error(
                "build the arXiv query",
                why=str(exc),
                next_step="pass a category such as quant-ph or cs.AI with --category",
            ),
            file=sys.stderr,
        )
        return 1
    new_only = args.new_only or config.new_only

    if args.list:
        result = _fetch_for_listing(descriptor, fetch_fn)
        if isinstance(result, int):
            return result
        feed = result.new_submissions() if new_only else result
        print_feed(feed, config, descriptor, console or Console())
        return 0

    if not validate_interactive_tty_fn():
        print(
            build_actionable_error(
                "start the interactive browser",
                why="stdin or stdout is not a terminal",
                next_step="run arxivlens in a terminal, or pass --list for plain output",
            ),
            file=sys.stderr,
        )
        return 2

    if app_factory is None:
        from arxivlens.app import ArxivLens as _ArxivLens

        app_factory = _ArxivLens

    app = app_factory(descriptor, config=config, new_only=new_only)
    app.run()
    return 0


__all__ = [
    "_configure_color_mode",
    "_configure_logging",
    "_validate_interactive_tty",
    "main",
    "print_feed",
]
