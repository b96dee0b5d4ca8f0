"""CLI/bootstrap helpers for the character browser application."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import logging.handlers
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
from platformdirs import user_config_dir

from character_browser.action_messages import build_actionable_error, build_fetch_error_message
from character_browser.config import load_config
from character_browser.models import (
    CHARACTER_SPECIES,
    CHARACTER_STATUSES,
    CONFIG_APP_NAME,
    LOAD_MODES,
    SORT_OPTIONS,
    SUPPORTED_LANGUAGES,
    FetchFailure,
    FilterCriteria,
    PageResult,
    UserConfig,
)
from character_browser.query import build_view
from character_browser.services.character_api_service import (
    USER_AGENT,
    build_request_body,
    decode_page_response,
)

logger = logging.getLogger(__name__)


def _fetch_character_page_sync(*, page: int, api_url: str, timeout_seconds: int) -> PageResult:
    """Fetch one page of characters with a blocking request.

    Raises:
        FetchFailure: Transport, HTTP status, or payload error.
    """
    try:
        response = httpx.post(
            api_url,
            json=build_request_body(page),
            headers={"User-Agent": USER_AGENT},
            timeout=timeout_seconds,
        )
    except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
        raise FetchFailure(f"Network error: {exc}", page=page) from exc
    return decode_page_response(response, page)


def _print_page(
    args: argparse.Namespace,
    config: UserConfig,
    fetch_fn: Callable[..., PageResult],
) -> int:
    """Fetch one page, run it through filter/sort, and print one line per character."""
    page = args.list_page
    if page < 1:
        print(
            build_actionable_error(
                f"load page {page}",
                why="page numbers start at 1",
                next_step="pass --list-page 1 or higher",
            ),
            file=sys.stderr,
        )
        return 1
    try:
        result = fetch_fn(
            page=page,
            api_url=config.api_url,
            timeout_seconds=config.request_timeout_seconds,
        )
    except FetchFailure as exc:
        print(build_fetch_error_message(exc, retry_hint="run the command again"), file=sys.stderr)
        return 1

    criteria = FilterCriteria(status=args.status or "", species=args.species or "")
    view = build_view(result.characters, criteria, args.sort or "")
    for character in view:
        print(
            f"{character.id}\t{character.name}\t{character.status}\t"
            f"{character.species}\t{character.origin}"
        )
    more = "more pages available" if result.has_next else "last page"
    print(f"# page {page}: {len(view)} of {len(result.characters)} shown, {more}")
    return 0


def _configure_logging(debug: bool) -> None:
    """Configure logging. When debug=True, logs to file at DEBUG level."""
    if not debug:
        # Default: suppress all logging (TUI captures stderr)
        logging.disable(logging.CRITICAL)
        return

    log_dir = Path(user_config_dir(CONFIG_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "debug.log"

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.DEBUG)


def _configure_color_mode(color_mode: str) -> None:
    """Configure environment hints for terminal color behavior."""
    if color_mode == "never":
        os.environ["NO_COLOR"] = "1"
        os.environ.pop("FORCE_COLOR", None)
        return
    if color_mode == "always":
        os.environ["FORCE_COLOR"] = "1"
        os.environ.pop("NO_COLOR", None)
        return
    # auto
    os.environ.pop("FORCE_COLOR", None)


def _validate_interactive_tty() -> bool:
    """Return True when stdin/stdout are interactive terminals."""
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Browse Rick and Morty characters page by page or as an endless list"
    )
    parser.add_argument(
        "--mode",
        choices=LOAD_MODES,
        default=None,
        help="Start in this load mode (default: restored session or config default_mode)",
    )
    parser.add_argument(
        "--language",
        choices=SUPPORTED_LANGUAGES,
        default=None,
        help="UI language (default: config value)",
    )
    parser.add_argument(
        "--no-restore",
        action="store_true",
        help="Start with a fresh session (ignore saved mode, filters and sort)",
    )
    parser.add_argument(
        "--api-url",
        type=str,
        default=None,
        help="GraphQL endpoint to query (default: config value)",
    )
    parser.add_argument(
        "--list-page",
        type=int,
        default=None,
        metavar="N",
        help="Print page N as tab-separated lines and exit (no TUI)",
    )
    parser.add_argument(
        "--status",
        choices=CHARACTER_STATUSES,
        default=None,
        help="Status filter for --list-page",
    )
    parser.add_argument(
        "--species",
        choices=CHARACTER_SPECIES,
        default=None,
        help="Species filter for --list-page",
    )
    parser.add_argument(
        "--sort",
        choices=[key for key in SORT_OPTIONS if key],
        default=None,
        help="Sort key for --list-page",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to file (~/.config/character-browser/debug.log)",
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Color output mode for terminal UI (default: auto)",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable terminal colors (equivalent to --color never)",
    )
    parser.add_argument(
        "--ascii",
        action="store_true",
        help="Use ASCII-only status icons for compatibility with limited terminals",
    )
    return parser


def main(
    argv: list[str] | None = None,
    *,
    load_config_fn: Callable[[], UserConfig] = load_config,
    fetch_page_fn: Callable[..., PageResult] = _fetch_character_page_sync,
    configure_logging_fn: Callable[[bool], None] = _configure_logging,
    configure_color_mode_fn: Callable[[str], None] = _configure_color_mode,
    validate_interactive_tty_fn: Callable[[], bool] = _validate_interactive_tty,
    app_factory: Callable[..., Any] | None = None,
) -> int:
    """Main entry point. Returns exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    list_only = (args.status, args.species, args.sort)
    if args.list_page is None and any(value is not None for value in list_only):
        print("Error: --status/--species/--sort require --list-page", file=sys.stderr)
        return 1

    color_mode = "never" if args.no_color else args.color
    configure_color_mode_fn(color_mode)
    configure_logging_fn(args.debug)
    logger.debug("character-browser starting, cwd=%s", Path.cwd())

    config = load_config_fn()
    if args.api_url:
        config = dataclasses.replace(config, api_url=args.api_url)

    if args.list_page is not None:
        return _print_page(args, config, fetch_page_fn)

    if not validate_interactive_tty_fn():
        print(
            "Error: character-browser requires an interactive TTY for the full UI.",
            file=sys.stderr,
        )
        print("Next steps:", file=sys.stderr)
        print("  - Run character-browser directly in a terminal session", file=sys.stderr)
        print("  - Use --list-page N for non-interactive output", file=sys.stderr)
        print("  - Use --help for command documentation", file=sys.stderr)
        return 2

    if app_factory is None:
        from character_browser.app import CharacterBrowser as _CharacterBrowser

        app_factory = _CharacterBrowser

    app = app_factory(
        config=config,
        restore_session=not args.no_restore,
        mode=args.mode,
        language=args.language,
        ascii_icons=args.ascii,
    )
    app.run()
    return 0


__all__ = [
    "_configure_color_mode",
    "_configure_logging",
    "_fetch_character_page_sync",
    "_print_page",
    "_validate_interactive_tty",
    "main",
]
