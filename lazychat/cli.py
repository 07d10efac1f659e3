"""Command-line front door for lazychat.

Parses CLI options, merges them over the persisted config, sets up file
logging, then runs the interactive inbox or prints one rendered frame.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys

from .logging_setup import setup_logging
from .model import DEFAULT_VISIBLE_COUNT
from .platforms import DemoPlatformClient
from .runtime import config, render_once, run_app
from .runtime.app import AppOptions
from .ui_theme import available_theme_names, resolve_theme

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazychat",
        description="Browse and answer chat channels from one keyboard-driven terminal list.",
    )
    parser.add_argument("--demo", action="store_true", help="Use the bundled in-memory demo platform.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument(
        "--visible-count",
        type=_positive_int,
        default=None,
        help=f"Messages shown per expanded channel (default: {DEFAULT_VISIBLE_COUNT}).",
    )
    parser.add_argument("--read-only", action="store_true", help="Browse without connecting; writes are refused.")
    parser.add_argument("--log-file", default=None, help="Write logs to this file instead of the user log dir.")
    parser.add_argument("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR).")
    parser.add_argument("--render", action="store_true", help="Print one frame of the inbox and exit.")
    parser.add_argument(
        "--max-cols",
        type=_positive_int,
        default=None,
        help="Column width for --render output (default: terminal width).",
    )
    parser.add_argument(
        "--max-rows",
        type=_positive_int,
        default=24,
        help="Row count for --render output.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse CLI arguments and launch lazychat; returns a process exit code."""
    args = build_parser().parse_args(argv)

    if not args.demo:
        raise SystemExit("No platform adapter is configured; run with --demo.")

    log_path = setup_logging(
        args.log_level or config.load_log_level() or "WARNING",
        args.log_file or config.default_log_path(),
    )
    visible_count = args.visible_count or config.load_visible_count() or DEFAULT_VISIBLE_COUNT
    theme = resolve_theme(args.theme or config.load_theme_name(), no_color=args.no_color)
    logger.info("starting lazychat (theme=%s, visible_count=%d, log=%s)", theme.name, visible_count, log_path)

    client = DemoPlatformClient()
    options = AppOptions(
        theme=theme,
        color=not args.no_color,
        visible_count=visible_count,
        read_only=args.read_only,
        persist=not args.render,
    )
    if args.render:
        cols = args.max_cols or max(1, shutil.get_terminal_size((80, 24)).columns)
        rows = render_once(client, options, rows=args.max_rows, cols=cols)
        sys.stdout.write("\n".join(rows) + "\n")
        return 0
    return run_app(client, options)


if __name__ == "__main__":
    sys.exit(main())
