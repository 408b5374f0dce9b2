#!/usr/bin/env python3
"""
gridmon - live NFL / college football scoreboard in the terminal.
Usage: gridmon [--ncaa] [-i SECONDS] [--config PATH] [--log-file PATH] [--debug]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console

from gridmon.config import MIN_INTERVAL, ConfigError, Settings, load_config
from gridmon.espn import ScoreboardSource
from gridmon.logos import LogoLoader
from gridmon.poller import fetch_timeout
from gridmon.state import ScoreboardState

console = Console(stderr=True)

log = logging.getLogger("gridmon")


class TerminalError(Exception):
    pass


def interval_arg(value: str) -> int:
    try:
        seconds = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a whole number of seconds: {value!r}")
    if seconds < MIN_INTERVAL:
        raise argparse.ArgumentTypeError(f"interval must be at least {MIN_INTERVAL} second")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gridmon", description="Live American football scoreboard")
    parser.add_argument(
        "--ncaa",
        action="store_true",
        help="Show NCAA college football instead of the NFL",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=interval_arg,
        default=None,
        help="Refresh interval in seconds (default: from config, else 15)",
    )
    parser.add_argument("--config", type=Path, help="Path to a JSON config file")
    parser.add_argument("--log-file", type=Path, help="Write logs to this file")
    parser.add_argument("--debug", action="store_true", help="Log at debug level")
    return parser


def setup_logging(log_file: Optional[Path], debug: bool) -> None:
    """Route logs away from the screen the TUI is drawing on."""
    if log_file is not None:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    else:
        from textual.logging import TextualHandler

        handler = TextualHandler()
    log.handlers[:] = [handler]
    log.setLevel(logging.DEBUG if debug else logging.INFO)
    log.propagate = False


def check_terminal() -> None:
    if not sys.stdin.isatty() or not sys.stdout.isatty():
        raise TerminalError("gridmon needs an interactive terminal (stdin and stdout must be a TTY)")


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        return 1

    settings = Settings.resolve(config, ncaa=args.ncaa, interval=args.interval)
    setup_logging(args.log_file, args.debug)

    try:
        check_terminal()
    except TerminalError as e:
        console.print(f"[red]{e}[/red]")
        return 1

    from gridmon.app import ScoreboardApp

    state = ScoreboardState(settings.league, settings.interval, show_logos=settings.show_logos)
    timeout = fetch_timeout(settings.interval)
    source = ScoreboardSource(timeout=timeout)
    app = ScoreboardApp(state, source, theme=settings.theme, logos=LogoLoader(timeout=timeout))

    try:
        app.run()
    except Exception as e:
        # textual has already restored the terminal at this point
        log.exception("Terminal session failed")
        console.print(f"[red]Terminal error: {e}[/red]")
        return 1

    return app.return_code or 0


if __name__ == "__main__":
    sys.exit(main())
