"""Argument parsing and command dispatch for the hashmark CLI."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .commands import CompileCommand, WatchCommand

COMMANDS = {
    CompileCommand.name: CompileCommand,
    WatchCommand.name: WatchCommand,
}

_EPILOG = """Commands:
  compile    Compile assets for production
  watch      Watch assets for changes and recompile

Examples:
  hashmark compile
  hashmark compile -o public/assets
  hashmark watch
  hashmark watch -r /path/to/app
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hashmark",
        usage="hashmark [COMMAND] [OPTIONS]",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("command", nargs="?", choices=sorted(COMMANDS), help=argparse.SUPPRESS)
    CompileCommand.configure(parser)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Sequence[str] | None = None, *, start_dir: Path | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        # argparse exits 0 for --help and 2 for usage errors
        return 0 if not exc.code else 1

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if not args.command:
        parser.print_help()
        return 0
    command = COMMANDS[args.command](start_dir=start_dir)
    return command.run(args)
