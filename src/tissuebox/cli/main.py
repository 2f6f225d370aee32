# src/tissuebox/cli/main.py

"""
CLI entrypoint.

Builds Settings, initializes logging, then runs one command against the
tissue box file (read -> parse -> mutate -> serialize -> atomic write).
This is the only place where errors become exit codes.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from ..config import Settings
from ..core.errors import TissueError
from ..core.ports import IssuePublisher
from ..logging_setup import setup_logging
from ..storage.store import TissueStore
from .commands import CommandContext, UsageError, registry

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tissuebox",
        description="Track short-lived tasks in a TOML file next to your code.",
        epilog="Run 'tissuebox help' for the list of commands.",
    )
    parser.add_argument(
        "-i",
        "--input",
        default=str(settings.box_path),
        help=f"tissue box file (default: {settings.box_path})",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help=f"console log level (default: {settings.log_level})",
    )
    parser.add_argument("command", nargs=argparse.REMAINDER, help="command and its arguments")
    return parser


def main(
    argv: Sequence[str] | None = None,
    *,
    settings: Settings | None = None,
    publisher: IssuePublisher | None = None,
) -> int:
    if settings is None:
        settings = Settings.from_env()

    args = build_parser(settings).parse_args(argv)

    level = logging.getLevelName(str(args.log_level).upper())
    # getLevelName maps unknown names to "Level X" strings, not ints.
    console_level = level if isinstance(level, int) else settings.console_level
    setup_logging(console_level=console_level, log_file=settings.log_file)

    command = list(args.command) or ["list"]
    ctx = CommandContext(store=TissueStore(args.input), publisher=publisher)
    logger.debug("Running %s on %s", command[0], ctx.store.path)

    try:
        out = registry.handle(ctx, command)
    except UsageError as exc:
        print(exc, file=sys.stderr)
        return EXIT_USAGE
    except TissueError as exc:
        logger.error("%s", exc)
        return EXIT_ERROR
    except OSError as exc:
        logger.error("I/O error on %s: %s", ctx.store.path, exc)
        return EXIT_ERROR

    if out:
        print(out)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
