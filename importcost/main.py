"""Main CLI entry point for importcost.

Provides commands: extract, watch
"""

import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from importcost.cli.extract import extract_command
from importcost.cli.watch import watch_command
from importcost.parsers.base import RecoverableError

logger = logging.getLogger("importcost.cli")


def setup_logging(verbose: bool = False, console: Optional[Console] = None) -> None:
    """Setup logging configuration with Rich integration.

    Args:
        verbose: Enable verbose logging.
        console: Rich Console instance for coordinated output (optional).
    """
    level = logging.DEBUG if verbose else logging.WARNING

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        log_time_format="[%H:%M:%S]",
    )

    logging.basicConfig(
        level=level,
        format="[%(name)s] %(message)s",
        handlers=[handler],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="importcost",
        description="importcost - find the external packages a JS/TS file depends on",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    # A sub-command -v must not reset a top-level -v.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Enable verbose logging",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    extract_parser = subparsers.add_parser(
        "extract", parents=[common], help="List the package references of source files"
    )
    extract_parser.add_argument("files", nargs="+", help="JavaScript/TypeScript files")
    extract_parser.add_argument(
        "--config", help="Configuration file (.toml/.json) or inline TOML/JSON"
    )
    extract_parser.add_argument("--json", action="store_true", help="Print results as JSON")

    watch_parser = subparsers.add_parser(
        "watch",
        parents=[common],
        help="Track the package costs of a file as it and its manifests change",
    )
    watch_parser.add_argument("file", help="JavaScript/TypeScript file")
    watch_parser.add_argument(
        "--config", help="Configuration file (.toml/.json) or inline TOML/JSON"
    )
    watch_parser.add_argument(
        "--once", action="store_true", help="Process the file once and exit"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Returns:
        int: Exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return 1

    commands = {"extract": extract_command, "watch": watch_command}
    try:
        return commands[args.command](args)
    except RecoverableError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
