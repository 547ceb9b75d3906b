"""Command line entry point for pro."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from propener import __version__
from propener.auth import authorize
from propener.config import ConfigError, load_config
from propener.opener import EXIT_FAILURE, Opener
from propener.providers import PROVIDERS_BY_NAME

PROVIDER_USAGE = "Please specify provider (github or gitlab)"


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr, debug level when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pro",
        description="Pull Request Opener: open the pull/merge request for the current branch.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug information to stderr",
    )
    parser.add_argument(
        "-C",
        dest="directory",
        type=Path,
        default=Path("."),
        help="Run as if started in this directory",
    )
    parser.add_argument(
        "-p",
        "--print",
        dest="print_url",
        action="store_true",
        help="Print URL instead of opening in browser",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="command")

    open_parser = subparsers.add_parser("open", help="Open PR page in browser (default action)")
    open_parser.add_argument(
        "-p",
        "--print",
        dest="print_url",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Print URL instead of opening in browser",
    )

    auth_parser = subparsers.add_parser(
        "auth",
        help="Authorize GitLab or GitHub",
        usage="pro auth [gitlab|github]",
    )
    auth_parser.add_argument("providers", nargs="*", metavar="provider", help="github or gitlab")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    err_console = Console(stderr=True)

    if args.command == "auth" and (len(args.providers) != 1 or args.providers[0] not in PROVIDERS_BY_NAME):
        err_console.print(PROVIDER_USAGE, markup=False)
        return EXIT_FAILURE

    try:
        config = load_config()
    except ConfigError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        return EXIT_FAILURE

    if args.command == "auth":
        return authorize(PROVIDERS_BY_NAME[args.providers[0]], config, console=err_console)

    return Opener(config, err_console=err_console).run(args.directory, print_url=args.print_url)


if __name__ == "__main__":
    sys.exit(main())
