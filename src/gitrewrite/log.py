"""Logging setup for the command line tools."""

from __future__ import annotations

import argparse
import logging


def add_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the ``--verbose`` and ``--debug`` options read by ``setup``."""
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show informational log messages",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show debug log messages",
    )


def setup(args: argparse.Namespace, program: str) -> None:
    """Configure the root logger for one command line run.

    Warnings and errors are always shown. ``--verbose`` adds progress details
    and ``--debug`` everything, prefixed with ``program``.
    """

    prefix = program.replace("%", "%%")
    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format=f"{prefix} %(levelname)s %(name)s: %(message)s")
    elif args.verbose:
        logging.basicConfig(level=logging.INFO, format=f"{prefix} %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING, format="%(name)s: %(message)s")
