"""Command-line interface for expanding actor classes into handler bindings and client traits.

Notes:
    - The expanded modules import the actor runtime module given by `--runtime-module`.
"""

from __future__ import annotations

import argparse
import logging
import os.path
from collections.abc import Sequence

from actor_handler_generator.errors import GenerationError
from actor_handler_generator.run import DEFAULT_OUTPUT_SUFFIX, run
from actor_handler_generator.runtime_types import DEFAULT_RUNTIME_MODULE

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DIAGNOSTICS = 1
EXIT_ABORTED = 2


def _add_recursive_argument(parser: argparse.ArgumentParser):
    """Add a recursive argument to a parser.

    Args:
        parser (argparse.ArgumentParser): The parser to add the argument to.
    """
    parser.add_argument(
        "-r",
        "--recursive",
        dest="recursive",
        default=False,
        action="store_true",
        help="recursively search for *.py files with a given glob expression.",
    )


def setup_parser() -> argparse.ArgumentParser:
    """Setup for the parser.

    Returns:
        argparse.ArgumentParser: The parser after setup.
    """
    parser = argparse.ArgumentParser(description="Generate handler bindings and client traits for actor classes.")

    parser.add_argument(
        "-c",
        "--clean",
        type=str,
        nargs="+",
        default=[],
        help="path or glob expressions that match files to clean up before generation.",
    )

    parser.add_argument(
        "-p",
        "--paths",
        type=str,
        nargs="+",
        default=["**/*.py"],
        help="path or glob expressions that match *.py files with actor_handler classes.",
    )

    parser.add_argument(
        "-e",
        "--excludes",
        type=str,
        nargs="+",
        default=[],
        help="path or glob expressions to exclude from path matches.",
    )

    parser.add_argument(
        "-o",
        "--output-dir",
        type=str,
        default="",
        help="directory to write all expanded modules; defaults to alongside each source if omitted.",
    )

    parser.add_argument(
        "-s",
        "--suffix",
        type=str,
        default=DEFAULT_OUTPUT_SUFFIX,
        help="suffix appended to the module name of each expanded module.",
    )

    parser.add_argument(
        "--runtime-module",
        dest="runtime_module",
        type=str,
        default=DEFAULT_RUNTIME_MODULE,
        help="module that provides Handler, Context, Addr, Request, RecipientRequest and MessageResult.",
    )

    parser.add_argument(
        "--no-format",
        dest="no_format",
        default=False,
        action="store_true",
        help="skip ruff formatting of the generated code.",
    )

    parser.add_argument(
        "--pyright",
        dest="pyright",
        default=False,
        action="store_true",
        help="validate the expanded modules with pyright.",
    )

    _add_recursive_argument(parser)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the handler generator.

    Args:
        argv (Sequence[str] | None, optional): Run arguments. Defaults to None.

    Returns:
        int: Error code. 1 if any handler method was rejected, 2 if generation was aborted.
    """
    logging.basicConfig(level=logging.INFO)

    root_directory = os.getcwd()
    logging.info("Working from root directory: %s", root_directory)

    parser = setup_parser()
    args = parser.parse_args(argv)

    try:
        diagnostic_count = run(args, root_directory)
    except GenerationError as e:
        logger.error("Generation aborted: %s", e)
        return EXIT_ABORTED

    if diagnostic_count:
        logger.error("%d handler method(s) were rejected.", diagnostic_count)
        return EXIT_DIAGNOSTICS

    return EXIT_OK
