# source/xmldoc_gen/cli.py
"""Command-line entrypoint.

Works both as a standalone tool and as an mdBook preprocessor: with no
subcommand it speaks the preprocessor protocol on stdin/stdout.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .constants import (
    EXIT_FAILURE,
    EXIT_LOG_SETUP,
    EXIT_OK,
    HEADER_LEVEL_DEFAULT,
    STDOUT_SENTINEL,
)
from .errors import XmlDocError
from .generator import GeneratorOptions, HeaderLevel
from .io import read_schema
from .loader import LoadDigest, load
from .log import configure_logging, verbosity_level
from .preprocessor import run as run_preprocessor, supports
from .writer import write_md


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xmldoc-gen",
        description=(
            "Generate Markdown reference documentation from a YAML tag list. "
            "Without a command, runs as an mdBook preprocessor."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--verbose", action="store_true", help="Provide additional diagnostics."
    )
    parser.add_argument(
        "--trace", action="store_true", help="Log every tag as it is processed."
    )

    sub = parser.add_subparsers(dest="command")

    check = sub.add_parser("check", help="Check that a file is a valid tag list.")
    check.add_argument("file", type=Path)
    check.add_argument(
        "--strict",
        action="store_true",
        help="Treat load warnings (unresolved references, roots) as a failure.",
    )

    generate = sub.add_parser("generate", help="Generate a Markdown file from a tag list.")
    generate.add_argument("file", type=Path)
    generate.add_argument(
        "output",
        nargs="?",
        default=STDOUT_SENTINEL,
        help=f"Destination file ({STDOUT_SENTINEL!r} for standard output).",
    )
    generate.add_argument(
        "--level",
        type=int,
        default=HEADER_LEVEL_DEFAULT,
        help="Markdown heading level of each tag header (1-6).",
    )
    generate.add_argument(
        "--crlf", action="store_true", help="Use CRLF line endings instead of LF."
    )

    supports_cmd = sub.add_parser(
        "supports", help="mdBook query: can the preprocessor feed this renderer?"
    )
    supports_cmd.add_argument("renderer")

    return parser


def _load_file(path: Path, logger: logging.Logger) -> LoadDigest:
    logger.debug("loading tag list from %s", path)
    return load(read_schema(path, logger=logger), logger=logger)


def exec_check(path: Path, strict: bool, logger: logging.Logger) -> bool:
    digest = _load_file(path, logger)
    if digest.issues:
        for issue in digest.issues:
            if issue.hint:
                logger.debug("%s: %s", issue.code, issue.hint)
        logger.info("file loaded with %d warning(s)", len(digest.issues))
        return not strict
    logger.info("file ok")
    return True


def exec_generate(
    path: Path, output: str, options: GeneratorOptions, logger: logging.Logger
) -> bool:
    digest = _load_file(path, logger)
    write_md(output, digest.model, options, logger=logger)
    if output != STDOUT_SENTINEL:
        logger.info("wrote %d tag(s) to %s", len(digest.model), output)
    return True


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entrypoint; returns the process exit code."""
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    # `supports` is answered before anything touches the log configuration.
    if args.command == "supports":
        return EXIT_OK if supports(args.renderer) else EXIT_FAILURE

    try:
        logger = configure_logging(verbosity_level(args.verbose, args.trace))
    except (OSError, ValueError, TypeError) as e:
        print(f"failed to configure log: {e}", file=sys.stderr)
        print("exiting...", file=sys.stderr)
        return EXIT_LOG_SETUP

    try:
        if args.command == "check":
            success = exec_check(args.file, args.strict, logger)
        elif args.command == "generate":
            options = GeneratorOptions(level=HeaderLevel(args.level), crlf=args.crlf)
            success = exec_generate(args.file, args.output, options, logger)
        else:
            run_preprocessor(sys.stdin, sys.stdout, logger=logger)
            success = True
    except XmlDocError as e:
        logger.error("%s", e)
        success = False

    if not success:
        logger.error("xmldoc-gen failed, check the logs!")
        logger.error("if the logs are empty, run with --verbose")
        return EXIT_FAILURE
    return EXIT_OK


def run() -> None:
    raise SystemExit(main())
