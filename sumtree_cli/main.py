"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    sumtree build leaves.json [--out DIR] [--json]
    sumtree prove leaves.json INDEX [--out FILE]
    sumtree verify root.json proof.json [--json]
    sumtree config --init | --show

Environment Variables:
    SUMTREE_HASH_ALGORITHM      Digest function (default: sha256)
    SUMTREE_AMOUNT_BITS         Amount width in bits (default: 64)
    SUMTREE_MAX_WORKERS         Threads for tree construction (default: 1)
    SUMTREE_PARALLEL_THRESHOLD  Pairs per level before using threads (default: 1024)
    SUMTREE_LOG_LEVEL           Log level (default: INFO)
    SUMTREE_LOG_FILE            Optional log file
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from sumtree_cli import __version__
from sumtree_cli.commands import build, config_cmd, prove, verify
from sumtree_cli.config import load_config


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("sumtree_cli")


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Route log records to stderr and, if configured, a file."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def _add_build_parser(subparsers) -> None:
    p = subparsers.add_parser(
        "build",
        help="Build a tree and publish its root",
        description="Build a Merkle sum tree from a JSON or CSV leaf file.",
    )
    p.add_argument(
        "input",
        help="Leaf file (.json list of {label, amount} or .csv with a label,amount header)",
    )
    p.add_argument("--out", "-o", default=None, help="Directory for root.json and proofs/")
    p.add_argument("--json", action="store_true", help="Print a JSON summary")
    p.set_defaults(func=build.build_cmd)


def _add_prove_parser(subparsers) -> None:
    p = subparsers.add_parser(
        "prove",
        help="Emit the proof bundle for one leaf",
        description="Rebuild the tree and emit the proof bundle for a real leaf index.",
    )
    p.add_argument("input", help="Leaf file used to build the tree")
    p.add_argument("index", type=int, help="Leaf index (0-based)")
    p.add_argument("--out", "-o", default=None, help="Output file (default: stdout)")
    p.set_defaults(func=prove.prove_cmd)


def _add_verify_parser(subparsers) -> None:
    p = subparsers.add_parser(
        "verify",
        help="Verify a proof bundle against a root statement",
        description="Rebuild the root from a proof bundle and report the leaf's exclusive interval.",
    )
    p.add_argument("root", help="Path to root.json")
    p.add_argument("proof", help="Path to a proof bundle")
    p.add_argument("--json", action="store_true", help="Print the result as JSON")
    p.set_defaults(func=verify.verify_cmd)


def _add_config_parser(subparsers) -> None:
    p = subparsers.add_parser(
        "config",
        help="Create or show configuration",
        description="Write a template configuration file or print the effective one.",
    )
    group = p.add_mutually_exclusive_group()
    group.add_argument("--init", action="store_true", help="Write a template config file")
    group.add_argument("--show", action="store_true", help="Print the effective configuration")
    p.add_argument(
        "--path",
        default="sumtree.yaml",
        help="Where --init writes the template (default: sumtree.yaml)",
    )
    p.set_defaults(func=config_cmd.config_cmd)


def create_parser() -> argparse.ArgumentParser:
    """Top-level parser with the build, prove, verify and config subcommands."""
    parser = argparse.ArgumentParser(
        prog="sumtree",
        description="Build Merkle sum tree commitments and verify exclusive allotment proofs.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Configuration file (default: ./sumtree.yaml, ./sumtree.json "
             "or ~/.config/sumtree/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    _add_build_parser(subparsers)
    _add_prove_parser(subparsers)
    _add_verify_parser(subparsers)
    _add_config_parser(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """
    Run the CLI.

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        args.cli_config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    setup_logging(
        level=args.log_level or args.cli_config.log_level,
        log_file=args.cli_config.log_file,
    )

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        logger.debug("Unhandled error in %s", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
