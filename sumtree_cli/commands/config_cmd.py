"""
CLI Config Command

Usage:
    sumtree config --init [--path FILE]
    sumtree config --show
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace
from pathlib import Path

from sumtree_cli.config import get_default_config_template


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def config_cmd(args: Namespace) -> int:
    """Handle the config command."""
    if args.init:
        path = Path(args.path)
        if path.exists():
            print(f"Error: Config file already exists: {path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR
        path.write_text(get_default_config_template(), encoding="utf-8")
        print(f"Created configuration file: {path}")
        print("Environment variables with the SUMTREE_ prefix override it.")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: sumtree config [--init|--show]")
    return EXIT_SUCCESS
