"""
CLI Prove Command

Rebuild the tree from the leaf file and emit the proof bundle for one
real leaf.

Usage:
    sumtree prove leaves.json INDEX [--out FILE]
"""

from __future__ import annotations

import logging
import sys
from argparse import Namespace
from pathlib import Path

from sumtree.schemas.errors import SumTreeException
from sumtree.schemas.wire import ProofBundle
from sumtree_cli.commands.build import build_tree


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def prove_cmd(args: Namespace) -> int:
    """Handle the prove command."""
    try:
        tree, leaves = build_tree(args.input, args.cli_config)
        label = leaves[args.index][0] if 0 <= args.index < len(leaves) else None
        bundle = ProofBundle.from_tree(tree, args.index, label=label)
    except (SumTreeException, FileNotFoundError) as e:
        logger.error(f"Prove failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    document = bundle.to_json()
    if args.out:
        Path(args.out).write_text(document + "\n", encoding="utf-8")
        print(f"Wrote proof for leaf {args.index} to {args.out}")
    else:
        print(document)
    return EXIT_SUCCESS
