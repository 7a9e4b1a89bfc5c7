"""
CLI Build Command

Build a Merkle sum tree from a leaf file and publish its root statement
and, optionally, one proof bundle per real leaf.

Usage:
    sumtree build leaves.json [--out DIR] [--json]

Output layout (with --out):
    DIR/root.json            RootStatement
    DIR/proofs/<index>.json  ProofBundle for each real leaf
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path

from sumtree.merkle import MerkleSumTree
from sumtree.schemas.errors import SumTreeException
from sumtree.schemas.wire import ProofBundle, RootStatement
from sumtree_cli.config import CLIConfig
from sumtree_cli.loader import load_leaves


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def build_tree(input_path: str | Path, cli_config: CLIConfig) -> tuple[MerkleSumTree, list[tuple[bytes, int]]]:
    """Load leaves and build the tree with the configured scheme and workers."""
    leaves = load_leaves(input_path)
    tree = MerkleSumTree.build(leaves, **cli_config.runtime.build_options())
    return tree, leaves


def write_outputs(
    tree: MerkleSumTree,
    leaves: list[tuple[bytes, int]],
    statement: RootStatement,
    out_dir: Path,
) -> int:
    """Write root.json and proofs/<index>.json. Returns the number of proofs."""
    proofs_dir = out_dir / "proofs"
    proofs_dir.mkdir(parents=True, exist_ok=True)
    (out_dir / "root.json").write_text(statement.to_json() + "\n", encoding="utf-8")

    for index, (label, _amount) in enumerate(leaves):
        bundle = ProofBundle.from_tree(tree, index, label=label)
        (proofs_dir / f"{index}.json").write_text(bundle.to_json() + "\n", encoding="utf-8")

    logger.info(f"Wrote root statement and {len(leaves)} proofs to {out_dir}")
    return len(leaves)


def build_cmd(args: Namespace) -> int:
    """Handle the build command."""
    config = args.cli_config
    try:
        tree, leaves = build_tree(args.input, config)
    except (SumTreeException, FileNotFoundError) as e:
        logger.error(f"Build failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    statement = RootStatement.from_tree(tree)

    proofs_written = 0
    if args.out:
        proofs_written = write_outputs(tree, leaves, statement, Path(args.out))

    if args.json or config.default_output_format == "json":
        summary = {
            "root": statement.root.model_dump(),
            "leaf_count": tree.leaf_count,
            "padded_leaf_count": tree.padded_leaf_count,
            "depth": tree.depth,
            "hash_algorithm": statement.hash_algorithm,
            "amount_bits": statement.amount_bits,
            "proofs_written": proofs_written,
        }
        print(json.dumps(summary, indent=2))
    else:
        print(f"leaf_count: {tree.leaf_count}")
        print(f"padded_leaf_count: {tree.padded_leaf_count}")
        print(f"depth: {tree.depth}")
        print(f"total_amount: {statement.root.amount}")
        print(f"root_digest: {statement.root.digest}")
        if args.out:
            print(f"output: {args.out} ({proofs_written} proofs)")

    return EXIT_SUCCESS
