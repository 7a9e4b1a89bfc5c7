"""
CLI Verify Command

Verify a proof bundle against a published root statement and report the
leaf's exclusive interval.

Usage:
    sumtree verify root.json proofs/3.json [--json]

Exit codes: 0 accepted, 2 rejected, 1 runtime error.
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path

from sumtree.merkle import AllotmentResult
from sumtree.schemas.errors import SumTreeException
from sumtree.schemas.versioning import UnsupportedSchemaVersionError
from sumtree.schemas.wire import ProofBundle, RootStatement


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def verify_files(root_path: str | Path, proof_path: str | Path) -> AllotmentResult:
    """
    Load both documents and verify.

    Typed verification failures come back as a rejected result; unreadable
    or invalid documents raise.
    """
    statement = RootStatement.from_json(Path(root_path).read_text(encoding="utf-8"))
    bundle = ProofBundle.from_json(Path(proof_path).read_text(encoding="utf-8"))

    verifier = statement.verifier()
    try:
        claimed = bundle.claimed_leaf(statement.build_scheme())
    except SumTreeException as e:
        return AllotmentResult.rejected(bundle.leaf_index, e)
    return verifier.verify(claimed, bundle.leaf_index, bundle.to_proof())


def print_result_human(result: AllotmentResult) -> None:
    """Print a verification result in human-readable format."""
    print(f"leaf_index: {result.index}")
    print(f"accepted: {str(result.accepted).lower()}")
    if result.interval is not None:
        print(f"interval: {result.interval}")
    if result.error is not None:
        print(f"error: {result.error.code}: {result.error.message}")


def verify_cmd(args: Namespace) -> int:
    """Handle the verify command."""
    try:
        result = verify_files(args.root, args.proof)
    except (SumTreeException, UnsupportedSchemaVersionError, FileNotFoundError) as e:
        logger.error(f"Verification could not run: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if args.json or args.cli_config.default_output_format == "json":
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_result_human(result)

    return EXIT_SUCCESS if result.accepted else EXIT_VERIFICATION_FAILED
