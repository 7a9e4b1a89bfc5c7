"""
Merkle Sum Tree and Exclusive Allotment Proofs

This package provides:
- Commitment / Position: value types carried by every node and proof step
- SumCommitmentScheme: leaf, padding and combine over a pluggable digest
- MerkleSumTree: build once, read the root, prove any real leaf
- verify_allotment / ExclusiveAllotmentVerifier: rebuild the root and
  derive the leaf's exclusive interval
- AllotmentLedger: refuse overlapping intervals across claimants

Commitment Rules:
1. Leaf: digest = H(encode(amount) + label)
2. Parent: amount = left + right, digest = H(left + right + encode(amount))
3. Padding: zero-amount leaves with a reserved label, up to a power of two
4. Empty input: EmptyInput
5. Overflow: AmountOverflow, never wraparound

Usage:
    from sumtree.merkle import MerkleSumTree, ExclusiveAllotmentVerifier

    tree = MerkleSumTree.build([(b"a", 5), (b"b", 3), (b"c", 7), (b"d", 1)])
    verifier = ExclusiveAllotmentVerifier(tree.root(), tree.leaf_count)
    result = verifier.verify(tree.leaf(2), 2, tree.prove(2))
    assert result.accepted and (result.interval.lo, result.interval.hi) == (8, 15)
"""
from .commitment import (
    DEFAULT_AMOUNT_BITS,
    PADDING_LABEL,
    Commitment,
    CommitmentScheme,
    Position,
    SumCommitmentScheme,
    salted_label,
)

from .sum_tree import (
    DEFAULT_PARALLEL_THRESHOLD,
    InclusionProof,
    MerkleSumTree,
    ProofStep,
    compute_tree_depth,
    next_power_of_two,
)

from .verifier import (
    AllotmentLedger,
    AllotmentResult,
    ExclusiveAllotmentVerifier,
    Interval,
    check_proof_shape,
    verify_allotment,
)


__all__ = [
    # Commitments
    "DEFAULT_AMOUNT_BITS",
    "PADDING_LABEL",
    "Commitment",
    "CommitmentScheme",
    "Position",
    "SumCommitmentScheme",
    "salted_label",
    # Tree
    "DEFAULT_PARALLEL_THRESHOLD",
    "InclusionProof",
    "MerkleSumTree",
    "ProofStep",
    "compute_tree_depth",
    "next_power_of_two",
    # Verification
    "AllotmentLedger",
    "AllotmentResult",
    "ExclusiveAllotmentVerifier",
    "Interval",
    "check_proof_shape",
    "verify_allotment",
]
