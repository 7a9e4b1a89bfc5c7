"""
Merkle sum trees with exclusive allotment proofs.

Build a commitment over (label, amount) pairs, publish its root, and prove
to each entity that its amount occupies its own slice of the total.
"""

from sumtree.merkle import (
    AllotmentLedger,
    AllotmentResult,
    Commitment,
    ExclusiveAllotmentVerifier,
    InclusionProof,
    Interval,
    MerkleSumTree,
    Position,
    ProofStep,
    SumCommitmentScheme,
    verify_allotment,
)

__version__ = "0.1.0"

__all__ = [
    "AllotmentLedger",
    "AllotmentResult",
    "Commitment",
    "ExclusiveAllotmentVerifier",
    "InclusionProof",
    "Interval",
    "MerkleSumTree",
    "Position",
    "ProofStep",
    "SumCommitmentScheme",
    "verify_allotment",
]
