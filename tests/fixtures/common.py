"""
Common test fixtures - factory functions for trees, proofs and tampering.

These factories produce valid objects by default; tampering helpers
return modified copies and never touch the originals.
"""

from __future__ import annotations

from typing import Optional, Sequence

from sumtree.crypto.hashing import get_digest_function
from sumtree.merkle import (
    Commitment,
    InclusionProof,
    MerkleSumTree,
    ProofStep,
    SumCommitmentScheme,
)


def make_scheme(algorithm: str = "sha256", amount_bits: int = 64) -> SumCommitmentScheme:
    """Create a commitment scheme for tests."""
    return SumCommitmentScheme(digest=get_digest_function(algorithm), amount_bits=amount_bits)


def make_leaves(amounts: Sequence[int], prefix: str = "entity") -> list[tuple[bytes, int]]:
    """Create (label, amount) pairs with distinct labels."""
    return [(f"{prefix}-{i}".encode(), amount) for i, amount in enumerate(amounts)]


def make_tree(
    amounts: Sequence[int] = (5, 3, 7, 1),
    scheme: Optional[SumCommitmentScheme] = None,
    **build_kwargs,
) -> MerkleSumTree:
    """Create a tree over the given amounts."""
    return MerkleSumTree.build(make_leaves(amounts), scheme=scheme or make_scheme(), **build_kwargs)


def flip_bit(data: bytes, bit: int) -> bytes:
    """Return a copy of `data` with one bit inverted."""
    buf = bytearray(data)
    buf[bit // 8] ^= 1 << (bit % 8)
    return bytes(buf)


def replace_step(
    proof: InclusionProof,
    level: int,
    sibling: Optional[Commitment] = None,
    position=None,
) -> InclusionProof:
    """Return a copy of `proof` with one step's sibling and/or position replaced."""
    steps = list(proof.steps)
    old = steps[level]
    steps[level] = ProofStep(
        sibling=sibling if sibling is not None else old.sibling,
        position=position if position is not None else old.position,
    )
    return InclusionProof(steps=tuple(steps))


def tamper_sibling_digest(proof: InclusionProof, level: int, bit: int = 0) -> InclusionProof:
    """Flip one bit of the sibling digest at `level`."""
    old = proof[level].sibling
    return replace_step(proof, level, sibling=Commitment(old.amount, flip_bit(old.digest, bit)))


def tamper_sibling_amount(proof: InclusionProof, level: int, delta: int = 1) -> InclusionProof:
    """Shift the sibling amount at `level` by `delta` (clamped at zero)."""
    old = proof[level].sibling
    return replace_step(proof, level, sibling=Commitment(max(0, old.amount + delta), old.digest))
