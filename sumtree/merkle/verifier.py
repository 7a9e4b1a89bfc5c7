"""
Exclusive Allotment Verification
Rebuilds the root from a claimed leaf and its proof, and derives the
half-open interval [lo, hi) the leaf occupies inside [0, root.amount).

Checks, in order:
1. Trusted context: leaf_count >= 1                  -> MalformedProof
2. Index range: 0 <= index < leaf_count              -> IndexOutOfRange
3. Proof length == compute_tree_depth(leaf_count)    -> MalformedProof
4. Step k position matches bit k of index            -> MalformedProof
5. Reconstructed commitment == root (amount+digest)  -> ProofMismatch

Interval derivation: every LEFT sibling's amount is added to `lo`;
RIGHT siblings lie above the leaf and never move it. hi = lo + leaf.amount.
Because the root commits to every subtree sum, the intervals of distinct
leaves of one tree are disjoint and together cover [0, root.amount).

The leaf count is part of the trusted verification context. Taking it
from the prover lets a proof for a padding slot through the range check.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from sumtree.merkle.commitment import (
    Commitment,
    CommitmentScheme,
    Position,
    SumCommitmentScheme,
)
from sumtree.merkle.sum_tree import InclusionProof, compute_tree_depth
from sumtree.schemas.errors import (
    AllotmentOverlap,
    IndexOutOfRange,
    MalformedProof,
    ProofMismatch,
    SumTreeError,
    SumTreeException,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class Interval:
    """Half-open numeric range [lo, hi)."""
    lo: int
    hi: int

    def __post_init__(self) -> None:
        if self.lo < 0 or self.hi < self.lo:
            raise ValueError(f"Invalid interval [{self.lo}, {self.hi})")

    @property
    def width(self) -> int:
        return self.hi - self.lo

    def overlaps(self, other: "Interval") -> bool:
        """True if the two ranges share at least one value."""
        if self.width == 0 or other.width == 0:
            return False
        return self.lo < other.hi and other.lo < self.hi

    def contains(self, value: int) -> bool:
        return self.lo <= value < self.hi

    def __str__(self) -> str:
        return f"[{self.lo}, {self.hi})"


@dataclass(frozen=True)
class AllotmentResult:
    """
    Outcome of verifying one claimed leaf.

    Attributes:
        accepted: Whether the proof reconstructs the root exactly
        index: Leaf index the claim was made for
        interval: Exclusive interval of the leaf (None when rejected)
        error: Structured failure (None when accepted)
        root: Root the claim was checked against (None when rejected)
    """
    accepted: bool
    index: int
    interval: Optional[Interval] = None
    error: Optional[SumTreeError] = None
    root: Optional[Commitment] = None

    @classmethod
    def rejected(cls, index: int, exc: SumTreeException) -> "AllotmentResult":
        return cls(accepted=False, index=index, interval=None, error=exc.to_error_model())

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"accepted": self.accepted, "index": self.index}
        if self.interval is not None:
            data["interval"] = [self.interval.lo, self.interval.hi]
        if self.error is not None:
            data["error"] = self.error.model_dump()
        return data


def check_proof_shape(index: int, proof: InclusionProof, leaf_count: int) -> None:
    """
    Validate index range and proof shape before any hashing.

    Raises:
        MalformedProof: If leaf_count < 1, the step count differs from the
            tree depth, or a position disagrees with the index bits
        IndexOutOfRange: If index is outside [0, leaf_count)
    """
    if isinstance(leaf_count, bool) or not isinstance(leaf_count, int) or leaf_count < 1:
        raise MalformedProof(
            f"Leaf count must be a positive integer, got {leaf_count!r}",
            leaf_index=index,
        )
    if isinstance(index, bool) or not isinstance(index, int):
        raise MalformedProof(
            f"Leaf index must be an integer, got {type(index).__name__}",
        )
    if index < 0 or index >= leaf_count:
        raise IndexOutOfRange(
            f"Leaf index {index} out of range for {leaf_count} leaves",
            index=index,
            leaf_count=leaf_count,
        )

    expected_depth = compute_tree_depth(leaf_count)
    if len(proof) != expected_depth:
        raise MalformedProof(
            f"Proof has {len(proof)} steps, expected {expected_depth} "
            f"for {leaf_count} leaves",
            leaf_index=index,
            details={"steps": len(proof), "expected": expected_depth},
        )

    for level, step in enumerate(proof):
        if step.position not in (Position.LEFT, Position.RIGHT):
            raise MalformedProof(
                f"Position at level {level} is {step.position!r}, expected left or right",
                leaf_index=index,
                details={"level": level},
            )
        expected = Position.for_index_bit(index >> level)
        if step.position != expected:
            raise MalformedProof(
                f"Position at level {level} is {Position(step.position).value}, "
                f"index {index} requires {expected.value}",
                leaf_index=index,
                details={"level": level},
            )


def verify_allotment(
    claimed_leaf: Commitment,
    index: int,
    proof: InclusionProof,
    root: Commitment,
    leaf_count: int,
    scheme: Optional[CommitmentScheme] = None,
) -> AllotmentResult:
    """
    Verify a claimed leaf against a root and derive its exclusive interval.

    Args:
        claimed_leaf: Leaf commitment the entity claims
        index: Leaf index the entity claims
        proof: Sibling path, leaf first
        root: Published root commitment
        leaf_count: Trusted number of real leaves behind `root`
        scheme: Commitment scheme the tree was built with

    Returns:
        Accepted AllotmentResult carrying Interval(lo, hi)

    Raises:
        MalformedProof, IndexOutOfRange: Shape checks, before hashing
        ProofMismatch: Reconstructed commitment differs from root
    """
    if scheme is None:
        scheme = SumCommitmentScheme()

    check_proof_shape(index, proof, leaf_count)

    running = claimed_leaf
    lo = 0
    try:
        for step in proof:
            if step.position == Position.LEFT:
                running = scheme.combine(step.sibling, running)
                lo += step.sibling.amount
            else:
                running = scheme.combine(running, step.sibling)
    except SumTreeException as e:
        # A genuine proof never leaves the amount domain
        raise ProofMismatch(
            f"Proof for leaf {index} cannot be reconstructed: {e.message}",
            leaf_index=index,
            details={"cause": e.code},
        ) from e

    if running.amount != root.amount:
        raise ProofMismatch(
            f"Reconstructed amount {running.amount} does not match root amount "
            f"{root.amount}",
            leaf_index=index,
            details={"reconstructed_amount": running.amount, "root_amount": root.amount},
        )
    if running.digest != root.digest:
        raise ProofMismatch(
            f"Reconstructed digest does not match root digest for leaf {index}",
            leaf_index=index,
            details={"reconstructed_digest": running.digest.hex(), "root_digest": root.digest.hex()},
        )

    interval = Interval(lo, lo + claimed_leaf.amount)
    logger.debug("Accepted leaf %d with interval %s", index, interval)
    return AllotmentResult(accepted=True, index=index, interval=interval, root=root)


class ExclusiveAllotmentVerifier:
    """
    Verifier bound to one published root and its trusted leaf count.

    verify() reports typed failures in the result instead of raising, so a
    caller can reject a single request without aborting a batch.

    Example:
        >>> verifier = ExclusiveAllotmentVerifier(tree.root(), tree.leaf_count)
        >>> result = verifier.verify(tree.leaf(2), 2, tree.prove(2))
        >>> result.accepted, result.interval
        (True, Interval(lo=8, hi=15))
    """

    def __init__(
        self,
        root: Commitment,
        leaf_count: int,
        scheme: Optional[CommitmentScheme] = None,
    ) -> None:
        self._root = root
        self._leaf_count = leaf_count
        self._scheme = scheme if scheme is not None else SumCommitmentScheme()

    @property
    def root(self) -> Commitment:
        return self._root

    @property
    def leaf_count(self) -> int:
        return self._leaf_count

    def verify_or_raise(
        self,
        claimed_leaf: Commitment,
        index: int,
        proof: InclusionProof,
    ) -> AllotmentResult:
        """Raising form; see verify_allotment()."""
        return verify_allotment(
            claimed_leaf,
            index,
            proof,
            self._root,
            self._leaf_count,
            self._scheme,
        )

    def verify(
        self,
        claimed_leaf: Commitment,
        index: int,
        proof: InclusionProof,
    ) -> AllotmentResult:
        """Verify a claim, returning rejections as results."""
        try:
            return self.verify_or_raise(claimed_leaf, index, proof)
        except SumTreeException as e:
            logger.debug("Rejected leaf %r: %s (%s)", index, e.message, e.code)
            return AllotmentResult.rejected(index, e)

    def verify_leaf(
        self,
        amount: int,
        label: bytes,
        index: int,
        proof: InclusionProof,
    ) -> AllotmentResult:
        """Verify from the entity's own (amount, label) instead of a commitment."""
        try:
            claimed = self._scheme.leaf(amount, label)
        except SumTreeException as e:
            return AllotmentResult.rejected(index, e)
        return self.verify(claimed, index, proof)


class AllotmentLedger:
    """
    Out-of-band exclusivity record for one root.

    Keeps the leaf index and interval accepted for each claimant. A new
    claim is refused if its leaf is already held by someone else or its
    interval overlaps another claimant's interval. Only results verified
    against this ledger's root are accepted, so the recorded total can
    never exceed root.amount.

    Usage:
        ledger = AllotmentLedger(tree.root(), tree.leaf_count)
        ledger.claim("alice", tree.leaf(0), 0, tree.prove(0))
        ledger.claim("mallory", tree.leaf(0), 0, tree.prove(0))  # AllotmentOverlap
    """

    def __init__(
        self,
        root: Commitment,
        leaf_count: int,
        scheme: Optional[CommitmentScheme] = None,
    ) -> None:
        self._verifier = ExclusiveAllotmentVerifier(root, leaf_count, scheme)
        self._claims: dict[str, Interval] = {}
        self._claimed_index: dict[str, int] = {}
        self._holders: dict[int, str] = {}

    @property
    def root(self) -> Commitment:
        return self._verifier.root

    def claim(
        self,
        claimant: str,
        claimed_leaf: Commitment,
        index: int,
        proof: InclusionProof,
    ) -> Interval:
        """
        Verify a claim against this ledger's root and record it.

        Raises:
            MalformedProof, IndexOutOfRange, ProofMismatch: From verification
            AllotmentOverlap: See record()
        """
        result = self._verifier.verify_or_raise(claimed_leaf, index, proof)
        return self.record(claimant, result)

    def record(self, claimant: str, result: AllotmentResult) -> Interval:
        """
        Record an already accepted result for `claimant`.

        Re-recording the same leaf for the same claimant is a no-op.

        Raises:
            ValueError: If the result was not accepted
            ProofMismatch: If the result was verified against another root,
                or its interval lies outside [0, root.amount)
            AllotmentOverlap: If the leaf is held by another claimant, the
                interval overlaps another claimant's, or the claimant already
                holds a different leaf
        """
        if not result.accepted or result.interval is None:
            raise ValueError("Only accepted results can be recorded")
        interval = result.interval
        index = result.index

        if result.root != self.root:
            raise ProofMismatch(
                f"Result for leaf {index} was not verified against this ledger's root",
                leaf_index=index,
            )
        if interval.hi > self.root.amount:
            raise ProofMismatch(
                f"Interval {interval} lies outside [0, {self.root.amount})",
                leaf_index=index,
                details={"claimed": [interval.lo, interval.hi]},
            )

        held = self._claims.get(claimant)
        if held is not None:
            if held == interval and self._claimed_index[claimant] == index:
                return held
            raise AllotmentOverlap(
                f"Claimant {claimant!r} already holds {held}, cannot also claim {interval}",
                details={
                    "claimant": claimant,
                    "held": [held.lo, held.hi],
                    "claimed": [interval.lo, interval.hi],
                },
            )

        holder = self._holders.get(index)
        if holder is not None:
            raise AllotmentOverlap(
                f"Leaf {index} is already held by {holder!r}",
                details={"claimant": claimant, "other": holder, "index": index},
            )

        for other, other_interval in self._claims.items():
            if interval.overlaps(other_interval):
                raise AllotmentOverlap(
                    f"Interval {interval} for {claimant!r} overlaps {other_interval} "
                    f"held by {other!r}",
                    details={
                        "claimant": claimant,
                        "other": other,
                        "claimed": [interval.lo, interval.hi],
                        "held": [other_interval.lo, other_interval.hi],
                    },
                )

        self._claims[claimant] = interval
        self._claimed_index[claimant] = index
        self._holders[index] = claimant
        logger.debug("Recorded leaf %d %s for %r", index, interval, claimant)
        return interval

    def intervals(self) -> dict[str, Interval]:
        return dict(self._claims)

    @property
    def claimed_total(self) -> int:
        return sum(interval.width for interval in self._claims.values())

    def __len__(self) -> int:
        return len(self._claims)


__all__ = [
    "Interval",
    "AllotmentResult",
    "check_proof_shape",
    "verify_allotment",
    "ExclusiveAllotmentVerifier",
    "AllotmentLedger",
]
