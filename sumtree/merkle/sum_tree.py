"""
Merkle Sum Tree
Bottom-up construction over sum commitments and inclusion proof generation.

This module provides:
- ProofStep / InclusionProof: sibling path from a leaf to the root
- MerkleSumTree: immutable tree built once per commitment epoch
- Depth and padding helpers shared with the verifier

Construction Rules (Hard Contracts):
1. Input: ordered (label, amount) pairs; insertion order is the leaf index
2. Padding: right-pad with scheme.padding() to the next power of two
3. Parent: combine(node[2i], node[2i+1]) at every level, order preserved
4. Empty input: EmptyInput
5. Single leaf: depth 0, root = the leaf, empty proofs

Proof Rules:
- Steps run leaf to root; step k holds the sibling at level k
- Index bit k (least significant first) set => sibling on the LEFT
- Proofs exist only for real leaves, never for padding slots
"""
from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from sumtree.merkle.commitment import (
    Commitment,
    CommitmentScheme,
    Position,
    SumCommitmentScheme,
)
from sumtree.schemas.errors import EmptyInput, IndexOutOfRange


logger = logging.getLogger(__name__)

DEFAULT_PARALLEL_THRESHOLD = 1024


@dataclass(frozen=True)
class ProofStep:
    """
    One level of an inclusion proof.

    Attributes:
        sibling: Commitment of the sibling node at this level
        position: Side the sibling occupies relative to the path node
    """
    sibling: Commitment
    position: Position


@dataclass(frozen=True)
class InclusionProof:
    """
    Ordered sibling path from a leaf to the root (leaf first).

    Immutable snapshot: safe to serialize, transmit and replay-verify any
    number of times.
    """
    steps: tuple[ProofStep, ...] = ()

    def __post_init__(self) -> None:
        # Accept any iterable of steps but always store a tuple
        object.__setattr__(self, "steps", tuple(self.steps))

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[ProofStep]:
        return iter(self.steps)

    def __getitem__(self, level: int) -> ProofStep:
        return self.steps[level]

    @property
    def positions(self) -> tuple[Position, ...]:
        return tuple(step.position for step in self.steps)


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


def compute_tree_depth(leaf_count: int) -> int:
    """
    Number of proof steps for a tree holding `leaf_count` real leaves.

    Equals ceil(log2(leaf_count)): padding rounds the leaf level up to a
    power of two.

    Raises:
        ValueError: If leaf_count < 1
    """
    if leaf_count < 1:
        raise ValueError(f"leaf_count must be at least 1, got {leaf_count}")
    return next_power_of_two(leaf_count).bit_length() - 1


class MerkleSumTree:
    """
    Binary Merkle sum tree over (label, amount) leaves.

    Usage:
        tree = MerkleSumTree.build([(b"alice", 20), (b"bob", 50), (b"carol", 10)])
        root = tree.root()            # amount == 80
        proof = tree.prove(1)         # 2 steps (3 leaves padded to 4)
    """

    def __init__(
        self,
        levels: Sequence[Sequence[Commitment]],
        leaf_count: int,
        scheme: CommitmentScheme,
    ) -> None:
        """
        Wrap precomputed levels. Use MerkleSumTree.build() instead.

        Args:
            levels: Level 0 (padded leaves) up to the single-node root level
            leaf_count: Number of real (unpadded) leaves
            scheme: Scheme the levels were built with
        """
        self._levels: tuple[tuple[Commitment, ...], ...] = tuple(
            tuple(level) for level in levels
        )
        self._leaf_count = leaf_count
        self._scheme = scheme

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def build(
        cls,
        leaves: Sequence[tuple[bytes, int]],
        scheme: Optional[CommitmentScheme] = None,
        max_workers: int = 1,
        parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD,
    ) -> "MerkleSumTree":
        """
        Build a tree from ordered (label, amount) pairs.

        Args:
            leaves: Ordered (label, amount) pairs; order defines leaf index
            scheme: Commitment scheme (default: SHA-256, 64-bit amounts)
            max_workers: Worker threads for level construction (1 = serial)
            parallel_threshold: Minimum pairs in a level before it is
                combined on the worker pool

        Raises:
            EmptyInput: If leaves is empty
            InvalidAmount / ReservedLabel: From scheme.leaf()
            AmountOverflow: If any subtree sum leaves the numeric domain
        """
        if scheme is None:
            scheme = SumCommitmentScheme()
        if len(leaves) == 0:
            raise EmptyInput("Cannot build a Merkle sum tree from zero leaves")

        leaf_level = [scheme.leaf(amount, label) for label, amount in leaves]
        leaf_count = len(leaf_level)
        padded_count = next_power_of_two(leaf_count)
        if padded_count > leaf_count:
            padding = scheme.padding()
            leaf_level.extend([padding] * (padded_count - leaf_count))

        levels: list[list[Commitment]] = [leaf_level]
        if max_workers > 1 and padded_count // 2 >= parallel_threshold:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                cls._reduce(levels, scheme, pool, parallel_threshold)
        else:
            cls._reduce(levels, scheme, None, parallel_threshold)

        tree = cls(levels, leaf_count, scheme)
        logger.info(
            "Built Merkle sum tree: leaves=%d padded=%d depth=%d total=%d",
            leaf_count,
            padded_count,
            tree.depth,
            tree.total_amount,
        )
        return tree

    @staticmethod
    def _reduce(
        levels: list[list[Commitment]],
        scheme: CommitmentScheme,
        pool: Optional[Executor],
        parallel_threshold: int,
    ) -> None:
        """Combine adjacent pairs level by level until one node remains."""
        current = levels[-1]
        while len(current) > 1:
            lefts = current[0::2]
            rights = current[1::2]
            if pool is not None and len(lefts) >= parallel_threshold:
                next_level = list(pool.map(scheme.combine, lefts, rights))
            else:
                next_level = [scheme.combine(l, r) for l, r in zip(lefts, rights)]
            logger.debug("Built level %d with %d nodes", len(levels), len(next_level))
            levels.append(next_level)
            current = next_level

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def scheme(self) -> CommitmentScheme:
        return self._scheme

    @property
    def leaf_count(self) -> int:
        """Number of real (unpadded) leaves."""
        return self._leaf_count

    @property
    def padded_leaf_count(self) -> int:
        return len(self._levels[0])

    @property
    def depth(self) -> int:
        """Number of levels above the leaves; also the proof length."""
        return len(self._levels) - 1

    @property
    def levels(self) -> tuple[tuple[Commitment, ...], ...]:
        return self._levels

    @property
    def total_amount(self) -> int:
        return self.root().amount

    def root(self) -> Commitment:
        """The single top-level commitment."""
        return self._levels[-1][0]

    def leaf(self, index: int) -> Commitment:
        """
        Leaf commitment of a real leaf.

        Raises:
            IndexOutOfRange: If index is not a real leaf index
        """
        self._check_index(index)
        return self._levels[0][index]

    def leaves(self) -> tuple[Commitment, ...]:
        """Commitments of the real leaves, in index order."""
        return self._levels[0][: self._leaf_count]

    # ------------------------------------------------------------------
    # Proofs
    # ------------------------------------------------------------------

    def prove(self, index: int) -> InclusionProof:
        """
        Generate the inclusion proof for the real leaf at `index`.

        At every level the sibling is index ^ 1 and the index moves up
        with index // 2.

        Raises:
            IndexOutOfRange: If index < 0 or index >= leaf_count
        """
        self._check_index(index)

        steps: list[ProofStep] = []
        current_index = index
        for level in self._levels[:-1]:
            sibling_index = current_index ^ 1
            steps.append(
                ProofStep(
                    sibling=level[sibling_index],
                    position=Position.for_index_bit(current_index),
                )
            )
            current_index //= 2

        return InclusionProof(steps=tuple(steps))

    def prove_all(self) -> Iterator[tuple[int, InclusionProof]]:
        """Yield (index, proof) for every real leaf."""
        for index in range(self._leaf_count):
            yield index, self.prove(index)

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"Leaf index must be an int, got {type(index).__name__}")
        if index < 0 or index >= self._leaf_count:
            raise IndexOutOfRange(
                f"Leaf index {index} out of range for {self._leaf_count} leaves",
                index=index,
                leaf_count=self._leaf_count,
            )

    def __len__(self) -> int:
        return self._leaf_count

    def __repr__(self) -> str:
        return (
            f"MerkleSumTree(leaf_count={self._leaf_count}, depth={self.depth}, "
            f"root={self.root()!r})"
        )


__all__ = [
    "DEFAULT_PARALLEL_THRESHOLD",
    "ProofStep",
    "InclusionProof",
    "next_power_of_two",
    "compute_tree_depth",
    "MerkleSumTree",
]
