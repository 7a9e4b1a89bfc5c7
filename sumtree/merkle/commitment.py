"""
Sum Commitments
Commitment value type, sibling positions and the commitment scheme.

A commitment pairs a non-negative amount with a fixed-size digest:

- Leaf:     digest = H(encode(amount) + label)
- Internal: amount = left.amount + right.amount
            digest = H(left.digest + right.digest + encode(amount))
- Padding:  amount = 0, digest = H(encode(0) + PADDING_LABEL)

encode() is fixed-width big-endian over `amount_bits`. Amounts outside
[0, 2**amount_bits) are rejected, sums that leave the domain raise
AmountOverflow. Child order is always left then right.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from sumtree.crypto.hashing import DigestFunction, encode_amount, sha256, to_hex
from sumtree.schemas.errors import AmountOverflow, InvalidAmount, ReservedLabel


# Label reserved for padding leaves; SumCommitmentScheme.leaf() refuses it.
PADDING_LABEL: bytes = b"\x00sumtree/padding-leaf/v1\x00"

DEFAULT_AMOUNT_BITS = 64


@dataclass(frozen=True)
class Commitment:
    """
    Summary of a leaf or a merged subtree.

    Attributes:
        amount: Cumulative non-negative amount
        digest: Fixed-size digest binding the amount and its children
    """
    amount: int
    digest: bytes

    def __post_init__(self) -> None:
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise InvalidAmount(
                f"Commitment amount must be an integer, got {type(self.amount).__name__}",
                amount=self.amount,
            )
        if self.amount < 0:
            raise InvalidAmount(
                f"Commitment amount must be non-negative, got {self.amount}",
                amount=self.amount,
            )
        if not isinstance(self.digest, bytes):
            raise TypeError(
                f"Commitment digest must be bytes, got {type(self.digest).__name__}"
            )

    def __repr__(self) -> str:
        return f"Commitment(amount={self.amount}, digest={to_hex(self.digest)})"


class Position(str, Enum):
    """Side the sibling occupies relative to the path node at one level."""

    LEFT = "left"
    RIGHT = "right"

    @classmethod
    def for_index_bit(cls, bit: int) -> "Position":
        """
        Sibling position for a path node whose index bit at this level is `bit`.

        A set bit means the path node is the right child, so its sibling
        sits on the left.
        """
        return cls.LEFT if bit & 1 else cls.RIGHT


@runtime_checkable
class CommitmentScheme(Protocol):
    """Policy object the tree and the verifier are generic over."""

    @property
    def max_amount(self) -> int: ...

    def leaf(self, amount: int, label: bytes) -> Commitment: ...

    def combine(self, left: Commitment, right: Commitment) -> Commitment: ...

    def padding(self) -> Commitment: ...


class SumCommitmentScheme:
    """
    Default sum commitment scheme, parameterized by a digest function.

    Usage:
        scheme = SumCommitmentScheme(digest=sha256, amount_bits=64)
        alice = scheme.leaf(20, b"alice")
        bob = scheme.leaf(50, b"bob")
        parent = scheme.combine(alice, bob)
        assert parent.amount == 70
    """

    def __init__(
        self,
        digest: DigestFunction = sha256,
        amount_bits: int = DEFAULT_AMOUNT_BITS,
    ) -> None:
        if amount_bits <= 0 or amount_bits % 8 != 0:
            raise ValueError(
                f"amount_bits must be a positive multiple of 8, got {amount_bits}"
            )
        self._digest = digest
        self._amount_bits = amount_bits
        self._amount_width = amount_bits // 8
        self._max_amount = (1 << amount_bits) - 1

    @property
    def digest_function(self) -> DigestFunction:
        return self._digest

    @property
    def amount_bits(self) -> int:
        return self._amount_bits

    @property
    def max_amount(self) -> int:
        return self._max_amount

    def encode(self, amount: int) -> bytes:
        """Fixed-width big-endian encoding of an in-domain amount."""
        return encode_amount(amount, self._amount_width)

    def check_amount(self, amount: object) -> int:
        """
        Validate an amount against the numeric domain.

        Raises:
            InvalidAmount: If not an int, negative, or wider than amount_bits
        """
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidAmount(
                f"Amount must be an integer, got {type(amount).__name__}",
                amount=amount,
            )
        if amount < 0:
            raise InvalidAmount(
                f"Amount must be non-negative, got {amount}",
                amount=amount,
            )
        if amount > self._max_amount:
            raise InvalidAmount(
                f"Amount {amount} exceeds the {self._amount_bits}-bit domain",
                amount=amount,
                max_amount=self._max_amount,
            )
        return amount

    def leaf(self, amount: int, label: bytes) -> Commitment:
        """
        Commit to one entity's amount.

        Args:
            amount: Declared non-negative amount
            label: Caller-supplied label or salt; distinguishes equal amounts

        Raises:
            InvalidAmount: If the amount is outside the domain
            ReservedLabel: If the label is the padding label
        """
        self.check_amount(amount)
        if not isinstance(label, (bytes, bytearray)):
            raise TypeError(f"Leaf label must be bytes, got {type(label).__name__}")
        label = bytes(label)
        if label == PADDING_LABEL:
            raise ReservedLabel(
                "Label is reserved for padding leaves",
                details={"label": to_hex(label)},
            )
        return Commitment(amount=amount, digest=self._digest(self.encode(amount) + label))

    def padding(self) -> Commitment:
        """Zero-amount commitment used to fill the tree to a power of two."""
        return Commitment(amount=0, digest=self._digest(self.encode(0) + PADDING_LABEL))

    def combine(self, left: Commitment, right: Commitment) -> Commitment:
        """
        Merge two child commitments, left then right.

        Raises:
            InvalidAmount: If a child amount is outside the domain
            AmountOverflow: If the sum exceeds the domain
        """
        self.check_amount(left.amount)
        self.check_amount(right.amount)
        amount = left.amount + right.amount
        if amount > self._max_amount:
            raise AmountOverflow(
                f"Sum {left.amount} + {right.amount} exceeds the "
                f"{self._amount_bits}-bit domain",
                left=left.amount,
                right=right.amount,
                max_amount=self._max_amount,
            )
        return Commitment(
            amount=amount,
            digest=self._digest(left.digest + right.digest + self.encode(amount)),
        )

    def __repr__(self) -> str:
        name = getattr(self._digest, "__name__", repr(self._digest))
        return f"SumCommitmentScheme(digest={name}, amount_bits={self._amount_bits})"


def salted_label(identity: bytes, salt: bytes, digest: DigestFunction = sha256) -> bytes:
    """
    Hide an identity behind a salt: H(salt + identity).

    Lets a prover publish proofs without revealing who owns a leaf; the
    entity keeps its salt to recognise its own leaf.
    """
    return digest(salt + identity)


__all__ = [
    "PADDING_LABEL",
    "DEFAULT_AMOUNT_BITS",
    "Commitment",
    "Position",
    "CommitmentScheme",
    "SumCommitmentScheme",
    "salted_label",
]
