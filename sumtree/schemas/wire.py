"""
Schemas & Canonicalization
File: wire.py

Purpose: Lossless wire forms for the two values that cross a process
boundary: the published root statement and per-entity proof bundles.

The core never depends on this module; it is one possible encoding.
Digests travel as 0x-prefixed lowercase hex, amounts as JSON integers,
positions as "left" / "right".
"""

from __future__ import annotations

import json
import re
from typing import Any, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sumtree.crypto.hashing import digest_name, from_hex, get_digest_function, to_hex
from sumtree.merkle.commitment import (
    DEFAULT_AMOUNT_BITS,
    Commitment,
    Position,
    SumCommitmentScheme,
)
from sumtree.merkle.sum_tree import InclusionProof, MerkleSumTree, ProofStep
from sumtree.merkle.verifier import ExclusiveAllotmentVerifier

from .canonical import dumps_canonical, loads_canonical
from .errors import (
    CanonicalizationException,
    ConfigurationException,
    ErrorCodes,
    ProofMismatch,
    SchemaValidationException,
)
from .versioning import SCHEMA_VERSION, assert_supported_schema_version


# 0x followed by an even, non-zero number of hex chars
HEX_PATTERN = re.compile(r"^0x(?:[0-9a-fA-F]{2})+$")

ModelT = TypeVar("ModelT", bound="WireDocument")


def validate_hex(value: str, field_name: str) -> str:
    """Validate a 0x-prefixed hex string and normalize it to lowercase."""
    if not HEX_PATTERN.match(value):
        shown = value[:20] + "..." if len(value) > 20 else value
        raise ValueError(f"{field_name} must be 0x-prefixed hex, got: {shown}")
    return value.lower()


class CommitmentModel(BaseModel):
    """Wire form of a Commitment."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    amount: int = Field(..., ge=0, description="Cumulative amount")
    digest: str = Field(..., description="0x-prefixed digest")

    @field_validator("amount", mode="before")
    @classmethod
    def _reject_non_int(cls, v: Any) -> Any:
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError("amount must be an integer")
        return v

    @field_validator("digest")
    @classmethod
    def _check_digest(cls, v: str) -> str:
        return validate_hex(v, "digest")

    @classmethod
    def from_commitment(cls, commitment: Commitment) -> "CommitmentModel":
        return cls(amount=commitment.amount, digest=to_hex(commitment.digest))

    def to_commitment(self) -> Commitment:
        return Commitment(amount=self.amount, digest=from_hex(self.digest))


class ProofStepModel(BaseModel):
    """Wire form of a ProofStep."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    sibling: CommitmentModel
    position: Literal["left", "right"]

    @classmethod
    def from_step(cls, step: ProofStep) -> "ProofStepModel":
        return cls(
            sibling=CommitmentModel.from_commitment(step.sibling),
            position=Position(step.position).value,
        )

    def to_step(self) -> ProofStep:
        return ProofStep(sibling=self.sibling.to_commitment(), position=Position(self.position))


class WireDocument(BaseModel):
    """Base for versioned top-level documents."""

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(default=SCHEMA_VERSION)

    def to_json(self) -> str:
        """Canonical JSON (sorted keys, no whitespace)."""
        return dumps_canonical(self)

    @classmethod
    def from_dict(cls: type[ModelT], data: dict[str, Any]) -> ModelT:
        """
        Validate a decoded document.

        Raises:
            UnsupportedSchemaVersionError: If schema_version is unknown
            SchemaValidationException: If the document is malformed
        """
        if not isinstance(data, dict):
            raise SchemaValidationException(
                f"{cls.__name__} must be a JSON object, got {type(data).__name__}"
            )
        assert_supported_schema_version(
            str(data.get("schema_version", SCHEMA_VERSION)), cls.__name__
        )
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0]
            raise SchemaValidationException(
                f"Invalid {cls.__name__}: {first['msg']}",
                field_path=".".join(str(p) for p in first["loc"]),
                details={"error_count": e.error_count()},
            ) from e

    @classmethod
    def from_json(cls: type[ModelT], text: str) -> ModelT:
        try:
            data = loads_canonical(text)
        except (json.JSONDecodeError, CanonicalizationException) as e:
            raise SchemaValidationException(
                f"Invalid JSON for {cls.__name__}: {e}"
            ) from e
        return cls.from_dict(data)


class RootStatement(WireDocument):
    """
    Published commitment plus the trusted verification context.

    leaf_count belongs to the prover's public statement, not to individual
    proofs: verifiers take it from here when checking any bundle.
    """

    hash_algorithm: str = Field(default="sha256", min_length=1)
    amount_bits: int = Field(default=DEFAULT_AMOUNT_BITS, gt=0)
    leaf_count: int = Field(..., ge=1)
    root: CommitmentModel

    @field_validator("amount_bits")
    @classmethod
    def _check_amount_bits(cls, v: int) -> int:
        if v % 8 != 0:
            raise ValueError("amount_bits must be a multiple of 8")
        return v

    @classmethod
    def from_tree(
        cls,
        tree: MerkleSumTree,
        hash_algorithm: Optional[str] = None,
    ) -> "RootStatement":
        """
        Statement for a built tree.

        hash_algorithm defaults to the registered name of the tree's digest
        function; an explicit name must resolve to that same function.

        Raises:
            ConfigurationException: If the name is unknown, disagrees with
                the tree's scheme, or cannot be derived from it
        """
        digest = getattr(tree.scheme, "digest_function", None)
        if hash_algorithm is None:
            if digest is None:
                raise ConfigurationException(
                    "hash_algorithm is required for schemes without a digest_function",
                    code=ErrorCodes.UNSUPPORTED_HASH_ALGORITHM,
                )
            hash_algorithm = digest_name(digest)
        elif digest is not None and get_digest_function(hash_algorithm) is not digest:
            raise ConfigurationException(
                f"hash_algorithm {hash_algorithm!r} does not match the tree's digest function",
                code=ErrorCodes.UNSUPPORTED_HASH_ALGORITHM,
                details={"hash_algorithm": hash_algorithm, "tree_digest": digest_name(digest)},
            )
        return cls(
            hash_algorithm=hash_algorithm,
            amount_bits=getattr(tree.scheme, "amount_bits", DEFAULT_AMOUNT_BITS),
            leaf_count=tree.leaf_count,
            root=CommitmentModel.from_commitment(tree.root()),
        )

    def build_scheme(self) -> SumCommitmentScheme:
        return SumCommitmentScheme(
            digest=get_digest_function(self.hash_algorithm),
            amount_bits=self.amount_bits,
        )

    def verifier(self) -> ExclusiveAllotmentVerifier:
        return ExclusiveAllotmentVerifier(
            root=self.root.to_commitment(),
            leaf_count=self.leaf_count,
            scheme=self.build_scheme(),
        )


class ProofBundle(WireDocument):
    """
    Everything one entity needs to check its own inclusion.

    `label` is optional: when present the verifier recomputes the leaf from
    (amount, label) instead of trusting the shipped leaf commitment.
    """

    leaf_index: int = Field(..., ge=0)
    leaf: CommitmentModel
    label: Optional[str] = Field(default=None, description="0x-prefixed leaf label")
    steps: list[ProofStepModel] = Field(default_factory=list)

    @field_validator("label")
    @classmethod
    def _check_label(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "0x":
            return v
        return validate_hex(v, "label")

    @classmethod
    def from_proof(
        cls,
        index: int,
        leaf: Commitment,
        proof: InclusionProof,
        label: Optional[bytes] = None,
    ) -> "ProofBundle":
        return cls(
            leaf_index=index,
            leaf=CommitmentModel.from_commitment(leaf),
            label=to_hex(label) if label is not None else None,
            steps=[ProofStepModel.from_step(step) for step in proof],
        )

    @classmethod
    def from_tree(
        cls,
        tree: MerkleSumTree,
        index: int,
        label: Optional[bytes] = None,
    ) -> "ProofBundle":
        return cls.from_proof(index, tree.leaf(index), tree.prove(index), label=label)

    def to_proof(self) -> InclusionProof:
        return InclusionProof(steps=tuple(step.to_step() for step in self.steps))

    def claimed_leaf(self, scheme: SumCommitmentScheme) -> Commitment:
        """
        The leaf commitment to verify.

        Raises:
            ProofMismatch: If a shipped label does not reproduce the leaf
        """
        leaf = self.leaf.to_commitment()
        if self.label is None:
            return leaf
        recomputed = scheme.leaf(leaf.amount, from_hex(self.label))
        if recomputed != leaf:
            raise ProofMismatch(
                "Leaf commitment does not match (amount, label)",
                leaf_index=self.leaf_index,
            )
        return recomputed


__all__ = [
    "CommitmentModel",
    "ProofStepModel",
    "WireDocument",
    "RootStatement",
    "ProofBundle",
    "validate_hex",
]
