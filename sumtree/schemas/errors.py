"""
Schemas & Canonicalization
File: errors.py

Purpose: Error taxonomy for commitment building, proof generation and
exclusive allotment verification. Defines both a Pydantic model for
structured error reporting and Python exceptions for control flow.

Every failure in the core is local and recoverable: it is raised (or
returned as a SumTreeError) to the caller, never treated as fatal.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Commitment Errors
    INVALID_AMOUNT = "INVALID_AMOUNT"
    AMOUNT_OVERFLOW = "AMOUNT_OVERFLOW"
    RESERVED_LABEL = "RESERVED_LABEL"

    # Tree Errors
    EMPTY_INPUT = "EMPTY_INPUT"
    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"

    # Proof & Verification Errors
    MALFORMED_PROOF = "MALFORMED_PROOF"
    PROOF_MISMATCH = "PROOF_MISMATCH"
    ALLOTMENT_OVERLAP = "ALLOTMENT_OVERLAP"

    # Schema & Serialization Errors
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"
    UNSUPPORTED_VERSION = "UNSUPPORTED_VERSION"

    # Configuration Errors
    UNSUPPORTED_HASH_ALGORITHM = "UNSUPPORTED_HASH_ALGORITHM"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class SumTreeError(BaseModel):
    """
    Structured error model.

    Used when a failure is returned to the caller instead of raised,
    e.g. by ExclusiveAllotmentVerifier.verify().
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.PROOF_MISMATCH],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "SumTreeException":
        """Convert this error model back to the matching exception type."""
        exc_type = _EXCEPTIONS_BY_CODE.get(self.code, SumTreeException)
        exc = SumTreeException.__new__(exc_type)
        SumTreeException.__init__(
            exc,
            message=self.message,
            code=self.code,
            details=dict(self.details),
            retryable=self.retryable,
        )
        return exc


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class SumTreeException(Exception):
    """
    Base exception for all Merkle sum tree errors.

    Carries structured error information and can be converted to a
    SumTreeError model.
    """

    code: str = "SUMTREE_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code or type(self).code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> SumTreeError:
        """Convert this exception to a SumTreeError model."""
        return SumTreeError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class InvalidAmount(SumTreeException):
    """Raised when an amount is not an integer, is negative, or is too wide."""

    code = ErrorCodes.INVALID_AMOUNT

    def __init__(
        self,
        message: str,
        amount: Any = None,
        max_amount: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if amount is not None:
            full_details["amount"] = repr(amount)
        if max_amount is not None:
            full_details["max_amount"] = max_amount
        super().__init__(message=message, details=full_details)


class AmountOverflow(SumTreeException):
    """Raised when a combined amount exceeds the numeric domain."""

    code = ErrorCodes.AMOUNT_OVERFLOW

    def __init__(
        self,
        message: str,
        left: int | None = None,
        right: int | None = None,
        max_amount: int | None = None,
    ) -> None:
        full_details: dict[str, Any] = {}
        if left is not None:
            full_details["left"] = left
        if right is not None:
            full_details["right"] = right
        if max_amount is not None:
            full_details["max_amount"] = max_amount
        super().__init__(message=message, details=full_details)


class ReservedLabel(SumTreeException):
    """Raised when a real leaf uses the label reserved for padding leaves."""

    code = ErrorCodes.RESERVED_LABEL


class EmptyInput(SumTreeException):
    """Raised when a tree is built from zero leaves."""

    code = ErrorCodes.EMPTY_INPUT


class IndexOutOfRange(SumTreeException, IndexError):
    """Raised when a leaf index is outside the real (unpadded) leaf set."""

    code = ErrorCodes.INDEX_OUT_OF_RANGE

    def __init__(
        self,
        message: str,
        index: int | None = None,
        leaf_count: int | None = None,
    ) -> None:
        full_details: dict[str, Any] = {}
        if index is not None:
            full_details["index"] = index
        if leaf_count is not None:
            full_details["leaf_count"] = leaf_count
        super().__init__(message=message, details=full_details)


class MalformedProof(SumTreeException):
    """Raised when a proof's shape disagrees with the index or tree depth."""

    code = ErrorCodes.MALFORMED_PROOF

    def __init__(
        self,
        message: str,
        leaf_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if leaf_index is not None:
            full_details["leaf_index"] = leaf_index
        super().__init__(message=message, details=full_details)


class ProofMismatch(SumTreeException):
    """Raised when the reconstructed root differs from the expected root."""

    code = ErrorCodes.PROOF_MISMATCH

    def __init__(
        self,
        message: str,
        leaf_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if leaf_index is not None:
            full_details["leaf_index"] = leaf_index
        super().__init__(message=message, details=full_details)


class AllotmentOverlap(SumTreeException):
    """Raised when an accepted interval overlaps another claimant's interval."""

    code = ErrorCodes.ALLOTMENT_OVERLAP


class CanonicalizationException(SumTreeException):
    """Raised when canonical serialization fails."""

    code = ErrorCodes.CANONICALIZATION_ERROR


class SchemaValidationException(SumTreeException):
    """Raised when a wire document fails validation."""

    code = ErrorCodes.SCHEMA_VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(message=message, details=full_details)


class ConfigurationException(SumTreeException):
    """Raised for invalid configuration values or unknown hash algorithms."""

    code = ErrorCodes.CONFIGURATION_ERROR


_EXCEPTIONS_BY_CODE: dict[str, type[SumTreeException]] = {
    ErrorCodes.INVALID_AMOUNT: InvalidAmount,
    ErrorCodes.AMOUNT_OVERFLOW: AmountOverflow,
    ErrorCodes.RESERVED_LABEL: ReservedLabel,
    ErrorCodes.EMPTY_INPUT: EmptyInput,
    ErrorCodes.INDEX_OUT_OF_RANGE: IndexOutOfRange,
    ErrorCodes.MALFORMED_PROOF: MalformedProof,
    ErrorCodes.PROOF_MISMATCH: ProofMismatch,
    ErrorCodes.ALLOTMENT_OVERLAP: AllotmentOverlap,
    ErrorCodes.CANONICALIZATION_ERROR: CanonicalizationException,
    ErrorCodes.SCHEMA_VALIDATION_ERROR: SchemaValidationException,
    ErrorCodes.UNSUPPORTED_HASH_ALGORITHM: ConfigurationException,
    ErrorCodes.CONFIGURATION_ERROR: ConfigurationException,
}
