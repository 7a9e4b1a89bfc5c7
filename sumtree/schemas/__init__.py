"""
Schemas & Canonicalization

Error taxonomy, canonical JSON and version constants. Wire models live in
sumtree.schemas.wire and are imported from there directly, since they
depend on sumtree.merkle.
"""

from .versioning import (
    SCHEMA_VERSION,
    SUPPORTED_SCHEMA_VERSIONS,
    SchemaVersion,
    UnsupportedSchemaVersionError,
    assert_supported_schema_version,
)

from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    loads_canonical,
)

from .errors import (
    AllotmentOverlap,
    AmountOverflow,
    CanonicalizationException,
    ConfigurationException,
    EmptyInput,
    ErrorCodes,
    IndexOutOfRange,
    InvalidAmount,
    MalformedProof,
    ProofMismatch,
    ReservedLabel,
    SchemaValidationException,
    SumTreeError,
    SumTreeException,
)

__all__ = [
    # Versioning
    "SCHEMA_VERSION",
    "SUPPORTED_SCHEMA_VERSIONS",
    "SchemaVersion",
    "UnsupportedSchemaVersionError",
    "assert_supported_schema_version",
    # Canonical JSON
    "CANONICAL_JSON_SEPARATORS",
    "canonical_equals",
    "canonicalize_value",
    "dumps_canonical",
    "loads_canonical",
    # Errors
    "AllotmentOverlap",
    "AmountOverflow",
    "CanonicalizationException",
    "ConfigurationException",
    "EmptyInput",
    "ErrorCodes",
    "IndexOutOfRange",
    "InvalidAmount",
    "MalformedProof",
    "ProofMismatch",
    "ReservedLabel",
    "SchemaValidationException",
    "SumTreeError",
    "SumTreeException",
]
