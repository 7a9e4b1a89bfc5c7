"""
Schemas & Canonicalization
File: versioning.py

Purpose: Wire-format version of root statements and proof bundles.
No imports from other schema modules.
"""

from typing import Literal

SCHEMA_VERSION: str = "v1"

SchemaVersion = Literal["v1"]

SUPPORTED_SCHEMA_VERSIONS: frozenset[str] = frozenset({SCHEMA_VERSION})


class UnsupportedSchemaVersionError(ValueError):
    """A document declares a schema_version this release cannot read."""

    def __init__(self, version: str, document: str | None = None) -> None:
        self.version = version
        self.document = document
        where = f" in {document}" if document else ""
        super().__init__(
            f"Unsupported schema version{where}: {version!r} "
            f"(supported: {', '.join(sorted(SUPPORTED_SCHEMA_VERSIONS))})"
        )


def assert_supported_schema_version(version: str, document: str | None = None) -> None:
    """
    Raises:
        UnsupportedSchemaVersionError: If `version` is not readable
    """
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        raise UnsupportedSchemaVersionError(version, document)
