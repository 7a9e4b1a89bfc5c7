"""
Hashing Utilities
Digest functions, fixed-width amount encoding and hex helpers for
sum commitments.

This module provides:
- DigestFunction: the pluggable `bytes -> fixed-size digest` contract
- SHA-256, SHA3-256 and BLAKE2b-256 digest functions
- A name registry used by configuration to pick a digest function
- Fixed-width big-endian amount encoding
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Always hash raw bytes exactly as given
- Digest functions are stateless; nothing here holds process-wide state
  beyond the read-only registry
"""
from __future__ import annotations

import hashlib
from typing import Callable

from sumtree.schemas.errors import ConfigurationException, ErrorCodes


DigestFunction = Callable[[bytes], bytes]


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def sha3_256(data: bytes) -> bytes:
    """Compute SHA3-256 hash of raw bytes."""
    return hashlib.sha3_256(data).digest()


def blake2b_256(data: bytes) -> bytes:
    """Compute BLAKE2b hash of raw bytes truncated to a 32-byte digest."""
    return hashlib.blake2b(data, digest_size=32).digest()


_DIGEST_FUNCTIONS: dict[str, DigestFunction] = {
    "sha256": sha256,
    "sha3_256": sha3_256,
    "blake2b_256": blake2b_256,
}


def available_digest_functions() -> list[str]:
    """Names accepted by get_digest_function()."""
    return sorted(_DIGEST_FUNCTIONS)


def get_digest_function(name: str) -> DigestFunction:
    """
    Resolve a digest function by name.

    Args:
        name: Registered algorithm name (case-insensitive, "-" allowed)

    Returns:
        The digest function

    Raises:
        ConfigurationException: If the name is not registered
    """
    key = name.strip().lower().replace("-", "_")
    try:
        return _DIGEST_FUNCTIONS[key]
    except KeyError:
        raise ConfigurationException(
            message=f"Unsupported hash algorithm: {name!r}",
            code=ErrorCodes.UNSUPPORTED_HASH_ALGORITHM,
            details={"algorithm": name, "supported": available_digest_functions()},
        ) from None


def digest_name(digest: DigestFunction) -> str:
    """
    Registered name of a digest function.

    Raises:
        ConfigurationException: If the function is not registered
    """
    for name, registered in _DIGEST_FUNCTIONS.items():
        if registered is digest:
            return name
    raise ConfigurationException(
        message=f"Digest function {getattr(digest, '__name__', digest)!r} is not registered",
        code=ErrorCodes.UNSUPPORTED_HASH_ALGORITHM,
        details={"supported": available_digest_functions()},
    )


def digest_size(digest: DigestFunction) -> int:
    """Output width in bytes of a digest function."""
    return len(digest(b""))


def encode_amount(amount: int, width: int) -> bytes:
    """
    Encode a non-negative amount as fixed-width big-endian bytes.

    Raises:
        OverflowError: If the amount does not fit in `width` bytes
    """
    return amount.to_bytes(width, "big", signed=False)


def decode_amount(data: bytes) -> int:
    """Decode a big-endian unsigned amount."""
    return int.from_bytes(data, "big", signed=False)


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


__all__ = [
    "DigestFunction",
    "sha256",
    "sha3_256",
    "blake2b_256",
    "available_digest_functions",
    "get_digest_function",
    "digest_name",
    "digest_size",
    "encode_amount",
    "decode_amount",
    "to_hex",
    "from_hex",
]
