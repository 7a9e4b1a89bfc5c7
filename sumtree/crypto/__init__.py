"""
Cryptographic utilities.

Digest functions are plain stateless callables; the commitment scheme
takes one as a parameter instead of hard-wiring an algorithm.
"""
from .hashing import (
    DigestFunction,
    sha256,
    sha3_256,
    blake2b_256,
    available_digest_functions,
    get_digest_function,
    digest_name,
    digest_size,
    encode_amount,
    decode_amount,
    to_hex,
    from_hex,
)

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
