"""
Hashing Unit Tests
Tests for sumtree/crypto/hashing.py

Tests:
- digest functions match hashlib and have fixed width
- registry lookup and unknown-algorithm errors
- fixed-width amount encoding
- to_hex/from_hex round trip and validation
"""
import hashlib

import pytest

from sumtree.crypto.hashing import (
    available_digest_functions,
    blake2b_256,
    decode_amount,
    digest_name,
    digest_size,
    encode_amount,
    from_hex,
    get_digest_function,
    sha256,
    sha3_256,
    to_hex,
)
from sumtree.schemas.errors import ConfigurationException, ErrorCodes


class TestDigestFunctions:
    """Tests for the built-in digest functions."""

    def test_sha256_known_value(self):
        """sha256 matches hashlib."""
        assert sha256(b"hello") == hashlib.sha256(b"hello").digest()
        assert len(sha256(b"hello")) == 32

    def test_sha3_256_matches_hashlib(self):
        assert sha3_256(b"hello") == hashlib.sha3_256(b"hello").digest()

    def test_blake2b_256_is_32_bytes(self):
        assert blake2b_256(b"hello") == hashlib.blake2b(b"hello", digest_size=32).digest()
        assert digest_size(blake2b_256) == 32

    def test_functions_differ(self):
        """Different algorithms give different digests for the same input."""
        outputs = {sha256(b"x"), sha3_256(b"x"), blake2b_256(b"x")}
        assert len(outputs) == 3


class TestRegistry:
    """Tests for get_digest_function()."""

    def test_lookup_by_name(self):
        assert get_digest_function("sha256") is sha256
        assert get_digest_function("sha3_256") is sha3_256
        assert get_digest_function("blake2b_256") is blake2b_256

    def test_lookup_normalizes_case_and_dashes(self):
        assert get_digest_function("SHA256") is sha256
        assert get_digest_function("SHA3-256") is sha3_256
        assert get_digest_function(" blake2b-256 ") is blake2b_256

    def test_unknown_algorithm_raises(self):
        """Unknown names raise a configuration error with a stable code."""
        with pytest.raises(ConfigurationException) as exc_info:
            get_digest_function("md5")

        assert exc_info.value.code == ErrorCodes.UNSUPPORTED_HASH_ALGORITHM
        assert "sha256" in exc_info.value.details["supported"]

    def test_digest_name_reverse_lookup(self):
        assert digest_name(sha3_256) == "sha3_256"
        assert digest_name(get_digest_function("BLAKE2B-256")) == "blake2b_256"

    def test_digest_name_unregistered(self):
        with pytest.raises(ConfigurationException) as exc_info:
            digest_name(lambda data: data)

        assert exc_info.value.code == ErrorCodes.UNSUPPORTED_HASH_ALGORITHM

    def test_available_names_sorted(self):
        names = available_digest_functions()
        assert names == sorted(names)
        assert "sha256" in names


class TestAmountEncoding:
    """Tests for encode_amount()/decode_amount()."""

    def test_fixed_width_big_endian(self):
        assert encode_amount(1, 8) == b"\x00" * 7 + b"\x01"
        assert encode_amount(0x0102, 4) == b"\x00\x00\x01\x02"

    def test_round_trip(self):
        for value in (0, 1, 255, 2**32, 2**64 - 1):
            assert decode_amount(encode_amount(value, 8)) == value

    def test_too_wide_raises(self):
        with pytest.raises(OverflowError):
            encode_amount(2**64, 8)


class TestHex:
    """Tests for to_hex()/from_hex()."""

    def test_round_trip(self):
        data = bytes(range(16))
        assert from_hex(to_hex(data)) == data

    def test_prefix(self):
        assert to_hex(b"\xde\xad") == "0xdead"

    def test_empty(self):
        assert from_hex("0x") == b""

    def test_missing_prefix_raises(self):
        with pytest.raises(ValueError, match="0x"):
            from_hex("dead")

    def test_odd_length_raises(self):
        with pytest.raises(ValueError, match="even length"):
            from_hex("0xabc")

    def test_invalid_chars_raise(self):
        with pytest.raises(ValueError, match="Invalid hex"):
            from_hex("0xzz")
