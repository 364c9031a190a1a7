"""
Hashing Unit Tests
Tests for core/crypto/hashing.py

Tests:
- sha256 stability
- hash_canonical stability for dict key ordering differences
- hash_pair order independence
- to_hex/from_hex and coerce_digest validation
"""
import hashlib

import pytest

from core.crypto.hashing import (
    DIGEST_SIZE,
    ZERO_HASH,
    coerce_digest,
    from_hex,
    hash_canonical,
    hash_pair,
    is_zero_hash,
    sha256,
    to_hex,
)
from core.schemas.errors import CanonicalizationException


class TestSha256:
    """Tests for sha256() function."""

    def test_sha256_known_value(self):
        """sha256 matches hashlib for a known input."""
        result = sha256(b"hello")

        assert result == hashlib.sha256(b"hello").digest()
        assert len(result) == DIGEST_SIZE

    def test_sha256_different_inputs_different_outputs(self):
        assert sha256(b"input1") != sha256(b"input2")


class TestHashCanonical:
    """Tests for hash_canonical()."""

    def test_key_order_does_not_matter(self):
        """Dicts with different insertion order hash identically."""
        a = {"account": "0xabc", "amount": 150}
        b = {"amount": 150, "account": "0xabc"}

        assert hash_canonical(a) == hash_canonical(b)

    def test_matches_manual_rule(self):
        """Leaf rule is sha256 of the compact sorted JSON."""
        expected = hashlib.sha256(b'{"account":"0xabc","amount":150}').digest()

        assert hash_canonical({"account": "0xabc", "amount": 150}) == expected

    def test_amount_changes_hash(self):
        assert hash_canonical({"account": "0xabc", "amount": 150}) != hash_canonical(
            {"account": "0xabc", "amount": 151}
        )

    def test_float_rejected(self):
        with pytest.raises(CanonicalizationException):
            hash_canonical({"account": "0xabc", "amount": 1.5})


class TestHashPair:
    """Tests for sorted-pair hashing."""

    def test_order_independent(self):
        a, b = sha256(b"a"), sha256(b"b")

        assert hash_pair(a, b) == hash_pair(b, a)

    def test_smaller_digest_first(self):
        a, b = sha256(b"a"), sha256(b"b")
        low, high = sorted([a, b])

        assert hash_pair(a, b) == sha256(low + high)

    def test_self_pair(self):
        a = sha256(b"a")

        assert hash_pair(a, a) == sha256(a + a)


class TestHexCodec:
    """Tests for to_hex/from_hex/coerce_digest."""

    def test_round_trip(self):
        data = sha256(b"x")

        assert from_hex(to_hex(data)) == data
        assert to_hex(data).startswith("0x")

    def test_missing_prefix_rejected(self):
        with pytest.raises(ValueError, match="0x"):
            from_hex("deadbeef")

    def test_odd_length_rejected(self):
        with pytest.raises(ValueError, match="even length"):
            from_hex("0xabc")

    def test_invalid_chars_rejected(self):
        with pytest.raises(ValueError, match="Invalid hex"):
            from_hex("0xzz")

    def test_coerce_accepts_hex_and_bytes(self):
        digest = sha256(b"root")

        assert coerce_digest(digest) == digest
        assert coerce_digest(to_hex(digest)) == digest

    def test_coerce_rejects_wrong_length(self):
        with pytest.raises(ValueError, match="32 bytes"):
            coerce_digest(b"\x01" * 31)

    def test_coerce_rejects_other_types(self):
        with pytest.raises(TypeError):
            coerce_digest(12345)

    def test_zero_hash(self):
        assert is_zero_hash(ZERO_HASH)
        assert not is_zero_hash(sha256(b""))
