"""
Hashing Utilities
Hash primitives shared by claim-tree generation and claim verification.

This module provides:
- SHA-256 hashing for raw bytes
- Canonical hashing for objects (via dumps_canonical)
- Sorted-pair hashing for Merkle parents
- Hex encoding/decoding with 0x prefix

Commitment Rules (Hard Contracts):
1. Object hashing: sha256(dumps_canonical(obj).encode("utf-8"))
2. Pair hashing: sha256(min(a, b) + max(a, b)), byte-wise ordering
3. All digests are 32 bytes

Both sides of a claim (the off-line tree builder and the registry
verifier) MUST use the functions in this module. A mismatch in either rule
silently invalidates every proof.
"""
from __future__ import annotations

import hashlib
from typing import Any

from core.schemas.canonical import dumps_canonical


DIGEST_SIZE: int = 32

# All-zero digest, never a valid commitment
ZERO_HASH: bytes = bytes(DIGEST_SIZE)


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte SHA-256 digest

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def hash_canonical(obj: Any) -> bytes:
    """
    Hash an object using canonical JSON serialization.

    Rule: sha256(dumps_canonical(obj).encode("utf-8"))

    Args:
        obj: Any object that can be canonically serialized
             (Pydantic model, dict, list, primitives)

    Returns:
        32-byte SHA-256 digest of the canonical JSON

    Raises:
        CanonicalizationException: If object cannot be canonically serialized
    """
    canonical_json = dumps_canonical(obj)
    return sha256(canonical_json.encode("utf-8"))


def hash_pair(a: bytes, b: bytes) -> bytes:
    """
    Hash two sibling nodes in canonical (sorted) order.

    The smaller digest always goes first, so a proof does not need to
    carry left/right position bits.

    Args:
        a: One child hash
        b: The other child hash

    Returns:
        32-byte parent digest
    """
    if a <= b:
        return sha256(a + b)
    return sha256(b + a)


def is_zero_hash(value: bytes) -> bool:
    """Check whether a digest is the all-zero value."""
    return value == ZERO_HASH


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

    Args:
        hex_string: Hex string with 0x prefix

    Returns:
        Decoded bytes

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


def coerce_digest(value: bytes | str) -> bytes:
    """
    Accept a digest as raw bytes or 0x-prefixed hex and return raw bytes.

    Raises:
        ValueError: If the value is not a 32-byte digest
        TypeError: If the value is neither bytes nor str
    """
    if isinstance(value, str):
        value = from_hex(value)
    elif not isinstance(value, (bytes, bytearray)):
        raise TypeError(f"Digest must be bytes or hex str, got {type(value).__name__}")
    if len(value) != DIGEST_SIZE:
        raise ValueError(f"Digest must be {DIGEST_SIZE} bytes, got {len(value)}")
    return bytes(value)


__all__ = [
    "DIGEST_SIZE",
    "ZERO_HASH",
    "sha256",
    "hash_canonical",
    "hash_pair",
    "is_zero_hash",
    "to_hex",
    "from_hex",
    "coerce_digest",
]
