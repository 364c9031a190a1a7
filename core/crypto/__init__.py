"""
Core cryptographic utilities.

Hash primitives for claim leaves and Merkle commitments.
"""
from .hashing import (
    DIGEST_SIZE,
    ZERO_HASH,
    sha256,
    hash_canonical,
    hash_pair,
    is_zero_hash,
    to_hex,
    from_hex,
    coerce_digest,
)

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
