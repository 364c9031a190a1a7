"""
Merkle Tree Implementation
Sorted-pair Merkle tree construction, proof generation, and verification.

This module provides:
- Deterministic Merkle root computation
- Merkle proof generation for any leaf index
- Position-free Merkle proof verification
- Standard padding rule for odd number of leaves

Canonical Commitment Rules (Hard Contracts):
1. Parent hashing: parent = sha256(min(a, b) + max(a, b))
   - Implemented via core.crypto.hashing.hash_pair()
   - Siblings are combined in sorted order, so proofs carry no
     left/right bits and a verifier never needs the leaf index
2. Padding rule: Duplicate last node if odd number at any level
3. Empty leaves: build_merkle_root([]) returns sha256(b"")
4. Single leaf: root = leaf, proof has no siblings

Leaf ordering is the caller's choice; ClaimTree sorts leaves by hash so that
the root does not depend on input order.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from core.crypto.hashing import hash_pair, sha256


# Empty tree sentinel: sha256 of empty bytes
EMPTY_TREE_ROOT: bytes = sha256(b"")


@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle inclusion proof for a single leaf.

    Attributes:
        leaf: The leaf hash being proven (32 bytes)
        siblings: Sibling hashes from bottom to top of tree
        root: The Merkle root this proof is against
        index: Position of the leaf when the proof was generated.
               Informational only; verification does not use it.
    """
    leaf: bytes
    siblings: list[bytes] = field(default_factory=list)
    root: bytes = b""
    index: int = 0

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"Leaf index must be non-negative, got {self.index}")


def merkle_parent(left: bytes, right: bytes) -> bytes:
    """Compute the parent hash of two child nodes (sorted-pair rule)."""
    return hash_pair(left, right)


def _next_level(level: list[bytes]) -> list[bytes]:
    if len(level) % 2 == 1:
        level = level + [level[-1]]
    return [merkle_parent(level[i], level[i + 1]) for i in range(0, len(level), 2)]


def build_merkle_root(leaves: Sequence[bytes]) -> bytes:
    """
    Build a Merkle root from a sequence of leaf hashes.

    Example: [a, b, c] -> [a, b, c, c] -> [parent(a,b), parent(c,c)]

    Args:
        leaves: Sequence of leaf hashes (32 bytes each)

    Returns:
        32-byte Merkle root
    """
    if len(leaves) == 0:
        return EMPTY_TREE_ROOT

    current_level: list[bytes] = list(leaves)
    while len(current_level) > 1:
        current_level = _next_level(current_level)

    return current_level[0]


def build_merkle_proof(leaves: Sequence[bytes], index: int) -> MerkleProof:
    """
    Generate a Merkle proof for the leaf at the given index.

    Args:
        leaves: Sequence of leaf hashes
        index: 0-based index of the leaf to prove

    Returns:
        MerkleProof with leaf, siblings (bottom-up), root and index

    Raises:
        IndexError: If index is out of range
        ValueError: If leaves is empty
    """
    if len(leaves) == 0:
        raise ValueError("Cannot generate proof for empty leaf list")

    if index < 0 or index >= len(leaves):
        raise IndexError(
            f"Leaf index {index} out of range for {len(leaves)} leaves"
        )

    siblings: list[bytes] = []
    current_level: list[bytes] = list(leaves)
    current_index = index

    while len(current_level) > 1:
        if len(current_level) % 2 == 1:
            current_level.append(current_level[-1])

        # XOR with 1 flips to the other child of the same parent
        siblings.append(current_level[current_index ^ 1])

        current_level = _next_level(current_level)
        current_index //= 2

    return MerkleProof(
        leaf=leaves[index],
        siblings=siblings,
        root=current_level[0],
        index=index,
    )


def process_proof(leaf: bytes, siblings: Sequence[bytes]) -> bytes:
    """
    Recompute the root implied by a leaf and its sibling path.

    Args:
        leaf: Leaf hash
        siblings: Sibling hashes, bottom-up

    Returns:
        The reconstructed root
    """
    current_hash = leaf
    for sibling in siblings:
        current_hash = merkle_parent(current_hash, sibling)
    return current_hash


def verify_merkle_proof(proof: MerkleProof) -> bool:
    """
    Verify a Merkle proof against the root it carries.

    Returns:
        True if the proof is valid, False otherwise
    """
    return process_proof(proof.leaf, proof.siblings) == proof.root


def compute_tree_depth(num_leaves: int) -> int:
    """
    Compute the depth of a Merkle tree with given number of leaves.

    A single leaf has depth 1, two leaves have depth 2, etc.
    Returns 0 for an empty tree.
    """
    if num_leaves == 0:
        return 0

    depth = 1
    n = num_leaves
    while n > 1:
        n = (n + 1) // 2
        depth += 1

    return depth


__all__ = [
    "EMPTY_TREE_ROOT",
    "MerkleProof",
    "merkle_parent",
    "build_merkle_root",
    "build_merkle_proof",
    "process_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
]
