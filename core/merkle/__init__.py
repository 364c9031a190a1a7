"""
Merkle Tree and Claim Commitments
Sorted-pair Merkle tree construction + proof generation/verification.

This module provides:
- MerkleProof: Dataclass representing a Merkle inclusion proof
- build_merkle_root / build_merkle_proof / verify_merkle_proof
- claim_leaf: Leaf for one (account, cumulative entitlement) pair
- ClaimTree: Off-line builder of claim roots and proofs
- MerkleVerifier: Stateless verification used by the registry

Canonical Commitment Rules:
1. Claim leaf: sha256(dumps_canonical({"account": a, "amount": n}).encode("utf-8"))
2. Parent hashing: sha256(min(x, y) + max(x, y))
3. Padding: Duplicate last node if odd number at any level
4. Single leaf: root = leaf

Usage:
    from core.merkle import ClaimTree, MerkleVerifier

    tree = ClaimTree({"0xaaa...": 150, "0xbbb...": 50})
    proof = tree.proof_for("0xaaa...")
    assert MerkleVerifier.verify_claim("0xaaa...", 150, proof, tree.root)
"""
from .merkle_tree import (
    EMPTY_TREE_ROOT,
    MerkleProof,
    merkle_parent,
    build_merkle_root,
    build_merkle_proof,
    process_proof,
    verify_merkle_proof,
    compute_tree_depth,
)

from .merkle_proofs import (
    claim_leaf,
    ClaimTree,
    MerkleProver,
    MerkleVerifier,
)


__all__ = [
    # Core types
    "MerkleProof",
    "EMPTY_TREE_ROOT",
    # Core functions
    "merkle_parent",
    "build_merkle_root",
    "build_merkle_proof",
    "process_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
    # Claims
    "claim_leaf",
    "ClaimTree",
    "MerkleProver",
    "MerkleVerifier",
]
