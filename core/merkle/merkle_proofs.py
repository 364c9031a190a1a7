"""
Merkle Proofs for Prize Claims
Proof generation (off-line, by the administrator) and verification (by the
registry) for batch-proof competitions.

Leaf rule (Hard Contract):
    leaf = sha256(dumps_canonical({"account": account, "amount": amount}))

`amount` is the claimant's cumulative lifetime entitlement, not a per-claim
delta. A claimant appears exactly once in a tree and may withdraw up to
`amount` across any number of claims.

Both sides must use claim_leaf() and the sorted-pair rule from
merkle_tree.py; the tests pin this contract.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from core.crypto.hashing import hash_canonical, to_hex
from core.merkle.merkle_tree import (
    MerkleProof,
    build_merkle_proof,
    build_merkle_root,
    compute_tree_depth,
    process_proof,
    verify_merkle_proof,
)


def claim_leaf(account: str, amount: int) -> bytes:
    """
    Compute the leaf binding an account to its cumulative entitlement.

    Args:
        account: Claimant identity
        amount: Cumulative entitlement (integer)

    Returns:
        32-byte leaf hash
    """
    return hash_canonical({"account": account, "amount": amount})


class MerkleProver:
    """
    Convenience class for generating Merkle proofs from pre-hashed leaves.

    Example:
        >>> leaves = [sha256(b"a"), sha256(b"b"), sha256(b"c")]
        >>> proof = MerkleProver.prove(leaves, index=1)
        >>> proof.leaf == leaves[1]
        True
    """

    @staticmethod
    def prove(leaves: Sequence[bytes], index: int) -> MerkleProof:
        return build_merkle_proof(leaves, index)

    @staticmethod
    def compute_root(leaves: Sequence[bytes]) -> bytes:
        return build_merkle_root(leaves)


class ClaimTree:
    """
    Claim tree over (account, cumulative entitlement) pairs.

    Leaves are sorted by hash before the tree is built, so the root is a
    function of the entitlement set only.

    Usage:
        tree = ClaimTree({"0xaaa...": 150, "0xbbb...": 50})
        root = tree.root
        proof = tree.proof_for("0xaaa...")
    """

    def __init__(self, entitlements: Mapping[str, int] | Iterable[tuple[str, int]]) -> None:
        items = entitlements.items() if isinstance(entitlements, Mapping) else entitlements

        self._amounts: dict[str, int] = {}
        for account, amount in items:
            if not isinstance(account, str) or not account.strip():
                raise ValueError(f"Invalid account in entitlements: {account!r}")
            if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
                raise ValueError(
                    f"Entitlement for {account} must be a positive integer, got {amount!r}"
                )
            if account in self._amounts:
                raise ValueError(f"Duplicate account in entitlements: {account}")
            self._amounts[account] = amount

        if not self._amounts:
            raise ValueError("Cannot build a claim tree without entitlements")

        leaf_by_account = {a: claim_leaf(a, n) for a, n in self._amounts.items()}
        self._leaves: list[bytes] = sorted(leaf_by_account.values())
        self._index: dict[str, int] = {
            account: self._leaves.index(leaf) for account, leaf in leaf_by_account.items()
        }
        self._root = build_merkle_root(self._leaves)

    @property
    def root(self) -> bytes:
        return self._root

    @property
    def leaves(self) -> list[bytes]:
        return list(self._leaves)

    @property
    def depth(self) -> int:
        return compute_tree_depth(len(self._leaves))

    @property
    def total(self) -> int:
        """Sum of all entitlements; the pool must hold at least this much."""
        return sum(self._amounts.values())

    def __len__(self) -> int:
        return len(self._amounts)

    def __contains__(self, account: object) -> bool:
        return account in self._amounts

    def amount_for(self, account: str) -> int:
        try:
            return self._amounts[account]
        except KeyError:
            raise KeyError(f"Account not in claim tree: {account}") from None

    def proof_for(self, account: str) -> list[bytes]:
        """Sibling path for an account's leaf."""
        self.amount_for(account)
        return build_merkle_proof(self._leaves, self._index[account]).siblings

    def to_dict(self) -> dict[str, Any]:
        """Export root and every claimant's proof in hex form."""
        return {
            "root": to_hex(self._root),
            "depth": self.depth,
            "total": self.total,
            "claims": {
                account: {
                    "amount": amount,
                    "proof": [to_hex(s) for s in self.proof_for(account)],
                }
                for account, amount in sorted(self._amounts.items())
            },
        }


class MerkleVerifier:
    """
    Stateless inclusion checks.

    Example:
        >>> tree = ClaimTree({"0xaaa": 10})
        >>> MerkleVerifier.verify_claim("0xaaa", 10, tree.proof_for("0xaaa"), tree.root)
        True
    """

    @staticmethod
    def verify(proof: MerkleProof) -> bool:
        return verify_merkle_proof(proof)

    @staticmethod
    def verify_leaf(leaf: bytes, siblings: Sequence[bytes], root: bytes) -> bool:
        """
        Verify a leaf is included under a root using raw components.

        Args:
            leaf: The leaf hash to verify
            siblings: Sibling hashes (bottom-up)
            root: The published Merkle root

        Returns:
            True if the proof is valid, False otherwise
        """
        return process_proof(leaf, siblings) == root

    @staticmethod
    def verify_claim(
        account: str,
        amount: int,
        siblings: Sequence[bytes],
        root: bytes,
    ) -> bool:
        """Verify that (account, amount) is committed under root."""
        return MerkleVerifier.verify_leaf(claim_leaf(account, amount), siblings, root)


__all__ = [
    "claim_leaf",
    "MerkleProver",
    "ClaimTree",
    "MerkleVerifier",
]
