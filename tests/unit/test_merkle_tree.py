"""
Merkle Tree Unit Tests
Tests for core/merkle/merkle_tree.py

Covers:
1. Root determinism - same leaves give the same root across runs
2. Padding correctness - odd leaf count uses the "duplicate last" rule
3. Proof verification - generate a proof for each index and verify it
4. Tamper detection - a tampered sibling, leaf or root fails verification
5. Sorted-pair rule - parent hashing is order independent
"""
import pytest

from core.crypto.hashing import sha256
from core.merkle.merkle_tree import (
    EMPTY_TREE_ROOT,
    MerkleProof,
    build_merkle_proof,
    build_merkle_root,
    compute_tree_depth,
    merkle_parent,
    process_proof,
    verify_merkle_proof,
)


def _leaves(n: int) -> list[bytes]:
    return [sha256(f"leaf-{i}".encode()) for i in range(n)]


class TestEmptyTree:
    """Tests for empty tree behavior."""

    def test_empty_leaves_returns_sha256_empty(self):
        assert build_merkle_root([]) == sha256(b"")
        assert build_merkle_root([]) == EMPTY_TREE_ROOT

    def test_build_proof_empty_raises(self):
        with pytest.raises(ValueError, match="empty"):
            build_merkle_proof([], 0)


class TestSingleLeaf:

    def test_single_leaf_root_equals_leaf(self):
        leaf = sha256(b"single leaf")

        assert build_merkle_root([leaf]) == leaf

    def test_single_leaf_proof_no_siblings(self):
        leaf = sha256(b"only one")
        proof = build_merkle_proof([leaf], 0)

        assert proof.siblings == []
        assert proof.root == leaf
        assert verify_merkle_proof(proof)


class TestRootDeterminism:

    def test_same_leaves_same_root(self):
        assert build_merkle_root(_leaves(5)) == build_merkle_root(_leaves(5))

    def test_different_leaves_different_roots(self):
        assert build_merkle_root(_leaves(4)) != build_merkle_root(_leaves(5))

    def test_swapping_pair_does_not_change_root(self):
        """Sorted-pair hashing makes siblings within a pair interchangeable."""
        a, b, c, d = _leaves(4)

        assert build_merkle_root([a, b, c, d]) == build_merkle_root([b, a, d, c])


class TestPaddingCorrectness:

    def test_padding_rule_three_leaves(self):
        """[a, b, c] -> [parent(a,b), parent(c,c)]."""
        a, b, c = _leaves(3)
        expected = merkle_parent(merkle_parent(a, b), merkle_parent(c, c))

        assert build_merkle_root([a, b, c]) == expected

    def test_padding_rule_five_leaves(self):
        a, b, c, d, e = _leaves(5)
        level1 = [merkle_parent(a, b), merkle_parent(c, d), merkle_parent(e, e)]
        level2 = [merkle_parent(level1[0], level1[1]), merkle_parent(level1[2], level1[2])]

        assert build_merkle_root([a, b, c, d, e]) == merkle_parent(*level2)


class TestProofVerification:
    """Tests for proof generation and verification."""

    @pytest.mark.parametrize("count", [1, 2, 3, 4, 5, 7, 8, 13])
    def test_proof_verifies_for_each_index(self, count):
        leaves = _leaves(count)
        root = build_merkle_root(leaves)

        for index in range(count):
            proof = build_merkle_proof(leaves, index)
            assert proof.root == root
            assert verify_merkle_proof(proof)
            assert process_proof(leaves[index], proof.siblings) == root

    def test_proof_index_out_of_range_raises(self):
        with pytest.raises(IndexError):
            build_merkle_proof(_leaves(3), 3)
        with pytest.raises(IndexError):
            build_merkle_proof(_leaves(3), -1)

    def test_verification_ignores_index(self):
        """Positions are not needed: a proof with a wrong index still verifies."""
        leaves = _leaves(4)
        proof = build_merkle_proof(leaves, 2)
        relabeled = MerkleProof(leaf=proof.leaf, siblings=proof.siblings, root=proof.root, index=0)

        assert verify_merkle_proof(relabeled)

    def test_depth_matches_proof_length(self):
        leaves = _leaves(6)
        proof = build_merkle_proof(leaves, 5)

        assert len(proof.siblings) == compute_tree_depth(len(leaves)) - 1


class TestTamperDetection:

    def test_tampered_sibling_fails(self):
        leaves = _leaves(4)
        proof = build_merkle_proof(leaves, 1)
        siblings = list(proof.siblings)
        siblings[0] = sha256(b"evil")

        assert not verify_merkle_proof(MerkleProof(leaf=proof.leaf, siblings=siblings, root=proof.root))

    def test_tampered_leaf_fails(self):
        proof = build_merkle_proof(_leaves(4), 1)

        assert not verify_merkle_proof(
            MerkleProof(leaf=sha256(b"evil"), siblings=proof.siblings, root=proof.root)
        )

    def test_tampered_root_fails(self):
        proof = build_merkle_proof(_leaves(4), 1)

        assert not verify_merkle_proof(
            MerkleProof(leaf=proof.leaf, siblings=proof.siblings, root=sha256(b"evil"))
        )

    def test_missing_sibling_fails(self):
        proof = build_merkle_proof(_leaves(8), 3)

        assert not verify_merkle_proof(
            MerkleProof(leaf=proof.leaf, siblings=proof.siblings[:-1], root=proof.root)
        )


class TestMerkleParent:

    def test_parent_order_independent(self):
        a, b = _leaves(2)

        assert merkle_parent(a, b) == merkle_parent(b, a)

    def test_parent_sorted_concat(self):
        a, b = _leaves(2)
        low, high = sorted([a, b])

        assert merkle_parent(a, b) == sha256(low + high)


class TestComputeTreeDepth:

    @pytest.mark.parametrize("leaves,depth", [(0, 0), (1, 1), (2, 2), (3, 3), (4, 3), (5, 4), (8, 4), (9, 5)])
    def test_depth(self, leaves, depth):
        assert compute_tree_depth(leaves) == depth


class TestMerkleProofDataclass:

    def test_merkle_proof_immutable(self):
        proof = build_merkle_proof(_leaves(2), 0)

        with pytest.raises(AttributeError):
            proof.root = b"x"

    def test_merkle_proof_negative_index_raises(self):
        with pytest.raises(ValueError, match="non-negative"):
            MerkleProof(leaf=sha256(b"x"), index=-1)
