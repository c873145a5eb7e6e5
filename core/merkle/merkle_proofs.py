"""
Merkle Proofs Convenience Wrappers
Thin wrappers around core Merkle tree functions for cleaner API.

This module provides class-based interfaces:
- MerkleProver: Build trees and proofs from chunk texts or digests
- MerkleVerifier: Verify chunk texts or digests against a root
"""
from __future__ import annotations

from typing import Sequence

from core.crypto.hashing import hash_text, hash_texts
from core.merkle.merkle_tree import (
    MerkleTree,
    build_merkle_proof,
    build_merkle_root,
    build_merkle_tree,
    verify_merkle_proof,
)
from core.merkle.proof import InclusionProof


class MerkleProver:
    """
    Convenience class for generating Merkle proofs.

    Provides static methods for proof generation from:
    - Pre-hashed leaves (bytes)
    - Raw chunk texts (hashed with the content hasher)

    Example:
        >>> tree = MerkleProver.tree_from_texts(["a", "b", "c"])
        >>> MerkleVerifier.verify_text("b", tree.proof_for(1), tree.root)
        True
    """

    @staticmethod
    def prove(leaves: Sequence[bytes], index: int) -> InclusionProof:
        """
        Generate a Merkle proof for the leaf at the given index.

        Raises:
            IndexError: If index is out of range
            EmptyInputError: If leaves is empty
        """
        return build_merkle_proof(leaves, index)

    @staticmethod
    def compute_root(leaves: Sequence[bytes]) -> bytes:
        """Compute the Merkle root for a sequence of leaf digests."""
        return build_merkle_root(leaves)

    @staticmethod
    def tree_from_texts(texts: Sequence[str]) -> MerkleTree:
        """Hash chunk texts in order and build their tree."""
        return build_merkle_tree(hash_texts(texts))


class MerkleVerifier:
    """Convenience class for verifying Merkle proofs."""

    @staticmethod
    def verify(leaf: bytes, proof: InclusionProof, root: bytes) -> bool:
        """Verify a leaf digest against a root."""
        return verify_merkle_proof(leaf, proof, root)

    @staticmethod
    def verify_text(text: str, proof: InclusionProof, root: bytes) -> bool:
        """
        Verify that chunk text is included under a root.

        The text is hashed with the content hasher to produce the leaf.
        """
        return verify_merkle_proof(hash_text(text), proof, root)


__all__ = [
    "MerkleProver",
    "MerkleVerifier",
]
