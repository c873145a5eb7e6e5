"""
Merkle Tree and Inclusion Proofs
Deterministic Merkle tree construction + proof generation/verification
over sealed chunk digests.

This module provides:
- InclusionProof: Validated, ordered sibling digests for one leaf
- MerkleTree: Root, levels and per-leaf proofs of one document
- order_pair / merkle_parent: The single shared pair-ordering rule
- build_merkle_tree / build_merkle_root / build_merkle_proof
- verify_merkle_proof / verify_merkle_proof_hex

Commitment Rules:
1. Leaf = sha256(text.strip().encode("utf-8"))
2. Parent = sha256(min(a, b) + max(a, b))  (sort-pairs)
3. Padding: odd tail is paired with itself (duplicate-odd)
4. Empty tree: EmptyInputError
5. Single leaf: root = leaf, empty proof

Usage:
    from core.crypto import hash_texts
    from core.merkle import build_merkle_tree, verify_merkle_proof

    tree = build_merkle_tree(hash_texts(chunks))
    assert verify_merkle_proof(tree.leaves[2], tree.proof_for(2), tree.root)
"""
from .proof import InclusionProof

from .merkle_tree import (
    MerkleTree,
    order_pair,
    merkle_parent,
    build_merkle_tree,
    build_merkle_root,
    build_merkle_proof,
    verify_merkle_proof,
    verify_merkle_proof_hex,
    compute_tree_depth,
)

from .merkle_proofs import (
    MerkleProver,
    MerkleVerifier,
)


__all__ = [
    # Core types
    "InclusionProof",
    "MerkleTree",
    # Core functions
    "order_pair",
    "merkle_parent",
    "build_merkle_tree",
    "build_merkle_root",
    "build_merkle_proof",
    "verify_merkle_proof",
    "verify_merkle_proof_hex",
    "compute_tree_depth",
    # Convenience classes
    "MerkleProver",
    "MerkleVerifier",
]
