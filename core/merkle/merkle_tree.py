"""
Merkle Tree Implementation
Deterministic Merkle tree construction, proof generation, and verification
over sealed chunk digests.

Commitment Rules (Hard Contracts):
1. Leaf: the 32-byte content digest of a chunk (core.crypto.hashing.hash_text).
   Leaves are NOT re-hashed when entering the tree.
2. Pair ordering ("sort-pairs"): before hashing, the two children are put
   in ascending byte order by order_pair(). Builder and verifier both call
   merkle_parent(), which is the only place this rule is applied.
3. Parent hashing: parent = sha256(min(a, b) + max(a, b))
4. Padding ("duplicate-odd"): if a level has an odd node count, the last
   node is paired with itself, and that self-sibling IS recorded in the
   proof so every leaf's proof has the same length.
5. Empty leaves: EmptyInputError, there is no root for an empty set.
6. Single leaf: root = leaf, proof = [] (no hashing happens).

Determinism Notes:
- No randomness or global state; safe to run concurrently per document
- Leaf order is defined by the chunk index and is never sorted here.
  Only the two members of a pair are ordered, so swapping two leaves
  that land in different pairs changes the root.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from core.crypto.hashing import DIGEST_SIZE, digest_from_hex, sha256, to_hex
from core.merkle.proof import InclusionProof
from core.schemas.errors import (
    EmptyInputError,
    MalformedDigestError,
    MalformedProofError,
)


def order_pair(a: bytes, b: bytes) -> tuple[bytes, bytes]:
    """
    Apply the sort-pairs rule to two sibling digests.

    Returns the pair in ascending unsigned byte order. For equal-length
    inputs Python's bytes comparison is exactly Buffer.compare / memcmp
    ordering, so independent implementations agree.
    """
    if a <= b:
        return a, b
    return b, a


def merkle_parent(a: bytes, b: bytes) -> bytes:
    """
    Compute the parent digest of two child nodes.

    parent = sha256(concat(order_pair(a, b))). Argument order does not
    matter: merkle_parent(a, b) == merkle_parent(b, a).
    """
    first, second = order_pair(a, b)
    return sha256(first + second)


def _check_leaves(leaves: Sequence[bytes]) -> list[bytes]:
    if len(leaves) == 0:
        raise EmptyInputError()
    checked: list[bytes] = []
    for i, leaf in enumerate(leaves):
        if not isinstance(leaf, (bytes, bytearray)) or len(leaf) != DIGEST_SIZE:
            size = len(leaf) if isinstance(leaf, (bytes, bytearray)) else type(leaf).__name__
            raise MalformedDigestError(
                f"Leaf {i} must be a {DIGEST_SIZE}-byte digest, got {size}",
                details={"leaf_index": i},
            )
        checked.append(bytes(leaf))
    return checked


def _build_levels(leaves: list[bytes]) -> list[list[bytes]]:
    """
    Build every level of the tree, bottom-up.

    levels[0] are the leaves, levels[-1] is [root]. Levels are stored
    unpadded; padding is applied on the fly when pairing.
    """
    levels: list[list[bytes]] = [leaves]
    current = leaves
    while len(current) > 1:
        next_level: list[bytes] = []
        for i in range(0, len(current), 2):
            left = current[i]
            # duplicate-odd: last node pairs with itself
            right = current[i + 1] if i + 1 < len(current) else left
            next_level.append(merkle_parent(left, right))
        levels.append(next_level)
        current = next_level
    return levels


def _proof_from_levels(levels: list[list[bytes]], index: int) -> InclusionProof:
    siblings: list[bytes] = []
    current_index = index
    for level in levels[:-1]:
        sibling_index = current_index ^ 1
        if sibling_index >= len(level):
            # Odd tail: the node was paired with itself
            sibling_index = current_index
        siblings.append(level[sibling_index])
        current_index //= 2
    return InclusionProof(tuple(siblings))


@dataclass(frozen=True)
class MerkleTree:
    """
    A completed Merkle tree over one document's chunk digests.

    The tree is a build artifact: only `root` and `proofs` need to be
    persisted. `levels` is kept for inspection and tests.

    Attributes:
        leaves: Leaf digests in chunk order
        levels: Node digests per level, bottom (leaves) to top (root)
        proofs: Inclusion proof per leaf index
    """
    leaves: tuple[bytes, ...]
    levels: tuple[tuple[bytes, ...], ...]
    proofs: tuple[InclusionProof, ...]

    @property
    def root(self) -> bytes:
        return self.levels[-1][0]

    @property
    def root_hex(self) -> str:
        return to_hex(self.root)

    @property
    def depth(self) -> int:
        """Number of levels including leaves and root."""
        return len(self.levels)

    def proof_for(self, index: int) -> InclusionProof:
        """Return the proof for the leaf at `index`."""
        if index < 0 or index >= len(self.leaves):
            raise IndexError(
                f"Leaf index {index} out of range for {len(self.leaves)} leaves"
            )
        return self.proofs[index]

    def proof_for_digest(self, digest: bytes) -> InclusionProof:
        """
        Return the proof for the first leaf equal to `digest`.

        Identical chunks share a digest; any of their proofs verifies, so
        the first occurrence is returned.

        Raises:
            KeyError: If the digest is not a leaf of this tree
        """
        for i, leaf in enumerate(self.leaves):
            if leaf == digest:
                return self.proofs[i]
        raise KeyError(to_hex(digest))


def build_merkle_tree(leaves: Sequence[bytes]) -> MerkleTree:
    """
    Build a Merkle tree and the inclusion proof of every leaf.

    Algorithm:
    1. Validate: non-empty, every leaf exactly 32 bytes
    2. Pair adjacent nodes left-to-right, duplicating an odd tail,
       parent = merkle_parent(left, right); repeat until one node remains
    3. For each leaf, collect the sibling at every level

    Example: [a, b, c]
        level 0: a b c
        level 1: P(a,b) P(c,c)
        level 2: P(P(a,b), P(c,c))
        proof(c) = [c, P(a,b)]

    Args:
        leaves: Ordered leaf digests (32 bytes each)

    Returns:
        MerkleTree with root and per-leaf proofs

    Raises:
        EmptyInputError: If leaves is empty
        MalformedDigestError: If any leaf is not a 32-byte digest
    """
    checked = _check_leaves(leaves)
    levels = _build_levels(checked)
    proofs = tuple(_proof_from_levels(levels, i) for i in range(len(checked)))
    return MerkleTree(
        leaves=tuple(checked),
        levels=tuple(tuple(level) for level in levels),
        proofs=proofs,
    )


def build_merkle_root(leaves: Sequence[bytes]) -> bytes:
    """Compute only the root of the tree over `leaves`."""
    return _build_levels(_check_leaves(leaves))[-1][0]


def build_merkle_proof(leaves: Sequence[bytes], index: int) -> InclusionProof:
    """
    Generate the inclusion proof for the leaf at `index`.

    Raises:
        EmptyInputError: If leaves is empty
        IndexError: If index is out of range
    """
    checked = _check_leaves(leaves)
    if index < 0 or index >= len(checked):
        raise IndexError(
            f"Leaf index {index} out of range for {len(checked)} leaves"
        )
    return _proof_from_levels(_build_levels(checked), index)


def verify_merkle_proof(
    leaf: bytes,
    proof: InclusionProof | Sequence[bytes],
    root: bytes,
) -> bool:
    """
    Verify that `leaf` is included under `root`.

    Folds the leaf with each sibling through merkle_parent (same pair
    ordering as the builder) and compares the result with `root`.

    Pure: no I/O, no mutation, no anchor lookup. A malformed proof or a
    digest of the wrong size yields False rather than an exception.

    Args:
        leaf: 32-byte leaf digest
        proof: Sibling digests, bottom-up
        root: Claimed 32-byte root

    Returns:
        True if the recomputed root equals `root`, False otherwise
    """
    if not isinstance(leaf, (bytes, bytearray)) or len(leaf) != DIGEST_SIZE:
        return False
    if not isinstance(root, (bytes, bytearray)) or len(root) != DIGEST_SIZE:
        return False

    current = bytes(leaf)
    for sibling in proof:
        if not isinstance(sibling, (bytes, bytearray)) or len(sibling) != DIGEST_SIZE:
            return False
        current = merkle_parent(current, bytes(sibling))

    return current == bytes(root)


def verify_merkle_proof_hex(
    leaf_hex: str,
    proof_hex: Sequence[str],
    root_hex: str,
) -> bool:
    """
    Verify a proof given in its persisted hex form.

    Malformed hex anywhere is reported as a failed verification.
    """
    try:
        leaf = digest_from_hex(leaf_hex)
        root = digest_from_hex(root_hex)
        proof = InclusionProof.from_hex(proof_hex)
    except (MalformedDigestError, MalformedProofError):
        return False
    return verify_merkle_proof(leaf, proof, root)


def compute_tree_depth(num_leaves: int) -> int:
    """
    Compute the depth of a tree with `num_leaves` leaves.

    Depth counts levels from leaves to root inclusive: 1 leaf -> 1,
    2 leaves -> 2, 3 or 4 leaves -> 3. Every proof has depth - 1 siblings.
    Returns 0 for an empty tree.
    """
    if num_leaves <= 0:
        return 0
    depth = 1
    n = num_leaves
    while n > 1:
        n = (n + 1) // 2
        depth += 1
    return depth


__all__ = [
    "MerkleTree",
    "order_pair",
    "merkle_parent",
    "build_merkle_tree",
    "build_merkle_root",
    "build_merkle_proof",
    "verify_merkle_proof",
    "verify_merkle_proof_hex",
    "compute_tree_depth",
]
