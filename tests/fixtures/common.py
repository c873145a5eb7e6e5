"""
Common test fixtures shared by all modules.

Provides factory functions for core chunkseal data structures:
- chunk texts and their digests
- Merkle trees
- VerifiableSource
- SealedChunk / SealedDocument
"""

from typing import Optional, Sequence

from core.crypto.hashing import hash_texts, to_hex
from core.merkle.merkle_tree import MerkleTree, build_merkle_tree
from core.schemas.chunks import SealedChunk, SealedDocument
from core.schemas.verification import VerifiableSource


# =============================================================================
# Chunk Text Factories
# =============================================================================

def make_texts(count: int = 5, prefix: str = "Chunk") -> list[str]:
    """
    Create distinct chunk texts.

    Args:
        count: Number of chunks
        prefix: Text prefix for every chunk
    """
    return [
        f"{prefix} {i}: Pendapatan negara tahun anggaran {2020 + i} "
        f"direncanakan sebesar Rp{1000 + i * 37} triliun."
        for i in range(count)
    ]


def make_tree(texts: Optional[Sequence[str]] = None) -> MerkleTree:
    """Build the Merkle tree over chunk texts (default: make_texts())."""
    return build_merkle_tree(hash_texts(texts if texts is not None else make_texts()))


# =============================================================================
# VerifiableSource Factory
# =============================================================================

def make_source(
    texts: Optional[Sequence[str]] = None,
    index: int = 0,
    content: Optional[str] = None,
    chunk_id: Optional[str] = None,
) -> VerifiableSource:
    """
    Create a VerifiableSource for the chunk at `index` of `texts`.

    Args:
        texts: Document chunk texts (default: make_texts())
        index: Chunk to build the source for
        content: Override the retrieved content (simulates an edit)
        chunk_id: Chunk id (default: "chunk-<index>")
    """
    texts = list(texts if texts is not None else make_texts())
    tree = make_tree(texts)
    return VerifiableSource(
        content=texts[index] if content is None else content,
        content_digest=to_hex(tree.leaves[index]),
        inclusion_proof=tree.proof_for(index).to_hex(),
        merkle_root=tree.root_hex,
        chunk_id=chunk_id or f"chunk-{index}",
    )


def make_sources(texts: Optional[Sequence[str]] = None) -> list[VerifiableSource]:
    """One VerifiableSource per chunk of `texts`."""
    texts = list(texts if texts is not None else make_texts())
    return [make_source(texts, i) for i in range(len(texts))]


# =============================================================================
# Stored Record Factories
# =============================================================================

def make_sealed_records(
    texts: Optional[Sequence[str]] = None,
    document_id: str = "doc-test-001",
    anchor_tx_ref: str = "0x" + "ab" * 32,
) -> tuple[SealedDocument, list[SealedChunk]]:
    """Create a document record and its chunk records (not anchored)."""
    texts = list(texts if texts is not None else make_texts())
    tree = make_tree(texts)
    document = SealedDocument(
        document_id=document_id,
        merkle_root=tree.root_hex,
        anchor_tx_ref=anchor_tx_ref,
        chunk_count=len(texts),
        file_name="apbn-2024.pdf",
        source="Kementerian Keuangan",
    )
    chunks = [
        SealedChunk(
            id=f"{document_id}-{i:04d}",
            document_id=document_id,
            index=i,
            content=text,
            content_digest=to_hex(tree.leaves[i]),
            inclusion_proof=tree.proof_for(i).to_hex(),
        )
        for i, text in enumerate(texts)
    ]
    return document, chunks
