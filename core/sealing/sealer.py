"""
Document Sealer

Ingestion side of the protocol: turns an ordered list of chunk texts into
sealed records whose root is published on the ledger.

    texts -> digests -> Merkle tree -> anchor(root) -> persist document + chunks

Zero-chunk documents are rejected with EmptyInputError before anything is
anchored or persisted; there is no root for an empty set.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Sequence

from core.anchor.base import AnchorClient
from core.crypto.hashing import hash_texts, to_hex
from core.merkle.merkle_tree import MerkleTree, build_merkle_tree
from core.schemas.anchor import AnchorReceipt
from core.schemas.chunks import SealedChunk, SealedDocument
from core.storage.base import ChunkStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SealResult:
    """Everything produced by sealing one document."""
    document: SealedDocument
    chunks: list[SealedChunk]
    tree: MerkleTree
    receipt: AnchorReceipt

    @property
    def merkle_root(self) -> str:
        return self.document.merkle_root


def chunk_id_for(document_id: str, index: int) -> str:
    """Stable chunk id derived from its document and position."""
    return f"{document_id}-{index:04d}"


def seal_chunks(texts: Sequence[str]) -> tuple[MerkleTree, list[bytes]]:
    """
    Hash chunk texts and build their tree. Pure, no I/O.

    Raises:
        EmptyInputError: If texts is empty
    """
    digests = hash_texts(texts)
    return build_merkle_tree(digests), digests


class DocumentSealer:
    """
    Seals documents: hashes, builds the tree, anchors the root, persists.

    Usage:
        sealer = DocumentSealer(store, AnchorService(LocalLedger()))
        result = sealer.seal(["chunk one", "chunk two"], file_name="apbn.pdf")
    """

    def __init__(self, store: ChunkStore, anchor_client: AnchorClient) -> None:
        self.store = store
        self.anchor_client = anchor_client

    def seal(
        self,
        texts: Sequence[str],
        *,
        document_id: Optional[str] = None,
        file_name: str = "",
        source: str = "",
    ) -> SealResult:
        """
        Seal an ordered list of chunk texts as one document.

        Raises:
            EmptyInputError: If texts is empty
            AnchorFailedError / LedgerUnavailableError: If the root cannot be
                published (nothing is persisted in that case)
        """
        tree, digests = seal_chunks(texts)
        document_id = document_id or str(uuid.uuid4())

        logger.info(
            f"Sealing document {document_id}: {len(texts)} chunks, root {tree.root_hex[:16]}..."
        )

        receipt = self.anchor_client.anchor(tree.root_hex, document_id)

        document = SealedDocument(
            document_id=document_id,
            merkle_root=tree.root_hex,
            anchor_tx_ref=receipt.tx_ref,
            chunk_count=len(texts),
            file_name=file_name,
            source=source,
        )
        chunks = [
            SealedChunk(
                id=chunk_id_for(document_id, index),
                document_id=document_id,
                index=index,
                content=text,
                content_digest=to_hex(digests[index]),
                inclusion_proof=tree.proof_for(index).to_hex(),
            )
            for index, text in enumerate(texts)
        ]

        self.store.save_document(document)
        self.store.replace_chunks(document_id, chunks)

        return SealResult(document=document, chunks=chunks, tree=tree, receipt=receipt)


__all__ = [
    "DocumentSealer",
    "SealResult",
    "chunk_id_for",
    "seal_chunks",
]
