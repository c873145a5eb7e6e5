"""
Chunk Store Interface

Persistence contract for sealed documents and chunks. The protocol only
needs to write sealed records, read them back, and replace a chunk
record (used by the tamper simulator). Re-sealing a document id replaces
its whole chunk set.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from core.schemas.chunks import SealedChunk, SealedDocument


class ChunkStore(ABC):
    """
    Abstract base class for chunk stores.

    Lookups of unknown ids raise ChunkNotFoundError / DocumentNotFoundError.
    """

    @abstractmethod
    def save_document(self, document: SealedDocument) -> None:
        """Insert or replace a document record."""

    @abstractmethod
    def get_document(self, document_id: str) -> SealedDocument:
        """Return a document record."""

    @abstractmethod
    def list_documents(self) -> list[SealedDocument]:
        """All documents, oldest first."""

    @abstractmethod
    def save_chunks(self, chunks: Sequence[SealedChunk]) -> None:
        """Insert chunk records."""

    @abstractmethod
    def replace_chunks(self, document_id: str, chunks: Sequence[SealedChunk]) -> None:
        """
        Make `chunks` the complete chunk set of a document.

        Chunk records left over from an earlier sealing of the same
        document id are dropped in the same write.
        """

    @abstractmethod
    def get_chunk(self, chunk_id: str) -> SealedChunk:
        """Return a chunk record."""

    @abstractmethod
    def update_chunk(self, chunk: SealedChunk) -> None:
        """Replace an existing chunk record (matched by id)."""

    @abstractmethod
    def list_chunks(self, document_id: str) -> list[SealedChunk]:
        """Chunks of a document ordered by index."""


__all__ = [
    "ChunkStore",
]
