"""
Tamper Simulator

Controlled corruption of sealed chunks, used to exercise the negative
paths of the verification protocol.

- tamper: OriginalState -> TamperedState(original_content=<content>),
  content gets TAMPER_MARKER appended
- restore: TamperedState -> OriginalState, content reset to the saved original

The stored digest and proof are never touched: the mismatch between them
and the mutated content is exactly what the hash layer must detect.
Transitions are rejected from the wrong state (AlreadyTamperedError /
NotTamperedError), so a second tamper can never overwrite the saved
original.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from core.schemas.chunks import OriginalState, SealedChunk, TamperedState
from core.schemas.errors import AlreadyTamperedError, NotTamperedError
from core.storage.base import ChunkStore


logger = logging.getLogger(__name__)


TAMPER_MARKER = "\n\n[⚠️ TAMPERED - Modified for demonstration]"

PREVIEW_CHARS = 200


def tamper_chunk(chunk: SealedChunk, now: Optional[datetime] = None) -> SealedChunk:
    """
    Return the tampered version of `chunk`.

    Raises:
        AlreadyTamperedError: If the chunk already holds a saved original
    """
    if chunk.is_tampered:
        raise AlreadyTamperedError(chunk.id)
    return chunk.model_copy(update={
        "content": chunk.content + TAMPER_MARKER,
        "state": TamperedState(
            original_content=chunk.content,
            tampered_at=now or datetime.now(timezone.utc),
        ),
    })


def restore_chunk(chunk: SealedChunk) -> SealedChunk:
    """
    Return `chunk` with its saved original content back in place.

    Raises:
        NotTamperedError: If the chunk is not tampered
    """
    original = chunk.original_content
    if original is None:
        raise NotTamperedError(chunk.id)
    return chunk.model_copy(update={
        "content": original,
        "state": OriginalState(),
    })


@dataclass
class ChunkTamperInfo:
    """Tamper status of one chunk, for listings."""
    chunk_id: str
    index: int
    content_preview: str
    is_tampered: bool
    tampered_at: Optional[datetime] = None


@dataclass
class TamperStatus:
    """Tamper status of every chunk in a document."""
    document_id: str
    chunks: list[ChunkTamperInfo] = field(default_factory=list)

    @property
    def tampered_count(self) -> int:
        return sum(1 for c in self.chunks if c.is_tampered)


class TamperSimulator:
    """
    Applies tamper/restore transitions to stored chunks.

    Each call reads the chunk, applies the pure transition (which validates
    the state) and writes it back; a rejected transition writes nothing.
    Read, check and write happen under one lock, so of two concurrent
    tampers of the same chunk exactly one succeeds.
    """

    def __init__(
        self,
        store: ChunkStore,
        *,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.store = store
        self._clock = clock
        self._lock = threading.Lock()

    def tamper(self, chunk_id: str) -> SealedChunk:
        """
        Tamper a stored chunk.

        Raises:
            ChunkNotFoundError: If the chunk does not exist
            AlreadyTamperedError: If it is already tampered
        """
        with self._lock:
            chunk = tamper_chunk(self.store.get_chunk(chunk_id), now=self._clock())
            self.store.update_chunk(chunk)
        logger.warning(f"Chunk {chunk_id} tampered for demonstration")
        return chunk

    def restore(self, chunk_id: str) -> SealedChunk:
        """
        Restore a tampered chunk.

        Raises:
            ChunkNotFoundError: If the chunk does not exist
            NotTamperedError: If it is not tampered
        """
        with self._lock:
            chunk = restore_chunk(self.store.get_chunk(chunk_id))
            self.store.update_chunk(chunk)
        logger.info(f"Chunk {chunk_id} restored")
        return chunk

    def status(self, document_id: str) -> TamperStatus:
        """List every chunk of a document with its tamper status."""
        chunks = self.store.list_chunks(document_id)
        return TamperStatus(
            document_id=document_id,
            chunks=[
                ChunkTamperInfo(
                    chunk_id=c.id,
                    index=c.index,
                    content_preview=c.content[:PREVIEW_CHARS],
                    is_tampered=c.is_tampered,
                    tampered_at=c.tampered_at,
                )
                for c in chunks
            ],
        )


__all__ = [
    "TAMPER_MARKER",
    "ChunkTamperInfo",
    "TamperSimulator",
    "TamperStatus",
    "restore_chunk",
    "tamper_chunk",
]
