"""
In-memory chunk store and its JSON-file-backed variant.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Sequence

from core.schemas.chunks import SealedChunk, SealedDocument
from core.schemas.errors import ChunkNotFoundError, DocumentNotFoundError
from core.storage.base import ChunkStore


logger = logging.getLogger(__name__)


class InMemoryChunkStore(ChunkStore):
    """Dict-backed store; records are immutable models so no copies are needed."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._documents: dict[str, SealedDocument] = {}
        self._chunks: dict[str, SealedChunk] = {}

    def save_document(self, document: SealedDocument) -> None:
        with self._lock:
            self._documents[document.document_id] = document
            self._persist()

    def get_document(self, document_id: str) -> SealedDocument:
        with self._lock:
            document = self._documents.get(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    def list_documents(self) -> list[SealedDocument]:
        with self._lock:
            return sorted(self._documents.values(), key=lambda d: d.created_at)

    def save_chunks(self, chunks: Sequence[SealedChunk]) -> None:
        with self._lock:
            for chunk in chunks:
                self._chunks[chunk.id] = chunk
            self._persist()

    def replace_chunks(self, document_id: str, chunks: Sequence[SealedChunk]) -> None:
        foreign = [c.id for c in chunks if c.document_id != document_id]
        if foreign:
            raise ValueError(f"Chunks {foreign} do not belong to document {document_id}")
        with self._lock:
            stale = [cid for cid, c in self._chunks.items() if c.document_id == document_id]
            for chunk_id in stale:
                del self._chunks[chunk_id]
            for chunk in chunks:
                self._chunks[chunk.id] = chunk
            self._persist()
        if stale:
            logger.info(f"Replaced {len(stale)} earlier chunk records of document {document_id}")

    def get_chunk(self, chunk_id: str) -> SealedChunk:
        with self._lock:
            chunk = self._chunks.get(chunk_id)
        if chunk is None:
            raise ChunkNotFoundError(chunk_id)
        return chunk

    def update_chunk(self, chunk: SealedChunk) -> None:
        with self._lock:
            if chunk.id not in self._chunks:
                raise ChunkNotFoundError(chunk.id)
            self._chunks[chunk.id] = chunk
            self._persist()

    def list_chunks(self, document_id: str) -> list[SealedChunk]:
        with self._lock:
            if document_id not in self._documents:
                raise DocumentNotFoundError(document_id)
            chunks = [c for c in self._chunks.values() if c.document_id == document_id]
        return sorted(chunks, key=lambda c: c.index)

    def _persist(self) -> None:
        """Hook for durable subclasses; called with the lock held."""


class JsonChunkStore(InMemoryChunkStore):
    """
    Store persisted as a single JSON file.

    The whole file is rewritten on every change (write to a temp file,
    then rename), which is fine for demo and CLI sized data sets.
    """

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            self._load()

    def _load(self) -> None:
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        for raw in data.get("documents", []):
            document = SealedDocument(**raw)
            self._documents[document.document_id] = document
        for raw in data.get("chunks", []):
            chunk = SealedChunk.from_storage_record(raw)
            self._chunks[chunk.id] = chunk
        logger.debug(
            f"Loaded {len(self._documents)} documents / {len(self._chunks)} chunks from {self.path}"
        )

    def _persist(self) -> None:
        data: dict[str, Any] = {
            "documents": [d.model_dump(mode="json") for d in self._documents.values()],
            "chunks": [
                c.to_storage_record()
                for c in sorted(self._chunks.values(), key=lambda c: (c.document_id, c.index))
            ],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        finally:
            if os.path.exists(tmp):
                os.unlink(tmp)


__all__ = [
    "InMemoryChunkStore",
    "JsonChunkStore",
]
