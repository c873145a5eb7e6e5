"""
Sealed-chunk storage.
"""
from .base import ChunkStore
from .memory import InMemoryChunkStore, JsonChunkStore

__all__ = [
    "ChunkStore",
    "InMemoryChunkStore",
    "JsonChunkStore",
]
