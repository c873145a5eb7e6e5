"""
Sealed-chunk verification protocol.
"""
from .protocol import (
    DEFAULT_ANCHOR_TIMEOUT_S,
    DEFAULT_MAX_WORKERS,
    SealedChunkVerifier,
    check_local,
    source_from_chunk,
    sources_for_document,
)

__all__ = [
    "DEFAULT_ANCHOR_TIMEOUT_S",
    "DEFAULT_MAX_WORKERS",
    "SealedChunkVerifier",
    "check_local",
    "source_from_chunk",
    "sources_for_document",
]
