"""
Tamper simulation for exercising verification failures.
"""
from .simulator import (
    TAMPER_MARKER,
    ChunkTamperInfo,
    TamperSimulator,
    TamperStatus,
    restore_chunk,
    tamper_chunk,
)

__all__ = [
    "TAMPER_MARKER",
    "ChunkTamperInfo",
    "TamperSimulator",
    "TamperStatus",
    "restore_chunk",
    "tamper_chunk",
]
