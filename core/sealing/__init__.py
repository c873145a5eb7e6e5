"""
Document sealing (ingestion side).
"""
from .sealer import DocumentSealer, SealResult, chunk_id_for, seal_chunks

__all__ = [
    "DocumentSealer",
    "SealResult",
    "chunk_id_for",
    "seal_chunks",
]
