"""
Core cryptographic utilities.

Provides the content hasher and digest hex helpers shared by the
Merkle builder, the verifier and the ledger adapters.
"""
from .hashing import (
    DIGEST_SIZE,
    sha256,
    normalize_text,
    hash_text,
    hash_text_hex,
    hash_texts,
    verify_text_hash,
    to_hex,
    digest_from_hex,
    normalize_hex_digest,
    to_bytes32,
    hash_concat,
)

__all__ = [
    "DIGEST_SIZE",
    "sha256",
    "normalize_text",
    "hash_text",
    "hash_text_hex",
    "hash_texts",
    "verify_text_hash",
    "to_hex",
    "digest_from_hex",
    "normalize_hex_digest",
    "to_bytes32",
    "hash_concat",
]
