"""
Content Hasher
Deterministic hashing of chunk text plus hex helpers for digests.

This module provides:
- SHA-256 hashing for raw bytes
- Text normalization + hashing for sealed chunks
- Strict hex encoding/decoding of 32-byte digests

Security/Determinism Notes:
- Exactly one algorithm (SHA-256), never configurable per call
- Normalization only trims leading/trailing whitespace; interior
  whitespace and casing are hashed as-is so that an independent client
  (e.g. a browser using Web Crypto) reproduces the same digest
- No salt, no randomness
"""
from __future__ import annotations

import hashlib
import re
from typing import Iterable

from core.schemas.errors import MalformedDigestError


# Digest length in bytes (SHA-256)
DIGEST_SIZE: int = 32

_HEX_DIGEST_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte SHA-256 digest

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def normalize_text(text: str) -> bytes:
    """
    Normalize chunk text into the exact bytes that get hashed.

    Rule: text.strip() encoded as UTF-8. Python's str.strip() and
    JavaScript's String.prototype.trim() agree on ASCII and common
    Unicode whitespace, which is what chunk boundaries produce.
    """
    return text.strip().encode("utf-8")


def hash_text(text: str) -> bytes:
    """
    Hash a chunk of text.

    Rule: digest = sha256(text.strip().encode("utf-8"))

    Args:
        text: Chunk content

    Returns:
        32-byte content digest
    """
    return sha256(normalize_text(text))


def hash_text_hex(text: str) -> str:
    """Hash a chunk of text and return the lowercase hex digest."""
    return hash_text(text).hex()


def hash_texts(texts: Iterable[str]) -> list[bytes]:
    """Hash several chunks, preserving order."""
    return [hash_text(text) for text in texts]


def verify_text_hash(text: str, expected_hex: str) -> bool:
    """
    Check that text hashes to the expected hex digest.

    Comparison is case-insensitive on the hex input; a malformed
    expected value simply does not match.
    """
    return hash_text_hex(text) == expected_hex.lower()


def to_hex(data: bytes) -> str:
    """
    Convert a digest to its canonical storage form: lowercase hex, no prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        'deadbeef'
    """
    return data.hex()


def digest_from_hex(value: str) -> bytes:
    """
    Decode a 32-byte digest from hex.

    Accepts an optional 0x prefix (the ledger's bytes32 form) and either
    case, but the payload must be exactly 64 hex characters.

    Raises:
        MalformedDigestError: If the value is not a 32-byte hex digest
    """
    if not isinstance(value, str):
        raise MalformedDigestError(
            f"Digest must be a hex string, got {type(value).__name__}"
        )

    payload = value[2:] if value.startswith(("0x", "0X")) else value
    if not _HEX_DIGEST_RE.match(payload):
        raise MalformedDigestError(
            f"Digest must be {DIGEST_SIZE * 2} hex characters, got {len(payload)}",
            value=value,
        )
    return bytes.fromhex(payload)


def normalize_hex_digest(value: str) -> str:
    """Validate a hex digest and return it in canonical lowercase form."""
    return to_hex(digest_from_hex(value))


def to_bytes32(digest: bytes | str) -> str:
    """
    Convert a digest to the 0x-prefixed bytes32 form used by ledgers.

    Args:
        digest: Raw 32-byte digest or a hex digest string

    Returns:
        "0x" + 64 lowercase hex characters
    """
    if isinstance(digest, str):
        digest = digest_from_hex(digest)
    if len(digest) != DIGEST_SIZE:
        raise MalformedDigestError(
            f"Digest must be {DIGEST_SIZE} bytes, got {len(digest)}"
        )
    return "0x" + digest.hex()


def hash_concat(left: bytes, right: bytes) -> bytes:
    """
    Hash the concatenation of two byte sequences: sha256(left + right).

    Callers building Merkle parents must go through
    core.merkle.merkle_tree.merkle_parent, which applies pair ordering.
    """
    return sha256(left + right)


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
