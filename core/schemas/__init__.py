"""
Schemas
File: __init__.py

Purpose: Export the error taxonomy for the schemas module.

The record models live in submodules and are imported from there
(core.schemas.chunks, core.schemas.anchor, core.schemas.verification);
they depend on core.crypto, which itself depends on the errors below,
so they are not re-exported here.
"""

# Error models and exceptions
from .errors import (
    AlreadyTamperedError,
    AnchorFailedError,
    ChunkNotFoundError,
    ChunkSealException,
    DocumentNotFoundError,
    DuplicateRootError,
    EmptyInputError,
    ErrorCodes,
    LedgerUnavailableError,
    MalformedDigestError,
    MalformedProofError,
    NotTamperedError,
    SealError,
)

__all__ = [
    "AlreadyTamperedError",
    "AnchorFailedError",
    "ChunkNotFoundError",
    "ChunkSealException",
    "DocumentNotFoundError",
    "DuplicateRootError",
    "EmptyInputError",
    "ErrorCodes",
    "LedgerUnavailableError",
    "MalformedDigestError",
    "MalformedProofError",
    "NotTamperedError",
    "SealError",
]
