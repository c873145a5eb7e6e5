"""
Schemas - Error Taxonomy
File: errors.py

Purpose: Standard error taxonomy across the sealing protocol.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

Verification failures (hash / proof / anchor mismatches) are NOT exceptions;
they are reported as VerificationVerdict data. The exceptions below cover
caller misuse (structural), tamper state conflicts, storage lookups and
ledger transport problems.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the protocol."""

    # Structural errors (caller misuse)
    EMPTY_INPUT = "EMPTY_INPUT"
    MALFORMED_DIGEST = "MALFORMED_DIGEST"
    MALFORMED_PROOF = "MALFORMED_PROOF"

    # Tamper state conflicts
    ALREADY_TAMPERED = "ALREADY_TAMPERED"
    NOT_TAMPERED = "NOT_TAMPERED"

    # Storage
    CHUNK_NOT_FOUND = "CHUNK_NOT_FOUND"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"

    # Ledger / anchoring
    DUPLICATE_ROOT = "DUPLICATE_ROOT"
    LEDGER_UNAVAILABLE = "LEDGER_UNAVAILABLE"
    ANCHOR_FAILED = "ANCHOR_FAILED"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class SealError(BaseModel):
    """
    Base error model for structured error communication.

    Used by the API layer to serialize exceptions without losing the
    machine-readable code or the retry hint.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.MALFORMED_DIGEST],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "ChunkSealException":
        """Convert this error model to a raised exception."""
        return ChunkSealException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class ChunkSealException(Exception):
    """
    Base exception for all sealing protocol errors.

    Carries structured error information and can be converted to a
    SealError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "CHUNKSEAL_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> SealError:
        """Convert this exception to a SealError model."""
        return SealError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class EmptyInputError(ChunkSealException):
    """Raised when a Merkle tree is requested over zero leaves."""

    def __init__(
        self,
        message: str = "Cannot build a Merkle tree from an empty leaf set",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.EMPTY_INPUT,
            details=details,
            retryable=False,
        )


class MalformedDigestError(ChunkSealException):
    """Raised when a digest is not exactly 32 bytes / 64 hex characters."""

    def __init__(
        self,
        message: str,
        value: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if value is not None:
            # Only a prefix; the value may be arbitrary caller input
            full_details["value"] = value[:80]
        super().__init__(
            message=message,
            code=ErrorCodes.MALFORMED_DIGEST,
            details=full_details,
            retryable=False,
        )


class MalformedProofError(ChunkSealException):
    """Raised when an inclusion proof contains a sibling of the wrong shape."""

    def __init__(
        self,
        message: str,
        position: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if position is not None:
            full_details["position"] = position
        super().__init__(
            message=message,
            code=ErrorCodes.MALFORMED_PROOF,
            details=full_details,
            retryable=False,
        )


class AlreadyTamperedError(ChunkSealException):
    """Raised when tampering a chunk that already carries a saved original."""

    def __init__(self, chunk_id: str) -> None:
        super().__init__(
            message=f"Chunk {chunk_id} is already tampered",
            code=ErrorCodes.ALREADY_TAMPERED,
            details={"chunk_id": chunk_id, "is_tampered": True},
            retryable=False,
        )
        self.chunk_id = chunk_id


class NotTamperedError(ChunkSealException):
    """Raised when restoring a chunk that is not tampered."""

    def __init__(self, chunk_id: str) -> None:
        super().__init__(
            message=f"Chunk {chunk_id} is not tampered",
            code=ErrorCodes.NOT_TAMPERED,
            details={"chunk_id": chunk_id, "is_tampered": False},
            retryable=False,
        )
        self.chunk_id = chunk_id


class ChunkNotFoundError(ChunkSealException):
    """Raised when a chunk id is unknown to the store."""

    def __init__(self, chunk_id: str) -> None:
        super().__init__(
            message=f"Chunk not found: {chunk_id}",
            code=ErrorCodes.CHUNK_NOT_FOUND,
            details={"chunk_id": chunk_id},
            retryable=False,
        )
        self.chunk_id = chunk_id


class DocumentNotFoundError(ChunkSealException):
    """Raised when a document id is unknown to the store."""

    def __init__(self, document_id: str) -> None:
        super().__init__(
            message=f"Document not found: {document_id}",
            code=ErrorCodes.DOCUMENT_NOT_FOUND,
            details={"document_id": document_id},
            retryable=False,
        )
        self.document_id = document_id


class DuplicateRootError(ChunkSealException):
    """Raised by a ledger backend when a root is submitted a second time."""

    def __init__(self, root: str) -> None:
        super().__init__(
            message=f"Root already exists: {root}",
            code=ErrorCodes.DUPLICATE_ROOT,
            details={"root": root},
            retryable=False,
        )
        self.root = root


class LedgerUnavailableError(ChunkSealException):
    """Raised when the ledger cannot be reached or times out."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.LEDGER_UNAVAILABLE,
            details=details,
            retryable=True,
        )


class AnchorFailedError(ChunkSealException):
    """Raised when anchoring gives up after exhausting its retries."""

    def __init__(
        self,
        message: str,
        root: str | None = None,
        attempts: int | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if root is not None:
            details["root"] = root
        if attempts is not None:
            details["attempts"] = attempts
        super().__init__(
            message=message,
            code=ErrorCodes.ANCHOR_FAILED,
            details=details,
            retryable=True,
        )
