"""
API Response Models

Pydantic models for API response serialization.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from core.schemas.verification import VerificationVerdict


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "chunkseal-api"
    version: str = "v1"
    ledger: str = Field(default="", description="Configured ledger backend")


class ChunkInfo(BaseModel):
    """One stored chunk."""

    id: str
    index: int
    content: str
    content_digest: str
    inclusion_proof: list[str] = Field(default_factory=list)
    is_tampered: bool = False


class SealResponse(BaseModel):
    """Response for POST /documents endpoint."""

    ok: bool = True
    document_id: str
    merkle_root: str
    chunk_count: int
    tree_depth: int
    tx_ref: str = Field(default="", description="Ledger transaction of the root's publication")
    already_anchored: bool = Field(
        default=False,
        description="True if the root had been published earlier",
    )
    explorer_link: str | None = None
    chunks: list[ChunkInfo] = Field(default_factory=list)


class DocumentResponse(BaseModel):
    """Response for GET /documents/{document_id} endpoint."""

    ok: bool = True
    document_id: str
    merkle_root: str
    anchor_tx_ref: str
    chunk_count: int
    file_name: str = ""
    source: str = ""
    created_at: datetime
    chunks: list[ChunkInfo] = Field(default_factory=list)


class VerifyResponse(BaseModel):
    """Response for the verification endpoints."""

    ok: bool = Field(..., description="Whether every chunk verified")
    verified_count: int = 0
    failed_count: int = 0
    verdicts: list[VerificationVerdict] = Field(default_factory=list)


class TamperResponse(BaseModel):
    """Response for POST /documents/tamper endpoint."""

    ok: bool = True
    chunk_id: str
    action: str
    is_tampered: bool
    tampered_at: datetime | None = None
    content_preview: str = ""


class ChunkTamperStatus(BaseModel):
    chunk_id: str
    index: int
    is_tampered: bool
    tampered_at: datetime | None = None
    content_preview: str = ""


class TamperStatusResponse(BaseModel):
    """Response for GET /documents/tamper endpoint."""

    ok: bool = True
    document_id: str
    tampered_count: int = 0
    chunks: list[ChunkTamperStatus] = Field(default_factory=list)


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)
    retryable: bool = Field(default=False, description="Whether retrying may succeed")


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail = Field(..., description="Error details")
