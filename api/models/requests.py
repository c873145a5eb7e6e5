"""
API Request Models

Pydantic models for API request validation.
"""

from typing import Literal

from pydantic import BaseModel, Field

from core.schemas.verification import VerifiableSource


class SealRequest(BaseModel):
    """Request body for POST /documents endpoint."""

    chunks: list[str] = Field(
        ...,
        description="Ordered chunk texts of the document",
    )
    document_id: str | None = Field(
        default=None,
        min_length=1,
        description="Document id (a UUID is generated when omitted)",
    )
    file_name: str = Field(default="", description="Original file name")
    source: str = Field(default="", description="Source description")


class VerifyRequest(BaseModel):
    """Request body for POST /verify endpoint."""

    sources: list[VerifiableSource] = Field(
        ...,
        description="Retrieved chunks with their sealing material",
    )


class DocumentVerifyRequest(BaseModel):
    """Request body for POST /documents/{document_id}/verify endpoint."""

    chunk_indexes: list[int] | None = Field(
        default=None,
        description="Only verify these chunk indexes (all chunks when omitted)",
    )


class TamperRequest(BaseModel):
    """Request body for POST /documents/tamper endpoint."""

    chunk_id: str = Field(..., min_length=1)
    action: Literal["tamper", "restore"] = Field(
        default="tamper",
        description="'tamper' corrupts the chunk, 'restore' puts the original back",
    )
