"""
Schemas - Sealed Chunks and Documents
File: chunks.py

Purpose: Persisted records of sealed content.

A SealedChunk's digest and proof are fixed when it is sealed and are never
recomputed. Tamper status is an explicit tagged state rather than ad hoc
metadata keys:

    OriginalState                         (content is what was sealed)
    TamperedState(original_content, ..)  (content was mutated; original saved)
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.crypto.hashing import normalize_hex_digest
from core.merkle.proof import InclusionProof
from core.schemas.errors import MalformedDigestError, MalformedProofError


def _validate_hex_digest(value: str) -> str:
    try:
        return normalize_hex_digest(value)
    except MalformedDigestError as e:
        raise ValueError(e.message) from e


def _validate_hex_proof(values: list[str]) -> list[str]:
    try:
        return InclusionProof.from_hex(values).to_hex()
    except MalformedProofError as e:
        raise ValueError(e.message) from e


# =============================================================================
# Tamper State (tagged union)
# =============================================================================

class OriginalState(BaseModel):
    """Chunk content is exactly what was sealed."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    status: Literal["original"] = "original"


class TamperedState(BaseModel):
    """Chunk content was replaced; the sealed original is kept for restore."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    status: Literal["tampered"] = "tampered"
    original_content: str = Field(
        ...,
        description="Content as it was before tampering",
    )
    tampered_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the chunk was tampered",
    )


ChunkState = Annotated[
    Union[OriginalState, TamperedState],
    Field(discriminator="status"),
]


# =============================================================================
# Sealed Chunk
# =============================================================================

class SealedChunk(BaseModel):
    """
    One sealed unit of document text.

    Invariants:
    - content_digest and inclusion_proof are set at sealing time only
    - state is OriginalState unless the tamper simulator mutated content
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., min_length=1, description="Chunk identifier")
    document_id: str = Field(..., min_length=1, description="Owning document")
    index: int = Field(..., ge=0, description="Position of the chunk in its document")
    content: str = Field(..., description="Current chunk text")
    content_digest: str = Field(
        ...,
        description="Lowercase hex SHA-256 of the sealed (trimmed) content",
    )
    inclusion_proof: list[str] = Field(
        default_factory=list,
        description="Ordered sibling digests (hex) from leaf to root",
    )
    state: ChunkState = Field(default_factory=OriginalState)

    @field_validator("content_digest")
    @classmethod
    def _check_digest(cls, v: str) -> str:
        return _validate_hex_digest(v)

    @field_validator("inclusion_proof")
    @classmethod
    def _check_proof(cls, v: list[str]) -> list[str]:
        return _validate_hex_proof(v)

    @property
    def is_tampered(self) -> bool:
        return isinstance(self.state, TamperedState)

    @property
    def original_content(self) -> str | None:
        """Saved original text, present only while tampered."""
        if isinstance(self.state, TamperedState):
            return self.state.original_content
        return None

    @property
    def tampered_at(self) -> datetime | None:
        if isinstance(self.state, TamperedState):
            return self.state.tampered_at
        return None

    def to_storage_record(self) -> dict[str, Any]:
        """
        Flatten to the storage layout:
        {documentId, index, content, contentDigestHex, inclusionProof,
         metadataMarkers: {originalContent?, tamperedAtTimestamp?}}
        """
        markers: dict[str, Any] = {}
        if isinstance(self.state, TamperedState):
            markers["originalContent"] = self.state.original_content
            markers["tamperedAtTimestamp"] = int(self.state.tampered_at.timestamp())
        return {
            "id": self.id,
            "documentId": self.document_id,
            "index": self.index,
            "content": self.content,
            "contentDigestHex": self.content_digest,
            "inclusionProof": list(self.inclusion_proof),
            "metadataMarkers": markers,
        }

    @classmethod
    def from_storage_record(cls, record: dict[str, Any]) -> "SealedChunk":
        """Inverse of to_storage_record."""
        markers = record.get("metadataMarkers") or {}
        state: OriginalState | TamperedState
        if markers.get("originalContent") is not None:
            ts = markers.get("tamperedAtTimestamp")
            state = TamperedState(
                original_content=markers["originalContent"],
                tampered_at=(
                    datetime.fromtimestamp(ts, tz=timezone.utc)
                    if ts is not None
                    else datetime.now(timezone.utc)
                ),
            )
        else:
            state = OriginalState()
        return cls(
            id=record["id"],
            document_id=record["documentId"],
            index=record["index"],
            content=record["content"],
            content_digest=record["contentDigestHex"],
            inclusion_proof=record.get("inclusionProof", []),
            state=state,
        )


# =============================================================================
# Sealed Document
# =============================================================================

class SealedDocument(BaseModel):
    """Per-document record: the Merkle root and where it was anchored."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    document_id: str = Field(..., min_length=1)
    merkle_root: str = Field(..., description="Lowercase hex Merkle root")
    anchor_tx_ref: str = Field(
        default="",
        description="Ledger transaction reference of the root's publication",
    )
    chunk_count: int = Field(..., ge=1)
    file_name: str = Field(default="")
    source: str = Field(default="")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    @field_validator("merkle_root")
    @classmethod
    def _check_root(cls, v: str) -> str:
        return _validate_hex_digest(v)
