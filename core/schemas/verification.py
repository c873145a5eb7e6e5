"""
Schemas - Verification
File: verification.py

Purpose: Inputs and results of the sealed-chunk verification protocol.

VerifiableSource is what retrieval hands over for one chunk.
VerificationVerdict is what the protocol reports back. A verdict with
verified=False is a normal, data-driven outcome (tampering detected, proof
broken, root not anchored) and never an exception.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.crypto.hashing import normalize_hex_digest
from core.merkle.proof import InclusionProof
from core.schemas.errors import MalformedDigestError, MalformedProofError


# Layer that rejected a chunk
FailedLayer = Literal["hash", "proof", "anchor"]

# Why the anchor layer rejected a chunk: retry makes sense only for "unreachable"
AnchorFailureKind = Literal["not_found", "unreachable"]


class VerificationStage(str, Enum):
    """States of the verification state machine."""

    HASHING = "hashing"
    PROOF_CHECKING = "proof_checking"
    ANCHOR_CHECKING = "anchor_checking"
    VERIFIED = "verified"
    FAILED = "failed"


class VerifiableSource(BaseModel):
    """
    One retrieved chunk together with its sealing material.

    Hex fields are validated here, at the boundary; a malformed digest or
    proof is a caller bug and is rejected before verification starts.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    content: str = Field(..., description="Chunk text as retrieved")
    content_digest: str = Field(..., description="Stored hex digest of the chunk")
    inclusion_proof: list[str] = Field(
        default_factory=list,
        description="Stored ordered hex sibling digests",
    )
    merkle_root: str = Field(..., description="Stored hex root of the chunk's document")
    anchor_reference: str = Field(
        default="",
        description="Ledger transaction reference recorded at sealing time",
    )
    chunk_id: str | None = Field(default=None)

    @field_validator("content_digest", "merkle_root")
    @classmethod
    def _check_digest(cls, v: str) -> str:
        try:
            return normalize_hex_digest(v)
        except MalformedDigestError as e:
            raise ValueError(e.message) from e

    @field_validator("inclusion_proof")
    @classmethod
    def _check_proof(cls, v: list[str]) -> list[str]:
        try:
            return InclusionProof.from_hex(v).to_hex()
        except MalformedProofError as e:
            raise ValueError(e.message) from e

    @property
    def proof(self) -> InclusionProof:
        return InclusionProof.from_hex(self.inclusion_proof)


class VerificationVerdict(BaseModel):
    """
    Result of running the verification protocol on one chunk.

    Created fresh per call, reported to callers, never persisted as
    trust data.
    """

    model_config = ConfigDict(extra="forbid")

    verified: bool = Field(..., description="Whether every layer passed")
    failed_layer: FailedLayer | None = Field(
        default=None,
        description="First layer that rejected the chunk",
    )
    detail: str = Field(default="", description="Human-readable explanation")
    anchor_failure: AnchorFailureKind | None = Field(
        default=None,
        description="For anchor failures: not_found vs unreachable",
    )
    anchor_timestamp: int | None = Field(
        default=None,
        description="Unix seconds at which the root was anchored",
    )
    anchor_document_id: str | None = Field(
        default=None,
        description="Document id the ledger recorded for the root",
    )
    chunk_id: str | None = Field(default=None)
    stage_trail: list[VerificationStage] = Field(
        default_factory=list,
        description="States visited, ending in verified or failed",
    )
    timings_ms: dict[str, float] = Field(
        default_factory=dict,
        description="Wall time per layer (telemetry only)",
    )

    @property
    def retryable(self) -> bool:
        """Only an unreachable ledger is worth retrying."""
        return self.failed_layer == "anchor" and self.anchor_failure == "unreachable"

    @property
    def final_stage(self) -> VerificationStage:
        return VerificationStage.VERIFIED if self.verified else VerificationStage.FAILED


class BatchVerification(BaseModel):
    """Aggregate over all chunks backing one answer."""

    model_config = ConfigDict(extra="forbid")

    all_verified: bool
    verdicts: list[VerificationVerdict] = Field(default_factory=list)

    @property
    def verified_count(self) -> int:
        return sum(1 for v in self.verdicts if v.verified)

    @property
    def failed_count(self) -> int:
        return len(self.verdicts) - self.verified_count
