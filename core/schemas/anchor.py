"""
Schemas - Ledger Anchoring
File: anchor.py

Purpose: Records exchanged with the external ledger that publishes
Merkle roots. The ledger owns these records; the protocol only reads
(lookup) and writes (anchor) them.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.crypto.hashing import normalize_hex_digest
from core.schemas.errors import MalformedDigestError


def _root_hex(v: str) -> str:
    try:
        return normalize_hex_digest(v)
    except MalformedDigestError as e:
        raise ValueError(e.message) from e


class AnchorLookup(BaseModel):
    """
    Result of asking the ledger whether a root exists.

    A root that was never anchored yields exists=False, timestamp=0,
    document_id="" (the registry contract's zero values).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    exists: bool
    document_id: str = ""
    timestamp: int = Field(default=0, ge=0, description="Unix seconds of publication")

    @classmethod
    def missing(cls) -> "AnchorLookup":
        return cls(exists=False)


class AnchorRecord(BaseModel):
    """An immutable publication of one root on the ledger."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    root: str = Field(..., description="Lowercase hex Merkle root")
    document_id: str
    timestamp: int = Field(..., ge=0)
    registered_by: str = Field(default="", description="Account that published the root")
    tx_ref: str = Field(default="", description="Transaction reference")

    @field_validator("root")
    @classmethod
    def _check_root(cls, v: str) -> str:
        return _root_hex(v)

    def to_lookup(self) -> AnchorLookup:
        return AnchorLookup(
            exists=True,
            document_id=self.document_id,
            timestamp=self.timestamp,
        )


class AnchorReceipt(BaseModel):
    """
    What anchor() returns to the caller.

    already_anchored=True means the root was published earlier and tx_ref
    points at that earlier publication (idempotent re-ingestion).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    root: str
    document_id: str
    tx_ref: str = ""
    already_anchored: bool = False

    @field_validator("root")
    @classmethod
    def _check_root(cls, v: str) -> str:
        return _root_hex(v)
