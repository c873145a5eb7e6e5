"""
Merkle - Inclusion Proof Value Object

An InclusionProof is the ordered list of sibling digests met while walking
from one leaf up to the root. Order is significant (bottom to top) and is
preserved exactly through hex serialization.

Proofs are validated on construction: a sibling of the wrong size is a
structural error in the calling code, so it is rejected here instead of
silently producing a mismatching root later.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

from core.crypto.hashing import DIGEST_SIZE, digest_from_hex, to_hex
from core.schemas.errors import MalformedDigestError, MalformedProofError


@dataclass(frozen=True)
class InclusionProof:
    """
    Ordered sibling digests proving one leaf's membership under a root.

    Attributes:
        siblings: 32-byte sibling digests, bottom-up
    """
    siblings: tuple[bytes, ...] = ()

    def __post_init__(self) -> None:
        # Accept any iterable of bytes but store an immutable tuple
        siblings = tuple(self.siblings)
        for position, sibling in enumerate(siblings):
            if not isinstance(sibling, (bytes, bytearray)):
                raise MalformedProofError(
                    f"Proof sibling {position} must be bytes, got {type(sibling).__name__}",
                    position=position,
                )
            if len(sibling) != DIGEST_SIZE:
                raise MalformedProofError(
                    f"Proof sibling {position} must be {DIGEST_SIZE} bytes, got {len(sibling)}",
                    position=position,
                )
        object.__setattr__(self, "siblings", tuple(bytes(s) for s in siblings))

    @classmethod
    def from_hex(cls, values: Sequence[str]) -> "InclusionProof":
        """
        Parse a proof from its persisted form (list of hex digests).

        Raises:
            MalformedProofError: If any entry is not a 64-char hex digest
        """
        if isinstance(values, (str, bytes)):
            raise MalformedProofError("Proof must be a list of hex digests, not a single string")

        siblings: list[bytes] = []
        for position, value in enumerate(values):
            try:
                siblings.append(digest_from_hex(value))
            except MalformedDigestError as e:
                raise MalformedProofError(
                    f"Proof sibling {position} is not a valid digest: {e.message}",
                    position=position,
                ) from e
        return cls(tuple(siblings))

    @classmethod
    def of(cls, siblings: Iterable[bytes]) -> "InclusionProof":
        """Build a proof from raw sibling digests."""
        return cls(tuple(siblings))

    def to_hex(self) -> list[str]:
        """Serialize to the persisted form: ordered lowercase hex strings."""
        return [to_hex(s) for s in self.siblings]

    def __len__(self) -> int:
        return len(self.siblings)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.siblings)

    def __getitem__(self, position: int) -> bytes:
        return self.siblings[position]


__all__ = [
    "InclusionProof",
]
