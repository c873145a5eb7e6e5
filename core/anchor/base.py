"""
Anchor Interfaces

Two seams separate the protocol from the ledger:

- LedgerBackend: the raw ledger. Mirrors the on-chain registry contract,
  including its rejection of a root that is already registered.
- AnchorClient: what the sealing and verification code consumes. anchor()
  is idempotent (an existing root yields a receipt for the earlier
  publication) and lookup() never errors for an unknown root.

AnchorService (core.anchor.service) adapts a LedgerBackend into an
AnchorClient.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Protocol, runtime_checkable

from core.schemas.anchor import AnchorLookup, AnchorReceipt, AnchorRecord


@runtime_checkable
class AnchorClient(Protocol):
    """Capability surface the protocol requires from the ledger side."""

    def anchor(self, root: str, document_id: str) -> AnchorReceipt:
        """
        Publish a root once.

        If the root is already published, return a receipt referencing
        that publication instead of failing.
        """
        ...

    def lookup(self, root: str) -> AnchorLookup:
        """
        Report whether a root is published.

        Safe for roots that were never anchored (exists=False).

        Raises:
            LedgerUnavailableError: If the ledger cannot be reached
        """
        ...


class LedgerBackend(ABC):
    """
    Abstract base class for ledger backends.

    Roots are passed as lowercase 64-char hex (no 0x prefix).
    Transport problems surface as LedgerUnavailableError.
    """

    name: str = "base"

    @abstractmethod
    def submit_root(self, root: str, document_id: str) -> str:
        """
        Register a new root.

        Returns:
            Transaction reference of the publication

        Raises:
            DuplicateRootError: If the root is already registered
            LedgerUnavailableError: On transport failure (outcome unknown)
        """

    @abstractmethod
    def verify_root(self, root: str) -> AnchorLookup:
        """Existence query; exists=False for unknown roots."""

    @abstractmethod
    def find_anchor_tx(self, root: str) -> Optional[str]:
        """Transaction reference of the root's original publication, if known."""

    @abstractmethod
    def get_root_details(self, root: str) -> Optional[AnchorRecord]:
        """Full record of a registered root, or None."""

    @abstractmethod
    def root_count(self) -> int:
        """Number of registered roots."""


__all__ = [
    "AnchorClient",
    "LedgerBackend",
]
