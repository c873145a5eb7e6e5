"""
Ledger Anchoring

Publishes Merkle roots to an immutable ledger and answers existence
queries.

This module provides:
- AnchorClient: Protocol consumed by sealing and verification
- LedgerBackend: Raw ledger interface (rejects duplicate roots)
- LocalLedger: In-process registry, optionally persisted to JSON
- HttpLedger: REST gateway client
- AnchorService: Idempotent anchor() and retried lookup() over a backend
"""
from .base import AnchorClient, LedgerBackend
from .local import LocalLedger
from .http_ledger import HttpLedger
from .service import AnchorService

__all__ = [
    "AnchorClient",
    "LedgerBackend",
    "LocalLedger",
    "HttpLedger",
    "AnchorService",
]
