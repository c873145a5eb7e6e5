"""
Service Wiring

Builds the store, ledger and protocol services from a RuntimeConfig.
Shared by the CLI and the HTTP API.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from core.anchor import AnchorService, HttpLedger, LedgerBackend, LocalLedger
from core.config.runtime import RuntimeConfig
from core.sealing import DocumentSealer
from core.storage import ChunkStore, InMemoryChunkStore, JsonChunkStore
from core.tamper import TamperSimulator
from core.verification import SealedChunkVerifier


logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Wired protocol services."""
    config: RuntimeConfig
    store: ChunkStore
    ledger: LedgerBackend
    anchor: AnchorService
    sealer: DocumentSealer
    verifier: SealedChunkVerifier
    tamper: TamperSimulator

    def close(self) -> None:
        self.verifier.close()
        if isinstance(self.ledger, HttpLedger):
            self.ledger.close()


def build_store(config: RuntimeConfig) -> ChunkStore:
    if config.storage.backend == "json":
        if not config.storage.path:
            raise ValueError("storage.path is required for the json storage backend")
        return JsonChunkStore(config.storage.path)
    return InMemoryChunkStore()


def build_ledger(config: RuntimeConfig) -> LedgerBackend:
    ledger_config = config.ledger
    if ledger_config.backend == "http":
        if not ledger_config.base_url:
            raise ValueError("ledger.base_url is required for the http ledger backend")
        return HttpLedger(
            ledger_config.base_url,
            timeout=ledger_config.timeout,
            api_key=ledger_config.api_key,
        )
    return LocalLedger(path=ledger_config.path, account=ledger_config.account)


def build_services(config: RuntimeConfig) -> Services:
    """Create every service from `config`."""
    store = build_store(config)
    ledger = build_ledger(config)
    anchor = AnchorService(
        ledger,
        max_retries=config.ledger.max_retries,
        retry_delay=config.ledger.retry_delay,
        explorer_url=config.ledger.explorer_url,
    )
    verifier = SealedChunkVerifier(
        anchor,
        anchor_timeout_s=config.verification.anchor_timeout_s,
        max_workers=config.verification.max_workers,
    )
    logger.debug(
        f"Services ready: storage={config.storage.backend}, ledger={ledger.name}"
    )
    return Services(
        config=config,
        store=store,
        ledger=ledger,
        anchor=anchor,
        sealer=DocumentSealer(store, anchor),
        verifier=verifier,
        tamper=TamperSimulator(store),
    )


__all__ = [
    "Services",
    "build_ledger",
    "build_services",
    "build_store",
]
