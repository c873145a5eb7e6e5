"""
Local Ledger

In-process document registry with the same rules as the on-chain
contract:
- a root can be registered once; a second registration is rejected
- registrations are kept in an append-only history
- each registration records document id, timestamp and registering account

Used by tests, by the CLI for offline demos and as a stand-in ledger in
development. With a `path`, state is persisted to a JSON file after every
registration.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from core.anchor.base import LedgerBackend
from core.crypto.hashing import normalize_hex_digest, sha256
from core.schemas.anchor import AnchorLookup, AnchorRecord
from core.schemas.errors import DuplicateRootError


logger = logging.getLogger(__name__)


DEFAULT_ACCOUNT = "local-admin"


class LocalLedger(LedgerBackend):
    """
    Document registry held in memory, optionally backed by a JSON file.

    Usage:
        ledger = LocalLedger()
        tx = ledger.submit_root(root_hex, "doc-1")
        assert ledger.verify_root(root_hex).exists
    """

    name = "local"

    def __init__(
        self,
        *,
        path: str | Path | None = None,
        account: str = DEFAULT_ACCOUNT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.path = Path(path) if path else None
        self.account = account
        self._clock = clock
        self._lock = threading.Lock()
        self._records: dict[str, AnchorRecord] = {}
        self._history: list[str] = []

        if self.path and self.path.exists():
            self._load(self.path)

    def submit_root(self, root: str, document_id: str) -> str:
        root = normalize_hex_digest(root)
        with self._lock:
            if root in self._records:
                raise DuplicateRootError(root)

            sequence = len(self._history)
            tx_ref = "0x" + sha256(
                f"{root}|{document_id}|{sequence}".encode("utf-8")
            ).hex()
            record = AnchorRecord(
                root=root,
                document_id=document_id,
                timestamp=int(self._clock()),
                registered_by=self.account,
                tx_ref=tx_ref,
            )
            records = {**self._records, root: record}
            history = [*self._history, root]
            # Memory changes only after the file write succeeded
            if self.path:
                self._save(self.path, records, history)
            self._records = records
            self._history = history

        logger.info(f"Registered root {root[:16]}... for document {document_id} ({tx_ref[:18]}...)")
        return tx_ref

    def verify_root(self, root: str) -> AnchorLookup:
        root = normalize_hex_digest(root)
        with self._lock:
            record = self._records.get(root)
        if record is None:
            return AnchorLookup.missing()
        return record.to_lookup()

    def find_anchor_tx(self, root: str) -> Optional[str]:
        record = self.get_root_details(root)
        return record.tx_ref if record else None

    def get_root_details(self, root: str) -> Optional[AnchorRecord]:
        root = normalize_hex_digest(root)
        with self._lock:
            return self._records.get(root)

    def root_count(self) -> int:
        with self._lock:
            return len(self._history)

    def root_history(self) -> list[str]:
        """Registered roots in registration order."""
        with self._lock:
            return list(self._history)

    def _load(self, path: Path) -> None:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        for raw in data.get("records", []):
            record = AnchorRecord(**raw)
            self._records[record.root] = record
        self._history = list(data.get("history", []))
        logger.debug(f"Loaded {len(self._history)} roots from {path}")

    @staticmethod
    def _save(path: Path, records: dict[str, AnchorRecord], history: list[str]) -> None:
        data = {
            "records": [r.model_dump(mode="json") for r in records.values()],
            "history": history,
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".ledger-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp, path)
        finally:
            if os.path.exists(tmp):
                os.unlink(tmp)


__all__ = [
    "DEFAULT_ACCOUNT",
    "LocalLedger",
]
