"""
Anchor Service

Adapts a LedgerBackend into the AnchorClient the protocol consumes.

Anchoring is at-most-effectively-once:
1. Look the root up first. If it is already published, return a receipt
   for that earlier publication (re-ingesting identical content is not
   an error).
2. Otherwise submit it. A transport failure after submission is
   ambiguous (the write may have landed), so before every retry the root
   is looked up again and an existing publication ends the loop.
3. A DuplicateRootError from the ledger (lost race, or a write that did
   land) is converted into the earlier-publication receipt.

Lookups retry transient failures a bounded number of times and then
re-raise LedgerUnavailableError. Nothing is cached between calls.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TypeVar

from core.anchor.base import LedgerBackend
from core.crypto.hashing import normalize_hex_digest
from core.schemas.anchor import AnchorLookup, AnchorReceipt
from core.schemas.errors import (
    AnchorFailedError,
    DuplicateRootError,
    LedgerUnavailableError,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")


class AnchorService:
    """
    Idempotent anchoring and retried lookups over a ledger backend.

    Usage:
        service = AnchorService(LocalLedger())
        receipt = service.anchor(tree.root_hex, document_id)
        assert service.lookup(tree.root_hex).exists
    """

    def __init__(
        self,
        ledger: LedgerBackend,
        *,
        max_retries: int = 3,
        retry_delay: float = 0.5,
        explorer_url: str = "",
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Args:
            ledger: Raw ledger backend
            max_retries: Extra attempts after the first for transient failures
            retry_delay: Base delay in seconds; doubles each attempt
            explorer_url: Block explorer tx URL prefix (optional)
            sleep: Sleep function (injectable for tests)
        """
        self.ledger = ledger
        self.max_retries = max(0, max_retries)
        self.retry_delay = retry_delay
        self.explorer_url = explorer_url.rstrip("/")
        self._sleep = sleep

    def _backoff(self, attempt: int) -> None:
        if self.retry_delay > 0:
            self._sleep(self.retry_delay * (2 ** (attempt - 1)))

    def _with_retries(self, operation: str, fn: Callable[[], T]) -> T:
        attempt = 0
        while True:
            attempt += 1
            try:
                return fn()
            except LedgerUnavailableError as e:
                if attempt > self.max_retries:
                    logger.warning(f"Ledger {operation} failed after {attempt} attempts: {e.message}")
                    raise
                logger.warning(f"Ledger {operation} attempt {attempt} failed, retrying: {e.message}")
                self._backoff(attempt)

    def lookup(self, root: str) -> AnchorLookup:
        """
        Ask the ledger whether `root` is published.

        Raises:
            MalformedDigestError: If root is not a hex digest
            LedgerUnavailableError: If the ledger stays unreachable
        """
        root = normalize_hex_digest(root)
        return self._with_retries("lookup", lambda: self.ledger.verify_root(root))

    def anchor(self, root: str, document_id: str) -> AnchorReceipt:
        """
        Publish `root` for `document_id`, once.

        Returns:
            Receipt; already_anchored=True if the root was published earlier

        Raises:
            MalformedDigestError: If root is not a hex digest
            AnchorFailedError: If submission keeps failing
            LedgerUnavailableError: If the pre-submission lookup keeps failing
        """
        root = normalize_hex_digest(root)

        existing = self.lookup(root)
        if existing.exists:
            logger.info(f"Root {root[:16]}... already anchored, reusing original publication")
            return self._prior_receipt(root, existing, document_id)

        attempt = 0
        while True:
            attempt += 1
            try:
                tx_ref = self.ledger.submit_root(root, document_id)
                logger.info(f"Anchored root {root[:16]}... for document {document_id}")
                return AnchorReceipt(
                    root=root,
                    document_id=document_id,
                    tx_ref=tx_ref,
                    already_anchored=False,
                )
            except DuplicateRootError:
                logger.info(f"Ledger reports root {root[:16]}... already registered")
                return self._prior_receipt(root, self.lookup(root), document_id)
            except LedgerUnavailableError as e:
                if attempt > self.max_retries:
                    raise AnchorFailedError(
                        f"Anchoring failed after {attempt} attempts: {e.message}",
                        root=root,
                        attempts=attempt,
                    ) from e
                logger.warning(f"Anchor attempt {attempt} for {root[:16]}... failed: {e.message}")
                self._backoff(attempt)

                # The failed write may have landed; check before writing again
                try:
                    landed = self.ledger.verify_root(root)
                except LedgerUnavailableError:
                    continue
                if landed.exists:
                    logger.info(f"Root {root[:16]}... landed despite the failed call")
                    return self._prior_receipt(root, landed, document_id)

    def _prior_receipt(
        self,
        root: str,
        lookup: AnchorLookup,
        requested_document_id: str,
    ) -> AnchorReceipt:
        tx_ref = self._with_retries("tx query", lambda: self.ledger.find_anchor_tx(root))
        if not tx_ref:
            logger.warning(f"Root {root[:16]}... is anchored but its original transaction was not found")
        if lookup.document_id and lookup.document_id != requested_document_id:
            logger.info(
                f"Root {root[:16]}... was anchored for document {lookup.document_id}, "
                f"not {requested_document_id}"
            )
        return AnchorReceipt(
            root=root,
            document_id=lookup.document_id or requested_document_id,
            tx_ref=tx_ref or "",
            already_anchored=True,
        )

    def explorer_link(self, tx_ref: str) -> Optional[str]:
        """Block explorer URL for a transaction, if an explorer is configured."""
        if not self.explorer_url or not tx_ref:
            return None
        return f"{self.explorer_url}/{tx_ref}"


__all__ = [
    "AnchorService",
]
