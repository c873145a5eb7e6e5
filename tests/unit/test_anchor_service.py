"""
Anchor Service Unit Tests
Tests for core/anchor/service.py

1. Idempotent anchoring - a root is published at most once
2. Retries - transient failures retried with a lookup before each retry
3. Lost races - DuplicateRootError becomes an earlier-publication receipt
4. Lookups - unknown roots are not errors; outages surface after retries
"""
import pytest

from core.anchor.local import LocalLedger
from core.anchor.service import AnchorService
from core.crypto.hashing import hash_text_hex
from core.schemas.errors import (
    AnchorFailedError,
    DuplicateRootError,
    LedgerUnavailableError,
    MalformedDigestError,
)
from fixtures.ledger_fakes import FlakyLedger


ROOT = hash_text_hex("document root")


def make_service(ledger, max_retries=3, sleeps=None):
    sleeps = sleeps if sleeps is not None else []
    return AnchorService(
        ledger,
        max_retries=max_retries,
        retry_delay=0.1,
        sleep=sleeps.append,
    )


class TestAnchor:
    """Tests for AnchorService.anchor."""

    def test_first_anchor_publishes(self, anchor_service, ledger):
        receipt = anchor_service.anchor(ROOT, "doc-1")
        assert receipt.already_anchored is False
        assert receipt.tx_ref == ledger.find_anchor_tx(ROOT)
        assert receipt.document_id == "doc-1"
        assert ledger.root_count() == 1

    def test_second_anchor_returns_original_publication(self, anchor_service, ledger):
        first = anchor_service.anchor(ROOT, "doc-1")
        second = anchor_service.anchor(ROOT, "doc-1")
        assert second.already_anchored is True
        assert second.tx_ref == first.tx_ref
        assert ledger.root_count() == 1

    def test_reanchor_under_other_document_keeps_ledger_document(self, anchor_service):
        anchor_service.anchor(ROOT, "doc-1")
        receipt = anchor_service.anchor(ROOT, "doc-2")
        assert receipt.already_anchored
        assert receipt.document_id == "doc-1"

    def test_accepts_prefixed_root(self, anchor_service, ledger):
        receipt = anchor_service.anchor("0x" + ROOT, "doc-1")
        assert receipt.root == ROOT
        assert ledger.verify_root(ROOT).exists

    def test_malformed_root(self, anchor_service):
        with pytest.raises(MalformedDigestError):
            anchor_service.anchor("1234", "doc-1")

    def test_transient_submit_failure_is_retried(self):
        ledger = FlakyLedger(submit_failures=2)
        sleeps = []
        receipt = make_service(ledger, sleeps=sleeps).anchor(ROOT, "doc-1")
        assert receipt.already_anchored is False
        assert ledger.submit_calls == 3
        assert sleeps == [0.1, 0.2]
        assert ledger.root_count() == 1

    def test_landed_write_is_not_resubmitted(self):
        """A failed call whose write landed is found by the pre-retry lookup."""
        ledger = FlakyLedger(submit_failures=1, land_on_failure=True)
        receipt = make_service(ledger).anchor(ROOT, "doc-1")
        assert receipt.already_anchored is True
        assert receipt.tx_ref == ledger.find_anchor_tx(ROOT)
        assert ledger.submit_calls == 1
        assert ledger.root_count() == 1

    def test_gives_up_after_max_retries(self):
        ledger = FlakyLedger(submit_failures=10)
        with pytest.raises(AnchorFailedError) as exc_info:
            make_service(ledger, max_retries=2).anchor(ROOT, "doc-1")
        assert ledger.submit_calls == 3
        assert exc_info.value.details["attempts"] == 3
        assert exc_info.value.retryable

    def test_lost_race_returns_prior_receipt(self):
        """Another writer registers the root between lookup and submit."""
        inner = LocalLedger()

        class RacingLedger(FlakyLedger):
            def submit_root(self, root, document_id):
                self.inner.submit_root(root, "doc-winner")
                raise DuplicateRootError(root)

        ledger = RacingLedger(inner)
        receipt = make_service(ledger).anchor(ROOT, "doc-loser")
        assert receipt.already_anchored
        assert receipt.document_id == "doc-winner"
        assert receipt.tx_ref == inner.find_anchor_tx(ROOT)

    def test_concurrent_anchor_registers_once(self, anchor_service, ledger):
        import concurrent.futures

        with concurrent.futures.ThreadPoolExecutor(max_workers=8) as pool:
            receipts = list(pool.map(lambda _: anchor_service.anchor(ROOT, "doc-1"), range(8)))

        assert ledger.root_count() == 1
        assert len({r.tx_ref for r in receipts}) == 1
        assert sum(1 for r in receipts if not r.already_anchored) == 1


class TestLookup:
    """Tests for AnchorService.lookup."""

    def test_unknown_root(self, anchor_service):
        lookup = anchor_service.lookup(ROOT)
        assert lookup.exists is False
        assert lookup.timestamp == 0

    def test_known_root(self, anchor_service):
        anchor_service.anchor(ROOT, "doc-1")
        lookup = anchor_service.lookup(ROOT)
        assert lookup.exists
        assert lookup.document_id == "doc-1"

    def test_transient_lookup_failure_retried(self):
        ledger = FlakyLedger(lookup_failures=2)
        lookup = make_service(ledger).lookup(ROOT)
        assert lookup.exists is False
        assert ledger.lookup_calls == 3

    def test_persistent_outage_raises(self):
        ledger = FlakyLedger(lookup_failures=100)
        with pytest.raises(LedgerUnavailableError):
            make_service(ledger, max_retries=1).lookup(ROOT)
        assert ledger.lookup_calls == 2

    def test_lookup_is_not_cached(self):
        ledger = FlakyLedger()
        service = make_service(ledger)
        assert not service.lookup(ROOT).exists
        ledger.inner.submit_root(ROOT, "doc-1")
        assert service.lookup(ROOT).exists


class TestExplorerLink:
    """Tests for explorer_link."""

    def test_link(self, ledger):
        service = AnchorService(ledger, explorer_url="https://explorer.example/tx/")
        assert service.explorer_link("0xabc") == "https://explorer.example/tx/0xabc"

    def test_no_explorer(self, anchor_service):
        assert anchor_service.explorer_link("0xabc") is None
