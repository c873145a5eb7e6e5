"""
HTTP Ledger Unit Tests
Tests for core/anchor/http_ledger.py and core/http/client.py

The gateway is replaced by a scripted client; no network access.
"""
import json

import pytest
import requests

from core.anchor.http_ledger import HttpLedger
from core.anchor.service import AnchorService
from core.crypto.hashing import hash_text_hex
from core.http import HttpClient, HttpError, HttpResponse, HttpTimeoutError
from core.schemas.errors import DuplicateRootError, LedgerUnavailableError
from core.schemas.verification import VerifiableSource
from core.verification import SealedChunkVerifier


ROOT = hash_text_hex("gateway root")
BASE = "https://ledger.example"


def response(status_code: int, body=None) -> HttpResponse:
    content = b"" if body is None else json.dumps(body).encode()
    return HttpResponse(status_code=status_code, content=content)


class ScriptedClient:
    """Returns queued responses (or raises queued exceptions) per (method, url)."""

    def __init__(self, script):
        self.script = {key: list(values) for key, values in script.items()}
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        outcome = self.script[(method, url)].pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self):
        pass


def root_url(*suffix):
    return "/".join([BASE, "roots", "0x" + ROOT, *suffix])


class TestSubmitRoot:
    """Tests for HttpLedger.submit_root."""

    def test_posts_bytes32_root(self):
        client = ScriptedClient({("POST", f"{BASE}/roots"): [response(200, {"txRef": "0xtx"})]})
        ledger = HttpLedger(BASE, client=client)
        assert ledger.submit_root(ROOT, "doc-1") == "0xtx"
        _, _, kwargs = client.calls[0]
        assert kwargs["json"] == {"merkleRoot": "0x" + ROOT, "documentId": "doc-1"}

    def test_conflict_is_duplicate(self):
        client = ScriptedClient({("POST", f"{BASE}/roots"): [response(409, {"error": "Root already exists"})]})
        with pytest.raises(DuplicateRootError):
            HttpLedger(BASE, client=client).submit_root(ROOT, "doc-1")

    def test_server_error_is_unavailable(self):
        client = ScriptedClient({("POST", f"{BASE}/roots"): [response(502)]})
        with pytest.raises(LedgerUnavailableError) as exc_info:
            HttpLedger(BASE, client=client).submit_root(ROOT, "doc-1")
        assert exc_info.value.retryable

    def test_transport_error_is_unavailable(self):
        client = ScriptedClient({("POST", f"{BASE}/roots"): [HttpTimeoutError("timed out")]})
        with pytest.raises(LedgerUnavailableError):
            HttpLedger(BASE, client=client).submit_root(ROOT, "doc-1")


class TestQueries:
    """Tests for the read-side gateway calls."""

    def test_verify_root_exists(self):
        client = ScriptedClient({("GET", root_url()): [
            response(200, {"exists": True, "timestamp": 1700000000, "documentId": "doc-1"}),
        ]})
        lookup = HttpLedger(BASE, client=client).verify_root(ROOT)
        assert lookup.exists
        assert lookup.document_id == "doc-1"
        assert lookup.timestamp == 1700000000

    def test_verify_root_zero_values(self):
        client = ScriptedClient({("GET", root_url()): [
            response(200, {"exists": False, "timestamp": 0, "documentId": ""}),
        ]})
        assert HttpLedger(BASE, client=client).verify_root(ROOT).exists is False

    def test_verify_root_404_is_missing(self):
        client = ScriptedClient({("GET", root_url()): [response(404)]})
        assert HttpLedger(BASE, client=client).verify_root(ROOT).exists is False

    def test_invalid_json_is_unavailable(self):
        client = ScriptedClient({("GET", root_url()): [
            HttpResponse(status_code=200, content=b"<html>"),
        ]})
        with pytest.raises(LedgerUnavailableError):
            HttpLedger(BASE, client=client).verify_root(ROOT)

    def test_find_anchor_tx(self):
        client = ScriptedClient({
            ("GET", root_url("tx")): [response(200, {"txRef": "0xabc"}), response(404)],
        })
        ledger = HttpLedger(BASE, client=client)
        assert ledger.find_anchor_tx(ROOT) == "0xabc"
        assert ledger.find_anchor_tx(ROOT) is None

    def test_get_root_details(self):
        client = ScriptedClient({("GET", root_url("details")): [response(200, {
            "merkleRoot": "0x" + ROOT,
            "timestamp": 5,
            "documentId": "doc-1",
            "registeredBy": "0xadmin",
            "txRef": "0xtx",
        })]})
        record = HttpLedger(BASE, client=client).get_root_details(ROOT)
        assert record.root == ROOT
        assert record.registered_by == "0xadmin"

    def test_root_count(self):
        client = ScriptedClient({("GET", f"{BASE}/roots/count"): [response(200, {"count": 3})]})
        assert HttpLedger(BASE, client=client).root_count() == 3


class TestMalformedBodies:
    """A gateway body of the wrong shape is an unavailable ledger, not a crash."""

    @pytest.mark.parametrize("body", [
        {"exists": True, "timestamp": None},
        {"exists": True, "timestamp": "yesterday"},
        {"exists": True, "timestamp": [1]},
    ])
    def test_lookup_body(self, body):
        client = ScriptedClient({("GET", root_url()): [response(200, body)]})
        with pytest.raises(LedgerUnavailableError) as exc_info:
            HttpLedger(BASE, client=client).verify_root(ROOT)
        assert "malformed lookup" in exc_info.value.message

    def test_submission_without_tx_ref(self):
        client = ScriptedClient({("POST", f"{BASE}/roots"): [response(200, {"status": "ok"})]})
        with pytest.raises(LedgerUnavailableError):
            HttpLedger(BASE, client=client).submit_root(ROOT, "doc-1")

    def test_tx_ref_of_wrong_type(self):
        client = ScriptedClient({("GET", root_url("tx")): [response(200, {"txRef": 42})]})
        with pytest.raises(LedgerUnavailableError):
            HttpLedger(BASE, client=client).find_anchor_tx(ROOT)

    def test_details_with_bad_root(self):
        client = ScriptedClient({("GET", root_url("details")): [
            response(200, {"merkleRoot": "0xnothex", "timestamp": 5}),
        ]})
        with pytest.raises(LedgerUnavailableError):
            HttpLedger(BASE, client=client).get_root_details(ROOT)

    def test_count_of_wrong_type(self):
        client = ScriptedClient({("GET", f"{BASE}/roots/count"): [response(200, {"count": None})]})
        with pytest.raises(LedgerUnavailableError):
            HttpLedger(BASE, client=client).root_count()

    def test_verification_reports_unreachable(self):
        client = ScriptedClient({("GET", root_url()): [
            response(200, {"exists": True, "timestamp": None}),
        ]})
        service = AnchorService(HttpLedger(BASE, client=client), max_retries=0, sleep=lambda _: None)
        source = VerifiableSource(
            content="gateway root",
            content_digest=ROOT,
            inclusion_proof=[],
            merkle_root=ROOT,
        )
        with SealedChunkVerifier(service, anchor_timeout_s=2.0) as verifier:
            single = verifier.verify(source)
        assert single.failed_layer == "anchor"
        assert single.anchor_failure == "unreachable"
        assert single.retryable


class TestHttpClient:
    """Tests for error mapping in HttpClient."""

    def test_timeout_maps_to_http_timeout_error(self, monkeypatch):
        def boom(self, **kwargs):
            raise requests.Timeout("slow")

        monkeypatch.setattr(requests.Session, "request", boom)
        with pytest.raises(HttpTimeoutError):
            HttpClient(timeout=0.1).request("GET", "https://ledger.example/roots/count")

    def test_connection_error_maps_to_http_error(self, monkeypatch):
        def boom(self, **kwargs):
            raise requests.ConnectionError("refused")

        monkeypatch.setattr(requests.Session, "request", boom)
        with pytest.raises(HttpError):
            HttpClient().request("POST", "https://ledger.example/roots", json={})

    def test_response_helpers(self):
        resp = response(201, {"a": 1})
        assert resp.ok
        assert resp.json() == {"a": 1}
        assert not response(500).ok
