"""
HTTP Ledger Gateway

LedgerBackend that talks to a REST gateway in front of the document
registry contract. The gateway holds the signing key; this client only
relays roots and reads registry state.

Gateway routes (roots are 0x-prefixed bytes32 hex):
    POST /roots                    {"merkleRoot", "documentId"} -> {"txRef"}
                                   409 when the root is already registered
    GET  /roots/{root}             -> {"exists", "timestamp", "documentId"}
    GET  /roots/{root}/tx          -> {"txRef"}  (404 if unknown)
    GET  /roots/{root}/details     -> {"merkleRoot", "timestamp",
                                       "documentId", "registeredBy", "txRef"}
    GET  /roots/count              -> {"count"}
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar

from pydantic import ValidationError

from core.anchor.base import LedgerBackend
from core.crypto.hashing import normalize_hex_digest, to_bytes32
from core.http import HttpClient, HttpError, HttpResponse
from core.schemas.anchor import AnchorLookup, AnchorRecord
from core.schemas.errors import DuplicateRootError, LedgerUnavailableError


logger = logging.getLogger(__name__)

T = TypeVar("T")


def _optional_str(data: dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _require_str(data: dict[str, Any], key: str) -> str:
    value = _optional_str(data, key)
    if value is None:
        raise ValueError(f"{key} is missing")
    return value


class HttpLedger(LedgerBackend):
    """
    Ledger backend over HTTP.

    Any transport error, timeout, 5xx or unparseable body is reported as
    LedgerUnavailableError so that the anchor service can retry it.
    """

    name = "http"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        api_key: Optional[str] = None,
        client: Optional[HttpClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self.client = client or HttpClient(timeout=timeout, default_headers=headers)

    def _url(self, *parts: str) -> str:
        return "/".join([self.base_url, *parts])

    def _call(self, method: str, url: str, **kwargs: Any) -> HttpResponse:
        try:
            response = self.client.request(method, url, **kwargs)
        except HttpError as e:
            raise LedgerUnavailableError(
                f"Ledger request failed: {e}",
                details={"url": url},
            ) from e
        if response.status_code >= 500:
            raise LedgerUnavailableError(
                f"Ledger returned HTTP {response.status_code}",
                details={"url": url, "status_code": response.status_code},
            )
        return response

    @staticmethod
    def _json(response: HttpResponse) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise LedgerUnavailableError(f"Ledger returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise LedgerUnavailableError("Ledger returned a non-object JSON body")
        return data

    @staticmethod
    def _parse(what: str, build: Callable[[], T]) -> T:
        try:
            return build()
        except (TypeError, ValueError, ValidationError) as e:
            raise LedgerUnavailableError(f"Ledger returned a malformed {what} body: {e}") from e

    def submit_root(self, root: str, document_id: str) -> str:
        root = normalize_hex_digest(root)
        response = self._call(
            "POST",
            self._url("roots"),
            json={"merkleRoot": to_bytes32(root), "documentId": document_id},
        )
        if response.status_code == 409:
            raise DuplicateRootError(root)
        if not response.ok:
            raise LedgerUnavailableError(
                f"Ledger rejected root submission with HTTP {response.status_code}",
                details={"status_code": response.status_code, "body": response.text[:200]},
            )
        data = self._json(response)
        return self._parse("submission", lambda: _require_str(data, "txRef"))

    def verify_root(self, root: str) -> AnchorLookup:
        root = normalize_hex_digest(root)
        response = self._call("GET", self._url("roots", to_bytes32(root)))
        if response.status_code == 404:
            return AnchorLookup.missing()
        if not response.ok:
            raise LedgerUnavailableError(f"Ledger lookup failed with HTTP {response.status_code}")
        data = self._json(response)
        if not data.get("exists"):
            return AnchorLookup.missing()
        return self._parse("lookup", lambda: AnchorLookup(
            exists=True,
            document_id=str(data.get("documentId", "")),
            timestamp=int(data.get("timestamp", 0)),
        ))

    def find_anchor_tx(self, root: str) -> Optional[str]:
        root = normalize_hex_digest(root)
        response = self._call("GET", self._url("roots", to_bytes32(root), "tx"))
        if response.status_code == 404:
            return None
        if not response.ok:
            raise LedgerUnavailableError(f"Ledger tx query failed with HTTP {response.status_code}")
        data = self._json(response)
        return self._parse("tx query", lambda: _optional_str(data, "txRef"))

    def get_root_details(self, root: str) -> Optional[AnchorRecord]:
        root = normalize_hex_digest(root)
        response = self._call("GET", self._url("roots", to_bytes32(root), "details"))
        if response.status_code == 404:
            return None
        if not response.ok:
            raise LedgerUnavailableError(f"Ledger details query failed with HTTP {response.status_code}")
        data = self._json(response)
        return self._parse("details", lambda: AnchorRecord(
            root=data.get("merkleRoot", root),
            document_id=str(data.get("documentId", "")),
            timestamp=int(data.get("timestamp", 0)),
            registered_by=str(data.get("registeredBy", "")),
            tx_ref=str(data.get("txRef", "")),
        ))

    def root_count(self) -> int:
        response = self._call("GET", self._url("roots", "count"))
        if not response.ok:
            raise LedgerUnavailableError(f"Ledger count query failed with HTTP {response.status_code}")
        data = self._json(response)
        return self._parse("count", lambda: int(data.get("count", 0)))

    def close(self) -> None:
        self.client.close()


__all__ = [
    "HttpLedger",
]
