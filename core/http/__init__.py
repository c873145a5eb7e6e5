"""
HTTP Client Module

requests-based HTTP client used by ledger gateway adapters.
"""

from .client import HttpClient, HttpError, HttpResponse, HttpTimeoutError

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "HttpTimeoutError",
]
