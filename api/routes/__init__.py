"""API route handlers."""

from api.routes import documents, health, tamper, verify

__all__ = ["documents", "health", "tamper", "verify"]
