"""
FastAPI Application

Main application setup and configuration.

Usage:
    uvicorn api.app:app --reload

    # Or run directly
    python -m api.app
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import (
    APIError,
    api_error_handler,
    chunkseal_error_handler,
    generic_error_handler,
)
from api.routes import documents, health, tamper, verify
from core.schemas.errors import ChunkSealException


# Configure logging from CHUNKSEAL_LOG_LEVEL or the log_level in chunkseal.json
def _resolve_log_level() -> int:
    """Resolve log level from env var or chunkseal.json, defaulting to INFO."""
    raw = os.getenv("CHUNKSEAL_LOG_LEVEL")
    if raw is None:
        try:
            import json
            from pathlib import Path
            cfg_path = Path.cwd() / "chunkseal.json"
            if cfg_path.exists():
                with open(cfg_path) as f:
                    raw = json.load(f).get("log_level")
        except (OSError, ValueError):
            raw = None
    return getattr(logging, (raw or "INFO").upper(), logging.INFO)


logging.basicConfig(
    level=_resolve_log_level(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="chunkseal API",
        description="""
HTTP API for sealing document chunks and verifying them against an
anchored Merkle root.

## Endpoints

- **POST /documents** - Seal a document and anchor its Merkle root
- **GET /documents/{document_id}** - Read a sealed document
- **POST /verify** - Verify retrieved chunks (hash, proof, anchor)
- **POST /documents/{document_id}/verify** - Verify a stored document
- **POST /documents/tamper** - Tamper or restore a chunk (demonstration)
- **GET /documents/tamper** - Tamper status of a document
- **GET /health** - Health check

## Verification

Each chunk passes three layers in order: its content must hash to the
sealed digest, the digest and proof must fold to the sealed root, and the
root must be published on the ledger. The first failing layer is
reported; an unreachable ledger is reported separately from a root that
is not anchored.
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(ChunkSealException, chunkseal_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # Include routers (tamper before documents so /documents/tamper is not
    # captured by /documents/{document_id})
    app.include_router(health.router)
    app.include_router(tamper.router)
    app.include_router(documents.router)
    app.include_router(verify.router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
