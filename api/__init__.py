"""
chunkseal HTTP API (FastAPI)

- POST /documents - Seal a document and anchor its root
- GET /documents/{document_id} - Read a sealed document
- POST /verify - Verify retrieved chunks
- POST /documents/{document_id}/verify - Verify a stored document
- POST /documents/tamper, GET /documents/tamper - Tamper demonstration
- GET /health - Health check

Usage:
    uvicorn api.app:app --reload
"""

__version__ = "0.1.0"
