"""
Tamper Routes

Demonstration endpoints that corrupt and restore stored chunks.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from api.deps import get_services
from api.models.requests import TamperRequest
from api.models.responses import (
    ChunkTamperStatus,
    TamperResponse,
    TamperStatusResponse,
)
from core.services import Services
from core.tamper.simulator import PREVIEW_CHARS


router = APIRouter(prefix="/documents", tags=["tamper"])


@router.post("/tamper", response_model=TamperResponse)
def tamper_chunk(
    request: TamperRequest,
    services: Services = Depends(get_services),
) -> TamperResponse:
    """
    Tamper or restore a chunk.

    Tampering an already tampered chunk, or restoring one that is not
    tampered, is rejected with 409.
    """
    if request.action == "tamper":
        chunk = services.tamper.tamper(request.chunk_id)
    else:
        chunk = services.tamper.restore(request.chunk_id)
    return TamperResponse(
        ok=True,
        chunk_id=chunk.id,
        action=request.action,
        is_tampered=chunk.is_tampered,
        tampered_at=chunk.tampered_at,
        content_preview=chunk.content[:PREVIEW_CHARS],
    )


@router.get("/tamper", response_model=TamperStatusResponse)
def tamper_status(
    document_id: str = Query(..., min_length=1),
    services: Services = Depends(get_services),
) -> TamperStatusResponse:
    """List the chunks of a document with their tamper status."""
    status = services.tamper.status(document_id)
    return TamperStatusResponse(
        ok=True,
        document_id=status.document_id,
        tampered_count=status.tampered_count,
        chunks=[
            ChunkTamperStatus(
                chunk_id=c.chunk_id,
                index=c.index,
                is_tampered=c.is_tampered,
                tampered_at=c.tampered_at,
                content_preview=c.content_preview,
            )
            for c in status.chunks
        ],
    )
