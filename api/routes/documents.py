"""
Documents Routes

Seal documents and read sealed documents back.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from api.deps import get_services
from api.models.requests import SealRequest
from api.models.responses import ChunkInfo, DocumentResponse, SealResponse
from core.schemas.chunks import SealedChunk
from core.services import Services


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


def chunk_info(chunk: SealedChunk) -> ChunkInfo:
    return ChunkInfo(
        id=chunk.id,
        index=chunk.index,
        content=chunk.content,
        content_digest=chunk.content_digest,
        inclusion_proof=list(chunk.inclusion_proof),
        is_tampered=chunk.is_tampered,
    )


@router.post("", response_model=SealResponse)
def seal_document(
    request: SealRequest,
    services: Services = Depends(get_services),
) -> SealResponse:
    """
    Seal a document.

    Hashes the chunks, builds the Merkle tree, anchors the root on the
    ledger and stores the sealed chunks. Sealing content whose root is
    already anchored returns the earlier publication (already_anchored).
    """
    result = services.sealer.seal(
        request.chunks,
        document_id=request.document_id,
        file_name=request.file_name,
        source=request.source,
    )
    return SealResponse(
        ok=True,
        document_id=result.document.document_id,
        merkle_root=result.merkle_root,
        chunk_count=result.document.chunk_count,
        tree_depth=result.tree.depth,
        tx_ref=result.receipt.tx_ref,
        already_anchored=result.receipt.already_anchored,
        explorer_link=services.anchor.explorer_link(result.receipt.tx_ref),
        chunks=[chunk_info(c) for c in result.chunks],
    )


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(
    document_id: str,
    services: Services = Depends(get_services),
) -> DocumentResponse:
    """Return a sealed document with its chunks."""
    document = services.store.get_document(document_id)
    chunks = services.store.list_chunks(document_id)
    return DocumentResponse(
        ok=True,
        document_id=document.document_id,
        merkle_root=document.merkle_root,
        anchor_tx_ref=document.anchor_tx_ref,
        chunk_count=document.chunk_count,
        file_name=document.file_name,
        source=document.source,
        created_at=document.created_at,
        chunks=[chunk_info(c) for c in chunks],
    )
