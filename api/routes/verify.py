"""
Verify Routes

Run the three-layer verification protocol (hash, proof, anchor) over
retrieved chunks or over the stored chunks of a document.

Verification failures are reported in the response body with HTTP 200;
only malformed input and unknown documents produce error responses.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from api.deps import get_services
from api.errors import InvalidRequestError
from api.models.requests import DocumentVerifyRequest, VerifyRequest
from api.models.responses import VerifyResponse
from core.schemas.verification import BatchVerification
from core.services import Services
from core.verification import sources_for_document


logger = logging.getLogger(__name__)

router = APIRouter(tags=["verification"])


def build_response(batch: BatchVerification) -> VerifyResponse:
    return VerifyResponse(
        ok=batch.all_verified,
        verified_count=batch.verified_count,
        failed_count=batch.failed_count,
        verdicts=batch.verdicts,
    )


@router.post("/verify", response_model=VerifyResponse)
def verify_sources(
    request: VerifyRequest,
    services: Services = Depends(get_services),
) -> VerifyResponse:
    """
    Verify a batch of retrieved chunks.

    Each source carries the chunk content together with its stored digest,
    inclusion proof and Merkle root.
    """
    batch = services.verifier.verify_many(request.sources)
    return build_response(batch)


@router.post("/documents/{document_id}/verify", response_model=VerifyResponse)
def verify_document(
    document_id: str,
    request: DocumentVerifyRequest | None = None,
    services: Services = Depends(get_services),
) -> VerifyResponse:
    """Verify the stored chunks of a document."""
    sources = sources_for_document(
        services.store,
        document_id,
        indexes=request.chunk_indexes if request else None,
    )
    if not sources:
        raise InvalidRequestError(
            f"No matching chunks in document {document_id}",
            details={"chunk_indexes": request.chunk_indexes if request else None},
        )
    batch = services.verifier.verify_many(sources)
    logger.info(
        f"Document {document_id}: {batch.verified_count}/{len(batch.verdicts)} chunks verified"
    )
    return build_response(batch)
