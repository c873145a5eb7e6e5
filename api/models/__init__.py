"""API request and response models."""

from api.models.requests import (
    DocumentVerifyRequest,
    SealRequest,
    TamperRequest,
    VerifyRequest,
)
from api.models.responses import (
    ChunkInfo,
    ChunkTamperStatus,
    DocumentResponse,
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
    SealResponse,
    TamperResponse,
    TamperStatusResponse,
    VerifyResponse,
)

__all__ = [
    "DocumentVerifyRequest",
    "SealRequest",
    "TamperRequest",
    "VerifyRequest",
    "ChunkInfo",
    "ChunkTamperStatus",
    "DocumentResponse",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "SealResponse",
    "TamperResponse",
    "TamperStatusResponse",
    "VerifyResponse",
]
