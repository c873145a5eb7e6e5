"""
API Error Handling

Standardized error handling for the API. Protocol exceptions are mapped
to HTTP status codes by their error code.
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from api.models.responses import ErrorDetail, ErrorResponse
from core.schemas.errors import ChunkSealException, ErrorCodes


logger = logging.getLogger(__name__)


# Status codes for protocol error codes; anything else is a 500
STATUS_BY_CODE: dict[str, int] = {
    ErrorCodes.EMPTY_INPUT: 400,
    ErrorCodes.MALFORMED_DIGEST: 400,
    ErrorCodes.MALFORMED_PROOF: 400,
    ErrorCodes.CHUNK_NOT_FOUND: 404,
    ErrorCodes.DOCUMENT_NOT_FOUND: 404,
    ErrorCodes.ALREADY_TAMPERED: 409,
    ErrorCodes.NOT_TAMPERED: 409,
    ErrorCodes.DUPLICATE_ROOT: 409,
    ErrorCodes.LEDGER_UNAVAILABLE: 503,
    ErrorCodes.ANCHOR_FAILED: 503,
}


class APIError(Exception):
    """Base API error with structured response."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code=self.code,
                message=self.message,
                details=self.details,
            ),
        )


class InvalidRequestError(APIError):
    """Invalid request parameters."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            code="INVALID_REQUEST",
            message=message,
            status_code=400,
            details=details,
        )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
    )


async def chunkseal_error_handler(request: Request, exc: ChunkSealException) -> JSONResponse:
    """Handle protocol exceptions raised by the core services."""
    status_code = STATUS_BY_CODE.get(exc.code, 500)
    if status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed: [{exc.code}] {exc.message}")
    error = exc.to_error_model()
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code=error.code,
                message=error.message,
                details=error.details,
                retryable=error.retryable,
            ),
        ).model_dump(),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred",
                details={"type": type(exc).__name__},
            ),
        ).model_dump(),
    )
