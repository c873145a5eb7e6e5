"""
Health Check Route

Simple health check endpoint for liveness checks.
"""

from fastapi import APIRouter, Depends

from api.deps import get_services
from api.models.responses import HealthResponse
from core.services import Services


router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(services: Services = Depends(get_services)) -> HealthResponse:
    """
    Health check endpoint.

    Returns service status for liveness checks. Does not contact the ledger.
    """
    return HealthResponse(
        ok=True,
        service="chunkseal-api",
        version="v1",
        ledger=services.ledger.name,
    )


@router.get("/", response_model=HealthResponse)
async def root(services: Services = Depends(get_services)) -> HealthResponse:
    """
    Root endpoint - same as health check.
    """
    return await health_check(services)
