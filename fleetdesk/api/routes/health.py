"""
Service endpoints
=================

GET /api/v1/health  -- simple health check
"""

from fastapi import APIRouter

from fleetdesk.api.schemas import HealthResponse

router = APIRouter(tags=["service"])


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
