"""Health & Readiness Probes: liveness and readiness endpoints.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if no provider API key is configured (readiness)
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from noesis.config import get_settings

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

_PLACEHOLDER_KEY = "sk-ant-placeholder"


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "noesis-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check():
    """Readiness probe: the tree content provider must be configured."""
    if get_settings().anthropic_api_key == _PLACEHOLDER_KEY:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "provider_not_configured",
            },
        )
    return {"status": "ready", "checks": {"provider": "configured"}}
