"""
DishManager Backend — Health Check Route
=========================================

What:  Liveness endpoint for monitoring and load balancer probes.
How:   Returns a fixed success envelope with the current server time.
Who:   Called by Docker health checks, load balancers, and the client layer.

Store connectivity is not probed here: a dashboard that can reach this
endpoint but not the store sees the failure on its snapshot fetch instead.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from dishmanager.schemas.dish import HealthResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/api/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        success=True,
        message="Server is running",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )
