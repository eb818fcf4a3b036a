"""Health check endpoints."""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Request

from yt_ersatztv import __version__
from yt_ersatztv.api.schemas import HealthResponse, LivenessResponse

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint.

    Reports the running version and deployment environment.
    """
    config = getattr(request.app.state, "config", None)
    environment = config.security.environment if config is not None else "unknown"

    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=environment,
        version=__version__,
    )


@router.get("/liveness", response_model=LivenessResponse)
async def liveness_check() -> LivenessResponse:
    """
    Liveness probe endpoint.

    Returns HTTP 200 if the process is alive.
    Used by container orchestration to determine if the container
    should be restarted.
    """
    return LivenessResponse(status="alive")
