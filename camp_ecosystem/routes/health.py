"""Health check route."""

import datetime

from fastapi import APIRouter, Depends

from camp_ecosystem import __version__
from camp_ecosystem.dependencies import get_container, ServiceContainer
from camp_ecosystem.models.responses import HealthResponse

# Create router
router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health_check(container: ServiceContainer = Depends(get_container)) -> HealthResponse:
    """
    Check the health of the service.

    Returns the service status, version and a short cache summary.
    """
    stats = container.cache.get_stats()
    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat(),
        environment=container.ecosystem_config.environment,
        cache={
            "total_items": stats["total_items"],
            "pending_requests": stats["pending_requests"],
        }
    )
