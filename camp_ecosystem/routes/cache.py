"""Cache maintenance API routes.

This module defines routes to inspect and manage the server cache.
"""

import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from camp_ecosystem.dependencies import get_cache_service
from camp_ecosystem.models.requests import CacheActionRequest
from camp_ecosystem.models.responses import CacheActionResponse, CacheStatsResponse
from camp_ecosystem.services.cache_service import CacheService
from camp_ecosystem.utils.errors import ValidationError

# Create router
router = APIRouter(tags=["cache"])


@router.get(
    "/cache-stats",
    response_model=CacheStatsResponse,
    summary="Get cache statistics"
)
async def get_cache_stats(cache: CacheService = Depends(get_cache_service)) -> CacheStatsResponse:
    """Get a snapshot of the server cache statistics."""
    return CacheStatsResponse(
        stats=cache.get_stats(),
        timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat()
    )


@router.delete(
    "/cache-stats",
    response_model=CacheActionResponse,
    summary="Invalidate or clean up cache entries"
)
async def invalidate_cache(
    pattern: Optional[str] = Query(None, description="Remove keys containing this substring"),
    cache: CacheService = Depends(get_cache_service)
) -> CacheActionResponse:
    """Invalidate entries matching ``pattern``, or remove expired ones when no pattern is given."""
    if pattern:
        removed = cache.invalidate(pattern)
        return CacheActionResponse(message=f"Invalidated {removed} cache entries", removed=removed)
    removed = cache.cleanup()
    return CacheActionResponse(message=f"Cleaned up {removed} expired entries", removed=removed)


@router.post(
    "/cache-stats",
    response_model=CacheActionResponse,
    summary="Run a cache maintenance action"
)
async def cache_action(
    body: CacheActionRequest,
    cache: CacheService = Depends(get_cache_service)
) -> CacheActionResponse:
    """Run ``clear`` (optionally limited to a key pattern) or ``cleanup``."""
    if body.action == "clear":
        if body.type:
            removed = cache.invalidate(body.type)
            return CacheActionResponse(
                message=f"Cleared {removed} {body.type} cache entries", removed=removed
            )
        removed = cache.clear()
        return CacheActionResponse(
            message=f"Cleared all cache ({removed} entries)", removed=removed, stats=cache.get_stats()
        )

    if body.action == "cleanup":
        removed = cache.cleanup()
        return CacheActionResponse(message=f"Cleaned up {removed} expired entries", removed=removed)

    raise ValidationError(f"Unknown action: {body.action}", details={"action": body.action})
