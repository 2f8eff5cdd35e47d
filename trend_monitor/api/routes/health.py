"""
Health endpoint: PostgreSQL and Redis reachability with latency.

Always answers 200; a failing component turns the overall status to
"degraded" so load balancers can still tell the process is up.
"""

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import APIRouter, Depends

from trend_monitor import __version__
from trend_monitor.api.dependencies import get_database, get_redis_client
from trend_monitor.api.models import ComponentHealth, HealthResponse
from trend_monitor.storage.database import Database

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _probe(check: Callable[[], Awaitable[object]]) -> ComponentHealth:
    """Run one check; a falsy result or an exception marks it unhealthy."""
    started = time.perf_counter()
    details = None
    try:
        ok = bool(await check())
    except Exception as e:
        ok = False
        details = {"error": str(e)}
    return ComponentHealth(
        status="healthy" if ok else "unhealthy",
        latency_ms=round((time.perf_counter() - started) * 1000, 2),
        details=details,
    )


@router.get("/health", response_model=HealthResponse, summary="Service health")
async def health_check(
    db: Database = Depends(get_database),
    redis_client=Depends(get_redis_client),
) -> HealthResponse:
    components = {
        "database": await _probe(db.health_check),
        "redis": await _probe(redis_client.ping),
    }
    unhealthy = [name for name, c in components.items() if c.status != "healthy"]
    if unhealthy:
        logger.warning("Health check degraded", unhealthy=unhealthy)
    return HealthResponse(
        status="degraded" if unhealthy else "healthy",
        version=__version__,
        components=components,
    )
