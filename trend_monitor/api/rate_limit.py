"""
slowapi rate limiting for the trend-monitor API.

Opt-in via RATE_LIMIT_ENABLED=true, backed by Redis when on. Read routes
use RATE_LIMIT_DEFAULT, routes that write or trigger ingestion use the
stricter RATE_LIMIT_ADMIN.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from trend_monitor.config.settings import get_settings


def client_key(request: Request) -> str:
    # Callers sharing an IP are still limited separately by API key
    return request.headers.get("X-API-KEY") or get_remote_address(request)


def read_limit() -> str:
    return get_settings().rate_limit_default


def write_limit() -> str:
    return get_settings().rate_limit_admin


def create_limiter() -> Limiter:
    settings = get_settings()
    enabled = settings.rate_limit_enabled
    return Limiter(
        key_func=client_key,
        default_limits=[settings.rate_limit_default],
        storage_uri=str(settings.redis_url) if enabled else "memory://",
        enabled=enabled,
    )


limiter = create_limiter()
