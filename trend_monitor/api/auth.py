"""
X-API-KEY authentication for the trend-monitor API.

API_KEYS holds a comma-separated list of accepted keys. When it is unset
or empty the API runs open (local development) and every request is
attributed to "dev-mode".
"""

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

from trend_monitor.config.settings import Settings, get_settings

DEV_MODE_PRINCIPAL = "dev-mode"

api_key_header = APIKeyHeader(name="X-API-KEY", auto_error=False)


def accepted_keys(settings: Settings) -> frozenset[str]:
    if not settings.api_keys:
        return frozenset()
    return frozenset(k.strip() for k in settings.api_keys.split(",") if k.strip())


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


async def verify_api_key(api_key: str | None = Security(api_key_header)) -> str:
    """Return the caller's key, or raise 401 when keys are configured and it is wrong."""
    keys = accepted_keys(get_settings())
    if not keys:
        return DEV_MODE_PRINCIPAL
    if api_key is None:
        raise _unauthorized("Missing API key. Provide X-API-KEY header.")
    if api_key not in keys:
        raise _unauthorized("Invalid API key")
    return api_key
