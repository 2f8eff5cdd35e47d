"""
FastAPI application factory for the trend-monitor REST API.

Run with ``trend-monitor serve`` or
``uvicorn trend_monitor.api.app:create_app --factory``.
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trend_monitor import __version__
from trend_monitor.api.dependencies import cleanup_dependencies
from trend_monitor.api.routes import health, keywords, mentions, sources, trends, trigger
from trend_monitor.config.settings import Settings, get_settings

logger = structlog.get_logger(__name__)

_ROUTERS = (
    (health.router, "health", "Service health checks"),
    (keywords.router, "keywords", "Tracked keywords and aliases"),
    (mentions.router, "mentions", "Posts that matched a keyword"),
    (sources.router, "sources", "Feed sources, health and validation"),
    (trends.router, "trends", "Top, emerging and per-keyword trends"),
    (trigger.router, "trigger", "Manual feed ingestion"),
)

_DESCRIPTION = """
Keyword trend monitoring over RSS/Atom feeds.

## Authentication

When `API_KEYS` is set every endpoint except `/health` requires an
`X-API-KEY` header carrying one of the configured keys.
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Trend monitor API starting up", version=__version__)
    yield
    logger.info("Trend monitor API shutting down")
    await cleanup_dependencies()


def _request_id(request: Request) -> str:
    return (
        request.headers.get("X-Request-ID")
        or request.headers.get("X-Correlation-ID")
        or str(uuid.uuid4())
    )


def _install_request_logging(app: FastAPI) -> None:
    """Bind a request_id to every log line of a request and echo it back."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = _request_id(request)
        structlog.contextvars.bind_contextvars(request_id=request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            return response
        finally:
            structlog.contextvars.clear_contextvars()


def _install_rate_limiting(app: FastAPI, settings: Settings) -> None:
    # Route decorators are no-ops while the limiter is disabled
    if not settings.rate_limit_enabled:
        return

    from slowapi import _rate_limit_exceeded_handler
    from slowapi.errors import RateLimitExceeded

    from trend_monitor.api.rate_limit import limiter

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def create_app() -> FastAPI:
    """Build the API with middleware, error handling and all routers."""
    settings = get_settings()

    app = FastAPI(
        title="Trend Monitor API",
        description=_DESCRIPTION,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=[{"name": tag, "description": desc} for _, tag, desc in _ROUTERS],
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    _install_request_logging(app)
    _install_rate_limiting(app, settings)

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):
        logger.error("Unhandled exception", path=request.url.path, error=str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_type": "internal"},
        )

    for router, tag, _ in _ROUTERS:
        app.include_router(router, tags=[tag])

    @app.get("/", include_in_schema=False)
    async def root():
        return {"service": "Trend Monitor API", "version": __version__, "docs": "/docs"}

    return app
