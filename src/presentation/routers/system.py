"""Unversioned system endpoints: root, health and config.

None of these paths are rate limited; the enforcement middleware skips
them so load balancer health checks never consume a counter.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from src.core.config import settings
from src.core.container import get_counter_store, get_database
from src.core.result import Failure, Success

# Never written, only read, so probing leaves no state behind.
HEALTH_PROBE_KEY = "rl:__health__"

system_router = APIRouter(tags=["System"])


@system_router.get("/")
async def root() -> dict[str, str]:
    """Service name, status and version."""
    return {
        "message": settings.app_name,
        "status": "operational",
        "version": settings.app_version,
    }


@system_router.get("/health")
async def health() -> JSONResponse:
    """Report whether the counter store and the database answer.

    Returns:
        200 when both are reachable, 503 with per-dependency status otherwise.
    """
    content: dict[str, str] = {"status": "healthy"}

    match await get_counter_store().peek(HEALTH_PROBE_KEY):
        case Success():
            content["counterStore"] = "ok"
        case Failure(error=error):
            content["counterStore"] = "unavailable"
            content["detail"] = error.message

    database_ok = await get_database().check_connection()
    content["database"] = "ok" if database_ok else "unavailable"

    if content["counterStore"] == "ok" and database_ok:
        return JSONResponse(content=content)
    content["status"] = "degraded"
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=content)


@system_router.get("/config")
async def get_config() -> JSONResponse:
    """Sanitized runtime settings, development only (403 elsewhere)."""
    if not settings.is_development:
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"detail": "Config endpoint only available in development"},
        )

    return JSONResponse(
        content={
            "environment": settings.environment.value,
            "debug": settings.debug,
            "api": {
                "name": settings.app_name,
                "version": settings.app_version,
                "v1_prefix": settings.api_v1_prefix,
            },
            "database": {"url": "<redacted>", "echo": settings.db_echo},
            "counter_store": {
                "backend": settings.rate_limit_store,
                "url": "<redacted>",
            },
            "rate_limit": {
                "route_prefixes": settings.rate_limit_route_prefixes,
                "config_cache_ttl_seconds": settings.rate_limit_config_cache_ttl_seconds,
                "trust_forwarded": settings.rate_limit_trust_forwarded,
            },
        }
    )
