"""
Main FastAPI application entry point.

This module initializes the FastAPI application instance and wires the
rate limit control plane:

- Lifespan: create tables, seed default configurations, run the periodic
  usage sample flush, and release connections on shutdown
- Middleware: CORS, rate limit enforcement, request tracing
- Routers: system endpoints and the v1 admin API (from the route registry)
- Exception handlers: RFC 7807 problem details for every error
"""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.core.config import settings
from src.presentation.routers import system_router
from src.presentation.routers.api.middleware.rate_limit_middleware import (
    RateLimitMiddleware,
)
from src.presentation.routers.api.middleware.trace_middleware import TraceMiddleware
from src.presentation.routers.api.v1 import v1_router
from src.presentation.routers.api.v1.errors import register_exception_handlers


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager.

    Handles startup and shutdown events:
    - Startup: Create tables, seed default configs, start usage flushing
    - Shutdown: Stop flushing (with a final flush), close Redis and database

    Args:
        app: FastAPI application instance.

    Yields:
        None during application lifetime.
    """
    from src.core.container import (
        get_database,
        get_event_bus,
        get_logger,
        get_usage_recorder,
    )
    from src.infrastructure.rate_limit.default_configs import seed_default_configs

    logger = get_logger()
    database = get_database()

    # Startup: schema and defaults (idempotent; Alembic owns real migrations)
    await database.create_all()
    if settings.rate_limit_seed_defaults:
        async with database.get_session() as session:
            await seed_default_configs(session)

    # Subscribe the usage recorder and resolver before the first request
    get_event_bus()
    flush_task = asyncio.create_task(
        get_usage_recorder().run_periodic(settings.rate_limit_usage_flush_seconds)
    )
    logger.info(
        "application_started",
        environment=settings.environment.value,
        counter_store=settings.rate_limit_store,
    )

    yield

    # Shutdown: run_periodic flushes once more when cancelled
    flush_task.cancel()
    with suppress(asyncio.CancelledError):
        await flush_task

    if settings.rate_limit_store == "redis":
        from src.core.container import get_redis

        await get_redis().aclose()
    await database.close()
    logger.info("application_stopped")


# Initialize FastAPI application with settings and lifespan
app = FastAPI(
    title=settings.app_name,
    description="Runtime-configurable distributed rate limiting",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    debug=settings.debug,
    lifespan=lifespan,
)

# Middleware runs in reverse order of registration: Trace -> RateLimit -> CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[
        "Retry-After",
        "X-RateLimit-Limit",
        "X-RateLimit-Remaining",
        "X-RateLimit-Reset",
        "X-RateLimit-Config",
        "X-RateLimit-Source",
        "X-Trace-Id",
    ],
)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(TraceMiddleware)

# Register global exception handlers (RFC 7807 error responses)
register_exception_handlers(app)

# System endpoints (root, health, config) and the v1 admin API
app.include_router(system_router)
app.include_router(v1_router)
