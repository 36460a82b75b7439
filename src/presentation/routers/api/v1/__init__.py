"""API v1 routers.

All routes are generated from the Route Metadata Registry at startup.
The registry (ROUTE_REGISTRY) is the single source of truth for all endpoints.
See src/presentation/routers/api/v1/routes/registry.py for the complete route catalog.

Admin Resources (/api/v1/admin/rate-limits):
    /configs                     - Configuration CRUD, toggle, history, reset
    /active, /status, /stats     - Live counters
    /reset, /block, /unblock     - Counter administration
    /applications, /roles, /services - Reference data for overrides
    /analytics, /history         - Dashboard analytics
    /csrf-token                  - Double-submit CSRF token
"""

from fastapi import APIRouter

from src.presentation.routers.api.v1.routes.generator import (
    register_routes_from_registry,
)
from src.presentation.routers.api.v1.routes.registry import ROUTE_REGISTRY

API_V1_PREFIX = "/api/v1"

# Create v1 router and generate all routes from registry
v1_router = APIRouter(prefix=API_V1_PREFIX)
register_routes_from_registry(v1_router, ROUTE_REGISTRY)

# Export v1_router
__all__ = [
    "API_V1_PREFIX",
    "v1_router",
]
