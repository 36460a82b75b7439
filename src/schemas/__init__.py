"""Request/response schemas for API endpoints.

All Pydantic models for HTTP request validation and response serialization.
Schemas are kept separate from domain entities (HTTP-layer concerns only).

Usage:
    from src.schemas import ConfigCreateRequest, ConfigResponse
"""

from src.schemas.rate_limit_schemas import (
    # Configuration CRUD
    ConfigCreateRequest,
    ConfigHistoryResponse,
    ConfigListResponse,
    ConfigResponse,
    ConfigToggleRequest,
    ConfigUpdateRequest,
    # Counters
    ActiveLimitListResponse,
    BlockRequest,
    KeyBlockResponse,
    KeyResetResponse,
    KeyStatusResponse,
    StatsResponse,
    UnblockRequest,
    # Analytics
    HistoryResponse,
    OverviewResponse,
    # CSRF
    CsrfTokenResponse,
)

__all__ = [
    # Configuration CRUD
    "ConfigCreateRequest",
    "ConfigHistoryResponse",
    "ConfigListResponse",
    "ConfigResponse",
    "ConfigToggleRequest",
    "ConfigUpdateRequest",
    # Counters
    "ActiveLimitListResponse",
    "BlockRequest",
    "KeyBlockResponse",
    "KeyResetResponse",
    "KeyStatusResponse",
    "StatsResponse",
    "UnblockRequest",
    # Analytics
    "HistoryResponse",
    "OverviewResponse",
    # CSRF
    "CsrfTokenResponse",
]
