"""Security adapters."""

from src.infrastructure.security.jwt_service import (
    TOKEN_EXPIRED,
    TOKEN_INVALID,
    JWTService,
)

__all__ = ["JWTService", "TOKEN_EXPIRED", "TOKEN_INVALID"]
