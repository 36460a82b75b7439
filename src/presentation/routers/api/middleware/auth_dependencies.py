"""JWT authentication and CSRF dependencies for the admin surface.

Tokens are issued by the identity service; this service only verifies
them (HS256, shared secret) and reads the caller's identity and roles.

Usage:
    # Admin read route
    @router.get("/configs")
    async def list_configs(current_user: AdminUser):
        ...

    # Admin mutating route (adds the double-submit CSRF check)
    @router.post("/configs", dependencies=[Depends(verify_csrf)])
    async def create_config(current_user: AdminUser):
        ...
"""

import secrets
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.core.config import settings
from src.core.container import get_token_service
from src.core.result import Failure, Success
from src.domain.protocols.token_validation_protocol import TokenValidationProtocol

# auto_error=False so a missing token yields our 401 (HTTPBearer raises 403)
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True, slots=True, kw_only=True)
class CurrentUser:
    """Caller identity extracted from a verified JWT.

    Attributes:
        user_id: Subject (``sub`` claim), recorded as ``changedBy``.
        roles: Role names (``roles`` claim).
        application_id: Calling application (``app_id`` claim).
        role_id: Role identity (``role_id`` claim, else first of ``roles``).
    """

    user_id: str
    roles: list[str] = field(default_factory=list)
    application_id: str | None = None
    role_id: str | None = None

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> "CurrentUser":
        """Build identity from token claims.

        Raises:
            KeyError: If the ``sub`` claim is missing.
        """
        roles_raw = claims.get("roles") or []
        roles = [str(r) for r in roles_raw] if isinstance(roles_raw, list) else []
        app_id = claims.get("app_id")
        role_id = claims.get("role_id") or (roles[0] if roles else None)
        return cls(
            user_id=str(claims["sub"]),
            roles=roles,
            application_id=str(app_id) if app_id else None,
            role_id=str(role_id) if role_id else None,
        )

    @property
    def is_admin(self) -> bool:
        return settings.admin_role in self.roles


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
    token_service: Annotated[TokenValidationProtocol, Depends(get_token_service)],
) -> CurrentUser:
    """Get current authenticated caller from the bearer token.

    Raises:
        HTTPException 401: If token is missing, invalid, or expired.
    """
    if credentials is None:
        raise _unauthorized("Authentication required")

    match token_service.validate_access_token(credentials.credentials):
        case Success(value=claims):
            try:
                return CurrentUser.from_claims(claims)
            except KeyError as e:
                raise _unauthorized("Invalid token payload") from e
        case Failure(error=error):
            raise _unauthorized(error)

    raise _unauthorized("Invalid token")  # pragma: no cover


async def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Require the configured admin role.

    Raises:
        HTTPException 403: If the caller lacks the admin role.
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Role '{settings.admin_role}' required",
        )
    return current_user


async def verify_csrf(request: Request) -> None:
    """Double-submit CSRF check for mutating admin routes.

    The token issued by GET /csrf-token is stored in a cookie; the client
    must echo it in the CSRF header.

    Raises:
        HTTPException 403: If header and cookie are missing or differ.
    """
    header_token = request.headers.get(settings.csrf_header_name)
    cookie_token = request.cookies.get(settings.csrf_cookie_name)
    if (
        not header_token
        or not cookie_token
        or not secrets.compare_digest(header_token, cookie_token)
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="CSRF token missing or invalid",
        )


def issue_csrf_token() -> str:
    """Generate a new CSRF token value."""
    return secrets.token_urlsafe(32)


# Type aliases for cleaner route signatures
AuthenticatedUser = Annotated[CurrentUser, Depends(get_current_user)]
AdminUser = Annotated[CurrentUser, Depends(require_admin)]
