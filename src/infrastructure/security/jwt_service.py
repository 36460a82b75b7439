"""JWT token service (adapter).

Implements TokenValidationProtocol using PyJWT with HMAC-SHA256.

Claims read by the rate limit service:
    sub      caller identity (admin audit ``changedBy``)
    roles    role names (admin surface requires the admin role)
    app_id   application identity (application key strategy)
    role_id  role identity (role key strategy, falls back to roles[0])

Security:
    - HMAC-SHA256 (HS256) algorithm
    - 256-bit secret key minimum
    - Signature and ``exp`` always verified
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from uuid_extensions import uuid7

from src.core.result import Failure, Result, Success

TOKEN_EXPIRED = "token_expired"
TOKEN_INVALID = "token_invalid"


class JWTService:
    """JWT validation service.

    Usage:
        from src.core.container import get_token_service

        result = get_token_service().validate_access_token(token)
        match result:
            case Success(value=claims):
                subject = claims["sub"]
            case Failure(error=reason):
                ...
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256") -> None:
        """Initialize JWT service.

        Args:
            secret_key: Shared secret of the token issuer.
                MUST be at least 256 bits (32 bytes).
            algorithm: Signing algorithm.

        Raises:
            ValueError: If secret_key is too short (< 32 bytes).
        """
        if len(secret_key) < 32:
            msg = "JWT secret key must be at least 32 bytes (256 bits)"
            raise ValueError(msg)

        self._secret_key = secret_key
        self._algorithm = algorithm

    def generate_access_token(
        self,
        subject: str,
        roles: list[str],
        *,
        application_id: str | None = None,
        role_id: str | None = None,
        expires_in: timedelta = timedelta(minutes=15),
    ) -> str:
        """Sign a token with the claims this service reads.

        Tokens are normally issued by the identity service; this exists for
        local development and tests.
        """
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": subject,
            "roles": roles,
            "iat": int(now.timestamp()),
            "exp": int((now + expires_in).timestamp()),
            "jti": str(uuid7()),
        }
        if application_id is not None:
            payload["app_id"] = application_id
        if role_id is not None:
            payload["role_id"] = role_id

        token: str = jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
        return token

    def validate_access_token(self, token: str) -> Result[dict[str, Any], str]:
        """Validate a bearer token and extract its claims.

        Returns:
            Success(claims), or Failure("token_expired" | "token_invalid").
        """
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": ["exp", "sub"]},
            )
            return Success(value=payload)
        except ExpiredSignatureError:
            return Failure(error=TOKEN_EXPIRED)
        except InvalidTokenError:
            return Failure(error=TOKEN_INVALID)
