"""Token validation protocol.

The rate limit service never issues tokens. It only verifies bearer tokens
issued elsewhere to learn who is calling (admin identity for the control
surface, application and role for key derivation).
"""

from typing import Any, Protocol

from src.core.result import Result


class TokenValidationProtocol(Protocol):
    """Access token verification interface.

    Implementations:
        - JWTService: HMAC-SHA256 (PyJWT)
    """

    def validate_access_token(self, token: str) -> Result[dict[str, Any], str]:
        """Verify signature and expiry.

        Returns:
            Success(claims) or Failure(reason) where reason is
            ``token_expired`` or ``token_invalid``.
        """
        ...
