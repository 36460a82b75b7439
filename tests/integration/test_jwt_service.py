"""Integration tests for JWTService.

Real PyJWT signing and validation, no mocking. Expiry is driven with
freezegun because both signing and PyJWT's ``exp`` check read wall time.
"""

from datetime import timedelta

import jwt
import pytest
from freezegun import freeze_time

from src.core.result import Failure, Success
from src.infrastructure.security.jwt_service import (
    TOKEN_EXPIRED,
    TOKEN_INVALID,
    JWTService,
)

SECRET = "x" * 32


@pytest.fixture
def service():
    return JWTService(secret_key=SECRET)


class TestJWTService:
    """Tests for token signing and validation."""

    def test_short_secret_rejected(self):
        with pytest.raises(ValueError, match="32 bytes"):
            JWTService(secret_key="short")

    def test_round_trip_claims(self, service):
        token = service.generate_access_token(
            "admin-1", ["admin"], application_id="mobile", role_id="premium"
        )

        result = service.validate_access_token(token)

        assert isinstance(result, Success)
        assert result.value["sub"] == "admin-1"
        assert result.value["roles"] == ["admin"]
        assert result.value["app_id"] == "mobile"
        assert result.value["role_id"] == "premium"

    def test_optional_claims_omitted(self, service):
        token = service.generate_access_token("admin-1", [])

        claims = service.validate_access_token(token).value

        assert "app_id" not in claims
        assert "role_id" not in claims

    def test_expired_token(self, service):
        with freeze_time("2026-01-01 12:00:00"):
            token = service.generate_access_token(
                "admin-1", ["admin"], expires_in=timedelta(minutes=1)
            )

        with freeze_time("2026-01-01 12:02:00"):
            result = service.validate_access_token(token)

        assert result == Failure(error=TOKEN_EXPIRED)

    def test_token_valid_until_expiry(self, service):
        with freeze_time("2026-01-01 12:00:00"):
            token = service.generate_access_token(
                "admin-1", ["admin"], expires_in=timedelta(minutes=1)
            )

        with freeze_time("2026-01-01 12:00:59"):
            assert isinstance(service.validate_access_token(token), Success)

    def test_wrong_secret(self, service):
        token = JWTService(secret_key="y" * 32).generate_access_token("a", [])

        assert service.validate_access_token(token) == Failure(error=TOKEN_INVALID)

    @pytest.mark.parametrize("token", ["", "invalid", "only.two", "...."])
    def test_malformed_token(self, service, token):
        assert service.validate_access_token(token) == Failure(error=TOKEN_INVALID)

    def test_missing_subject_rejected(self, service):
        token = jwt.encode({"exp": 4_102_444_800}, SECRET, algorithm="HS256")

        assert service.validate_access_token(token) == Failure(error=TOKEN_INVALID)
