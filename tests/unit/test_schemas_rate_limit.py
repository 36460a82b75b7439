"""Unit tests for rate limit admin schemas.

Tests cover:
- camelCase wire names on requests and responses
- Partial update conversion (only sent fields, null clears overrides)
- Create request conversion into the command
- Block request validation
"""

import pytest
from pydantic import ValidationError

from src.domain.enums import FailureMode, KeyStrategy, RateLimitType
from src.domain.value_objects.limit_override import (
    ComponentLimit,
    EnvironmentOverride,
    RoleLimit,
)
from src.schemas.rate_limit_schemas import (
    BlockRequest,
    ConfigCreateRequest,
    ConfigResponse,
    ConfigUpdateRequest,
)
from tests.conftest import create_config


class TestConfigUpdateRequest:
    """Tests for ConfigUpdateRequest.to_changes()."""

    def test_only_sent_fields_become_changes(self):
        request = ConfigUpdateRequest.model_validate(
            {"windowMs": 1000, "changeReason": "tighten"}
        )

        assert request.to_changes() == {"window_ms": 1000}
        assert request.change_reason == "tighten"

    def test_override_lists_converted_to_domain(self):
        request = ConfigUpdateRequest.model_validate(
            {
                "roleLimits": [{"roleId": "premium", "max": 50}],
                "componentLimits": [{"serviceId": "billing", "max": 5}],
                "environmentOverrides": {"production": {"max": 10}},
            }
        )

        changes = request.to_changes()

        assert changes["role_limits"] == [RoleLimit(role_id="premium", max=50)]
        assert changes["component_limits"] == [
            ComponentLimit(service_id="billing", procedure_name=None, max=5)
        ]
        assert changes["environment_overrides"] == {
            "production": EnvironmentOverride(enabled=True, max=10)
        }

    def test_null_clears_overrides(self):
        request = ConfigUpdateRequest.model_validate(
            {"applicationLimits": None, "environmentOverrides": None}
        )

        assert request.to_changes() == {
            "application_limits": [],
            "environment_overrides": {},
        }

    def test_name_is_passed_through_for_immutability_check(self):
        request = ConfigUpdateRequest.model_validate({"name": "renamed"})
        assert request.to_changes() == {"name": "renamed"}


class TestConfigCreateRequest:
    """Tests for ConfigCreateRequest.to_command()."""

    def test_to_command(self):
        request = ConfigCreateRequest.model_validate(
            {
                "name": "search",
                "displayName": "Search",
                "type": "api",
                "windowMs": 1000,
                "max": 3,
                "keyStrategy": "custom",
                "customKeyGenerator": "{headers.x-tenant-id}",
                "roleLimits": [{"roleId": "premium", "max": 9}],
                "changeReason": "new endpoint",
            }
        )

        command = request.to_command(created_by="admin-1")

        assert command.name == "search"
        assert command.key_strategy is KeyStrategy.CUSTOM
        assert command.role_limits == [RoleLimit(role_id="premium", max=9)]
        assert command.created_by == "admin-1"
        assert command.reason == "new endpoint"

    def test_missing_required_field_rejected(self):
        with pytest.raises(ValidationError):
            ConfigCreateRequest.model_validate({"name": "x", "windowMs": 1000})


class TestConfigResponse:
    """Tests for ConfigResponse.from_entity()."""

    def test_camel_case_dump(self):
        config = create_config(
            "auth",
            type=RateLimitType.AUTH,
            role_limits=[RoleLimit(role_id="premium", max=20)],
        )

        body = ConfigResponse.from_entity(config).model_dump(
            mode="json", by_alias=True
        )

        assert body["windowMs"] == 60_000
        assert body["keyStrategy"] == "ip"
        assert body["failureMode"] is None
        assert body["effectiveFailureMode"] == FailureMode.CLOSED.value
        assert body["roleLimits"] == [{"roleId": "premium", "max": 20}]
        assert body["prefix"] == "rl:auth:"


class TestBlockRequest:
    """Tests for BlockRequest validation."""

    def test_defaults(self):
        request = BlockRequest.model_validate({"configName": "auth", "key": "ip:1"})
        assert request.duration > 0

    @pytest.mark.parametrize("duration", [0, -10])
    def test_non_positive_duration_rejected(self, duration):
        with pytest.raises(ValidationError):
            BlockRequest.model_validate(
                {"configName": "auth", "key": "ip:1", "duration": duration}
            )
