"""Unit tests for RateLimitConfig domain entity.

Tests cover:
- Invariant validation (name, window, max, prefix, custom generator, overrides)
- Partial updates with audit diffs and immutable fields
- Master switch toggling
- Failure mode defaults by traffic class
- Environment resolution into EffectiveRateLimitConfig

Architecture:
- Unit tests for domain entity (no dependencies)
- All mutations return Result types (ROP)
"""

from datetime import UTC, datetime

import pytest

from src.core.enums import ErrorCode
from src.core.result import Failure, Success
from src.domain.enums import FailureMode, KeyStrategy, RateLimitType
from src.domain.value_objects.limit_override import (
    ApplicationLimit,
    ComponentLimit,
    EnvironmentOverride,
    RoleLimit,
)
from tests.conftest import create_config, create_context


# =============================================================================
# Validation
# =============================================================================


class TestRateLimitConfigValidation:
    """Tests for RateLimitConfig.validate()."""

    def test_valid_config_passes(self):
        assert isinstance(create_config().validate(), Success)

    def test_default_prefix_derived_from_name(self):
        assert create_config("auth-login").prefix == "rl:auth-login:"

    @pytest.mark.parametrize("name", ["Bad Name", "UPPER", "", "a" * 101, "semi;colon"])
    def test_invalid_name_rejected(self, name):
        result = create_config(name, prefix="rl:x:").validate()

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.INVALID_CONFIG_NAME
        assert result.error.field == "name"

    @pytest.mark.parametrize("window_ms", [0, -1])
    def test_non_positive_window_rejected(self, window_ms):
        result = create_config(window_ms=window_ms).validate()

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.INVALID_WINDOW

    @pytest.mark.parametrize("max_requests", [0, -5])
    def test_non_positive_max_rejected(self, max_requests):
        result = create_config(max=max_requests).validate()

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.INVALID_MAX_REQUESTS

    def test_negative_block_duration_rejected(self):
        result = create_config(block_duration_ms=-1).validate()

        assert isinstance(result, Failure)
        assert result.error.field == "blockDurationMs"

    def test_glob_characters_in_prefix_rejected(self):
        result = create_config(prefix="rl:*:").validate()

        assert isinstance(result, Failure)
        assert result.error.field == "prefix"

    @pytest.mark.parametrize("prefix", ["rl:a", "tenant", "rl:search:v2"])
    def test_prefix_must_end_with_separator(self, prefix):
        result = create_config(prefix=prefix).validate()

        assert isinstance(result, Failure)
        assert result.error.field == "prefix"
        assert "':'" in result.error.message

    def test_custom_strategy_requires_generator(self):
        result = create_config(key_strategy=KeyStrategy.CUSTOM).validate()

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.INVALID_CUSTOM_KEY_GENERATOR

    def test_generator_only_allowed_with_custom_strategy(self):
        result = create_config(custom_key_generator="{user_id}").validate()

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.INVALID_CUSTOM_KEY_GENERATOR

    def test_custom_generator_must_parse(self):
        result = create_config(
            key_strategy=KeyStrategy.CUSTOM,
            custom_key_generator="{__class__}",
        ).validate()

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.INVALID_CUSTOM_KEY_GENERATOR

    def test_valid_custom_generator_passes(self):
        result = create_config(
            key_strategy=KeyStrategy.CUSTOM,
            custom_key_generator="tenant:{headers.x-tenant-id}:{user_id}",
        ).validate()

        assert isinstance(result, Success)

    def test_override_needs_positive_max(self):
        result = create_config(
            application_limits=[ApplicationLimit(application_id="app-1", max=0)]
        ).validate()

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.INVALID_OVERRIDE

    def test_unknown_environment_override_rejected(self):
        result = create_config(
            environment_overrides={"staging-eu": EnvironmentOverride(max=10)}
        ).validate()

        assert isinstance(result, Failure)
        assert result.error.field == "environmentOverrides"


# =============================================================================
# Mutations
# =============================================================================


class TestRateLimitConfigApplyChanges:
    """Tests for partial updates and audit diffs."""

    def test_apply_changes_returns_diff_and_bumps_version(self):
        config = create_config(max=5)
        now = datetime(2026, 1, 1, tzinfo=UTC)

        result = config.apply_changes({"max": 10}, changed_by="admin-2", now=now)

        assert isinstance(result, Success)
        assert result.value == {"max": {"from": 5, "to": 10}}
        assert config.max == 10
        assert config.version == 2
        assert config.updated_by == "admin-2"
        assert config.updated_at == now

    def test_unchanged_value_yields_empty_diff(self):
        config = create_config(max=5)

        result = config.apply_changes({"max": 5}, changed_by="admin-2")

        assert isinstance(result, Success)
        assert result.value == {}

    def test_name_is_immutable(self):
        config = create_config("api")

        result = config.apply_changes({"name": "api2"}, changed_by="admin-2")

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.IMMUTABLE_FIELD
        assert config.name == "api"
        assert config.version == 1

    def test_rejected_patch_leaves_entity_untouched(self):
        config = create_config(max=5, window_ms=60_000)

        result = config.apply_changes(
            {"max": 50, "window_ms": 0}, changed_by="admin-2"
        )

        assert isinstance(result, Failure)
        assert config.max == 5
        assert config.window_ms == 60_000

    def test_switching_away_from_custom_clears_generator(self):
        config = create_config(
            key_strategy=KeyStrategy.CUSTOM, custom_key_generator="{user_id}"
        )

        result = config.apply_changes(
            {"key_strategy": KeyStrategy.IP}, changed_by="admin-2"
        )

        assert isinstance(result, Success)
        assert config.custom_key_generator is None
        assert set(result.value) == {"keyStrategy", "customKeyGenerator"}

    def test_override_lists_diffed_in_wire_shape(self):
        config = create_config()

        result = config.apply_changes(
            {"role_limits": [RoleLimit(role_id="premium", max=100)]},
            changed_by="admin-2",
        )

        assert isinstance(result, Success)
        assert result.value["roleLimits"]["to"] == [{"roleId": "premium", "max": 100}]

    def test_set_enabled_reports_diff_only_on_change(self):
        config = create_config(enabled=True)

        assert config.set_enabled(False, changed_by="admin-2") == {
            "enabled": {"from": True, "to": False}
        }
        assert config.set_enabled(False, changed_by="admin-2") == {}
        assert config.version == 3


# =============================================================================
# Effective resolution
# =============================================================================


class TestRateLimitConfigEffective:
    """Tests for failure modes and environment resolution."""

    def test_auth_configs_fail_closed_by_default(self):
        assert (
            create_config("auth", type=RateLimitType.AUTH).effective_failure_mode
            is FailureMode.CLOSED
        )

    def test_other_configs_fail_open_by_default(self):
        assert create_config().effective_failure_mode is FailureMode.OPEN

    def test_explicit_failure_mode_wins(self):
        config = create_config(failure_mode=FailureMode.CLOSED)
        assert config.effective_failure_mode is FailureMode.CLOSED

    def test_environment_override_replaces_max_and_window(self):
        config = create_config(
            max=100,
            window_ms=60_000,
            environment_overrides={
                "production": EnvironmentOverride(max=1000, window_ms=1000)
            },
        )

        effective = config.resolve_effective("production")

        assert effective.max == 1000
        assert effective.window_ms == 1000
        assert config.resolve_effective("testing").max == 100

    def test_environment_can_disable_but_not_enable(self):
        enabled = create_config(
            environment_overrides={"testing": EnvironmentOverride(enabled=False)}
        )
        disabled = create_config(
            enabled=False,
            environment_overrides={"testing": EnvironmentOverride(enabled=True)},
        )

        assert enabled.resolve_effective("testing").enabled is False
        assert disabled.resolve_effective("testing").enabled is False

    def test_effective_max_follows_override_precedence(self):
        config = create_config(
            max=10,
            application_limits=[ApplicationLimit(application_id="app-1", max=30)],
            role_limits=[RoleLimit(role_id="premium", max=20)],
            component_limits=[
                ComponentLimit(service_id="billing", procedure_name=None, max=40)
            ],
        )
        effective = config.resolve_effective("testing")

        assert effective.max_for(create_context()) == (10, "global")
        assert effective.max_for(create_context(application_id="app-1")) == (
            30,
            "application",
        )
        assert effective.max_for(
            create_context(application_id="app-1", role_id="premium")
        ) == (20, "role")
        assert effective.max_for(
            create_context(
                application_id="app-1", role_id="premium", service_id="billing"
            )
        ) == (40, "component")

    def test_store_key_joins_prefix(self):
        effective = create_config("api").resolve_effective("testing")
        assert effective.store_key("ip:1.2.3.4") == "rl:api:ip:1.2.3.4"
