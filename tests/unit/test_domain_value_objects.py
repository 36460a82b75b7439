"""Unit tests for rate limit value objects.

Tests cover:
- Override precedence (component > role > application > global)
- Service-wide component limits vs exact procedure matches
- Key template parsing and rendering
- RateLimitDecision derived values (retry-after, remaining, decrement rules)
- LimitState derivation and counter snapshots
- TimeRange granularity policy
"""

import pytest

from src.core.result import Failure, Success
from src.domain.enums import Granularity, LimitState, TimeRange
from src.domain.value_objects.counter import ActiveLimitRecord, CounterSnapshot
from src.domain.value_objects.key_template import KeyTemplate
from src.domain.value_objects.limit_override import (
    ApplicationLimit,
    ApplicationOverrideProvider,
    ComponentLimit,
    ComponentOverrideProvider,
    RoleLimit,
    RoleOverrideProvider,
    resolve_max,
)
from src.domain.value_objects.rate_limit_decision import (
    DecisionOutcome,
    RateLimitDecision,
)
from src.domain.value_objects.request_context import RequestContextView
from tests.conftest import create_context


# =============================================================================
# Override precedence
# =============================================================================


class TestOverrideResolution:
    """Tests for resolve_max() and the override providers."""

    def _providers(self):
        return (
            ComponentOverrideProvider(
                (
                    ComponentLimit(service_id="billing", procedure_name="", max=50),
                    ComponentLimit(
                        service_id="billing", procedure_name="export", max=5
                    ),
                )
            ),
            RoleOverrideProvider((RoleLimit(role_id="premium", max=500),)),
            ApplicationOverrideProvider(
                (ApplicationLimit(application_id="app-1", max=200),)
            ),
        )

    def test_no_match_uses_global(self):
        assert resolve_max(self._providers(), create_context(), 100) == (100, "global")

    def test_exact_procedure_beats_service_wide(self):
        context = create_context(service_id="billing", procedure_name="export")
        assert resolve_max(self._providers(), context, 100) == (5, "component")

    def test_service_wide_applies_to_other_procedures(self):
        context = create_context(service_id="billing", procedure_name="invoice")
        assert resolve_max(self._providers(), context, 100) == (50, "component")

    def test_component_beats_role_and_application(self):
        context = create_context(
            service_id="billing",
            procedure_name="export",
            role_id="premium",
            application_id="app-1",
        )
        assert resolve_max(self._providers(), context, 100) == (5, "component")

    def test_role_beats_application(self):
        context = create_context(role_id="premium", application_id="app-1")
        assert resolve_max(self._providers(), context, 100) == (500, "role")

    def test_stale_override_reference_never_matches(self):
        context = create_context(application_id="deleted-app")
        assert resolve_max(self._providers(), context, 100) == (100, "global")

    def test_overrides_are_not_summed(self):
        providers = (
            ApplicationOverrideProvider(
                (
                    ApplicationLimit(application_id="app-1", max=10),
                    ApplicationLimit(application_id="app-1", max=20),
                )
            ),
        )
        context = create_context(application_id="app-1")
        assert resolve_max(providers, context, 100) == (10, "application")


# =============================================================================
# Key templates
# =============================================================================


class TestKeyTemplate:
    """Tests for KeyTemplate.parse() and render()."""

    def test_parse_collects_fields(self):
        result = KeyTemplate.parse("tenant:{headers.x-tenant-id}:{user_id}")

        assert isinstance(result, Success)
        assert result.value.fields == ("headers.x-tenant-id", "user_id")

    @pytest.mark.parametrize(
        "source",
        [
            "",
            "   ",
            "no-fields-here",
            "{password}",
            "{ip!r}",
            "{ip:>10}",
            "{headers}",
            "{user_id.__class__}",
            "{unclosed",
            "x" * 201 + "{ip}",
        ],
    )
    def test_parse_rejects_invalid_templates(self, source):
        assert isinstance(KeyTemplate.parse(source), Failure)

    def test_render_substitutes_request_values(self):
        template = KeyTemplate.parse("t:{headers.X-Tenant}:{query.region}").value
        view = RequestContextView(
            create_context(headers={"x-tenant": "acme"}, query={"region": "eu"})
        )

        assert template.render(view) == "t:acme:eu"

    def test_render_missing_field_raises_lookup_error(self):
        template = KeyTemplate.parse("user:{user_id}").value

        with pytest.raises(LookupError):
            template.render(RequestContextView(create_context()))

    def test_render_overlong_key_raises_value_error(self):
        template = KeyTemplate.parse("{headers.x-big}").value
        view = RequestContextView(create_context(headers={"x-big": "a" * 300}))

        with pytest.raises(ValueError):
            template.render(view)

    def test_view_rejects_unknown_names(self):
        view = RequestContextView(create_context())

        with pytest.raises(KeyError):
            view.lookup("secret")


# =============================================================================
# Decisions
# =============================================================================


class TestRateLimitDecision:
    """Tests for RateLimitDecision derived properties."""

    def test_retry_after_rounds_up_to_whole_seconds(self):
        decision = RateLimitDecision(
            allowed=False,
            outcome=DecisionOutcome.LIMITED,
            config_name="api",
            reset_time=10_001,
            now_ms=0,
        )
        assert decision.retry_after_seconds == 11

    def test_retry_after_is_at_least_one_when_denied(self):
        decision = RateLimitDecision(
            allowed=False,
            outcome=DecisionOutcome.LIMITED,
            config_name="api",
            reset_time=1000,
            now_ms=1000,
        )
        assert decision.retry_after_seconds == 1

    def test_allowed_decision_has_no_retry_after(self):
        decision = RateLimitDecision(
            allowed=True, outcome=DecisionOutcome.ALLOWED, config_name="api"
        )
        assert decision.retry_after_seconds == 0

    def test_remaining_never_negative(self):
        decision = RateLimitDecision(
            allowed=False,
            outcome=DecisionOutcome.LIMITED,
            config_name="api",
            current_count=7,
            max_allowed=5,
        )
        assert decision.remaining == 0

    @pytest.mark.parametrize(
        ("skip_ok", "skip_failed", "status", "expected"),
        [
            (True, False, 200, True),
            (True, False, 500, False),
            (False, True, 404, True),
            (False, True, 302, False),
            (False, False, 200, False),
        ],
    )
    def test_should_decrement(self, skip_ok, skip_failed, status, expected):
        decision = RateLimitDecision(
            allowed=True,
            outcome=DecisionOutcome.ALLOWED,
            config_name="api",
            counted=True,
            skip_successful_requests=skip_ok,
            skip_failed_requests=skip_failed,
        )
        assert decision.should_decrement(status) is expected

    def test_uncounted_request_never_decrements(self):
        decision = RateLimitDecision(
            allowed=True,
            outcome=DecisionOutcome.STORE_FAILED_OPEN,
            config_name="api",
            counted=False,
            skip_successful_requests=True,
        )
        assert decision.should_decrement(200) is False


# =============================================================================
# Counter state
# =============================================================================


class TestLimitState:
    """Tests for LimitState derivation."""

    @pytest.mark.parametrize(
        ("count", "blocked", "expected"),
        [
            (0, False, LimitState.FRESH),
            (None, False, LimitState.FRESH),
            (3, False, LimitState.COUNTING),
            (5, False, LimitState.COUNTING),
            (6, False, LimitState.AT_LIMIT),
            (0, True, LimitState.BLOCKED),
        ],
    )
    def test_state_of(self, count, blocked, expected):
        assert (
            LimitState.of(current_count=count, max_allowed=5, blocked=blocked)
            is expected
        )

    def test_snapshot_prefers_explicit_max(self):
        snapshot = CounterSnapshot(current_count=6, reset_time=1000, max_allowed=5)

        assert snapshot.state() is LimitState.AT_LIMIT
        assert snapshot.state(max_allowed=10) is LimitState.COUNTING

    def test_active_record_utilization_and_relative_key(self):
        record = ActiveLimitRecord(
            key="rl:api:ip:1.2.3.4",
            config_name="api",
            current_count=3,
            max_allowed=4,
            reset_time=0,
        )

        assert record.utilization == 75.0
        assert record.relative_key("rl:api:") == "ip:1.2.3.4"


class TestTimeRange:
    """Tests for analytics bucket granularity."""

    @pytest.mark.parametrize(
        ("time_range", "granularity"),
        [
            (TimeRange.LAST_HOUR, Granularity.HOUR),
            (TimeRange.LAST_6_HOURS, Granularity.HOUR),
            (TimeRange.LAST_24_HOURS, Granularity.DAY),
            (TimeRange.LAST_30_DAYS, Granularity.DAY),
        ],
    )
    def test_granularity_policy(self, time_range, granularity):
        assert time_range.granularity is granularity
