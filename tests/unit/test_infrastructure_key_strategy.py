"""Unit tests for KeyStrategyEngine and TemplateKeyGenerator.

Tests cover:
- Key formats for every strategy
- IP fallback when a dimension is missing
- Custom template rendering and fallback on failure or timeout
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from src.core.result import Failure, Success
from src.domain.enums import KeyStrategy
from src.domain.value_objects.request_context import RequestContextView
from src.infrastructure.rate_limit.key_strategy import KeyStrategyEngine
from src.infrastructure.rate_limit.template_key_generator import (
    TemplateKeyGenerator,
)
from tests.conftest import create_config, create_context


def _effective(key_strategy, custom_key_generator=None):
    return create_config(
        key_strategy=key_strategy, custom_key_generator=custom_key_generator
    ).resolve_effective("testing")


class _SlowGenerator:
    """Generator that awaits longer than any test timeout."""

    def validate(self, source):
        return Success(value=None)

    async def generate(self, source, view):
        await asyncio.sleep(1)
        return "never"


@pytest.fixture
def engine(mock_logger):
    return KeyStrategyEngine(
        custom_generator=TemplateKeyGenerator(), logger=mock_logger, timeout_ms=50
    )


# =============================================================================
# Built-in strategies
# =============================================================================


class TestBuiltInStrategies:
    """Tests for application, role, component and IP keys."""

    @pytest.mark.parametrize(
        ("strategy", "context_values", "expected"),
        [
            (KeyStrategy.IP, {}, "ip:10.0.0.1"),
            (KeyStrategy.APPLICATION, {"application_id": "app-1"}, "app:app-1"),
            (KeyStrategy.ROLE, {"role_id": "premium"}, "role:premium"),
            (
                KeyStrategy.COMPONENT,
                {"service_id": "billing", "procedure_name": "export"},
                "comp:billing:export",
            ),
            (KeyStrategy.COMPONENT, {"service_id": "billing"}, "comp:billing"),
        ],
    )
    async def test_key_formats(self, engine, strategy, context_values, expected):
        key = await engine.derive_key(
            _effective(strategy), create_context(**context_values)
        )
        assert key == expected

    @pytest.mark.parametrize(
        "strategy",
        [KeyStrategy.APPLICATION, KeyStrategy.ROLE, KeyStrategy.COMPONENT],
    )
    async def test_missing_dimension_falls_back_to_ip(self, engine, strategy):
        key = await engine.derive_key(_effective(strategy), create_context())
        assert key == "ip:10.0.0.1"

    async def test_unknown_ip_fallback(self, engine):
        key = await engine.derive_key(_effective(KeyStrategy.IP), create_context(ip=""))
        assert key == "ip:unknown"


# =============================================================================
# Custom strategy
# =============================================================================


class TestCustomStrategy:
    """Tests for custom key generator evaluation."""

    async def test_template_rendered(self, engine):
        config = _effective(KeyStrategy.CUSTOM, "tenant:{headers.x-tenant-id}")
        context = create_context(headers={"x-tenant-id": "acme"})

        assert await engine.derive_key(config, context) == "tenant:acme"

    async def test_missing_field_falls_back_and_warns(self, engine, mock_logger):
        config = _effective(KeyStrategy.CUSTOM, "user:{user_id}")

        key = await engine.derive_key(config, create_context())

        assert key == "ip:10.0.0.1"
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.args[0] == "rate_limit_key_fallback"

    async def test_generator_timeout_falls_back(self, mock_logger):
        generator = AsyncMock()
        generator.generate.side_effect = asyncio.TimeoutError()
        engine = KeyStrategyEngine(custom_generator=generator, logger=mock_logger)
        config = _effective(KeyStrategy.CUSTOM, "user:{user_id}")

        key = await engine.derive_key(config, create_context(user_id="u-1"))

        assert key == "ip:10.0.0.1"
        assert mock_logger.warning.call_args.kwargs["error_type"] == "TimeoutError"

    async def test_slow_generator_cut_off_by_timeout(self, mock_logger):
        engine = KeyStrategyEngine(
            custom_generator=_SlowGenerator(), logger=mock_logger, timeout_ms=10
        )
        config = _effective(KeyStrategy.CUSTOM, "user:{user_id}")

        key = await engine.derive_key(config, create_context(user_id="u-1"))

        assert key == "ip:10.0.0.1"
        assert mock_logger.warning.call_args.kwargs["error_type"] == "TimeoutError"

    async def test_oversized_value_falls_back(self, engine, mock_logger):
        config = _effective(KeyStrategy.CUSTOM, "tenant:{headers.x-tenant-id}")
        context = create_context(headers={"x-tenant-id": "t" * 10_000})

        key = await engine.derive_key(config, context)

        assert key == "ip:10.0.0.1"
        assert mock_logger.warning.call_args.kwargs["error_type"] == "ValueError"


class TestTemplateKeyGenerator:
    """Tests for TemplateKeyGenerator.validate()."""

    def test_validate_accepts_known_fields(self):
        generator = TemplateKeyGenerator()
        assert isinstance(generator.validate("{ip}:{method}"), Success)

    def test_validate_rejects_unknown_fields(self):
        generator = TemplateKeyGenerator()
        assert isinstance(generator.validate("{os.environ}"), Failure)

    async def test_generate_invalid_template_raises(self):
        generator = TemplateKeyGenerator()
        with pytest.raises(ValueError):
            await generator.generate("{nope}", RequestContextView(create_context()))
