"""Integration tests for UsageSampleRecorder.

Tests cover:
- Event handlers feeding hourly buckets
- Flush into the database, merging into existing hour rows
- A failed flush keeps the buffer
"""

from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from src.domain.events.rate_limit_events import (
    RateLimitCheckDenied,
    RateLimitRequestCompleted,
)
from src.infrastructure.persistence.repositories import UsageSampleRepository
from src.infrastructure.rate_limit.usage_recorder import (
    UsageSampleRecorder,
    hour_bucket,
)

NOW = datetime(2026, 3, 1, 10, 42, 7, tzinfo=UTC)


class MovableClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


class UnavailableDatabase:
    """Database double whose sessions cannot be opened."""

    @asynccontextmanager
    async def get_session(self):
        raise ConnectionError("database is down")
        yield  # pragma: no cover


@pytest.fixture
def usage_clock():
    return MovableClock(NOW)


@pytest.fixture
def recorder(database, usage_clock):
    return UsageSampleRecorder(
        database=database, logger=MagicMock(), clock=usage_clock
    )


async def _samples(database):
    async with database.get_session() as session:
        return await UsageSampleRepository(session).list_between(
            NOW - timedelta(days=1), NOW + timedelta(days=1)
        )


def test_hour_bucket_truncates_to_utc_hour():
    assert hour_bucket(NOW) == datetime(2026, 3, 1, 10, tzinfo=UTC)


class TestRecording:
    """Tests for event handlers and buffering."""

    async def test_events_roll_up_per_config_and_hour(self, recorder):
        await recorder.handle_rate_limit_check_denied(
            RateLimitCheckDenied(
                config_name="auth",
                key="ip:1",
                outcome="limited",
                current_count=11,
                max_allowed=10,
                retry_after=60,
            )
        )
        await recorder.handle_rate_limit_request_completed(
            RateLimitRequestCompleted(config_name="auth", key="ip:1", status_code=200)
        )
        await recorder.handle_rate_limit_request_completed(
            RateLimitRequestCompleted(config_name="auth", key="ip:1", status_code=401)
        )

        [sample] = recorder.pending

        assert sample.config_name == "auth"
        assert sample.bucket_start == datetime(2026, 3, 1, 10, tzinfo=UTC)
        assert (sample.request_count, sample.blocked_count, sample.error_count) == (
            3,
            1,
            1,
        )

    async def test_separate_hours_stay_separate(self, recorder, usage_clock):
        recorder.record("api", requests=1)
        usage_clock.now = NOW + timedelta(hours=1)
        recorder.record("api", requests=1)

        assert len(recorder.pending) == 2


class TestFlush:
    """Tests for flush()."""

    async def test_flush_persists_and_clears_buffer(self, recorder, database):
        recorder.record("api", requests=5, blocked=2)
        recorder.record("auth", requests=1, errors=1)

        written = await recorder.flush()

        assert written == 2
        assert recorder.pending == []
        by_name = {s.config_name: s for s in await _samples(database)}
        assert by_name["api"].request_count == 5
        assert by_name["api"].blocked_count == 2
        assert by_name["auth"].error_count == 1

    async def test_flush_merges_into_existing_hour(self, recorder, database):
        recorder.record("api", requests=5)
        await recorder.flush()
        recorder.record("api", requests=3, blocked=1)
        await recorder.flush()

        [sample] = await _samples(database)

        assert sample.request_count == 8
        assert sample.blocked_count == 1

    async def test_empty_flush_is_noop(self, recorder):
        assert await recorder.flush() == 0

    async def test_failed_flush_keeps_buffer(self, usage_clock):
        logger = MagicMock()
        recorder = UsageSampleRecorder(
            database=UnavailableDatabase(), logger=logger, clock=usage_clock
        )
        recorder.record("api", requests=2)

        assert await recorder.flush() == 0

        [sample] = recorder.pending
        assert sample.request_count == 2
        assert logger.warning.call_args.args[0] == "rate_limit_usage_flush_failed"
