"""Usage sample recorder.

Rolls enforcement events up into hourly per-config counters and flushes
them to the database in the background. Enforcement never waits on this:
event handlers only touch an in-process buffer, and a failed flush keeps
the buffer for the next attempt.
"""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime

from src.domain.entities.usage_sample import UsageSample
from src.domain.events.rate_limit_events import (
    RateLimitCheckDenied,
    RateLimitRequestCompleted,
)
from src.domain.protocols import LoggerProtocol
from src.infrastructure.persistence.database import Database
from src.infrastructure.persistence.repositories import UsageSampleRepository


def _utc_now() -> datetime:
    return datetime.now(UTC)


def hour_bucket(moment: datetime) -> datetime:
    """Start of the UTC hour containing ``moment``."""
    return moment.astimezone(UTC).replace(minute=0, second=0, microsecond=0)


class UsageSampleRecorder:
    """Buffers usage counts and periodically persists them.

    Args:
        database: Target for flushed samples.
        logger: Structured logger.
        clock: Current UTC datetime (injectable for tests).
    """

    def __init__(
        self,
        *,
        database: Database,
        logger: LoggerProtocol,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._database = database
        self._logger = logger
        self._clock = clock
        self._buffer: dict[tuple[str, datetime], UsageSample] = {}
        self._flush_lock = asyncio.Lock()

    @property
    def pending(self) -> list[UsageSample]:
        return list(self._buffer.values())

    def record(
        self,
        config_name: str,
        *,
        requests: int = 0,
        blocked: int = 0,
        errors: int = 0,
    ) -> None:
        """Add counts to the current hour's sample for ``config_name``."""
        self._add(
            UsageSample(
                config_name=config_name,
                bucket_start=hour_bucket(self._clock()),
                request_count=requests,
                blocked_count=blocked,
                error_count=errors,
            )
        )

    async def handle_rate_limit_check_denied(self, event: RateLimitCheckDenied) -> None:
        self.record(event.config_name, requests=1, blocked=1)

    async def handle_rate_limit_request_completed(
        self, event: RateLimitRequestCompleted
    ) -> None:
        self.record(
            event.config_name,
            requests=1,
            errors=1 if event.status_code >= 400 else 0,
        )

    async def flush(self) -> int:
        """Persist buffered samples.

        Returns:
            Number of (config, hour) samples written. On failure the samples
            are merged back into the buffer and 0 is returned.
        """
        async with self._flush_lock:
            if not self._buffer:
                return 0
            samples = list(self._buffer.values())
            self._buffer = {}
            try:
                async with self._database.get_session() as session:
                    await UsageSampleRepository(session).add_counts(samples)
            except Exception as e:
                for sample in samples:
                    self._add(sample)
                self._logger.warning(
                    "rate_limit_usage_flush_failed",
                    samples=len(samples),
                    error=str(e),
                )
                return 0

        self._logger.debug("rate_limit_usage_flushed", samples=len(samples))
        return len(samples)

    async def run_periodic(self, interval_seconds: float) -> None:
        """Flush every ``interval_seconds`` until cancelled, then flush once more."""
        try:
            while True:
                await asyncio.sleep(interval_seconds)
                await self.flush()
        except asyncio.CancelledError:
            await self.flush()
            raise

    def _add(self, sample: UsageSample) -> None:
        slot = (sample.config_name, sample.bucket_start)
        existing = self._buffer.get(slot)
        if existing is None:
            self._buffer[slot] = sample
        else:
            existing.merge(sample)
