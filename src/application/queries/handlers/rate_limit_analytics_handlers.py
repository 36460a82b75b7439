"""Analytics and history query handlers.

Read-only summaries over change records, usage samples and counter store
snapshots. Every handler tolerates missing data: a cold start (no samples,
no changes) or an unreachable counter store yields zeroed structures so
the dashboard always renders.
"""

from collections import Counter
from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta

from src.application.dtos import (
    ActiveLimit,
    ConfigStatsBucket,
    HistorySummary,
    RateLimitHistory,
    RateLimitOverview,
    UsageBand,
    UsageBucket,
)
from src.application.errors import ApplicationError
from src.application.queries.rate_limit_queries import (
    DEFAULT_TOP_LIMIT,
    GetRateLimitHistory,
    GetRateLimitOverview,
    GetTopLimitedKeys,
    GetUsageDistribution,
)
from src.application.services import attribute_records, top_by_count
from src.core.result import Failure, Result, Success
from src.domain.enums import ChangeAction, Granularity, RateLimitType
from src.domain.protocols import (
    ConfigChangeRepository,
    CounterStoreProtocol,
    LoggerProtocol,
    RateLimitConfigRepository,
    UsageSampleRepository,
)

# (label, lower bound inclusive) in ascending order; the last band is open.
USAGE_BANDS: tuple[tuple[str, float], ...] = (
    ("0-24", 0.0),
    ("25-49", 25.0),
    ("50-74", 50.0),
    ("75-89", 75.0),
    ("90-100+", 90.0),
)

RECENT_CHANGES_LIMIT = 10


def _utc_now() -> datetime:
    return datetime.now(UTC)


def usage_distribution(limits: Iterable[ActiveLimit]) -> list[UsageBand]:
    """Histogram of active limits by utilization band (all bands present)."""
    counts = dict.fromkeys((label for label, _ in USAGE_BANDS), 0)
    for limit in limits:
        label = USAGE_BANDS[0][0]
        for band, lower in USAGE_BANDS:
            if limit.utilization >= lower:
                label = band
        counts[label] += 1
    return [UsageBand(label=label, count=count) for label, count in counts.items()]


def bucket_start(moment: datetime, granularity: Granularity) -> datetime:
    """Floor ``moment`` to the start of its hour or day (UTC)."""
    floored = moment.astimezone(UTC).replace(minute=0, second=0, microsecond=0)
    if granularity is Granularity.DAY:
        floored = floored.replace(hour=0)
    return floored


class _ActiveLimitsReader:
    """Shared best-effort read of attributed active limits."""

    def __init__(
        self,
        config_repo: RateLimitConfigRepository,
        counter_store: CounterStoreProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._config_repo = config_repo
        self._counter_store = counter_store
        self._logger = logger

    async def _active_limits(self) -> list[ActiveLimit]:
        match await self._counter_store.list_active():
            case Failure(error=error):
                self._logger.warning(
                    "rate_limit_analytics_store_unavailable", error=error.message
                )
                return []
            case Success(value=records):
                return attribute_records(records, await self._config_repo.list())


class GetTopLimitedKeysHandler(_ActiveLimitsReader):
    """Handler for the most loaded keys."""

    async def handle(
        self, query: GetTopLimitedKeys
    ) -> Result[list[ActiveLimit], ApplicationError]:
        limits = await self._active_limits()
        return Success(value=top_by_count(limits, max(query.limit, 0)))


class GetUsageDistributionHandler(_ActiveLimitsReader):
    """Handler for the utilization histogram."""

    async def handle(
        self, query: GetUsageDistribution
    ) -> Result[list[UsageBand], ApplicationError]:
        return Success(value=usage_distribution(await self._active_limits()))


class GetRateLimitOverviewHandler(_ActiveLimitsReader):
    """Handler for the dashboard overview."""

    def __init__(
        self,
        config_repo: RateLimitConfigRepository,
        change_repo: ConfigChangeRepository,
        counter_store: CounterStoreProtocol,
        logger: LoggerProtocol,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        super().__init__(config_repo, counter_store, logger)
        self._change_repo = change_repo
        self._clock = clock

    async def handle(
        self, query: GetRateLimitOverview
    ) -> Result[RateLimitOverview, ApplicationError]:
        now = self._clock()
        configs = await self._config_repo.list()
        limits = await self._active_limits()
        recent = await self._change_repo.list_between(
            now - query.time_range.duration, now, limit=RECENT_CHANGES_LIMIT
        )

        by_type: dict[RateLimitType, int] = Counter(config.type for config in configs)
        return Success(
            value=RateLimitOverview(
                time_range=query.time_range.value,
                total_configs=len(configs),
                enabled_configs=sum(1 for config in configs if config.enabled),
                configs_by_type=dict(by_type),
                active_limits_count=sum(1 for a in limits if a.current_count > 0),
                blocked_keys_count=sum(1 for a in limits if a.blocked),
                top_limited_keys=top_by_count(limits, DEFAULT_TOP_LIMIT),
                usage_distribution=usage_distribution(limits),
                recent_changes=recent,
            )
        )


class GetRateLimitHistoryHandler:
    """Handler for historical trends.

    Bucket width comes from the time range (hour up to 6h, day beyond),
    which keeps the number of buckets bounded whatever the caller asks for.
    """

    def __init__(
        self,
        change_repo: ConfigChangeRepository,
        usage_repo: UsageSampleRepository,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._change_repo = change_repo
        self._usage_repo = usage_repo
        self._clock = clock

    async def handle(
        self, query: GetRateLimitHistory
    ) -> Result[RateLimitHistory, ApplicationError]:
        end = self._clock()
        start = end - query.time_range.duration
        granularity = query.time_range.granularity
        first = bucket_start(start, granularity)

        changes = await self._change_repo.list_between(
            start, end, config_name=query.config_name
        )
        samples = await self._usage_repo.list_between(
            bucket_start(start, Granularity.HOUR), end, config_name=query.config_name
        )

        starts = _bucket_starts(first, end, granularity.step)
        change_buckets: dict[datetime, list] = {s: [] for s in starts}
        for record in changes:
            change_buckets.setdefault(
                bucket_start(record.changed_at, granularity), []
            ).append(record)

        usage: dict[datetime, list[int]] = {s: [0, 0, 0] for s in starts}
        for sample in samples:
            totals = usage.setdefault(
                bucket_start(sample.bucket_start, granularity), [0, 0, 0]
            )
            totals[0] += sample.request_count
            totals[1] += sample.blocked_count
            totals[2] += sample.error_count

        config_stats = [
            ConfigStatsBucket(
                bucket_start=moment,
                changes=len(records),
                configs_changed=len({r.config_name for r in records}),
                created=sum(1 for r in records if r.action is ChangeAction.CREATED),
                deleted=sum(1 for r in records if r.action is ChangeAction.DELETED),
            )
            for moment, records in sorted(change_buckets.items())
        ]
        usage_data = [
            UsageBucket(
                bucket_start=moment,
                requests=totals[0],
                blocked=totals[1],
                errors=totals[2],
            )
            for moment, totals in sorted(usage.items())
        ]

        by_config = Counter(record.config_name for record in changes)
        by_editor = Counter(record.changed_by for record in changes)
        summary = HistorySummary(
            total_changes=len(changes),
            most_changed_config=by_config.most_common(1)[0][0] if by_config else None,
            most_active_editor=by_editor.most_common(1)[0][0] if by_editor else None,
            total_requests=sum(b.requests for b in usage_data),
            total_blocked=sum(b.blocked for b in usage_data),
        )

        return Success(
            value=RateLimitHistory(
                start_date=start,
                end_date=end,
                granularity=granularity,
                config_stats=config_stats,
                usage_data=usage_data,
                changes=changes,
                summary=summary,
            )
        )


def _bucket_starts(first: datetime, end: datetime, step: timedelta) -> list[datetime]:
    starts: list[datetime] = []
    moment = first
    while moment <= end:
        starts.append(moment)
        moment += step
    return starts
