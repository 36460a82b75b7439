"""Attribution of counter store records to configurations.

Counter hashes remember the config that created them; block-only records
do not, so they are attributed by the longest matching prefix.
"""

from collections.abc import Iterable

from src.application.dtos import ActiveLimit
from src.domain.entities.rate_limit_config import RateLimitConfig
from src.domain.value_objects.counter import ActiveLimitRecord

UNKNOWN_CONFIG = "unknown"


def attribute_records(
    records: Iterable[ActiveLimitRecord], configs: Iterable[RateLimitConfig]
) -> list[ActiveLimit]:
    """Attach each record to its configuration, with the prefix stripped."""
    by_name = {config.name: config for config in configs}
    by_prefix = sorted(by_name.values(), key=lambda c: len(c.prefix), reverse=True)

    limits: list[ActiveLimit] = []
    for record in records:
        config = by_name.get(record.config_name) or next(
            (c for c in by_prefix if record.key.startswith(c.prefix)), None
        )
        if config is None:
            name, key, max_allowed = (
                record.config_name or UNKNOWN_CONFIG,
                record.key,
                record.max_allowed,
            )
        else:
            name = config.name
            key = record.relative_key(config.prefix)
            max_allowed = record.max_allowed or config.max
        utilization = record.current_count * 100.0 / max_allowed if max_allowed else 0.0
        limits.append(
            ActiveLimit(
                key=key,
                config_name=name,
                current_count=record.current_count,
                max_allowed=max_allowed,
                reset_time=record.reset_time,
                blocked=record.blocked,
                blocked_until=record.blocked_until,
                utilization=round(utilization, 2),
            )
        )
    return limits


def top_by_count(limits: Iterable[ActiveLimit], limit: int) -> list[ActiveLimit]:
    """Highest ``current_count`` first; ties ordered by config and key."""
    ordered = sorted(limits, key=lambda a: (-a.current_count, a.config_name, a.key))
    return ordered[:limit]
