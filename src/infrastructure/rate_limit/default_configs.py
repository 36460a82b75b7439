"""Default rate limit configurations.

Seeds the built-in configurations every deployment starts with (one per
traffic class). Idempotent via name uniqueness check - safe to run on every
startup and after every migration. Existing rows are never touched, so
values edited through the admin API survive restarts.

Called from:
    - ``src.main.lifespan`` when RATE_LIMIT_SEED_DEFAULTS is true
    - ``alembic/env.py`` after ``alembic upgrade``
"""

from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extensions import uuid7

from src.core.result import Failure
from src.domain.entities.config_change_record import ConfigChangeRecord
from src.domain.entities.rate_limit_config import RateLimitConfig, diff_snapshots
from src.domain.enums import ChangeAction, KeyStrategy, RateLimitType
from src.infrastructure.persistence.repositories import (
    ConfigChangeRepository,
    RateLimitConfigRepository,
)

logger = structlog.get_logger(__name__)

SEEDED_BY = "system"

DEFAULT_CONFIGS: list[dict[str, Any]] = [
    {
        "name": "api",
        "display_name": "Public API",
        "type": RateLimitType.API,
        "window_ms": 60_000,
        "max": 1000,
        "key_strategy": KeyStrategy.IP,
        "description": "General API traffic, keyed by client IP.",
    },
    {
        "name": "auth",
        "display_name": "Authentication",
        "type": RateLimitType.AUTH,
        "window_ms": 60_000,
        "max": 10,
        "key_strategy": KeyStrategy.IP,
        "block_duration_ms": 15 * 60_000,
        "description": "Login and token endpoints. Offenders are blocked "
        "for 15 minutes.",
        "message": "Too many authentication attempts, please try again later.",
    },
    {
        "name": "upload",
        "display_name": "Uploads",
        "type": RateLimitType.UPLOAD,
        "window_ms": 60_000,
        "max": 10,
        "key_strategy": KeyStrategy.APPLICATION,
        "description": "File uploads, keyed by calling application.",
    },
    {
        "name": "graphql",
        "display_name": "GraphQL",
        "type": RateLimitType.GRAPHQL,
        "window_ms": 60_000,
        "max": 200,
        "key_strategy": KeyStrategy.APPLICATION,
        "description": "GraphQL queries, keyed by calling application.",
    },
    {
        "name": "websocket",
        "display_name": "WebSocket",
        "type": RateLimitType.WEBSOCKET,
        "window_ms": 60_000,
        "max": 50,
        "key_strategy": KeyStrategy.IP,
        "description": "WebSocket connection attempts, keyed by client IP.",
    },
]


async def seed_default_configs(session: AsyncSession) -> int:
    """Create missing default configurations.

    Each inserted config also gets a "created" change record so the history
    endpoint shows where it came from.

    Args:
        session: Async database session. Committed on return when anything
            was inserted.

    Returns:
        Number of configurations inserted.
    """
    config_repo = RateLimitConfigRepository(session)
    change_repo = ConfigChangeRepository(session)
    seeded_count = 0
    skipped_count = 0

    for data in DEFAULT_CONFIGS:
        if await config_repo.find_by_name(data["name"]) is not None:
            skipped_count += 1
            logger.debug("rate_limit_config_exists", name=data["name"])
            continue

        now = datetime.now(UTC)
        config = RateLimitConfig(
            id=uuid7(),
            created_by=SEEDED_BY,
            updated_by=SEEDED_BY,
            created_at=now,
            updated_at=now,
            **data,
        )
        owner = await config_repo.find_overlapping_prefix(config.prefix)
        if owner is not None:
            skipped_count += 1
            logger.warning(
                "rate_limit_config_seed_prefix_taken",
                name=config.name,
                prefix=config.prefix,
                owner=owner.name,
            )
            continue

        match await config_repo.save(config):
            case Failure(error=error):
                # Another process seeded concurrently; the session was rolled back.
                logger.warning(
                    "rate_limit_config_seeding_aborted",
                    name=config.name,
                    error=error.message,
                )
                return 0
        await change_repo.append(
            ConfigChangeRecord(
                id=uuid7(),
                config_name=config.name,
                config_display_name=config.display_name,
                config_type=config.type,
                action=ChangeAction.CREATED,
                changed_by=SEEDED_BY,
                changes=diff_snapshots({}, config.audit_snapshot()),
                reason="Default configuration",
                changed_at=now,
            )
        )
        seeded_count += 1
        logger.info("rate_limit_config_seeded", name=config.name, id=str(config.id))

    if seeded_count:
        await config_repo.commit()

    logger.info(
        "rate_limit_config_seeding_complete",
        seeded=seeded_count,
        skipped=skipped_count,
        total=len(DEFAULT_CONFIGS),
    )
    return seeded_count
