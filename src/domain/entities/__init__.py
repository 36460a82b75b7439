"""Domain entities for the rate limit subsystem.

Pure business logic entities with no framework dependencies.
"""

from src.domain.entities.config_change_record import ConfigChangeRecord
from src.domain.entities.rate_limit_config import (
    DEFAULT_MESSAGE,
    RateLimitConfig,
    diff_snapshots,
)
from src.domain.entities.reference_data import Application, Role, Service
from src.domain.entities.usage_sample import UsageSample

__all__ = [
    "Application",
    "ConfigChangeRecord",
    "DEFAULT_MESSAGE",
    "RateLimitConfig",
    "Role",
    "Service",
    "UsageSample",
    "diff_snapshots",
]
