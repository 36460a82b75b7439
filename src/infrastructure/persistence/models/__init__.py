"""Database models for persistence layer.

SQLAlchemy models mapping to tables. Infrastructure concern only; the
domain layer never imports them.

Models Organization:
    - rate_limit_config.py: configurations, change records, usage samples
    - reference_data.py: applications, roles, services (read-only here)

Note:
    Domain entities (dataclasses) live in src/domain/entities/ and are
    mapped to these models by the repositories.
"""

from src.infrastructure.persistence.models.rate_limit_config import (
    RateLimitConfigChangeModel,
    RateLimitConfigModel,
    RateLimitUsageSampleModel,
)
from src.infrastructure.persistence.models.reference_data import (
    ApplicationModel,
    RoleModel,
    ServiceModel,
)

__all__ = [
    "ApplicationModel",
    "RateLimitConfigChangeModel",
    "RateLimitConfigModel",
    "RateLimitUsageSampleModel",
    "RoleModel",
    "ServiceModel",
]
