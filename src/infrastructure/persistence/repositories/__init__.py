"""Repository implementations (adapters) for the domain repository ports."""

from src.infrastructure.persistence.repositories.config_change_repository import (
    ConfigChangeRepository,
)
from src.infrastructure.persistence.repositories.rate_limit_config_repository import (
    RateLimitConfigRepository,
)
from src.infrastructure.persistence.repositories.reference_data_repository import (
    ReferenceDataRepository,
)
from src.infrastructure.persistence.repositories.usage_sample_repository import (
    UsageSampleRepository,
)

__all__ = [
    "ConfigChangeRepository",
    "RateLimitConfigRepository",
    "ReferenceDataRepository",
    "UsageSampleRepository",
]
