"""Domain protocols (ports) package.

Protocol definitions the domain needs. Infrastructure adapters implement
them without inheritance.

IMPORTANT: Re-exports are ONLY for protocols defined in this package.

Usage:
    from src.domain.protocols import CounterStoreProtocol, RateLimitConfigRepository
"""

# Service protocols
from src.domain.protocols.counter_store_protocol import CounterStoreProtocol
from src.domain.protocols.event_bus_protocol import EventBusProtocol, EventHandler
from src.domain.protocols.key_generator_protocol import CustomKeyGeneratorProtocol
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.domain.protocols.token_validation_protocol import TokenValidationProtocol

# Repository protocols
from src.domain.protocols.config_change_repository import ConfigChangeRepository
from src.domain.protocols.rate_limit_config_repository import (
    RateLimitConfigRepository,
)
from src.domain.protocols.reference_data_repository import ReferenceDataRepository
from src.domain.protocols.usage_sample_repository import UsageSampleRepository

__all__ = [
    # Service protocols
    "CounterStoreProtocol",
    "CustomKeyGeneratorProtocol",
    "EventBusProtocol",
    "EventHandler",
    "LoggerProtocol",
    "TokenValidationProtocol",
    # Repository protocols
    "ConfigChangeRepository",
    "RateLimitConfigRepository",
    "ReferenceDataRepository",
    "UsageSampleRepository",
]
