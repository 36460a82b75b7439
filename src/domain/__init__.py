"""Domain layer - Pure rate limiting logic.

Entities, value objects, protocols (ports) and domain events of the rate
limit subsystem. No framework or infrastructure dependencies.

Structure:
- entities/: RateLimitConfig, ConfigChangeRecord, UsageSample, reference data
- value_objects/: Request context, key templates, overrides, counter results
- protocols/: Counter store, repositories, logging, events, token validation
- events/: Enforcement and administration events
"""
