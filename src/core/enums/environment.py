"""Application environment types.

Defines the runtime environments the rate limit service runs in. Used by
Settings to pick adapters, and by the configuration resolver to select the
matching ``environmentOverrides`` entry of a rate limit configuration.

Environments:
- DEVELOPMENT: Local development, console logs, in-memory counters allowed
- TESTING: Automated test execution
- CI: Continuous integration
- PRODUCTION: Production deployment
"""

from enum import Enum


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    CI = "ci"
    PRODUCTION = "production"
