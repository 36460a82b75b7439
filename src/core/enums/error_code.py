"""Domain-level error codes (machine-readable).

Error codes follow ENTITY_ACTION_REASON naming convention.
Used with Result types for railway-oriented programming.

Categories:
- Validation errors (INVALID_*, VALIDATION_*)
- Resource errors (*_NOT_FOUND)
- Conflict errors (*_ALREADY_EXISTS, *_CONFLICT)
- Authentication errors (TOKEN_*, AUTHENTICATION_*)
- Authorization errors (PERMISSION_*, CSRF_*)
- Rate limit infrastructure errors (RATE_LIMIT_*, COUNTER_STORE_*)
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain-level error codes (machine-readable).

    Error codes follow ENTITY_ACTION_REASON naming convention.
    """

    # Validation errors
    VALIDATION_FAILED = "validation_failed"
    INVALID_CONFIG_NAME = "invalid_config_name"
    INVALID_WINDOW = "invalid_window"
    INVALID_MAX_REQUESTS = "invalid_max_requests"
    INVALID_KEY_STRATEGY = "invalid_key_strategy"
    INVALID_CUSTOM_KEY_GENERATOR = "invalid_custom_key_generator"
    INVALID_OVERRIDE = "invalid_override"
    INVALID_TIME_RANGE = "invalid_time_range"
    IMMUTABLE_FIELD = "immutable_field"

    # Resource errors
    RATE_LIMIT_CONFIG_NOT_FOUND = "rate_limit_config_not_found"
    RATE_LIMIT_KEY_NOT_FOUND = "rate_limit_key_not_found"
    RESOURCE_NOT_FOUND = "resource_not_found"

    # Conflict errors
    RATE_LIMIT_CONFIG_ALREADY_EXISTS = "rate_limit_config_already_exists"
    RATE_LIMIT_PREFIX_CONFLICT = "rate_limit_prefix_conflict"
    RESOURCE_CONFLICT = "resource_conflict"

    # Authentication errors
    TOKEN_EXPIRED = "token_expired"
    TOKEN_INVALID = "token_invalid"
    AUTHENTICATION_FAILED = "authentication_failed"

    # Authorization errors
    PERMISSION_DENIED = "permission_denied"
    CSRF_TOKEN_INVALID = "csrf_token_invalid"

    # Rate limit errors
    RATE_LIMIT_CHECK_FAILED = "rate_limit_check_failed"
    RATE_LIMIT_RESET_FAILED = "rate_limit_reset_failed"
    COUNTER_STORE_UNAVAILABLE = "counter_store_unavailable"
    KEY_DERIVATION_FAILED = "key_derivation_failed"

    # Persistence errors
    CONFIG_PERSISTENCE_FAILED = "config_persistence_failed"
    ANALYTICS_QUERY_FAILED = "analytics_query_failed"
