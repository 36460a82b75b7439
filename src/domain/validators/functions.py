"""Centralized validation functions (DRY principle).

Validation logic defined once and reused by the RateLimitConfig entity.
Validators are pure functions that raise ValueError on validation failure.
"""

import re

CONFIG_NAME_PATTERN = re.compile(r"^[a-z0-9_-]+$")
CONFIG_NAME_MAX_LENGTH = 100
PREFIX_MAX_LENGTH = 200
DISPLAY_NAME_MAX_LENGTH = 200
PREFIX_SEPARATOR = ":"


def validate_config_name(v: str) -> str:
    """Validate a configuration name (slug).

    Args:
        v: Candidate name.

    Returns:
        The name unchanged.

    Raises:
        ValueError: If the name is empty, too long or not a slug.

    Example:
        >>> validate_config_name("auth-login")
        'auth-login'
        >>> validate_config_name("Auth Login")
        ValueError: Config name must contain only lowercase letters, digits, '-' or '_'
    """
    if not v:
        raise ValueError("Config name is required")
    if len(v) > CONFIG_NAME_MAX_LENGTH:
        raise ValueError(
            f"Config name must be at most {CONFIG_NAME_MAX_LENGTH} characters"
        )
    if not CONFIG_NAME_PATTERN.match(v):
        raise ValueError(
            "Config name must contain only lowercase letters, digits, '-' or '_'"
        )
    return v


def validate_prefix(v: str) -> str:
    """Validate a counter key namespace prefix.

    Prefixes are joined verbatim with derived keys, so whitespace and glob
    characters (used by SCAN patterns) are rejected. A prefix must end with
    the ':' separator so one namespace can never be a partial segment of
    another (``rl:a`` would otherwise cover ``rl:ab:`` keys).

    Raises:
        ValueError: If the prefix is empty, too long, lacks the trailing
            separator or contains forbidden characters.
    """
    if not v:
        raise ValueError("Prefix is required")
    if len(v) > PREFIX_MAX_LENGTH:
        raise ValueError(f"Prefix must be at most {PREFIX_MAX_LENGTH} characters")
    if any(ch.isspace() or ch in "*?[]" for ch in v):
        raise ValueError("Prefix must not contain whitespace or glob characters")
    if not v.endswith(PREFIX_SEPARATOR):
        raise ValueError(f"Prefix must end with '{PREFIX_SEPARATOR}'")
    return v


def default_prefix(name: str) -> str:
    """Conventional prefix for a config name (``rl:<name>:``)."""
    return f"rl:{name}:"
