"""Validators package exports."""

from src.domain.validators.functions import (
    CONFIG_NAME_MAX_LENGTH,
    DISPLAY_NAME_MAX_LENGTH,
    default_prefix,
    validate_config_name,
    validate_prefix,
)

__all__ = [
    "CONFIG_NAME_MAX_LENGTH",
    "DISPLAY_NAME_MAX_LENGTH",
    "default_prefix",
    "validate_config_name",
    "validate_prefix",
]
