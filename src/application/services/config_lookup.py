"""Configuration lookup by admin-facing reference.

Admin routes address a configuration either by its name or by its UUID.
Names are validated slugs and can never parse as a UUID, so the two forms
cannot collide.
"""

from uuid import UUID

from src.core.enums import ErrorCode
from src.core.errors import NotFoundError
from src.core.result import Failure, Result, Success
from src.domain.entities.rate_limit_config import RateLimitConfig
from src.domain.protocols import RateLimitConfigRepository


def config_not_found(config_ref: str) -> NotFoundError:
    return NotFoundError(
        code=ErrorCode.RATE_LIMIT_CONFIG_NOT_FOUND,
        message=f"Rate limit config '{config_ref}' not found",
        resource_type="RateLimitConfig",
        resource_id=config_ref,
    )


def parse_config_id(config_ref: str) -> UUID | None:
    try:
        return UUID(config_ref)
    except ValueError:
        return None


async def find_config(
    repo: RateLimitConfigRepository, config_ref: str
) -> Result[RateLimitConfig, NotFoundError]:
    """Load a configuration by name or UUID.

    Returns:
        Success(config), or Failure(NotFoundError) when neither matches.
    """
    config_id = parse_config_id(config_ref)
    if config_id is not None:
        config = await repo.find_by_id(config_id)
    else:
        config = await repo.find_by_name(config_ref)
    if config is None:
        return Failure(error=config_not_found(config_ref))
    return Success(value=config)


async def resolve_config_name(
    repo: RateLimitConfigRepository, config_ref: str
) -> Result[str, NotFoundError]:
    """Name of the configuration a reference points at.

    Writers lock by name, so a UUID reference is translated first.
    """
    if parse_config_id(config_ref) is None:
        return Success(value=config_ref)
    match await find_config(repo, config_ref):
        case Success(value=config):
            return Success(value=config.name)
        case Failure(error=error):
            return Failure(error=error)


def store_key_for(config: RateLimitConfig, key: str) -> str:
    """Full store key for an admin-supplied key.

    Accepts both the derived key (``ip:10.0.0.1``) and the full store key
    (``rl:api:ip:10.0.0.1``).
    """
    if key.startswith(config.prefix):
        return key
    return f"{config.prefix}{key}"
