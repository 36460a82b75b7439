"""Key strategy engine.

Derives the bucket key for a request from the effective configuration's
key strategy. Derivation never fails: a missing dimension or a failing
custom generator degrades to ``ip:<address>``.

Key Formats:
    application  app:{application_id}
    role         role:{role_id}
    component    comp:{service_id}:{procedure_name} | comp:{service_id}
    ip           ip:{address}
    custom       rendered key template
"""

import asyncio

from src.core.enums import ErrorCode
from src.domain.enums import KeyStrategy
from src.domain.errors import KeyDerivationError
from src.domain.protocols import CustomKeyGeneratorProtocol, LoggerProtocol
from src.domain.value_objects.effective_config import EffectiveRateLimitConfig
from src.domain.value_objects.request_context import (
    RequestContext,
    RequestContextView,
)


class KeyStrategyEngine:
    """Maps (config, request) to a bucket key.

    Args:
        custom_generator: Evaluates custom key generators.
        logger: Receives fallback warnings.
        timeout_ms: Hard limit for one custom generator call.
    """

    def __init__(
        self,
        *,
        custom_generator: CustomKeyGeneratorProtocol,
        logger: LoggerProtocol,
        timeout_ms: int = 50,
    ) -> None:
        self._custom_generator = custom_generator
        self._logger = logger
        self._timeout = timeout_ms / 1000

    async def derive_key(
        self, config: EffectiveRateLimitConfig, context: RequestContext
    ) -> str:
        """Derive the bucket key (without the config prefix)."""
        match config.key_strategy:
            case KeyStrategy.APPLICATION:
                if context.application_id:
                    return f"app:{context.application_id}"
            case KeyStrategy.ROLE:
                if context.role_id:
                    return f"role:{context.role_id}"
            case KeyStrategy.COMPONENT:
                if context.service_id and context.procedure_name:
                    return f"comp:{context.service_id}:{context.procedure_name}"
                if context.service_id:
                    return f"comp:{context.service_id}"
            case KeyStrategy.CUSTOM:
                return await self._derive_custom(config, context)
        return context.ip_key

    async def _derive_custom(
        self, config: EffectiveRateLimitConfig, context: RequestContext
    ) -> str:
        try:
            if not config.custom_key_generator:
                raise ValueError("custom strategy without a key generator")
            return await asyncio.wait_for(
                self._custom_generator.generate(
                    config.custom_key_generator, RequestContextView(context)
                ),
                timeout=self._timeout,
            )
        except Exception as e:
            error = KeyDerivationError(
                code=ErrorCode.KEY_DERIVATION_FAILED,
                message=str(e) or type(e).__name__,
                config_name=config.name,
            )
            self._logger.warning(
                "rate_limit_key_fallback",
                config=config.name,
                error_type=type(e).__name__,
                error=error.message,
                fallback=context.ip_key,
            )
            return context.ip_key
