"""Custom key generator protocol.

Trust boundary for admin-supplied key generators. Implementations must be
side-effect free and must not block the event loop; the key strategy engine
cancels any call that outlasts its timeout.
"""

from typing import Protocol

from src.core.errors import ValidationError
from src.core.result import Result
from src.domain.value_objects.request_context import RequestContextView


class CustomKeyGeneratorProtocol(Protocol):
    def validate(self, source: str) -> Result[None, ValidationError]:
        """Check a generator definition before it is stored."""
        ...

    async def generate(self, source: str, view: RequestContextView) -> str:
        """Evaluate a generator for one request.

        Raises:
            Exception: Any failure; the caller falls back to IP keying.
        """
        ...
