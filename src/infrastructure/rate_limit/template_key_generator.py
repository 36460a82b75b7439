"""Custom key generator backed by the restricted key template language.

Admin-supplied generators are parsed into ``KeyTemplate`` objects (never
executed as code). Parsed templates are cached by source text.

Rendering never awaits and its work is bounded by construction: a template
is at most ``MAX_TEMPLATE_LENGTH`` characters and every substituted value,
as well as the rendered key, is capped at ``MAX_KEY_LENGTH``. The engine's
timeout around ``generate`` is therefore a guard for the async interface,
not something a template can run into.
"""

from functools import lru_cache

from src.core.errors import ValidationError
from src.core.result import Failure, Result, Success
from src.domain.value_objects.key_template import KeyTemplate
from src.domain.value_objects.request_context import RequestContextView


@lru_cache(maxsize=256)
def _parse(source: str) -> Result[KeyTemplate, ValidationError]:
    return KeyTemplate.parse(source)


class TemplateKeyGenerator:
    """Evaluates key templates."""

    def validate(self, source: str) -> Result[None, ValidationError]:
        match _parse(source):
            case Failure(error=error):
                return Failure(error=error)
        return Success(value=None)

    async def generate(self, source: str, view: RequestContextView) -> str:
        """Render ``source`` for one request.

        Raises:
            ValueError: If the template is invalid, or a value or the key is
                too long.
            LookupError: If a referenced field is missing.
        """
        parsed = _parse(source)
        if isinstance(parsed, Failure):
            raise ValueError(parsed.error.message)
        return parsed.value.render(view)
