"""Restricted key template language for custom key strategies.

Custom key generators are not code. A template is literal text with
``{field}`` placeholders, where ``field`` is one of the names allowed by
``RequestContextView`` (``ip``, ``user_id``, ``headers.x-tenant-id``, ...).
Conversions (``!r``), format specs (``:>10``), attribute access beyond the
single ``headers.``/``query.`` level, and indexing are rejected at parse
time.

Examples:
    tenant:{headers.x-tenant-id}
    user:{user_id}:{method}
    {application_id}-{query.region}

Rendering fails when a referenced field is absent from the request or the
output is empty, so the caller can fall back to IP keying.
"""

from dataclasses import dataclass
from string import Formatter

from src.core.enums import ErrorCode
from src.core.errors import ValidationError
from src.core.result import Failure, Result, Success
from src.domain.value_objects.request_context import RequestContextView

MAX_TEMPLATE_LENGTH = 200
MAX_KEY_LENGTH = 256


@dataclass(frozen=True, slots=True)
class KeyTemplate:
    """Parsed key template.

    Attributes:
        source: Original template text.
        parts: Sequence of (literal_text, field_name_or_None).
    """

    source: str
    parts: tuple[tuple[str, str | None], ...]

    @classmethod
    def parse(cls, source: str) -> Result["KeyTemplate", ValidationError]:
        """Parse and validate a template.

        Args:
            source: Template text.

        Returns:
            Success(KeyTemplate) or Failure(ValidationError) naming the problem.
        """
        if not source or not source.strip():
            return _invalid("Custom key generator must not be empty")
        if len(source) > MAX_TEMPLATE_LENGTH:
            return _invalid(
                f"Custom key generator must be at most {MAX_TEMPLATE_LENGTH} characters"
            )
        try:
            parsed = list(Formatter().parse(source))
        except ValueError as e:
            return _invalid(f"Malformed key template: {e}")

        parts: list[tuple[str, str | None]] = []
        fields = 0
        for literal, field_name, format_spec, conversion in parsed:
            if field_name is None:
                parts.append((literal, None))
                continue
            if conversion or format_spec:
                return _invalid(
                    f"Conversions and format specs are not allowed: {{{field_name}}}"
                )
            if not RequestContextView.is_valid_name(field_name):
                return _invalid(f"Unknown key template field: {{{field_name}}}")
            parts.append((literal, field_name))
            fields += 1

        if fields == 0:
            return _invalid("Custom key generator must reference at least one field")
        return Success(value=cls(source=source, parts=tuple(parts)))

    @property
    def fields(self) -> tuple[str, ...]:
        """Field names referenced by the template, in order."""
        return tuple(name for _, name in self.parts if name is not None)

    def render(self, view: RequestContextView) -> str:
        """Render the template against a request view.

        Raises:
            LookupError: If a referenced field is missing from the request.
            ValueError: If a value, or the key so far, exceeds MAX_KEY_LENGTH.
        """
        out: list[str] = []
        length = 0
        for literal, name in self.parts:
            out.append(literal)
            length += len(literal)
            if name is None:
                continue
            value = view.lookup(name)
            if value is None or value == "":
                raise LookupError(f"Request has no value for {{{name}}}")
            length += len(value)
            if length > MAX_KEY_LENGTH:
                raise ValueError(f"Rendered key exceeds {MAX_KEY_LENGTH} characters")
            out.append(value)
        key = "".join(out).strip()
        if not key:
            raise ValueError("Key template rendered an empty key")
        if len(key) > MAX_KEY_LENGTH:
            raise ValueError(f"Rendered key exceeds {MAX_KEY_LENGTH} characters")
        return key


def _invalid(message: str) -> Failure[ValidationError]:
    return Failure(
        error=ValidationError(
            code=ErrorCode.INVALID_CUSTOM_KEY_GENERATOR,
            message=message,
            field="customKeyGenerator",
        )
    )
