"""Problem Details (RFC 9457) response models for admin API errors.

Example body for a rejected create:

    {
        "type": "https://ratelimit.example.com/errors/command_validation_failed",
        "title": "Validation Failed",
        "status": 400,
        "detail": "windowMs must be a positive integer",
        "instance": "/api/v1/admin/rate-limits/configs",
        "code": "invalid_window",
        "errors": [{"field": "windowMs", "code": "invalid_window", "message": "..."}],
        "trace_id": "..."
    }
"""

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """One offending field in a validation failure."""

    field: str = Field(..., description="Field name (camelCase as sent)")
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")


class ProblemDetails(BaseModel):
    """Error envelope returned by every admin endpoint on failure."""

    type: str = Field(
        ...,
        description="URI reference identifying the problem type",
        examples=["https://ratelimit.example.com/errors/not_found"],
    )
    title: str = Field(..., description="Short summary", examples=["Resource Not Found"])
    status: int = Field(..., description="HTTP status code", examples=[404])
    detail: str = Field(
        ...,
        description="Explanation specific to this occurrence",
        examples=["Rate limit config 'uploads' not found"],
    )
    instance: str = Field(
        ...,
        description="Request path that produced the error",
        examples=["/api/v1/admin/rate-limits/configs/uploads"],
    )
    code: str | None = Field(
        None,
        description="Domain error code when one is available",
        examples=["rate_limit_config_not_found"],
    )
    errors: list[ErrorDetail] | None = Field(
        None, description="Field-level errors for validation failures"
    )
    trace_id: str | None = Field(None, description="Request trace id")
