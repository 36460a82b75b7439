"""Global exception handlers rendering Problem Details bodies.

Covers what never reaches a route's Result mapping: HTTPException raised
by the auth and CSRF dependencies, request validation errors (bad enum
values, wrong types) and anything unhandled.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from src.core.config import settings
from src.core.container import get_logger
from src.presentation.routers.api.middleware.trace_middleware import get_trace_id
from src.presentation.routers.api.v1.errors.problem_details import (
    ErrorDetail,
    ProblemDetails,
)

# status -> (title, type slug)
_STATUS_INFO: dict[int, tuple[str, str]] = {
    400: ("Bad Request", "bad_request"),
    401: ("Authentication Required", "unauthorized"),
    403: ("Access Denied", "forbidden"),
    404: ("Resource Not Found", "not_found"),
    405: ("Method Not Allowed", "method_not_allowed"),
    409: ("Resource Conflict", "conflict"),
    415: ("Unsupported Media Type", "unsupported_media_type"),
    500: ("Internal Server Error", "internal_server_error"),
    503: ("Service Unavailable", "service_unavailable"),
}

_REQUEST_LOCATIONS = ("body", "query", "path", "header", "cookie")


def _problem_response(
    request: Request,
    status_code: int,
    detail: str,
    *,
    title: str | None = None,
    slug: str | None = None,
    errors: list[ErrorDetail] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    default_title, default_slug = _STATUS_INFO.get(status_code, ("Error", "error"))
    problem = ProblemDetails(
        type=f"{settings.api_base_url}/errors/{slug or default_slug}",
        title=title or default_title,
        status=status_code,
        detail=detail,
        instance=str(request.url.path),
        errors=errors or None,
        trace_id=get_trace_id(),
    )
    return JSONResponse(
        status_code=status_code,
        content=problem.model_dump(exclude_none=True),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render HTTPException, keeping its headers (WWW-Authenticate)."""
    assert isinstance(exc, HTTPException)
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _problem_response(
        request,
        exc.status_code,
        detail,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Render request validation failures as 400 with one entry per field.

    Field paths drop the location prefix, so a bad ``keyStrategy`` in the
    body is reported as ``keyStrategy`` and nested override fields as
    ``roleLimits.0.max``.
    """
    assert isinstance(exc, RequestValidationError)

    field_errors = []
    for error in exc.errors():
        parts = [str(p) for p in error.get("loc", ()) if p not in _REQUEST_LOCATIONS]
        field_errors.append(
            ErrorDetail(
                field=".".join(parts) or "unknown",
                code=error.get("type", "validation_error"),
                message=error.get("msg", "Validation failed"),
            )
        )

    return _problem_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "Request validation failed. Check 'errors' for details.",
        title="Validation Failed",
        slug="validation_failed",
        errors=field_errors,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the exception and return a 500 without internals."""
    get_logger().error(
        "unhandled_exception",
        error=exc,
        request_path=request.url.path,
        request_method=request.method,
    )
    return _problem_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Quote the trace id when reporting it.",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the handlers above to ``app``."""
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
