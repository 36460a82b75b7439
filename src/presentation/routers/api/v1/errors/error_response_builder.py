"""Build RFC 9457 Problem Details responses from ApplicationError.

Every admin route maps its Failure through here so the 400/404/409/503
bodies share one shape: ``type``/``title``/``status`` from the application
error code, and ``code`` from the wrapped domain error when there is one
(``invalid_window``, ``rate_limit_config_not_found``, ...).
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from src.application.errors import ApplicationError, ApplicationErrorCode
from src.core.config import settings
from src.presentation.routers.api.v1.errors.problem_details import (
    ErrorDetail,
    ProblemDetails,
)

# (HTTP status, title) per application error code
_ERROR_TABLE: dict[ApplicationErrorCode, tuple[int, str]] = {
    ApplicationErrorCode.COMMAND_VALIDATION_FAILED: (
        status.HTTP_400_BAD_REQUEST,
        "Validation Failed",
    ),
    ApplicationErrorCode.COMMAND_EXECUTION_FAILED: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Command Execution Failed",
    ),
    ApplicationErrorCode.QUERY_FAILED: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Query Failed",
    ),
    ApplicationErrorCode.UNAUTHORIZED: (
        status.HTTP_401_UNAUTHORIZED,
        "Authentication Required",
    ),
    ApplicationErrorCode.FORBIDDEN: (status.HTTP_403_FORBIDDEN, "Access Denied"),
    ApplicationErrorCode.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "Resource Not Found"),
    ApplicationErrorCode.CONFLICT: (status.HTTP_409_CONFLICT, "Resource Conflict"),
    ApplicationErrorCode.STORE_UNAVAILABLE: (
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Counter Store Unavailable",
    ),
}

_FALLBACK = (status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


class ErrorResponseBuilder:
    """Convert application errors to Problem Details JSON responses."""

    @staticmethod
    def status_for(code: ApplicationErrorCode) -> int:
        """HTTP status for an application error code (500 when unmapped)."""
        return _ERROR_TABLE.get(code, _FALLBACK)[0]

    @staticmethod
    def from_application_error(
        error: ApplicationError,
        request: Request,
        trace_id: str,
    ) -> JSONResponse:
        """Render ``error`` as a Problem Details response.

        Args:
            error: Failure payload from a command or query handler.
            request: Current request, used for ``instance``.
            trace_id: Request trace id echoed in the body.

        Returns:
            JSONResponse with the mapped status code. Validation failures that
            name a field also carry a one-element ``errors`` list.
        """
        status_code, title = _ERROR_TABLE.get(error.code, _FALLBACK)
        domain_error = error.domain_error

        problem = ProblemDetails(
            type=f"{settings.api_base_url}/errors/{error.code.value}",
            title=title,
            status=status_code,
            detail=error.message,
            instance=str(request.url.path),
            code=domain_error.code.value if domain_error else error.code.value,
            trace_id=trace_id,
        )

        field = getattr(domain_error, "field", None)
        if field:
            problem.errors = [
                ErrorDetail(
                    field=field,
                    code=domain_error.code.value,
                    message=domain_error.message,
                )
            ]

        headers = {"Retry-After": "1"} if status_code == 503 else None
        return JSONResponse(
            status_code=status_code,
            content=problem.model_dump(exclude_none=True),
            headers=headers,
        )
