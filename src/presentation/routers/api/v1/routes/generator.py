"""Turn ROUTE_REGISTRY entries into FastAPI routes.

Each RouteMetadata becomes one ``router.add_api_route`` call. Auth policy
decides the dependency chain (``require_admin`` then ``verify_csrf`` on
mutating admin routes), error specs become OpenAPI responses rendered with
ProblemDetails, and the GET cache policy becomes a Cache-Control header.
"""

from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, Depends, Response

from src.presentation.routers.api.middleware.auth_dependencies import (
    get_current_user,
    require_admin,
    verify_csrf,
)
from src.presentation.routers.api.v1.errors.problem_details import ProblemDetails
from src.presentation.routers.api.v1.routes.metadata import (
    AuthLevel,
    CachePolicy,
    ErrorSpec,
    RouteMetadata,
)

_CACHE_CONTROL: dict[CachePolicy, str] = {
    CachePolicy.PRIVATE: "private",
    CachePolicy.NO_STORE: "no-store",
}


def register_routes_from_registry(
    router: APIRouter,
    registry: list[RouteMetadata],
) -> None:
    """Register every entry of ``registry`` on ``router``.

    Args:
        router: Versioned router (mounted under ``/api/v1``).
        registry: Route specifications, usually ROUTE_REGISTRY.
    """
    for metadata in registry:
        router.add_api_route(
            path=metadata.path,
            endpoint=metadata.handler,
            methods=[metadata.method.value],
            response_model=metadata.response_model,
            status_code=metadata.status_code,
            tags=list(metadata.tags),
            summary=metadata.summary,
            description=metadata.description,
            operation_id=metadata.operation_id,
            responses=_build_responses(metadata.errors) if metadata.errors else None,
            dependencies=_build_dependencies(metadata),
            deprecated=metadata.deprecated,
        )


def _build_dependencies(metadata: RouteMetadata) -> list[Any]:
    match metadata.auth_policy.level:
        case AuthLevel.PUBLIC:
            dependencies = []
        case AuthLevel.AUTHENTICATED:
            dependencies = [Depends(get_current_user)]
        case AuthLevel.ADMIN:
            dependencies = [Depends(require_admin)]
            if metadata.requires_csrf:
                dependencies.append(Depends(verify_csrf))
        case _:
            msg = f"Unknown auth level: {metadata.auth_policy.level}"
            raise ValueError(msg)

    header = _CACHE_CONTROL.get(metadata.cache_policy)
    if header:
        dependencies.append(Depends(_cache_control(header)))
    return dependencies


def _cache_control(value: str) -> Callable[[Response], None]:
    def set_cache_control(response: Response) -> None:
        response.headers["Cache-Control"] = value

    return set_cache_control


def _build_responses(errors: list[ErrorSpec]) -> dict[int | str, dict[str, Any]]:
    """OpenAPI ``responses`` mapping, ProblemDetails unless a spec says otherwise."""
    return {
        error.status: {
            "description": error.description,
            "model": error.model or ProblemDetails,
        }
        for error in errors
    }
