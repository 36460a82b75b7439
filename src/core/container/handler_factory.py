"""Auto-wired construction of CQRS handlers.

Handlers declare what they need in ``__init__``; this module reads those
annotations and fills them in:

- ``*Repository`` parameters get a repository bound to the request session
- protocol and lock parameters get the app-scoped container singleton
- parameters with defaults (clocks, limits) are left to the handler

Usage:
    handler: CreateRateLimitConfigHandler = Depends(
        handler_factory(CreateRateLimitConfigHandler)
    )
"""

import inspect
from collections.abc import Callable
from typing import Any, TypeVar, get_type_hints

from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


def _repository_classes() -> dict[str, type]:
    from src.infrastructure.persistence.repositories import (
        ConfigChangeRepository,
        RateLimitConfigRepository,
        ReferenceDataRepository,
        UsageSampleRepository,
    )

    return {
        cls.__name__: cls
        for cls in (
            RateLimitConfigRepository,
            ConfigChangeRepository,
            UsageSampleRepository,
            ReferenceDataRepository,
        )
    }


def _singleton_factories() -> dict[str, Callable[[], Any]]:
    from src.core.container.events import get_event_bus
    from src.core.container.infrastructure import (
        get_config_locks,
        get_counter_store,
        get_logger,
        get_token_service,
    )

    return {
        "EventBusProtocol": get_event_bus,
        "CounterStoreProtocol": get_counter_store,
        "LoggerProtocol": get_logger,
        "TokenValidationProtocol": get_token_service,
        "KeyedLock": get_config_locks,
    }


def _type_name(annotation: Any) -> str:
    # X | None -> X
    args = getattr(annotation, "__args__", ())
    if args:
        for arg in args:
            if arg is not type(None):
                return _type_name(arg)
    if isinstance(annotation, type):
        return annotation.__name__
    return str(annotation).split(".")[-1].rstrip("'>")


def required_dependencies(handler_class: type) -> dict[str, tuple[str, bool]]:
    """Map each required ``__init__`` parameter to (type name, is_optional)."""
    init_method = handler_class.__init__
    if init_method is object.__init__:
        return {}

    hints = get_type_hints(init_method)
    dependencies: dict[str, tuple[str, bool]] = {}
    for name, param in inspect.signature(init_method).parameters.items():
        if name == "self" or param.default is not inspect.Parameter.empty:
            continue
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        annotation = hints.get(name, param.annotation)
        is_optional = type(None) in getattr(annotation, "__args__", ())
        dependencies[name] = (_type_name(annotation), is_optional)
    return dependencies


async def create_handler(
    handler_class: type[T],
    session: AsyncSession,
    **overrides: Any,
) -> T:
    """Instantiate ``handler_class`` with its dependencies resolved.

    Args:
        handler_class: Command or query handler class.
        session: Request session shared by every repository of the handler.
        **overrides: Values used instead of resolving the named parameters.

    Raises:
        ValueError: A required, non-optional parameter has no resolver.
    """
    repositories = _repository_classes()
    singletons = _singleton_factories()
    resolved: dict[str, Any] = {}

    for name, (type_name, is_optional) in required_dependencies(handler_class).items():
        if name in overrides:
            resolved[name] = overrides[name]
        elif type_name in repositories:
            resolved[name] = repositories[type_name](session=session)
        elif type_name in singletons:
            resolved[name] = singletons[type_name]()
        elif is_optional:
            resolved[name] = None
        else:
            raise ValueError(
                f"Cannot resolve dependency '{name}' of type '{type_name}' "
                f"for {handler_class.__name__}"
            )

    return handler_class(**resolved)


# One factory per handler class so dependency_overrides keys stay stable
_handler_factory_cache: dict[type, Any] = {}


def handler_factory(handler_class: type[T]) -> Any:
    """FastAPI dependency building ``handler_class`` on the request session.

    Cached per class, so tests can override it:

        app.dependency_overrides[handler_factory(ListActiveLimitsHandler)] = (
            lambda: fake_handler
        )
    """
    if handler_class in _handler_factory_cache:
        return _handler_factory_cache[handler_class]

    from fastapi import Depends

    from src.core.container.infrastructure import get_db_session

    async def _factory(session: AsyncSession = Depends(get_db_session)) -> T:
        return await create_handler(handler_class, session)

    _factory.__name__ = f"get_{handler_class.__name__.lower()}"
    _handler_factory_cache[handler_class] = _factory
    return _factory


def clear_handler_factory_cache() -> None:
    _handler_factory_cache.clear()


def get_all_handler_factories() -> dict[str, Any]:
    """Factory per registered handler, keyed by handler class name."""
    from src.application.cqrs.computed_views import get_all_handler_classes

    return {
        handler_class.__name__: handler_factory(handler_class)
        for handler_class in get_all_handler_classes()
    }
