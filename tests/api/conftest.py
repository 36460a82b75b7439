"""API test fixtures.

Every test gets a freshly wired application: container singletons are
rebuilt (new in-memory SQLite database, new memory counter store, new
event bus) and the lifespan seeds the default configurations.
"""

import pytest
from fastapi.testclient import TestClient

from src.core import container
from src.core.config import settings
from src.infrastructure.security.jwt_service import JWTService
from src.main import app

CSRF_TOKEN = "test-csrf-token"

_SINGLETONS = (
    container.get_database,
    container.get_redis,
    container.get_counter_store,
    container.get_config_locks,
    container.get_token_service,
    container.get_logger,
    container.get_event_bus,
    container.get_config_resolver,
    container.get_key_engine,
    container.get_enforcer,
    container.get_usage_recorder,
)


def _reset_container() -> None:
    for factory in _SINGLETONS:
        factory.cache_clear()


def make_token(subject: str = "admin-1", roles: list[str] | None = None) -> str:
    """Signed access token for the configured secret."""
    return JWTService(settings.secret_key).generate_access_token(
        subject, roles if roles is not None else [settings.admin_role]
    )


@pytest.fixture
def client():
    _reset_container()
    app.middleware_stack = None
    with TestClient(app) as test_client:
        test_client.cookies.set(settings.csrf_cookie_name, CSRF_TOKEN)
        yield test_client
    _reset_container()


@pytest.fixture
def admin_headers():
    """Bearer token plus the CSRF header matching the client cookie."""
    return {
        "Authorization": f"Bearer {make_token()}",
        settings.csrf_header_name: CSRF_TOKEN,
    }


@pytest.fixture
def user_headers():
    return {
        "Authorization": f"Bearer {make_token('user-1', ['viewer'])}",
        settings.csrf_header_name: CSRF_TOKEN,
    }
