"""API tests for system endpoints (root, health, config)."""

from fastapi import status

from src.core.config import settings
from src.core.container import get_counter_store
from src.core.enums import ErrorCode
from src.core.result import Failure
from src.domain.errors import StoreUnavailableError


def test_root(client):
    response = client.get("/")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "operational"
    assert response.json()["version"] == settings.app_version


def test_health_is_not_rate_limited(client):
    response = client.get("/health")

    assert response.json() == {
        "status": "healthy",
        "counterStore": "ok",
        "database": "ok",
    }
    assert "X-RateLimit-Limit" not in response.headers


def test_trace_id_header(client):
    response = client.get("/health")

    assert response.headers.get("X-Trace-Id")


def test_config_endpoint_disabled_outside_development(client):
    response = client.get("/config")

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_health_reports_unavailable_store(client, monkeypatch):
    async def unavailable(key):
        return Failure(
            error=StoreUnavailableError(
                code=ErrorCode.COUNTER_STORE_UNAVAILABLE,
                message="redis down",
                backend="redis",
                operation="peek",
            )
        )

    monkeypatch.setattr(get_counter_store(), "peek", unavailable)

    response = client.get("/health")

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json()["counterStore"] == "unavailable"
