"""
Health endpoint tests using pytest-asyncio and httpx.AsyncClient.
"""

import pytest


@pytest.mark.asyncio
async def test_health_endpoint(test_client):
    """Test the health check endpoint returns expected structure."""
    response = await test_client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()

    assert "status" in data
    assert "uptime" in data
    assert "checks" in data
    assert isinstance(data["checks"], dict)
    assert data["checks"]["database"] == "ok"
    assert data["status"] == "ok"


@pytest.mark.asyncio
async def test_liveness_endpoint(test_client):
    response = await test_client.get("/healthz")

    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["service"] == "idp-okr-backend"
    assert data["ts"]


@pytest.mark.asyncio
async def test_protected_route_without_identity_is_401(test_client, auth):
    auth.anonymous()
    response = await test_client.get("/api/v1/goals")

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Unauthorized"
