"""
Habit Tracker Backend — Health and Error Envelope Tests
"""

import pytest

from habitapi.dependencies import get_optional_backend


@pytest.mark.asyncio
async def test_health_check(test_client):
    response = await test_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["backend"] == "connected"
    assert data["calendar_oauth"] == "configured"
    assert "version" in data
    assert "uptime_seconds" in data


@pytest.mark.asyncio
async def test_health_degraded_without_backend(app, test_client):
    app.dependency_overrides[get_optional_backend] = lambda: None

    response = await test_client.get("/health")

    assert response.json()["status"] == "degraded"
    assert response.json()["backend"] == "unconfigured"


@pytest.mark.asyncio
async def test_unknown_route_uses_envelope(test_client):
    response = await test_client.get("/api/nope")

    assert response.status_code == 404
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_wrong_method_keeps_allow_header(test_client):
    response = await test_client.get("/api/auth/logout")

    assert response.status_code == 405
    assert "POST" in response.headers["allow"]
