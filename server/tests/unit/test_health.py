"""Unit tests for health endpoints."""

import pytest
from sqlalchemy.exc import OperationalError


@pytest.mark.asyncio
async def test_health_ping(test_client):
    """Test the health ping endpoint."""
    response = await test_client.get("/v1/health/ping")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "ok"
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_health_ping_degraded(test_client, test_session, monkeypatch):
    """Test that a failing database is reported without failing the health check."""
    async def broken_execute(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(test_session, "execute", broken_execute)

    response = await test_client.get("/v1/health/ping")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["database"] == "unavailable"
