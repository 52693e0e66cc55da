"""Application-level tests against the real app factory."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker

from vip_transfer import main
from vip_transfer.main import create_app


@pytest.mark.asyncio
async def test_api_health_endpoints():
    """Test the health endpoints without database dependency."""
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "vip-transfer-api"
        assert "X-Request-ID" in response.headers

        response = await client.get("/info")
        assert response.status_code == 200
        data = response.json()
        assert data["version"] == main.VERSION
        assert data["business_timezone"] == "Europe/Istanbul"
        assert data["features"]["problem_details"] is True


@pytest.mark.asyncio
async def test_ready_endpoint(test_engine, monkeypatch):
    """Test readiness against the test database."""
    monkeypatch.setattr(main, "async_session_factory", async_sessionmaker(test_engine))
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] == "ok"


@pytest.mark.asyncio
async def test_metrics_endpoint():
    """Test the metrics endpoint."""
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/metrics")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")


@pytest.mark.asyncio
async def test_malformed_path_parameter_is_problem_document():
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/v1/reservations/not-a-number")

    assert response.status_code == 422
    assert response.json()["violations"][0]["path"] == "path.reservation_id"
