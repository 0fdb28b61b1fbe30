"""Unit tests for health endpoints."""

import pytest


@pytest.mark.asyncio
async def test_health_check(test_client):
    """Test the health check endpoint."""
    response = await test_client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "hotel-booking-api"
    assert "version" in data


@pytest.mark.asyncio
async def test_ready_check(test_client):
    """Readiness runs a query against the (test) database."""
    response = await test_client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"] == {"database": "ok"}


@pytest.mark.asyncio
async def test_info_endpoint(test_client):
    """Test the service info endpoint."""
    response = await test_client.get("/info")
    assert response.status_code == 200
    data = response.json()
    assert "service" in data
    assert "version" in data
    assert data["endpoints"]["booking"] == "/v1/booking"


@pytest.mark.asyncio
async def test_health_ping_rpc(test_client):
    """Test the RPC-style health ping endpoint."""
    response = await test_client.post("/v1/health/ping", json={})
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_request_id_is_echoed(test_client):
    response = await test_client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_metrics_endpoint(test_client):
    response = await test_client.get("/metrics")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "bookings_created_total" in response.text


@pytest.mark.asyncio
async def test_openapi_docs(test_client):
    """OpenAPI docs are served in development and list the booking routes."""
    response = await test_client.get("/docs")
    assert response.status_code == 200

    response = await test_client.get("/openapi.json")
    paths = response.json()["paths"]
    assert "/v1/booking" in paths
    assert "/v1/booking/{booking_id}" in paths


@pytest.mark.asyncio
async def test_unknown_paths_share_one_metrics_label(test_client):
    for path in ("/no-such-page-1", "/no-such-page-2"):
        response = await test_client.get(path)
        assert response.status_code == 404

    metrics = (await test_client.get("/metrics")).text

    assert 'endpoint="unmatched"' in metrics
    assert "no-such-page" not in metrics
