"""Tests for health check endpoints."""
from unittest.mock import patch

import redis


def test_health_check(client):
    """Test basic health check."""
    response = client.get("/api/v1/health/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_readiness_without_redis(client):
    """Database is required for readiness; a Redis outage is reported but tolerated."""
    with patch("pos.api.health.redis_client.ping", side_effect=redis.ConnectionError("down")):
        response = client.get("/api/v1/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] is True
    assert data["checks"]["redis"] is False
    assert data["checks"]["redis_error"] == "down"


def test_root_endpoint(client):
    """Test root endpoint returns API info."""
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert "name" in data
    assert "version" in data
    assert "docs" in data
