"""
Integration tests for health and readiness endpoints.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient


@pytest.mark.integration
def test_health_endpoint_returns_ok(client: TestClient) -> None:
    """Test that /health endpoint returns 200 with status ok."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.integration
def test_readiness_endpoint_returns_ready_when_db_accessible(client: TestClient) -> None:
    """Test that /ready returns 200 when the database answers."""
    response = client.get("/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] == "ok"


@pytest.mark.integration
def test_readiness_endpoint_returns_503_when_db_not_accessible(client: TestClient) -> None:
    """Test that /ready returns 503 when the database is unreachable."""
    with patch("car_rental.routes.health.check_engine_health") as mock_health:
        mock_health.return_value = False

        response = client.get("/ready")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "not ready"
    assert data["checks"]["database"] == "failed"


@pytest.mark.integration
def test_health_endpoint_ignores_database_state(client: TestClient) -> None:
    """Test that liveness does not depend on the database."""
    with patch("car_rental.routes.health.check_engine_health") as mock_health:
        mock_health.return_value = False

        response = client.get("/health")

    assert response.status_code == 200
    mock_health.assert_not_called()
