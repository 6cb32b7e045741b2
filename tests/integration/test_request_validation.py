"""
Integration tests for the shape of request validation errors.
"""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient


@pytest.mark.integration
def test_missing_fields_are_grouped_by_name(client: TestClient) -> None:
    """Test that each missing field gets its own entry."""
    response = client.post("/api/bookings/quote", json={"vehicleId": "v-1"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert {"pickupDate", "dropoffDate"} <= set(body["errors"])


@pytest.mark.integration
def test_invalid_payment_type(client: TestClient, booking_payload: dict[str, Any]) -> None:
    booking_payload["paymentType"] = "bitcoin"

    response = client.post("/api/bookings/quote", json=booking_payload)

    assert response.status_code == 400
    assert "paymentType" in response.json()["errors"]


@pytest.mark.integration
def test_invalid_query_parameter(client: TestClient) -> None:
    """Test that bad query values use the same error format."""
    response = client.get(
        "/api/vehicles/search", params={"pickupDate": "tomorrow", "dropoffDate": "2030-07-01"}
    )

    assert response.status_code == 400
    assert "pickupDate" in response.json()["errors"]


@pytest.mark.integration
def test_malformed_json_body(client: TestClient) -> None:
    response = client.post(
        "/api/auth/login",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False
