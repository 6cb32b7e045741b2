"""
Unit tests for metrics endpoint.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from car_rental.metrics import (
    booking_transitions,
    bookings_created,
    gateway_latency,
    gateway_requests,
    payment_events,
    price_quotes,
    repricing_operations,
    uploads_total,
)


@pytest.mark.unit
def test_metrics_endpoint_returns_prometheus_format(client: TestClient) -> None:
    """Test that /metrics endpoint returns Prometheus text format."""
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "text/plain" in response.headers["content-type"]


@pytest.mark.unit
def test_metrics_endpoint_contains_custom_metrics(client: TestClient) -> None:
    """Test that /metrics endpoint includes the booking, pricing and payment metrics."""
    bookings_created.labels(payment_type="online").inc()
    booking_transitions.labels(source="admin", result="applied").inc()
    price_quotes.labels(status="success").inc()
    repricing_operations.labels(operation="percent").inc()
    payment_events.labels(event="callback", status="success").inc()
    gateway_requests.labels(endpoint="register.do", status_code="200").inc()
    gateway_latency.labels(endpoint="register.do").observe(0.42)
    uploads_total.labels(kind="vehicle", status="success").inc()

    content = client.get("/metrics").text

    assert "car_rental_bookings_created_total" in content
    assert "car_rental_booking_transitions_total" in content
    assert "car_rental_price_quotes_total" in content
    assert "car_rental_repricing_operations_total" in content
    assert "car_rental_payment_events_total" in content
    assert "car_rental_gateway_requests_total" in content
    assert "car_rental_gateway_latency_seconds" in content
    assert "car_rental_uploads_total" in content


@pytest.mark.unit
def test_metrics_endpoint_includes_help_and_type_metadata(client: TestClient) -> None:
    """Test that metrics include Prometheus HELP and TYPE metadata."""
    content = client.get("/metrics").text

    assert "# HELP" in content
    assert "# TYPE" in content
    assert "counter" in content or "histogram" in content
