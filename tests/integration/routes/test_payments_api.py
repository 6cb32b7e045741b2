"""
Integration tests for gateway orders, verification, callbacks and admin status changes.
"""

from __future__ import annotations

import json
import os
from typing import Any, Generator
from unittest.mock import Mock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from car_rental.db.engine import engine
from car_rental.models.payments import PaymentLog
from car_rental.network.gateway import GatewayError
from car_rental.security import SIGNATURE_HEADER, sign_payload

CALLBACK_SECRET = "callback-test-secret"

payment_logs = PaymentLog.__table__


def logged_payment_types() -> list[str]:
    with engine.connect() as conn:
        rows = conn.execute(select(payment_logs.c.payment_type)).fetchall()
    return sorted(row[0] for row in rows)


def logged_payments() -> list[tuple[str, str]]:
    with engine.connect() as conn:
        rows = conn.execute(select(payment_logs.c.payment_type, payment_logs.c.status)).fetchall()
    return sorted((row[0], row[1]) for row in rows)


def post_callback(
    client: TestClient, payload: dict[str, Any], secret: str = CALLBACK_SECRET
) -> Any:
    body = json.dumps(payload).encode("utf-8")
    return client.post(
        "/api/payment/callback",
        content=body,
        headers={
            "Content-Type": "application/json",
            SIGNATURE_HEADER: sign_payload(secret, body),
        },
    )


@pytest.fixture
def callback_secret() -> Generator[str, None, None]:
    """Configure the shared callback secret for the duration of a test."""
    with patch.dict(os.environ, {"PAYMENT_CALLBACK_SECRET": CALLBACK_SECRET}):
        yield CALLBACK_SECRET


@pytest.mark.integration
@patch("car_rental.services.payments.register_order")
def test_create_order_returns_payment_url(
    mock_register: Mock, client: TestClient, pending_booking: dict[str, Any]
) -> None:
    """Test that a pending booking gets a hosted payment page and an audit entry."""
    mock_register.return_value = {
        "success": True,
        "order_id": "gw-1",
        "form_url": "https://gateway-test.jcc.com.cy/pay/gw-1",
        "raw": {"orderId": "gw-1"},
    }

    response = client.post("/api/payment/create-order", json={"bookingId": pending_booking["id"]})

    assert response.status_code == 200, response.text
    assert response.json()["payment_url"].endswith("/pay/gw-1")
    assert mock_register.call_args.kwargs["amount_cents"] == 17000
    assert logged_payment_types() == ["create_order"]


@pytest.mark.integration
@patch("car_rental.services.payments.register_order")
def test_create_order_gateway_failure(
    mock_register: Mock, client: TestClient, pending_booking: dict[str, Any]
) -> None:
    """Test that an unreachable gateway is reported as 502."""
    mock_register.side_effect = GatewayError("down")

    response = client.post("/api/payment/create-order", json={"bookingId": pending_booking["id"]})

    assert response.status_code == 502
    assert logged_payments() == [("create_order", "failed")]


@pytest.mark.integration
@patch("car_rental.services.payments.get_order_status")
def test_verify_payment_gateway_failure_is_logged(
    mock_status: Mock, client: TestClient, pending_booking: dict[str, Any]
) -> None:
    """Test that a failed status lookup leaves a failed audit entry."""
    mock_status.side_effect = GatewayError("timeout")

    response = client.post(
        "/api/payment/verify", json={"orderId": "gw-8", "bookingId": pending_booking["id"]}
    )

    assert response.status_code == 502
    assert logged_payments() == [("verify_payment", "failed")]


@pytest.mark.integration
def test_create_order_unknown_booking(client: TestClient) -> None:
    """Test that paying for an unknown booking is a 404."""
    response = client.post("/api/payment/create-order", json={"bookingId": "missing"})

    assert response.status_code == 404


@pytest.mark.integration
def test_create_order_for_paid_booking(
    client: TestClient, pending_booking: dict[str, Any], admin_headers: dict[str, str]
) -> None:
    """Test that an already paid booking cannot be paid again."""
    client.post(
        "/api/payment/update-status",
        json={"bookingId": pending_booking["id"], "status": "Confirmed", "paymentStatus": "Paid"},
        headers=admin_headers,
    )

    response = client.post("/api/payment/create-order", json={"bookingId": pending_booking["id"]})

    assert response.status_code == 400


@pytest.mark.integration
@patch("car_rental.services.payments.get_order_status")
def test_verify_payment_confirms_booking_once(
    mock_status: Mock, client: TestClient, pending_booking: dict[str, Any]
) -> None:
    """Test that a paid order confirms the booking and repeats are answered from the log."""
    mock_status.return_value = {
        "order_status": 2,
        "amount": 17000,
        "currency": "978",
        "error_code": "0",
        "error_message": None,
        "raw": {"orderStatus": 2},
    }
    body = {"orderId": "gw-7", "bookingId": pending_booking["id"]}

    first = client.post("/api/payment/verify", json=body)
    second = client.post("/api/payment/verify", json=body)

    assert first.status_code == 200, first.text
    assert first.json()["payment_status"] == "Paid"
    assert first.json()["booking_status"] == "Confirmed"
    assert first.json()["invoice_no"] == "P000001"
    assert second.json()["already_processed"] is True
    assert second.json()["invoice_no"] == "P000001"
    assert mock_status.call_count == 1


@pytest.mark.integration
def test_verify_payment_get_is_informational(client: TestClient) -> None:
    """Test that GET on the verify URL only describes the endpoint."""
    response = client.get("/api/payment/verify")

    assert response.status_code == 200
    assert "POST" in response.json()["message"]


@pytest.mark.integration
def test_callback_is_applied_exactly_once(
    client: TestClient, pending_booking: dict[str, Any], callback_secret: str
) -> None:
    """Test that a replayed callback is acknowledged without changing the booking."""
    payload = {
        "bookingId": pending_booking["id"],
        "orderId": "gw-9",
        "orderStatus": 2,
        "eventId": "evt-1",
    }

    first = post_callback(client, payload)
    second = post_callback(client, payload)

    assert first.status_code == 200, first.text
    assert first.json()["status"] == "processed"
    assert first.json()["payment_status"] == "Paid"
    assert first.json()["invoice_no"] == "P000001"
    assert second.status_code == 200
    assert second.json()["status"] == "duplicate"
    assert second.json()["invoice_no"] == "P000001"
    assert logged_payment_types() == ["callback"]


@pytest.mark.integration
def test_callback_failed_payment_marks_booking_failed(
    client: TestClient, pending_booking: dict[str, Any], callback_secret: str
) -> None:
    """Test that a declined order fails both the booking and its payment."""
    payload = {"bookingId": pending_booking["id"], "orderId": "gw-10", "orderStatus": 6}

    response = post_callback(client, payload)

    assert response.status_code == 200
    assert response.json()["booking_status"] == "Failed"
    assert response.json()["payment_status"] == "Failed"
    assert response.json()["invoice_no"] is None


@pytest.mark.integration
def test_callback_rejects_bad_signature(
    client: TestClient, pending_booking: dict[str, Any], callback_secret: str
) -> None:
    """Test that callbacks signed with another secret are refused."""
    payload = {"bookingId": pending_booking["id"], "orderId": "gw-11", "orderStatus": 2}

    response = post_callback(client, payload, secret="wrong-secret")

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid signature"}
    assert logged_payment_types() == []


@pytest.mark.integration
def test_callback_rejects_malformed_body(client: TestClient, callback_secret: str) -> None:
    """Test that a correctly signed but incomplete body is a 400."""
    response = post_callback(client, {"orderId": "gw-12"})

    assert response.status_code == 400


@pytest.mark.integration
def test_callback_unknown_booking(client: TestClient, callback_secret: str) -> None:
    """Test that callbacks for unknown bookings are a 404."""
    response = post_callback(client, {"bookingId": "missing", "orderId": "gw-13", "orderStatus": 2})

    assert response.status_code == 404


@pytest.mark.integration
def test_admin_status_update_requires_auth(
    client: TestClient, pending_booking: dict[str, Any]
) -> None:
    """Test that status changes need admin credentials."""
    response = client.post(
        "/api/payment/update-status",
        json={
            "bookingId": pending_booking["id"],
            "status": "Cancelled",
            "paymentStatus": "Pending",
        },
    )

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Basic"


@pytest.mark.integration
def test_admin_status_update_follows_state_machine(
    client: TestClient, pending_booking: dict[str, Any], admin_headers: dict[str, str]
) -> None:
    """Test that a cancelled booking cannot be moved back to confirmed."""
    cancel = client.post(
        "/api/payment/update-status",
        json={
            "bookingId": pending_booking["id"],
            "status": "Cancelled",
            "paymentStatus": "Pending",
        },
        headers=admin_headers,
    )
    revive = client.post(
        "/api/payment/update-status",
        json={"bookingId": pending_booking["id"], "status": "Confirmed", "paymentStatus": "Paid"},
        headers=admin_headers,
    )

    assert cancel.status_code == 200
    assert cancel.json()["status"] == "Cancelled"
    assert revive.status_code == 409


@pytest.mark.integration
def test_rejected_callback_is_logged(
    client: TestClient, pending_booking: dict[str, Any], callback_secret: str
) -> None:
    """Test that a callback the booking can no longer take is refused and recorded."""
    paid = {
        "bookingId": pending_booking["id"],
        "orderId": "gw-14",
        "orderStatus": 2,
        "eventId": "evt-14",
    }
    declined = {**paid, "orderStatus": 6, "eventId": "evt-15"}

    first = post_callback(client, paid)
    second = post_callback(client, declined)

    assert first.status_code == 200
    assert second.status_code == 409
    assert logged_payments() == [("callback", "failed"), ("callback", "success")]
    with engine.connect() as conn:
        details = conn.execute(
            select(payment_logs.c.error_details).where(payment_logs.c.status == "failed")
        ).scalar_one()
    assert details
