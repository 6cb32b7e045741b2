"""
Unit tests for the booking and payment status state machine.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import Mock, patch

import pytest

from car_rental.services.booking_status import (
    BOOKING_TRANSITIONS,
    PAYMENT_TRANSITIONS,
    InvalidStatusTransitionError,
    apply_transition,
    can_transition,
    statuses_for_gateway_state,
)


def make_booking(**overrides: Any) -> dict[str, Any]:
    booking = {
        "id": "booking-1",
        "status": "Pending",
        "payment_status": "Pending",
        "invoice_no": None,
        "transaction_id": None,
    }
    booking.update(overrides)
    return booking


@pytest.mark.unit
@pytest.mark.parametrize(
    "current,target,allowed",
    [
        ("Pending", "Confirmed", True),
        ("Pending", "Cancelled", True),
        ("Confirmed", "Completed", True),
        ("Confirmed", "Pending", False),
        ("Cancelled", "Confirmed", False),
        ("Completed", "Completed", True),
    ],
)
def test_booking_transitions(current: str, target: str, allowed: bool) -> None:
    """Test the allowed booking status moves, including the no-op move."""
    assert can_transition(current, target, BOOKING_TRANSITIONS) is allowed


@pytest.mark.unit
def test_payment_transitions() -> None:
    """Test that a paid booking can only be refunded."""
    assert can_transition("Pending", "Paid", PAYMENT_TRANSITIONS)
    assert can_transition("Paid", "Refunded", PAYMENT_TRANSITIONS)
    assert not can_transition("Paid", "Pending", PAYMENT_TRANSITIONS)
    assert not can_transition("Refunded", "Paid", PAYMENT_TRANSITIONS)


@pytest.mark.unit
@pytest.mark.parametrize(
    "order_status,expected",
    [
        (2, ("Confirmed", "Paid")),
        (1, ("Confirmed", "Paid")),
        (6, ("Failed", "Failed")),
        (None, ("Failed", "Failed")),
    ],
)
def test_statuses_for_gateway_state(order_status: Any, expected: tuple[str, str]) -> None:
    """Test that gateway states 1 and 2 mean paid and anything else failed."""
    assert statuses_for_gateway_state(order_status) == expected


@pytest.mark.unit
@patch("car_rental.services.booking_status.allocate_number")
@patch("car_rental.services.booking_status.update_booking_fields")
def test_apply_transition_allocates_invoice_on_payment(
    mock_update: Mock, mock_allocate: Mock
) -> None:
    """Test that the first successful payment assigns an invoice number."""
    mock_allocate.return_value = "P000007"
    conn = Mock()

    outcome = apply_transition(
        conn,
        make_booking(),
        status="Confirmed",
        payment_status="Paid",
        source="callback",
        transaction_id="order-123",
    )

    assert outcome == {
        "changed": True,
        "status": "Confirmed",
        "payment_status": "Paid",
        "invoice_no": "P000007",
    }
    mock_allocate.assert_called_once_with(conn, "next_invoice_number")
    mock_update.assert_called_once_with(
        conn,
        "booking-1",
        {
            "status": "Confirmed",
            "payment_status": "Paid",
            "transaction_id": "order-123",
            "invoice_no": "P000007",
        },
    )


@pytest.mark.unit
@patch("car_rental.services.booking_status.allocate_number")
@patch("car_rental.services.booking_status.update_booking_fields")
def test_apply_transition_same_status_is_noop(mock_update: Mock, mock_allocate: Mock) -> None:
    """Test that replaying the current status writes nothing."""
    booking = make_booking(
        status="Confirmed", payment_status="Paid", invoice_no="P000001", transaction_id="o-1"
    )

    outcome = apply_transition(
        Mock(), booking, status="Confirmed", payment_status="Paid", transaction_id="o-1"
    )

    assert outcome["changed"] is False
    assert outcome["invoice_no"] == "P000001"
    mock_update.assert_not_called()
    mock_allocate.assert_not_called()


@pytest.mark.unit
@patch("car_rental.services.booking_status.update_booking_fields")
def test_apply_transition_rejects_invalid_move(mock_update: Mock) -> None:
    """Test that a cancelled booking cannot be confirmed."""
    with pytest.raises(InvalidStatusTransitionError):
        apply_transition(Mock(), make_booking(status="Cancelled"), status="Confirmed")

    mock_update.assert_not_called()


@pytest.mark.unit
def test_apply_transition_rejects_unknown_status() -> None:
    """Test that statuses outside the known set are refused."""
    with pytest.raises(InvalidStatusTransitionError):
        apply_transition(Mock(), make_booking(), status="Shipped")
