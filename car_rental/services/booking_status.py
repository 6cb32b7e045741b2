"""
Booking and payment status state machine.

Booking status:
    Pending -> Confirmed | Cancelled | Failed
    Confirmed -> Completed

Payment status:
    Pending -> Paid | Failed
    Paid -> Refunded

Moving to the status a booking already has is allowed and changes nothing,
so replayed gateway notifications are harmless.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog
from sqlalchemy.engine import Connection

from car_rental.db.writers.bookings import update_booking_fields
from car_rental.db.writers.settings import allocate_number
from car_rental.metrics import booking_transitions

logger = structlog.get_logger(__name__)

PENDING = "Pending"
CONFIRMED = "Confirmed"
CANCELLED = "Cancelled"
COMPLETED = "Completed"
FAILED = "Failed"

PAID = "Paid"
REFUNDED = "Refunded"

BOOKING_STATUSES = (PENDING, CONFIRMED, CANCELLED, COMPLETED, FAILED)
PAYMENT_STATUSES = (PENDING, PAID, FAILED, REFUNDED)

BOOKING_TRANSITIONS: dict[str, set[str]] = {
    PENDING: {CONFIRMED, CANCELLED, FAILED},
    CONFIRMED: {COMPLETED},
    CANCELLED: set(),
    COMPLETED: set(),
    FAILED: set(),
}

PAYMENT_TRANSITIONS: dict[str, set[str]] = {
    PENDING: {PAID, FAILED},
    PAID: {REFUNDED},
    FAILED: set(),
    REFUNDED: set(),
}

# Gateway order states meaning the money was taken (2) or authorised (1)
GATEWAY_PAID_STATES = {1, 2}


class InvalidStatusTransitionError(ValueError):
    """Raised when a booking or payment status change is not allowed."""


def can_transition(current: str, target: str, transitions: dict[str, set[str]]) -> bool:
    """
    Check whether ``current`` may move to ``target``.

    Example:
        >>> can_transition("Pending", "Confirmed", BOOKING_TRANSITIONS)
        True
        >>> can_transition("Completed", "Pending", BOOKING_TRANSITIONS)
        False
    """
    return current == target or target in transitions.get(current, set())


def statuses_for_gateway_state(order_status: Optional[int]) -> tuple[str, str]:
    """
    Map a gateway order state to (booking status, payment status).

    Args:
        order_status: Numeric order state reported by the gateway

    Returns:
        tuple: ``("Confirmed", "Paid")`` when paid or authorised,
        ``("Failed", "Failed")`` otherwise
    """
    if order_status in GATEWAY_PAID_STATES:
        return CONFIRMED, PAID
    return FAILED, FAILED


def apply_transition(
    conn: Connection,
    booking: dict[str, Any],
    status: Optional[str] = None,
    payment_status: Optional[str] = None,
    source: str = "admin",
    transaction_id: Optional[str] = None,
) -> dict[str, Any]:
    """
    Validate and apply a status change to a booking row.

    A first successful payment also allocates the booking's invoice number.

    Args:
        conn: Database connection (within transaction)
        booking: Current booking row (id, status, payment_status, invoice_no)
        status: Target booking status, or None to keep it
        payment_status: Target payment status, or None to keep it
        source: What triggered the change (callback, verify or admin)
        transaction_id: Gateway order ID to record on the booking

    Returns:
        dict: ``changed`` flag plus the resulting status, payment_status and
        invoice_no

    Raises:
        InvalidStatusTransitionError: If either change is not allowed
    """
    target_status = status or booking["status"]
    target_payment = payment_status or booking["payment_status"]

    if target_status not in BOOKING_STATUSES:
        raise InvalidStatusTransitionError(f"Unknown booking status {target_status}")
    if target_payment not in PAYMENT_STATUSES:
        raise InvalidStatusTransitionError(f"Unknown payment status {target_payment}")

    if not can_transition(booking["status"], target_status, BOOKING_TRANSITIONS):
        booking_transitions.labels(source=source, result="rejected").inc()
        raise InvalidStatusTransitionError(
            f"Booking cannot move from {booking['status']} to {target_status}"
        )
    if not can_transition(booking["payment_status"], target_payment, PAYMENT_TRANSITIONS):
        booking_transitions.labels(source=source, result="rejected").inc()
        raise InvalidStatusTransitionError(
            f"Payment cannot move from {booking['payment_status']} to {target_payment}"
        )

    updates: dict[str, Any] = {}
    if target_status != booking["status"]:
        updates["status"] = target_status
    if target_payment != booking["payment_status"]:
        updates["payment_status"] = target_payment
    if transaction_id and transaction_id != booking.get("transaction_id"):
        updates["transaction_id"] = transaction_id

    invoice_no = booking.get("invoice_no")
    if target_payment == PAID and not invoice_no:
        invoice_no = allocate_number(conn, "next_invoice_number")
        updates["invoice_no"] = invoice_no

    if not updates:
        booking_transitions.labels(source=source, result="unchanged").inc()
        return {
            "changed": False,
            "status": target_status,
            "payment_status": target_payment,
            "invoice_no": invoice_no,
        }

    update_booking_fields(conn, booking["id"], updates)
    booking_transitions.labels(source=source, result="applied").inc()
    logger.info(
        "booking_status_changed",
        booking_id=booking["id"],
        source=source,
        from_status=booking["status"],
        to_status=target_status,
        from_payment_status=booking["payment_status"],
        to_payment_status=target_payment,
        invoice_no=invoice_no,
    )

    return {
        "changed": True,
        "status": target_status,
        "payment_status": target_payment,
        "invoice_no": invoice_no,
    }
