"""
Payment flows: order registration, gateway verification, signed callbacks
and manual status updates.

Every gateway interaction is written to the payment log. Callbacks carry an
idempotency key; a key seen before is acknowledged without touching the
booking again.
"""

from __future__ import annotations

import time
from decimal import Decimal
from typing import Any, Optional

import structlog
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from car_rental.config import DEFAULT_CURRENCY, PUBLIC_BASE_URL
from car_rental.db.readers.bookings import get_booking, get_booking_for_update
from car_rental.db.readers.payments import find_successful_log, idempotency_key_exists
from car_rental.db.writers.payments import insert_payment_log
from car_rental.metrics import payment_events
from car_rental.network.gateway import GatewayError, get_order_status, register_order
from car_rental.services.booking_status import (
    PAID,
    PENDING,
    InvalidStatusTransitionError,
    apply_transition,
    statuses_for_gateway_state,
)

logger = structlog.get_logger(__name__)


class BookingNotFoundError(LookupError):
    """Raised when a payment flow references an unknown booking."""


class PaymentConflictError(ValueError):
    """Raised when a booking is not in a state that accepts the payment action."""


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _customer_snapshot(booking: dict[str, Any]) -> dict[str, Any]:
    return {
        "customer_email": booking.get("customer_email"),
        "customer_first_name": booking.get("customer_first_name"),
        "customer_last_name": booking.get("customer_last_name"),
        "customer_phone": booking.get("customer_phone"),
    }


def _log_failure(engine: Engine, data: dict[str, Any], error: Exception) -> None:
    """
    Record a failed gateway interaction in its own transaction.

    The caller's transaction may already be rolled back, so the entry is
    written separately before the error is re-raised.
    """
    with engine.begin() as conn:
        insert_payment_log(conn, {**data, "status": "failed", "error_details": str(error)})
    payment_events.labels(event=data["payment_type"], status="failed").inc()
    logger.warning(
        "payment_interaction_failed",
        booking_id=data.get("booking_id"),
        payment_type=data["payment_type"],
        error=str(error),
    )


def create_order(
    engine: Engine,
    booking_id: str,
    amount: Optional[Decimal] = None,
    currency: str = DEFAULT_CURRENCY,
    client: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """
    Register a gateway order for a pending booking.

    Args:
        engine: SQLAlchemy engine
        booking_id: Booking to pay for
        amount: Amount to charge; defaults to the booking's total price
        currency: ISO currency code
        client: Request metadata (user_agent, ip_address) for the audit log

    Returns:
        dict: success flag, payment_url and order_id, or error details

    Raises:
        BookingNotFoundError: If the booking does not exist
        PaymentConflictError: If the booking is already paid or not pending
        GatewayError: If the gateway cannot be reached
    """
    started = time.monotonic()

    with engine.connect() as conn:
        booking = get_booking(conn, booking_id)
    if booking is None:
        raise BookingNotFoundError(f"Booking {booking_id} not found")
    if booking["payment_status"] == PAID:
        raise PaymentConflictError("Booking is already paid")
    if booking["status"] != PENDING:
        raise PaymentConflictError(f"Booking is {booking['status']} and cannot be paid online")

    charge = Decimal(str(amount if amount is not None else booking["total_price"]))
    amount_cents = int((charge * 100).to_integral_value())
    order_number = f"TEMP-{booking_id[:8]}-{int(time.time() * 1000)}"

    try:
        result = register_order(
            order_number=order_number,
            amount_cents=amount_cents,
            currency=currency,
            description=f"Car rental booking {booking['order_number'] or booking_id}",
            return_url=f"{PUBLIC_BASE_URL}/en/payment/success?bookingId={booking_id}",
            fail_url=f"{PUBLIC_BASE_URL}/en/payment/failure?bookingId={booking_id}",
            email=booking.get("customer_email"),
            phone=booking.get("customer_phone"),
            json_params={"bookingId": booking_id, "orderNumber": booking["order_number"]},
        )
    except GatewayError as e:
        _log_failure(
            engine,
            {
                "booking_id": booking_id,
                "order_number": order_number,
                "amount": charge,
                "currency": currency,
                "payment_type": "create_order",
                "processing_time_ms": _elapsed_ms(started),
                **_customer_snapshot(booking),
                **(client or {}),
            },
            e,
        )
        raise

    status = "success" if result["success"] else "failed"
    with engine.begin() as conn:
        insert_payment_log(
            conn,
            {
                "booking_id": booking_id,
                "order_number": order_number,
                "amount": charge,
                "currency": currency,
                "payment_type": "create_order",
                "status": status,
                "gateway_order_id": result.get("order_id"),
                "gateway_error_code": result.get("error_code"),
                "gateway_error_message": result.get("error_message"),
                "form_url": result.get("form_url"),
                "processing_time_ms": _elapsed_ms(started),
                "raw_response": result.get("raw"),
                **_customer_snapshot(booking),
                **(client or {}),
            },
        )

    payment_events.labels(event="create_order", status=status).inc()

    if not result["success"]:
        logger.warning(
            "payment_order_failed", booking_id=booking_id, error=result.get("error_message")
        )
        return {"success": False, "error": result.get("error_message")}

    logger.info("payment_order_created", booking_id=booking_id, order_id=result["order_id"])
    return {
        "success": True,
        "payment_url": result["form_url"],
        "order_id": result["order_id"],
    }


def verify_payment(
    engine: Engine,
    order_id: str,
    booking_id: str,
    client: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """
    Verify an order with the gateway and apply the outcome to the booking.

    A verification already recorded as successful for the same gateway order
    is answered from the log without calling the gateway again.

    Args:
        engine: SQLAlchemy engine
        order_id: Gateway order ID
        booking_id: Booking the order belongs to
        client: Request metadata (user_agent, ip_address) for the audit log

    Returns:
        dict: success flag, payment_status, booking_status, invoice_no and
        whether the result came from an earlier verification

    Raises:
        BookingNotFoundError: If the booking does not exist
        InvalidStatusTransitionError: If the booking can no longer take this outcome
        GatewayError: If the gateway cannot be reached
    """
    started = time.monotonic()

    with engine.connect() as conn:
        booking = get_booking(conn, booking_id)
        if booking is None:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        previous = find_successful_log(conn, order_id, "verify_payment")

    if previous is not None:
        logger.info("payment_already_verified", booking_id=booking_id, order_id=order_id)
        payment_events.labels(event="verify_payment", status="duplicate").inc()
        return {
            "success": booking["payment_status"] == PAID,
            "payment_status": booking["payment_status"],
            "booking_status": booking["status"],
            "invoice_no": booking["invoice_no"],
            "already_processed": True,
        }

    entry = {
        "booking_id": booking_id,
        "order_number": booking["order_number"],
        "amount": booking["total_price"],
        "currency": DEFAULT_CURRENCY,
        "payment_type": "verify_payment",
        "gateway_order_id": order_id,
        **_customer_snapshot(booking),
        **(client or {}),
    }

    try:
        gateway = get_order_status(order_id)
    except GatewayError as e:
        _log_failure(engine, {**entry, "processing_time_ms": _elapsed_ms(started)}, e)
        raise

    booking_status, payment_status = statuses_for_gateway_state(gateway["order_status"])
    paid = payment_status == PAID
    entry.update(
        gateway_status=str(gateway["order_status"]),
        gateway_error_code=gateway["error_code"],
        gateway_error_message=gateway["error_message"],
        raw_response=gateway["raw"],
    )

    try:
        with engine.begin() as conn:
            current = get_booking_for_update(conn, booking_id)
            if current is None:
                raise BookingNotFoundError(f"Booking {booking_id} not found")
            outcome = apply_transition(
                conn,
                current,
                status=booking_status,
                payment_status=payment_status,
                source="verify",
                transaction_id=order_id,
            )
            insert_payment_log(
                conn,
                {
                    **entry,
                    "status": "success" if paid else "failed",
                    "processing_time_ms": _elapsed_ms(started),
                },
            )
    except InvalidStatusTransitionError as e:
        _log_failure(engine, {**entry, "processing_time_ms": _elapsed_ms(started)}, e)
        raise

    payment_events.labels(event="verify_payment", status="success" if paid else "failed").inc()
    logger.info(
        "payment_verified",
        booking_id=booking_id,
        order_id=order_id,
        gateway_status=gateway["order_status"],
        payment_status=outcome["payment_status"],
    )

    return {
        "success": paid,
        "payment_status": outcome["payment_status"],
        "booking_status": outcome["status"],
        "invoice_no": outcome["invoice_no"],
        "already_processed": False,
    }


def callback_idempotency_key(payload: dict[str, Any]) -> str:
    """
    Derive the deduplication key of a gateway callback.

    The gateway's own event ID is preferred; without one the order ID and
    reported state identify the notification.
    """
    if payload.get("event_id"):
        return f"callback:{payload['event_id']}"
    return f"callback:{payload['order_id']}:{payload['order_status']}"


def handle_callback(
    engine: Engine,
    payload: dict[str, Any],
    client: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """
    Apply a verified gateway callback to its booking exactly once.

    Args:
        engine: SQLAlchemy engine
        payload: Callback fields (booking_id, order_id, order_status, event_id)
        client: Request metadata (user_agent, ip_address) for the audit log

    Returns:
        dict: ``status`` of ``processed`` or ``duplicate`` plus the booking's
        resulting statuses

    Raises:
        BookingNotFoundError: If the booking does not exist
        InvalidStatusTransitionError: If the booking can no longer take this outcome
    """
    started = time.monotonic()
    key = callback_idempotency_key(payload)
    booking_id = payload["booking_id"]

    with engine.connect() as conn:
        seen = idempotency_key_exists(conn, key)
    if seen:
        return _duplicate_callback(engine, booking_id, key)

    booking_status, payment_status = statuses_for_gateway_state(payload["order_status"])

    try:
        with engine.begin() as conn:
            booking = get_booking_for_update(conn, booking_id)
            if booking is None:
                raise BookingNotFoundError(f"Booking {booking_id} not found")

            outcome = apply_transition(
                conn,
                booking,
                status=booking_status,
                payment_status=payment_status,
                source="callback",
                transaction_id=payload["order_id"],
            )
            insert_payment_log(
                conn,
                {
                    "booking_id": booking_id,
                    "order_number": booking["order_number"],
                    "amount": booking["total_price"],
                    "currency": DEFAULT_CURRENCY,
                    "payment_type": "callback",
                    "status": "success" if payment_status == PAID else "failed",
                    "gateway_order_id": payload["order_id"],
                    "gateway_status": str(payload["order_status"]),
                    "idempotency_key": key,
                    "processing_time_ms": _elapsed_ms(started),
                    "raw_response": payload,
                    **(client or {}),
                },
            )
    except IntegrityError:
        # Same key committed by a concurrent delivery
        return _duplicate_callback(engine, booking_id, key)
    except InvalidStatusTransitionError as e:
        # Logged without the idempotency key; a redelivery is rejected again
        _log_failure(
            engine,
            {
                "booking_id": booking_id,
                "order_number": booking["order_number"],
                "amount": booking["total_price"],
                "currency": DEFAULT_CURRENCY,
                "payment_type": "callback",
                "gateway_order_id": payload["order_id"],
                "gateway_status": str(payload["order_status"]),
                "processing_time_ms": _elapsed_ms(started),
                "raw_response": payload,
                **(client or {}),
            },
            e,
        )
        raise

    payment_events.labels(
        event="callback", status="success" if payment_status == PAID else "failed"
    ).inc()
    logger.info(
        "payment_callback_processed",
        booking_id=booking_id,
        order_id=payload["order_id"],
        changed=outcome["changed"],
        payment_status=outcome["payment_status"],
    )

    return {
        "status": "processed",
        "booking_status": outcome["status"],
        "payment_status": outcome["payment_status"],
        "invoice_no": outcome["invoice_no"],
    }


def _duplicate_callback(engine: Engine, booking_id: str, key: str) -> dict[str, Any]:
    with engine.connect() as conn:
        booking = get_booking(conn, booking_id)

    payment_events.labels(event="callback", status="duplicate").inc()
    logger.info("payment_callback_duplicate", booking_id=booking_id, idempotency_key=key)

    return {
        "status": "duplicate",
        "booking_status": booking["status"] if booking else None,
        "payment_status": booking["payment_status"] if booking else None,
        "invoice_no": booking["invoice_no"] if booking else None,
    }


def admin_update_status(
    engine: Engine,
    booking_id: str,
    status: str,
    payment_status: str,
    client: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """
    Change booking and payment status on behalf of an administrator.

    Args:
        engine: SQLAlchemy engine
        booking_id: Booking to update
        status: Target booking status
        payment_status: Target payment status
        client: Request metadata (user_agent, ip_address) for the audit log

    Returns:
        dict: changed flag plus resulting status, payment_status and invoice_no

    Raises:
        BookingNotFoundError: If the booking does not exist
        InvalidStatusTransitionError: If the change is not allowed
    """
    with engine.begin() as conn:
        booking = get_booking_for_update(conn, booking_id)
        if booking is None:
            raise BookingNotFoundError(f"Booking {booking_id} not found")

        outcome = apply_transition(
            conn, booking, status=status, payment_status=payment_status, source="admin"
        )
        if outcome["changed"]:
            insert_payment_log(
                conn,
                {
                    "booking_id": booking_id,
                    "order_number": booking["order_number"],
                    "amount": booking["total_price"],
                    "currency": DEFAULT_CURRENCY,
                    "payment_type": "admin_update",
                    "status": "success",
                    "gateway_status": f"{status}/{payment_status}",
                    **(client or {}),
                },
            )

    payment_events.labels(event="admin_update", status="success").inc()
    return outcome
