"""
Internal helper functions for route handlers.

Lookups that end in a 404, request metadata for the payment audit log and
response shaping shared by the public and admin routers.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request, status
from sqlalchemy.engine import Connection

from car_rental.db.readers.bookings import get_booking
from car_rental.db.readers.customers import get_customer

FORWARDED_IP_HEADERS = ("x-forwarded-for", "x-real-ip", "cf-connecting-ip")


def client_info(request: Request) -> dict[str, Any]:
    """
    Collect user agent and client IP for the payment log.

    The first address of a proxy header wins over the socket peer.

    Args:
        request: Incoming request

    Returns:
        dict: user_agent and ip_address
    """
    ip_address = None
    for header in FORWARDED_IP_HEADERS:
        value = request.headers.get(header)
        if value:
            ip_address = value.split(",")[0].strip()
            break
    if ip_address is None and request.client is not None:
        ip_address = request.client.host

    return {
        "user_agent": request.headers.get("user-agent"),
        "ip_address": ip_address,
    }


def public_customer(row: dict[str, Any]) -> dict[str, Any]:
    """Customer row without the password hash, plus a has_password flag."""
    data = {k: v for k, v in row.items() if k != "password_hash"}
    data["has_password"] = bool(row.get("password_hash"))
    return data


def not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def get_customer_or_404(conn: Connection, customer_id: str) -> dict[str, Any]:
    """
    Fetch a customer, raise 404 if it does not exist.

    Args:
        conn: Database connection
        customer_id: Customer ID

    Returns:
        dict: Customer row

    Raises:
        HTTPException: 404 if customer doesn't exist
    """
    customer = get_customer(conn, customer_id)
    if customer is None:
        raise not_found("Customer not found")
    return customer


def get_booking_or_404(conn: Connection, booking_id: str) -> dict[str, Any]:
    """
    Fetch a booking with details, raise 404 if it does not exist.

    Raises:
        HTTPException: 404 if booking doesn't exist
    """
    booking = get_booking(conn, booking_id)
    if booking is None:
        raise not_found("Booking not found")
    return booking


def require_row(row: dict[str, Any] | None, label: str) -> dict[str, Any]:
    """Return ``row`` or raise 404 naming the missing entity."""
    if row is None:
        raise not_found(f"{label} not found")
    return row


def changes(payload: Any) -> dict[str, Any]:
    """Fields explicitly sent in a partial update payload."""
    return payload.model_dump(exclude_unset=True)
