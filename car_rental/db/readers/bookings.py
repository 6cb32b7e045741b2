"""Read queries for bookings, joined with customer and vehicle details."""

from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.engine import Connection

from car_rental.models.bookings import Booking
from car_rental.models.catalog import Vehicle, VehicleCategory
from car_rental.models.customers import Customer

bookings = Booking.__table__
customers = Customer.__table__
vehicles = Vehicle.__table__
categories = VehicleCategory.__table__


def _booking_details():
    return (
        select(
            bookings,
            customers.c.first_name.label("customer_first_name"),
            customers.c.last_name.label("customer_last_name"),
            customers.c.email.label("customer_email"),
            customers.c.phone.label("customer_phone"),
            vehicles.c.name.label("vehicle_name"),
            vehicles.c.group.label("vehicle_group"),
            vehicles.c.image.label("vehicle_image"),
            categories.c.name.label("category_name"),
        )
        .join(customers, customers.c.id == bookings.c.customer_id)
        .join(vehicles, vehicles.c.id == bookings.c.vehicle_id)
        .join(categories, categories.c.id == vehicles.c.category_id)
    )


def get_booking(conn: Connection, booking_id: str) -> Optional[dict[str, Any]]:
    """
    Fetch a booking with customer and vehicle details.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        booking_id (str): Booking ID.

    Returns:
        Optional[dict[str, Any]]: Booking row or None.
    """
    row = conn.execute(_booking_details().where(bookings.c.id == booking_id)).mappings().fetchone()
    return dict(row) if row else None


def get_booking_for_update(conn: Connection, booking_id: str) -> Optional[dict[str, Any]]:
    """
    Fetch and lock a bare booking row inside the current transaction.

    Args:
        conn (Connection): Connection with an open transaction.
        booking_id (str): Booking ID.

    Returns:
        Optional[dict[str, Any]]: Booking row or None.
    """
    stmt = select(bookings).where(bookings.c.id == booking_id).with_for_update()
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def find_booking_by_invoice_and_email(
    conn: Connection,
    invoice_no: str,
    email: str,
) -> Optional[dict[str, Any]]:
    """
    Find a booking by invoice number, only if it belongs to the given email.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        invoice_no (str): Invoice number (e.g. ``P000042``).
        email (str): Customer email, compared case-insensitively.

    Returns:
        Optional[dict[str, Any]]: Booking row or None when nothing matches both.
    """
    stmt = _booking_details().where(
        bookings.c.invoice_no == invoice_no.strip(),
        func.lower(customers.c.email) == email.strip().lower(),
    )
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def list_customer_bookings(conn: Connection, customer_id: str) -> list[dict[str, Any]]:
    stmt = (
        _booking_details()
        .where(bookings.c.customer_id == customer_id)
        .order_by(bookings.c.created_at.desc())
    )
    return [dict(row) for row in conn.execute(stmt).mappings()]


def list_bookings(
    conn: Connection,
    status: Optional[str] = None,
    payment_status: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> list[dict[str, Any]]:
    """
    List bookings for the back-office, newest first.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        status (Optional[str]): Filter by booking status.
        payment_status (Optional[str]): Filter by payment status.
        limit (int): Page size.
        offset (int): Rows to skip.

    Returns:
        list[dict[str, Any]]: Booking rows with customer and vehicle details.
    """
    stmt = _booking_details().order_by(bookings.c.created_at.desc())
    if status:
        stmt = stmt.where(bookings.c.status == status)
    if payment_status:
        stmt = stmt.where(bookings.c.payment_status == payment_status)
    stmt = stmt.limit(limit).offset(offset)
    return [dict(row) for row in conn.execute(stmt).mappings()]


def existing_booking_ids(conn: Connection, booking_ids: list[str]) -> list[str]:
    stmt = select(bookings.c.id).where(bookings.c.id.in_(booking_ids))
    return [row[0] for row in conn.execute(stmt)]


def count_vehicle_bookings(conn: Connection, vehicle_id: str) -> int:
    stmt = select(func.count(bookings.c.id)).where(bookings.c.vehicle_id == vehicle_id)
    return int(conn.execute(stmt).scalar() or 0)
