from typing import Any

from sqlalchemy import delete, update
from sqlalchemy.engine import Connection

from car_rental.db.writers.rows import insert_row
from car_rental.models.bookings import Booking
from car_rental.models.payments import PaymentLog
from car_rental.utils.datetime import utc_now

bookings = Booking.__table__
payment_logs = PaymentLog.__table__


def insert_booking(conn: Connection, data: dict[str, Any]) -> str:
    """
    Insert a booking row.

    Args:
        conn (Connection): SQLAlchemy DB connection (within transaction).
        data (dict[str, Any]): Booking column values.

    Returns:
        str: New booking ID.
    """
    return insert_row(conn, Booking, data)


def update_booking_fields(conn: Connection, booking_id: str, data: dict[str, Any]) -> int:
    """
    Update status, payment and document fields of a booking.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        booking_id (str): Booking ID.
        data (dict[str, Any]): Fields to update.

    Returns:
        int: Number of rows updated.
    """
    values = dict(data)
    values["updated_at"] = utc_now()
    result = conn.execute(update(bookings).where(bookings.c.id == booking_id).values(values))
    return result.rowcount


def delete_bookings(conn: Connection, booking_ids: list[str]) -> int:
    """
    Permanently delete bookings, detaching their payment logs first.

    Payment logs are an audit trail and outlive the booking they refer to.

    Args:
        conn (Connection): SQLAlchemy DB connection (within transaction).
        booking_ids (list[str]): IDs of bookings to delete.

    Returns:
        int: Number of bookings deleted.
    """
    if not booking_ids:
        return 0

    conn.execute(
        update(payment_logs)
        .where(payment_logs.c.booking_id.in_(booking_ids))
        .values(booking_id=None)
    )
    result = conn.execute(delete(bookings).where(bookings.c.id.in_(booking_ids)))
    return result.rowcount
