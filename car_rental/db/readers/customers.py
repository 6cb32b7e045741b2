from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.engine import Connection

from car_rental.models.bookings import Booking
from car_rental.models.customers import Customer

customers = Customer.__table__
bookings = Booking.__table__


def get_customer(conn: Connection, customer_id: str) -> Optional[dict[str, Any]]:
    """
    Fetch a customer by ID.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        customer_id (str): Customer ID.

    Returns:
        Optional[dict[str, Any]]: Customer row including password_hash, or None.
    """
    row = (
        conn.execute(select(customers).where(customers.c.id == customer_id))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def get_customer_by_email(conn: Connection, email: str) -> Optional[dict[str, Any]]:
    """
    Fetch a customer by email, ignoring case.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        email (str): Email address.

    Returns:
        Optional[dict[str, Any]]: Customer row or None.
    """
    stmt = select(customers).where(func.lower(customers.c.email) == email.strip().lower())
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def list_customers(conn: Connection, search: Optional[str] = None) -> list[dict[str, Any]]:
    """
    List customers with their booking count, newest first.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        search (Optional[str]): Substring matched against name and email.

    Returns:
        list[dict[str, Any]]: Customer rows with ``booking_count``.
    """
    booking_count = (
        select(func.count(bookings.c.id))
        .where(bookings.c.customer_id == customers.c.id)
        .scalar_subquery()
        .label("booking_count")
    )
    stmt = select(customers, booking_count).order_by(customers.c.created_at.desc())
    if search:
        pattern = f"%{search.lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(customers.c.email).like(pattern),
                func.lower(customers.c.first_name).like(pattern),
                func.lower(customers.c.last_name).like(pattern),
            )
        )
    return [dict(row) for row in conn.execute(stmt).mappings()]


def count_customer_bookings(conn: Connection, customer_id: str) -> int:
    stmt = select(func.count(bookings.c.id)).where(bookings.c.customer_id == customer_id)
    return int(conn.execute(stmt).scalar() or 0)
