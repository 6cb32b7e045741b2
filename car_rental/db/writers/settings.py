"""Writers for the general settings row and the document counters it holds."""

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.engine import Connection

from car_rental.db.readers.settings import DEFAULT_SETTINGS
from car_rental.models.settings import SETTINGS_ID, GeneralSetting
from car_rental.utils.datetime import utc_now

general_settings = GeneralSetting.__table__

COUNTER_PREFIXES = {
    "next_order_number": "K",
    "next_invoice_number": "P",
}


def ensure_settings_row(conn: Connection) -> None:
    """Insert the default settings row if it does not exist yet."""
    exists = conn.execute(
        select(general_settings.c.id).where(general_settings.c.id == SETTINGS_ID)
    ).fetchone()
    if exists is None:
        row = dict(DEFAULT_SETTINGS)
        row["updated_at"] = utc_now()
        conn.execute(general_settings.insert().values(**row))


def allocate_number(conn: Connection, counter: str) -> str:
    """
    Consume the next value of a document counter and format it.

    The settings row is locked for the rest of the caller's transaction so
    concurrent bookings never receive the same number.

    Args:
        conn (Connection): SQLAlchemy DB connection (within transaction).
        counter (str): ``next_order_number`` or ``next_invoice_number``.

    Returns:
        str: Formatted number, e.g. ``K000001`` or ``P000001``.

    Example:
        >>> with engine.begin() as conn:
        ...     allocate_number(conn, "next_order_number")
        'K000001'
    """
    prefix = COUNTER_PREFIXES[counter]
    ensure_settings_row(conn)

    column = general_settings.c[counter]
    current = conn.execute(
        select(column).where(general_settings.c.id == SETTINGS_ID).with_for_update()
    ).scalar_one()

    conn.execute(
        update(general_settings)
        .where(general_settings.c.id == SETTINGS_ID)
        .values({counter: current + 1})
    )
    return f"{prefix}{int(current):06d}"


def save_settings(conn: Connection, data: dict[str, Any]) -> None:
    """
    Create or update the settings row.

    Args:
        conn (Connection): SQLAlchemy DB connection (within transaction).
        data (dict[str, Any]): Settings fields to change.
    """
    if not data:
        return

    ensure_settings_row(conn)
    values = dict(data)
    values["updated_at"] = utc_now()
    conn.execute(
        update(general_settings).where(general_settings.c.id == SETTINGS_ID).values(values)
    )
