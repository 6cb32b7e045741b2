"""
Generic single-row write helpers shared by the domain writers.

Each helper stamps ``updated_at`` (and ``created_at`` on insert) when the
table has those columns, and returns what the caller needs to report back.
"""

from typing import Any

from sqlalchemy import delete, insert, update
from sqlalchemy.engine import Connection

from car_rental.models.base import new_id
from car_rental.utils.datetime import utc_now


def insert_row(conn: Connection, model: type, data: dict[str, Any]) -> str:
    """
    Insert one row and return its primary key.

    Args:
        conn (Connection): SQLAlchemy DB connection (within transaction).
        model (type): ORM model class (e.g. Vehicle, Promotion).
        data (dict[str, Any]): Column values.

    Returns:
        str: ID of the new row.
    """
    table = model.__table__
    now = utc_now()
    values = dict(data)
    values.setdefault("id", new_id())
    if "created_at" in table.c:
        values.setdefault("created_at", now)
    if "updated_at" in table.c:
        values.setdefault("updated_at", now)

    conn.execute(insert(table).values(**values))
    return str(values["id"])


def update_row(conn: Connection, model: type, row_id: str, data: dict[str, Any]) -> int:
    """
    Update one row by ID.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        model (type): ORM model class.
        row_id (str): Primary key of the row.
        data (dict[str, Any]): Fields to update.

    Returns:
        int: Number of rows updated (0 when the row does not exist).
    """
    table = model.__table__
    values = dict(data)
    if "updated_at" in table.c:
        values["updated_at"] = utc_now()

    result = conn.execute(update(table).where(table.c.id == row_id).values(**values))
    return result.rowcount


def delete_row(conn: Connection, model: type, row_id: str) -> int:
    """
    Permanently delete one row by ID.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        model (type): ORM model class.
        row_id (str): Primary key of the row.

    Returns:
        int: Number of rows deleted.
    """
    table = model.__table__
    result = conn.execute(delete(table).where(table.c.id == row_id))
    return result.rowcount


def reorder_rows(conn: Connection, model: type, ordered_ids: list[str]) -> None:
    """
    Rewrite ``display_order`` so rows appear in the given order.

    Args:
        conn (Connection): SQLAlchemy DB connection (within transaction).
        model (type): ORM model with a display_order column.
        ordered_ids (list[str]): Row IDs in their new order.
    """
    table = model.__table__
    for position, row_id in enumerate(ordered_ids):
        conn.execute(update(table).where(table.c.id == row_id).values(display_order=position))
