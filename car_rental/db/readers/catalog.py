from typing import Any, Optional

from sqlalchemy import func, select, text
from sqlalchemy.engine import Connection

from car_rental.models.catalog import Vehicle, VehicleCategory

vehicles = Vehicle.__table__
categories = VehicleCategory.__table__


def category_exists(conn: Connection, category_id: str) -> bool:
    """
    Check if a vehicle category exists.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        category_id (str): Category ID to check.

    Returns:
        bool: True if the category exists, False otherwise.
    """
    result = conn.execute(
        text("SELECT 1 FROM vehicle_categories WHERE id = :category_id"),
        {"category_id": category_id},
    )
    return result.fetchone() is not None


def get_category(conn: Connection, category_id: str) -> Optional[dict[str, Any]]:
    row = (
        conn.execute(select(categories).where(categories.c.id == category_id))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def get_category_by_name(conn: Connection, name: str) -> Optional[dict[str, Any]]:
    row = (
        conn.execute(select(categories).where(categories.c.name == name)).mappings().fetchone()
    )
    return dict(row) if row else None


def list_categories(conn: Connection, visible_only: bool = False) -> list[dict[str, Any]]:
    """
    List vehicle categories in display order.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        visible_only (bool): Only return categories shown on the public site.

    Returns:
        list[dict[str, Any]]: Category rows.
    """
    stmt = select(categories).order_by(categories.c.display_order, categories.c.name)
    if visible_only:
        stmt = stmt.where(categories.c.visible.is_(True))
    return [dict(row) for row in conn.execute(stmt).mappings()]


def max_category_order(conn: Connection) -> int:
    value = conn.execute(select(func.max(categories.c.display_order))).scalar()
    return int(value) if value is not None else -1


def get_vehicle(conn: Connection, vehicle_id: str) -> Optional[dict[str, Any]]:
    """
    Fetch a vehicle together with its category name.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        vehicle_id (str): Vehicle ID.

    Returns:
        Optional[dict[str, Any]]: Vehicle row with ``category_name``, or None.
    """
    stmt = (
        select(vehicles, categories.c.name.label("category_name"))
        .join(categories, categories.c.id == vehicles.c.category_id)
        .where(vehicles.c.id == vehicle_id)
    )
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def list_vehicles(
    conn: Connection,
    category_id: Optional[str] = None,
    visible_only: bool = False,
) -> list[dict[str, Any]]:
    """
    List vehicles with their category name, optionally filtered.

    Hidden categories also hide their vehicles when visible_only is set.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        category_id (Optional[str]): Restrict to one category.
        visible_only (bool): Only vehicles bookable on the public site.

    Returns:
        list[dict[str, Any]]: Vehicle rows ordered by category order, then group.
    """
    stmt = (
        select(vehicles, categories.c.name.label("category_name"))
        .join(categories, categories.c.id == vehicles.c.category_id)
        .order_by(categories.c.display_order, vehicles.c.group, vehicles.c.name)
    )
    if category_id:
        stmt = stmt.where(vehicles.c.category_id == category_id)
    if visible_only:
        stmt = stmt.where(vehicles.c.visible.is_(True), categories.c.visible.is_(True))
    return [dict(row) for row in conn.execute(stmt).mappings()]
