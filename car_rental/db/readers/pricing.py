"""Read queries for seasons, seasonal price grids and rental option tiers."""

from datetime import date
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from car_rental.models.catalog import VehicleCategory
from car_rental.models.options import RentalOption, RentalOptionPricing
from car_rental.models.pricing import Season, SeasonalPricing

seasons = Season.__table__
seasonal_pricing = SeasonalPricing.__table__
categories = VehicleCategory.__table__
rental_options = RentalOption.__table__
option_pricing = RentalOptionPricing.__table__


def get_season(conn: Connection, season_id: str) -> Optional[dict[str, Any]]:
    row = conn.execute(select(seasons).where(seasons.c.id == season_id)).mappings().fetchone()
    return dict(row) if row else None


def list_seasons(conn: Connection) -> list[dict[str, Any]]:
    stmt = select(seasons).order_by(seasons.c.start_date)
    return [dict(row) for row in conn.execute(stmt).mappings()]


def find_season_for_date(conn: Connection, day: date) -> Optional[dict[str, Any]]:
    """
    Find the season whose inclusive date interval contains ``day``.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        day (date): Calendar date (usually the pickup date).

    Returns:
        Optional[dict[str, Any]]: Season row or None when no season covers the date.
    """
    stmt = (
        select(seasons)
        .where(seasons.c.start_date <= day, seasons.c.end_date >= day)
        .order_by(seasons.c.start_date)
        .limit(1)
    )
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def find_overlapping_season(
    conn: Connection,
    start_date: date,
    end_date: date,
    exclude_id: Optional[str] = None,
) -> Optional[dict[str, Any]]:
    """
    Find an existing season overlapping the given interval.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        start_date (date): Interval start (inclusive).
        end_date (date): Interval end (inclusive).
        exclude_id (Optional[str]): Season being edited, ignored in the check.

    Returns:
        Optional[dict[str, Any]]: The first overlapping season, or None.
    """
    stmt = select(seasons).where(
        seasons.c.start_date <= end_date,
        seasons.c.end_date >= start_date,
    )
    if exclude_id:
        stmt = stmt.where(seasons.c.id != exclude_id)
    row = conn.execute(stmt.limit(1)).mappings().fetchone()
    return dict(row) if row else None


def get_pricing_row(
    conn: Connection,
    category_id: str,
    group: str,
    season_id: str,
) -> Optional[dict[str, Any]]:
    """
    Fetch the seasonal pricing row for one category/group/season triple.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        category_id (str): Vehicle category ID.
        group (str): Vehicle group code.
        season_id (str): Season ID.

    Returns:
        Optional[dict[str, Any]]: Pricing row or None when not configured.
    """
    stmt = select(seasonal_pricing).where(
        seasonal_pricing.c.category_id == category_id,
        seasonal_pricing.c.group == group,
        seasonal_pricing.c.season_id == season_id,
    )
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def list_season_pricing(conn: Connection, season_id: str) -> list[dict[str, Any]]:
    """
    List every pricing row of a season with its category name.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        season_id (str): Season ID.

    Returns:
        list[dict[str, Any]]: Rows ordered by category display order, then group.
    """
    stmt = (
        select(seasonal_pricing, categories.c.name.label("category_name"))
        .join(categories, categories.c.id == seasonal_pricing.c.category_id)
        .where(seasonal_pricing.c.season_id == season_id)
        .order_by(categories.c.display_order, seasonal_pricing.c.group)
    )
    return [dict(row) for row in conn.execute(stmt).mappings()]


def list_rental_options(conn: Connection, visible_only: bool = False) -> list[dict[str, Any]]:
    stmt = select(rental_options).order_by(rental_options.c.display_order, rental_options.c.name)
    if visible_only:
        stmt = stmt.where(rental_options.c.visible.is_(True))
    return [dict(row) for row in conn.execute(stmt).mappings()]


def get_rental_option(conn: Connection, option_id: str) -> Optional[dict[str, Any]]:
    row = (
        conn.execute(select(rental_options).where(rental_options.c.id == option_id))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def get_rental_option_by_code(conn: Connection, code: str) -> Optional[dict[str, Any]]:
    row = (
        conn.execute(select(rental_options).where(rental_options.c.code == code))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def list_option_pricing(conn: Connection, option_ids: list[str]) -> list[dict[str, Any]]:
    """
    List the price tiers of the given rental options.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        option_ids (list[str]): Rental option IDs.

    Returns:
        list[dict[str, Any]]: Tier rows (rental_option_id, vehicle_groups, price).
    """
    if not option_ids:
        return []
    stmt = select(option_pricing).where(option_pricing.c.rental_option_id.in_(option_ids))
    return [dict(row) for row in conn.execute(stmt).mappings()]


def list_rental_options_with_pricing(
    conn: Connection, visible_only: bool = False
) -> list[dict[str, Any]]:
    """Rental options with their price tiers attached under ``pricing``."""
    options = list_rental_options(conn, visible_only=visible_only)
    tiers: dict[str, list[dict[str, Any]]] = {}
    for tier in list_option_pricing(conn, [o["id"] for o in options]):
        tiers.setdefault(tier["rental_option_id"], []).append(tier)
    for option in options:
        option["pricing"] = tiers.get(option["id"], [])
    return options
