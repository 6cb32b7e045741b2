"""Write statements for seasonal price grids and rental option price tiers."""

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Connection

from car_rental.db.writers._upsert import upsert_with_distinct_check
from car_rental.models.base import new_id
from car_rental.models.options import RentalOptionPricing
from car_rental.models.pricing import SeasonalPricing
from car_rental.utils.datetime import utc_now

logger = logging.getLogger(__name__)

pricing = SeasonalPricing.__table__
option_pricing = RentalOptionPricing.__table__

TIER_COLUMNS = ("price_3_to_6_days", "price_7_to_14_days", "price_15_plus_days")
BASE_COLUMNS = ("base_price_3_to_6_days", "base_price_7_to_14_days", "base_price_15_plus_days")


def scale_season_prices(conn: Connection, season_id: str, multiplier: Decimal) -> int:
    """
    Multiply every tier price of a season and round to cents in one statement.

    Args:
        conn (Connection): SQLAlchemy DB connection (within transaction).
        season_id (str): Season whose grid is repriced.
        multiplier (Decimal): Factor applied to each tier (e.g. ``Decimal("1.10")``).

    Returns:
        int: Number of pricing rows updated.
    """
    values: dict[str, Any] = {
        col: func.round(pricing.c[col] * multiplier, 2) for col in TIER_COLUMNS
    }
    values["updated_at"] = utc_now()

    result = conn.execute(update(pricing).where(pricing.c.season_id == season_id).values(values))
    return result.rowcount


def restore_base_prices(conn: Connection, season_id: str) -> int:
    """
    Copy base prices back into the tier prices for rows that have all three.

    Args:
        conn (Connection): SQLAlchemy DB connection (within transaction).
        season_id (str): Season to reset.

    Returns:
        int: Number of pricing rows reset.
    """
    values: dict[str, Any] = {
        tier: pricing.c[base] for tier, base in zip(TIER_COLUMNS, BASE_COLUMNS)
    }
    values["updated_at"] = utc_now()

    stmt = (
        update(pricing)
        .where(
            pricing.c.season_id == season_id,
            *[pricing.c[base].is_not(None) for base in BASE_COLUMNS],
        )
        .values(values)
    )
    return conn.execute(stmt).rowcount


def copy_tiers_to_base(conn: Connection, season_id: str) -> int:
    """
    Record the current tier prices of a season as its base prices.

    Args:
        conn (Connection): SQLAlchemy DB connection (within transaction).
        season_id (str): Season to snapshot.

    Returns:
        int: Number of pricing rows updated.
    """
    values: dict[str, Any] = {
        base: pricing.c[tier] for tier, base in zip(TIER_COLUMNS, BASE_COLUMNS)
    }
    values["updated_at"] = utc_now()

    result = conn.execute(update(pricing).where(pricing.c.season_id == season_id).values(values))
    return result.rowcount


def update_pricing_row(conn: Connection, pricing_id: str, prices: dict[str, Any]) -> int:
    """
    Overwrite the tier prices of one pricing row.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        pricing_id (str): Pricing row ID.
        prices (dict[str, Any]): Tier (and optionally base) column values.

    Returns:
        int: Number of rows updated (0 when the row does not exist).
    """
    values = dict(prices)
    values["updated_at"] = utc_now()
    result = conn.execute(update(pricing).where(pricing.c.id == pricing_id).values(values))
    return result.rowcount


def upsert_pricing_rows(conn: Connection, rows: list[dict[str, Any]]) -> None:
    """
    Insert or update pricing rows keyed by (category_id, group, season_id).

    Args:
        conn (Connection): SQLAlchemy DB connection (within transaction).
        rows (list[dict[str, Any]]): Rows with category_id, group, season_id and tiers.
    """
    now = utc_now()
    prepared = []
    for row in rows:
        prepared.append(
            {
                "id": row.get("id") or new_id(),
                "category_id": row["category_id"],
                "group": row["group"],
                "season_id": row["season_id"],
                "price_3_to_6_days": row["price_3_to_6_days"],
                "price_7_to_14_days": row["price_7_to_14_days"],
                "price_15_plus_days": row["price_15_plus_days"],
                "base_price_3_to_6_days": row.get("base_price_3_to_6_days"),
                "base_price_7_to_14_days": row.get("base_price_7_to_14_days"),
                "base_price_15_plus_days": row.get("base_price_15_plus_days"),
                "created_at": now,
                "updated_at": now,
            }
        )

    upsert_with_distinct_check(
        conn=conn,
        table=SeasonalPricing,
        rows=prepared,
        conflict_columns=["category_id", "group", "season_id"],
        update_columns=list(TIER_COLUMNS) + list(BASE_COLUMNS),
    )
    logger.info(f"Upserted {len(prepared)} seasonal pricing rows")


def copy_season_pricing(conn: Connection, source_season_id: str, target_season_id: str) -> int:
    """
    Duplicate the price grid of one season into another.

    Args:
        conn (Connection): SQLAlchemy DB connection (within transaction).
        source_season_id (str): Season to copy from.
        target_season_id (str): Newly created season.

    Returns:
        int: Number of pricing rows copied.
    """
    source_rows = conn.execute(
        select(pricing).where(pricing.c.season_id == source_season_id)
    ).mappings()

    now = utc_now()
    copies = []
    for row in source_rows:
        data = dict(row)
        data.update(id=new_id(), season_id=target_season_id, created_at=now, updated_at=now)
        copies.append(data)

    if copies:
        conn.execute(insert(pricing), copies)
    return len(copies)


def delete_season_pricing(conn: Connection, season_id: str) -> int:
    result = conn.execute(delete(pricing).where(pricing.c.season_id == season_id))
    return result.rowcount


def replace_option_pricing(
    conn: Connection, option_id: str, tiers: list[dict[str, Any]]
) -> int:
    """
    Replace every price tier of a rental option.

    Args:
        conn (Connection): SQLAlchemy DB connection (within transaction).
        option_id (str): Rental option ID.
        tiers (list[dict[str, Any]]): Tiers with vehicle_groups and price.

    Returns:
        int: Number of tiers written.
    """
    conn.execute(delete(option_pricing).where(option_pricing.c.rental_option_id == option_id))
    rows = [
        {
            "id": new_id(),
            "rental_option_id": option_id,
            "vehicle_groups": tier["vehicle_groups"],
            "price": tier["price"],
        }
        for tier in tiers
    ]
    if rows:
        conn.execute(insert(option_pricing), rows)
    logger.info(f"Replaced pricing of rental option {option_id} with {len(rows)} tiers")
    return len(rows)
