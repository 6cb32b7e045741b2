"""
Bulk repricing of a season's price grid.

Every operation here runs as one transaction, so a failure leaves the grid
exactly as it was.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog
from sqlalchemy.engine import Engine

from car_rental.db.readers.pricing import get_season
from car_rental.db.writers.pricing import (
    TIER_COLUMNS,
    copy_tiers_to_base,
    restore_base_prices,
    scale_season_prices,
    update_pricing_row,
)
from car_rental.metrics import repriced_rows, repricing_operations

logger = structlog.get_logger(__name__)

MIN_PERCENT = Decimal("-100")


class SeasonNotFoundError(LookupError):
    """Raised when a repricing operation targets an unknown season."""


def _require_season(conn: Any, season_id: str) -> None:
    if get_season(conn, season_id) is None:
        raise SeasonNotFoundError(f"Season {season_id} not found")


def update_prices_by_percent(engine: Engine, season_id: str, percent: Decimal | float) -> int:
    """
    Raise or lower every tier price of a season by a percentage.

    Prices are multiplied by ``1 + percent / 100`` and rounded to cents in a
    single UPDATE.

    Args:
        engine: SQLAlchemy engine
        season_id: Season to reprice
        percent: Percentage change, e.g. ``10`` for +10% or ``-5`` for -5%

    Returns:
        int: Number of pricing rows updated

    Raises:
        ValueError: If percent is below -100 (prices would turn negative)
        SeasonNotFoundError: If the season does not exist
    """
    percent = Decimal(str(percent))
    if percent < MIN_PERCENT:
        raise ValueError("Percent must be greater than or equal to -100")

    multiplier = 1 + percent / 100

    with engine.begin() as conn:
        _require_season(conn, season_id)
        updated = scale_season_prices(conn, season_id, multiplier)

    repricing_operations.labels(operation="percent").inc()
    repriced_rows.labels(operation="percent").inc(updated)
    logger.info(
        "season_prices_scaled",
        season_id=season_id,
        percent=str(percent),
        multiplier=str(multiplier),
        updated=updated,
    )
    return updated


def reset_prices_to_base(engine: Engine, season_id: str) -> int:
    """
    Restore a season's tier prices from their stored base prices.

    Rows missing any of the three base prices are left untouched. Running it
    twice gives the same result as running it once.

    Args:
        engine: SQLAlchemy engine
        season_id: Season to reset

    Returns:
        int: Number of pricing rows reset

    Raises:
        SeasonNotFoundError: If the season does not exist
    """
    with engine.begin() as conn:
        _require_season(conn, season_id)
        updated = restore_base_prices(conn, season_id)

    repricing_operations.labels(operation="reset_to_base").inc()
    repriced_rows.labels(operation="reset_to_base").inc(updated)
    logger.info("season_prices_reset_to_base", season_id=season_id, updated=updated)
    return updated


def snapshot_base_prices(engine: Engine, season_id: str) -> int:
    """
    Store a season's current tier prices as its base prices.

    Args:
        engine: SQLAlchemy engine
        season_id: Season to snapshot

    Returns:
        int: Number of pricing rows updated

    Raises:
        SeasonNotFoundError: If the season does not exist
    """
    with engine.begin() as conn:
        _require_season(conn, season_id)
        updated = copy_tiers_to_base(conn, season_id)

    repricing_operations.labels(operation="snapshot_base").inc()
    repriced_rows.labels(operation="snapshot_base").inc(updated)
    logger.info("season_base_prices_snapshotted", season_id=season_id, updated=updated)
    return updated


def save_pricing_grid(engine: Engine, rows: list[dict[str, Any]]) -> int:
    """
    Apply admin edits to individual pricing rows, all or nothing.

    Args:
        engine: SQLAlchemy engine
        rows: Dicts with ``id`` and the tier price columns to set

    Returns:
        int: Number of pricing rows updated

    Raises:
        LookupError: If any row ID does not exist (nothing is saved)
    """
    updated = 0
    with engine.begin() as conn:
        for row in rows:
            prices = {col: row[col] for col in TIER_COLUMNS if row.get(col) is not None}
            if not prices:
                continue
            if update_pricing_row(conn, row["id"], prices) == 0:
                raise LookupError(f"Pricing row {row['id']} not found")
            updated += 1

    repricing_operations.labels(operation="grid").inc()
    repriced_rows.labels(operation="grid").inc(updated)
    logger.info("pricing_grid_saved", updated=updated)
    return updated
