"""
Back-office management of seasons and seasonal price grids.

Bulk operations (percent change, reset to base, base snapshot) run as
single UPDATE statements through ``car_rental.services.repricing``.
"""

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.engine import Engine

from car_rental.db.readers.catalog import category_exists
from car_rental.db.readers.pricing import (
    find_overlapping_season,
    get_pricing_row,
    get_season,
    list_season_pricing,
    list_seasons,
)
from car_rental.db.writers.pricing import (
    copy_season_pricing,
    delete_season_pricing,
    upsert_pricing_rows,
)
from car_rental.db.writers.rows import delete_row, insert_row, update_row
from car_rental.dependencies import get_db_engine
from car_rental.models.pricing import Season
from car_rental.routes._helpers import changes, not_found, require_row
from car_rental.schemas.pricing import (
    PercentUpdatePayload,
    PricingGridPayload,
    PricingRowCreatePayload,
    SeasonPayload,
    SeasonRefPayload,
    SeasonUpdatePayload,
)
from car_rental.security import require_admin
from car_rental.services.repricing import (
    SeasonNotFoundError,
    reset_prices_to_base,
    save_pricing_grid,
    snapshot_base_prices,
    update_prices_by_percent,
)

logger = structlog.get_logger(__name__)
router = APIRouter(dependencies=[Depends(require_admin)])


def season_overlap_conflict(existing: dict[str, Any]) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=(
            f"Season overlaps with '{existing['name']}' "
            f"({existing['start_date']} to {existing['end_date']})"
        ),
    )


# =============================================================================
# Seasons
# =============================================================================


@router.get("/seasons")
def admin_list_seasons(engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    try:
        with engine.connect() as conn:
            rows = list_seasons(conn)
        return {"success": True, "seasons": rows}

    except Exception as e:
        logger.exception("admin_list_seasons_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/seasons", status_code=status.HTTP_201_CREATED)
def admin_create_season(
    payload: SeasonPayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Create a season, optionally copying the price grid of another season.

    Raises:
        HTTPException: 409 if the dates overlap an existing season, 404 if
        the season to copy from doesn't exist
    """
    try:
        with engine.begin() as conn:
            overlap = find_overlapping_season(conn, payload.start_date, payload.end_date)
            if overlap:
                raise season_overlap_conflict(overlap)

            if payload.copy_from_id:
                require_row(get_season(conn, payload.copy_from_id), "Source season")

            season_id = insert_row(conn, Season, payload.model_dump(exclude={"copy_from_id"}))
            copied = 0
            if payload.copy_from_id:
                copied = copy_season_pricing(conn, payload.copy_from_id, season_id)
            season = get_season(conn, season_id)

        logger.info(
            "season_created",
            season_id=season_id,
            copied_from=payload.copy_from_id,
            copied_rows=copied,
        )
        return {"success": True, "season": season, "copied_rows": copied}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_create_season_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/seasons/{season_id}")
def admin_update_season(
    season_id: str,
    payload: SeasonUpdatePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    try:
        update_data = changes(payload)

        with engine.begin() as conn:
            current = require_row(get_season(conn, season_id), "Season")
            start = update_data.get("start_date", current["start_date"])
            end = update_data.get("end_date", current["end_date"])
            if end <= start:
                raise HTTPException(status_code=400, detail="endDate must be after startDate")

            overlap = find_overlapping_season(conn, start, end, exclude_id=season_id)
            if overlap:
                raise season_overlap_conflict(overlap)

            if update_data:
                update_row(conn, Season, season_id, update_data)
            season = get_season(conn, season_id)

        logger.info("season_updated", season_id=season_id, fields=sorted(update_data))
        return {"success": True, "season": season}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_update_season_failed", season_id=season_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/seasons/{season_id}")
def admin_delete_season(season_id: str, engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    """Delete a season together with its price grid."""
    try:
        with engine.begin() as conn:
            require_row(get_season(conn, season_id), "Season")
            removed = delete_season_pricing(conn, season_id)
            delete_row(conn, Season, season_id)

        logger.info("season_deleted", season_id=season_id, pricing_rows=removed)
        return {"success": True, "message": "Season deleted", "pricing_rows_deleted": removed}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_delete_season_failed", season_id=season_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


# =============================================================================
# Seasonal pricing
# =============================================================================


@router.get("/seasonal-pricing")
def admin_season_pricing(
    season_id: Optional[str] = Query(None, alias="seasonId"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Price grid of one season.

    Raises:
        HTTPException: 400 without seasonId, 404 for an unknown season
    """
    if not season_id:
        raise HTTPException(status_code=400, detail="seasonId is required")

    try:
        with engine.connect() as conn:
            season = require_row(get_season(conn, season_id), "Season")
            rows = list_season_pricing(conn, season_id)
        return {"success": True, "season": season, "pricing": rows}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_season_pricing_failed", season_id=season_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/seasonal-pricing")
def admin_save_pricing_row(
    payload: PricingRowCreatePayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Create or replace the price row of a category/group in a season.

    The submitted prices also become the row's base prices.
    """
    try:
        row = payload.model_dump()
        row.update(
            base_price_3_to_6_days=payload.price_3_to_6_days,
            base_price_7_to_14_days=payload.price_7_to_14_days,
            base_price_15_plus_days=payload.price_15_plus_days,
        )

        with engine.begin() as conn:
            require_row(get_season(conn, payload.season_id), "Season")
            if not category_exists(conn, payload.category_id):
                raise not_found("Category not found")
            upsert_pricing_rows(conn, [row])
            saved = get_pricing_row(conn, payload.category_id, payload.group, payload.season_id)

        logger.info(
            "pricing_row_saved",
            season_id=payload.season_id,
            category_id=payload.category_id,
            group=payload.group,
        )
        return {"success": True, "pricing": saved}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_save_pricing_row_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/seasonal-pricing")
def admin_save_pricing_grid(
    payload: PricingGridPayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Save edited tier prices of several rows in one transaction.

    Raises:
        HTTPException: 404 if any row doesn't exist (nothing is saved)
    """
    try:
        updated = save_pricing_grid(engine, [row.model_dump() for row in payload.rows])
        return {"success": True, "updated": updated}

    except LookupError as e:
        raise not_found(str(e))
    except Exception as e:
        logger.exception("admin_save_pricing_grid_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/seasonal-pricing/update-by-percent")
def admin_update_by_percent(
    payload: PercentUpdatePayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Raise or lower every price of a season by a percentage.

    Example:
        POST /api/admin/seasonal-pricing/update-by-percent
        {"seasonId": "...", "percent": 10}

        Response: {"success": true, "updated": 24}
    """
    try:
        updated = update_prices_by_percent(engine, payload.season_id, payload.percent)
        return {"success": True, "updated": updated}

    except SeasonNotFoundError:
        raise not_found("Season not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception(
            "admin_update_by_percent_failed", season_id=payload.season_id, error=str(e)
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/seasonal-pricing/reset-to-base")
def admin_reset_to_base(
    payload: SeasonRefPayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """Restore tier prices from base prices for every row that has them."""
    try:
        updated = reset_prices_to_base(engine, payload.season_id)
        return {"success": True, "updated": updated}

    except SeasonNotFoundError:
        raise not_found("Season not found")
    except Exception as e:
        logger.exception("admin_reset_to_base_failed", season_id=payload.season_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/seasonal-pricing/snapshot-base")
def admin_snapshot_base(
    payload: SeasonRefPayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """Record the current tier prices as the base prices of the season."""
    try:
        updated = snapshot_base_prices(engine, payload.season_id)
        return {"success": True, "updated": updated}

    except SeasonNotFoundError:
        raise not_found("Season not found")
    except Exception as e:
        logger.exception("admin_snapshot_base_failed", season_id=payload.season_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
