"""Public read-only catalog endpoints for the storefront."""

from datetime import date, time
from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from car_rental.db.readers.catalog import list_categories, list_vehicles
from car_rental.db.readers.content import (
    get_content,
    list_content,
    list_locations,
    list_published_posts,
)
from car_rental.db.readers.pricing import list_rental_options_with_pricing
from car_rental.dependencies import get_db_engine
from car_rental.i18n import is_supported, load_bundle
from car_rental.routes._helpers import not_found
from car_rental.services.pricing import search_vehicles

logger = structlog.get_logger(__name__)
router = APIRouter()

LOCATIONS_CACHE_CONTROL = "public, max-age=300, stale-while-revalidate=600"
RECENT_POSTS_LIMIT = 3


@router.get("/locations")
def locations(engine: Engine = Depends(get_db_engine)) -> JSONResponse:
    """
    List visible pickup/dropoff locations in display order.

    The response is cacheable for five minutes.
    """
    try:
        with engine.connect() as conn:
            rows = list_locations(conn, visible_only=True)
        return JSONResponse(
            content=jsonable_encoder({"success": True, "locations": rows}),
            headers={"Cache-Control": LOCATIONS_CACHE_CONTROL},
        )

    except Exception as e:
        logger.exception("list_locations_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/blog/recent")
def recent_posts(
    locale: str = Query("en", description="Locale of the posts"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """Return the three most recent posts published in ``locale``."""
    try:
        with engine.connect() as conn:
            rows = list_published_posts(conn, locale=locale, limit=RECENT_POSTS_LIMIT)
        return {"success": True, "posts": rows}

    except Exception as e:
        logger.exception("recent_posts_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/vehicles")
def vehicles(
    category_id: Optional[str] = Query(None, alias="categoryId"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    try:
        with engine.connect() as conn:
            rows = list_vehicles(conn, category_id=category_id, visible_only=True)
            categories = list_categories(conn, visible_only=True)
        return {"success": True, "vehicles": rows, "categories": categories}

    except Exception as e:
        logger.exception("list_vehicles_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/vehicles/search")
def search(
    pickup_date: date = Query(..., alias="pickupDate"),
    dropoff_date: date = Query(..., alias="dropoffDate"),
    pickup_time: Optional[time] = Query(None, alias="pickupTime"),
    dropoff_time: Optional[time] = Query(None, alias="dropoffTime"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Price every visible vehicle for a rental period.

    Vehicles with no price for the pickup season are omitted.

    Raises:
        HTTPException: 400 if dropoff is before pickup
    """
    if dropoff_date < pickup_date:
        raise HTTPException(status_code=400, detail="Dropoff date must not be before pickup date")

    try:
        with engine.connect() as conn:
            results = search_vehicles(conn, pickup_date, dropoff_date, pickup_time, dropoff_time)
        logger.info(
            "vehicle_search",
            pickup_date=pickup_date.isoformat(),
            dropoff_date=dropoff_date.isoformat(),
            results=len(results),
        )
        return {"success": True, "vehicles": results}

    except Exception as e:
        logger.exception("vehicle_search_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/rental-options")
def rental_options(engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    try:
        with engine.connect() as conn:
            options = list_rental_options_with_pricing(conn, visible_only=True)
        return {"success": True, "options": options}

    except Exception as e:
        logger.exception("list_rental_options_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/site-content")
def site_content(
    group: Optional[str] = Query(None),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """Return editable site texts as a key to value mapping."""
    try:
        with engine.connect() as conn:
            rows = list_content(conn, group=group)
        return {"success": True, "content": {row["key"]: row["value"] for row in rows}}

    except Exception as e:
        logger.exception("site_content_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/site-content/{key}")
def site_content_item(key: str, engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    try:
        with engine.connect() as conn:
            row = get_content(conn, key)
        if row is None:
            raise not_found("Content not found")
        return {"success": True, "key": row["key"], "value": row["value"]}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("site_content_item_failed", key=key, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/i18n/{locale}")
def translations(locale: str) -> dict[str, Any]:
    """Return the full translation bundle of a supported locale."""
    if not is_supported(locale):
        raise not_found(f"Unsupported locale: {locale}")
    return {"locale": locale, "messages": load_bundle(locale)}
