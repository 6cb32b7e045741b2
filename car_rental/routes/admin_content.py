"""
Back-office management of promotions, site texts, blog posts, locations,
customers and general settings.
"""

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.engine import Connection, Engine

from car_rental.db.readers.content import (
    get_content,
    get_location,
    get_post,
    get_promotion,
    get_promotion_by_code,
    list_content,
    list_locations,
    list_posts,
    list_promotions,
    max_location_order,
    slug_taken,
)
from car_rental.db.readers.customers import (
    count_customer_bookings,
    get_customer_by_email,
    list_customers,
)
from car_rental.db.readers.settings import get_settings
from car_rental.db.writers.rows import delete_row, insert_row, reorder_rows, update_row
from car_rental.db.writers.settings import save_settings
from car_rental.dependencies import get_db_engine
from car_rental.models.content import Post, Promotion, SiteContent
from car_rental.models.customers import Customer
from car_rental.models.locations import Location
from car_rental.routes._helpers import changes, get_customer_or_404, public_customer, require_row
from car_rental.schemas.catalog import MovePayload
from car_rental.schemas.content import (
    CustomerAdminUpdatePayload,
    LocationPayload,
    LocationUpdatePayload,
    PostPayload,
    PostUpdatePayload,
    PromotionPayload,
    PromotionUpdatePayload,
    SettingsUpdatePayload,
    SiteContentPayload,
    SiteContentUpdatePayload,
)
from car_rental.security import require_admin
from car_rental.utils.text import random_suffix, read_time_minutes, slugify

logger = structlog.get_logger(__name__)
router = APIRouter(dependencies=[Depends(require_admin)])


def conflict(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)


def unique_slug(conn: Connection, title: str, exclude_id: Optional[str] = None) -> str:
    """
    Slug for a post title, with a random suffix when it is already used.

    Example:
        >>> unique_slug(conn, "Best beaches")  # taken
        'best-beaches-k3x9q'
    """
    slug = slugify(title) or random_suffix()
    while slug_taken(conn, slug, exclude_id=exclude_id):
        slug = f"{slugify(title)}-{random_suffix()}"
    return slug


# =============================================================================
# Promotions
# =============================================================================


@router.get("/promotions")
def admin_list_promotions(engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    try:
        with engine.connect() as conn:
            rows = list_promotions(conn)
        return {"success": True, "promotions": rows}

    except Exception as e:
        logger.exception("admin_list_promotions_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/promotions", status_code=status.HTTP_201_CREATED)
def admin_create_promotion(
    payload: PromotionPayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Create a promotion code (stored upper-case).

    Raises:
        HTTPException: 409 if the code already exists
    """
    try:
        data = payload.model_dump()
        data["code"] = payload.code.strip().upper()

        with engine.begin() as conn:
            if get_promotion_by_code(conn, data["code"]):
                raise conflict(f"Promotion code '{data['code']}' already exists")
            promotion_id = insert_row(conn, Promotion, data)
            promotion = get_promotion(conn, promotion_id)

        logger.info("promotion_created", promotion_id=promotion_id, code=data["code"])
        return {"success": True, "promotion": promotion}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_create_promotion_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/promotions/{promotion_id}")
def admin_update_promotion(
    promotion_id: str,
    payload: PromotionUpdatePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    try:
        update_data = changes(payload)
        with engine.begin() as conn:
            current = require_row(get_promotion(conn, promotion_id), "Promotion")

            if "code" in update_data:
                update_data["code"] = update_data["code"].strip().upper()
                existing = get_promotion_by_code(conn, update_data["code"])
                if existing and existing["id"] != promotion_id:
                    raise conflict(f"Promotion code '{update_data['code']}' already exists")

            start = update_data.get("start_date", current["start_date"])
            end = update_data.get("end_date", current["end_date"])
            if end <= start:
                raise HTTPException(status_code=400, detail="endDate must be after startDate")

            if update_data:
                update_row(conn, Promotion, promotion_id, update_data)
            promotion = get_promotion(conn, promotion_id)

        logger.info("promotion_updated", promotion_id=promotion_id, fields=sorted(update_data))
        return {"success": True, "promotion": promotion}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_update_promotion_failed", promotion_id=promotion_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/promotions/{promotion_id}")
def admin_delete_promotion(
    promotion_id: str, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    try:
        with engine.begin() as conn:
            require_row(get_promotion(conn, promotion_id), "Promotion")
            delete_row(conn, Promotion, promotion_id)

        logger.info("promotion_deleted", promotion_id=promotion_id)
        return {"success": True, "message": "Promotion deleted"}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_delete_promotion_failed", promotion_id=promotion_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


# =============================================================================
# Site content
# =============================================================================


@router.get("/site-content")
def admin_list_content(
    group: Optional[str] = Query(None), engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    try:
        with engine.connect() as conn:
            rows = list_content(conn, group=group)
        return {"success": True, "content": rows}

    except Exception as e:
        logger.exception("admin_list_content_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/site-content")
def admin_save_content(
    payload: SiteContentPayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """Create a content block, or replace the value of an existing key."""
    try:
        with engine.begin() as conn:
            existing = get_content(conn, payload.key)
            if existing:
                update_row(conn, SiteContent, existing["id"], changes(payload))
            else:
                insert_row(conn, SiteContent, payload.model_dump())
            row = get_content(conn, payload.key)

        logger.info("site_content_saved", key=payload.key, created=existing is None)
        return {"success": True, "content": row}

    except Exception as e:
        logger.exception("admin_save_content_failed", key=payload.key, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/site-content/{key}")
def admin_update_content(
    key: str,
    payload: SiteContentUpdatePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    try:
        update_data = changes(payload)
        with engine.begin() as conn:
            existing = require_row(get_content(conn, key), "Content")
            if update_data:
                update_row(conn, SiteContent, existing["id"], update_data)
            row = get_content(conn, key)
        return {"success": True, "content": row}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_update_content_failed", key=key, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/site-content/{key}")
def admin_delete_content(key: str, engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    try:
        with engine.begin() as conn:
            existing = require_row(get_content(conn, key), "Content")
            delete_row(conn, SiteContent, existing["id"])

        logger.info("site_content_deleted", key=key)
        return {"success": True, "message": "Content deleted"}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_delete_content_failed", key=key, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


# =============================================================================
# Blog posts
# =============================================================================


@router.get("/posts")
def admin_list_posts(engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    try:
        with engine.connect() as conn:
            rows = list_posts(conn)
        return {"success": True, "posts": rows}

    except Exception as e:
        logger.exception("admin_list_posts_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/posts", status_code=status.HTTP_201_CREATED)
def admin_create_post(
    payload: PostPayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Create a blog post.

    Slugs come from the English and Russian titles and get a random suffix
    when already used; reading time is computed from the English body.
    """
    try:
        data = payload.model_dump()
        data["read_time"] = read_time_minutes(payload.content)

        with engine.begin() as conn:
            data["slug"] = unique_slug(conn, payload.title)
            if payload.title_ru:
                data["slug_ru"] = unique_slug(conn, payload.title_ru)
            post_id = insert_row(conn, Post, data)
            post = get_post(conn, post_id)

        logger.info("post_created", post_id=post_id, slug=data["slug"])
        return {"success": True, "post": post}

    except Exception as e:
        logger.exception("admin_create_post_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/posts/{post_id}")
def admin_update_post(
    post_id: str,
    payload: PostUpdatePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """Update a post; a changed title regenerates its slug."""
    try:
        update_data = changes(payload)
        if "content" in update_data:
            update_data["read_time"] = read_time_minutes(update_data["content"])

        with engine.begin() as conn:
            current = require_row(get_post(conn, post_id), "Post")
            if update_data.get("title") and update_data["title"] != current["title"]:
                update_data["slug"] = unique_slug(conn, update_data["title"], exclude_id=post_id)
            if update_data.get("title_ru") and update_data["title_ru"] != current["title_ru"]:
                update_data["slug_ru"] = unique_slug(
                    conn, update_data["title_ru"], exclude_id=post_id
                )
            if update_data:
                update_row(conn, Post, post_id, update_data)
            post = get_post(conn, post_id)

        logger.info("post_updated", post_id=post_id, fields=sorted(update_data))
        return {"success": True, "post": post}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_update_post_failed", post_id=post_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/posts/{post_id}")
def admin_delete_post(post_id: str, engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    try:
        with engine.begin() as conn:
            require_row(get_post(conn, post_id), "Post")
            delete_row(conn, Post, post_id)

        logger.info("post_deleted", post_id=post_id)
        return {"success": True, "message": "Post deleted"}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_delete_post_failed", post_id=post_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


# =============================================================================
# Locations
# =============================================================================


@router.get("/locations")
def admin_list_locations(engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    try:
        with engine.connect() as conn:
            rows = list_locations(conn)
        return {"success": True, "locations": rows}

    except Exception as e:
        logger.exception("admin_list_locations_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/locations", status_code=status.HTTP_201_CREATED)
def admin_create_location(
    payload: LocationPayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    try:
        with engine.begin() as conn:
            data = payload.model_dump()
            data["display_order"] = max_location_order(conn) + 1
            location_id = insert_row(conn, Location, data)
            location = get_location(conn, location_id)

        logger.info("location_created", location_id=location_id, name=payload.name)
        return {"success": True, "location": location}

    except Exception as e:
        logger.exception("admin_create_location_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/locations/{location_id}")
def admin_update_location(
    location_id: str,
    payload: LocationUpdatePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """Update a location; toggling ``visible`` hides it from the storefront."""
    try:
        update_data = changes(payload)
        with engine.begin() as conn:
            require_row(get_location(conn, location_id), "Location")
            if update_data:
                update_row(conn, Location, location_id, update_data)
            location = get_location(conn, location_id)

        logger.info("location_updated", location_id=location_id, fields=sorted(update_data))
        return {"success": True, "location": location}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_update_location_failed", location_id=location_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/locations/{location_id}/move")
def admin_move_location(
    location_id: str,
    payload: MovePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Swap a location with its neighbour in display order.

    Moving the first row up or the last row down changes nothing.
    """
    try:
        with engine.begin() as conn:
            require_row(get_location(conn, location_id), "Location")
            ids = [row["id"] for row in list_locations(conn)]
            index = ids.index(location_id)
            target = index - 1 if payload.direction == "up" else index + 1
            if 0 <= target < len(ids):
                ids[index], ids[target] = ids[target], ids[index]
                reorder_rows(conn, Location, ids)
            rows = list_locations(conn)

        return {"success": True, "locations": rows}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_move_location_failed", location_id=location_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/locations/{location_id}")
def admin_delete_location(
    location_id: str, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    try:
        with engine.begin() as conn:
            require_row(get_location(conn, location_id), "Location")
            delete_row(conn, Location, location_id)

        logger.info("location_deleted", location_id=location_id)
        return {"success": True, "message": "Location deleted"}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_delete_location_failed", location_id=location_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


# =============================================================================
# Customers
# =============================================================================


@router.get("/customers")
def admin_list_customers(
    search: Optional[str] = Query(None, description="Name, email or phone fragment"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    try:
        with engine.connect() as conn:
            rows = list_customers(conn, search=search)
        return {"success": True, "customers": [public_customer(row) for row in rows]}

    except Exception as e:
        logger.exception("admin_list_customers_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/customers/{customer_id}")
def admin_update_customer(
    customer_id: str,
    payload: CustomerAdminUpdatePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    try:
        update_data = changes(payload)
        with engine.begin() as conn:
            get_customer_or_404(conn, customer_id)
            if "email" in update_data:
                update_data["email"] = update_data["email"].lower()
                existing = get_customer_by_email(conn, update_data["email"])
                if existing and existing["id"] != customer_id:
                    raise conflict("Another customer already uses this email")
            if update_data:
                update_row(conn, Customer, customer_id, update_data)
            customer = get_customer_or_404(conn, customer_id)

        logger.info("customer_admin_updated", customer_id=customer_id, fields=sorted(update_data))
        return {"success": True, "customer": public_customer(customer)}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_update_customer_failed", customer_id=customer_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/customers/{customer_id}")
def admin_delete_customer(
    customer_id: str, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Delete a customer without bookings.

    Raises:
        HTTPException: 409 if the customer has bookings
    """
    try:
        with engine.begin() as conn:
            get_customer_or_404(conn, customer_id)
            booking_count = count_customer_bookings(conn, customer_id)
            if booking_count:
                raise conflict(f"Customer has {booking_count} booking(s) and cannot be deleted")
            delete_row(conn, Customer, customer_id)

        logger.info("customer_deleted", customer_id=customer_id)
        return {"success": True, "message": "Customer deleted"}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_delete_customer_failed", customer_id=customer_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


# =============================================================================
# Settings
# =============================================================================


@router.get("/settings")
def admin_get_settings(engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    try:
        with engine.connect() as conn:
            settings = get_settings(conn)
        return {"success": True, "settings": settings}

    except Exception as e:
        logger.exception("admin_get_settings_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/settings")
def admin_update_settings(
    payload: SettingsUpdatePayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """Change general settings. Document counters are not editable here."""
    try:
        update_data = changes(payload)
        with engine.begin() as conn:
            save_settings(conn, update_data)
            settings = get_settings(conn)

        logger.info("settings_updated", fields=sorted(update_data))
        return {"success": True, "settings": settings}

    except Exception as e:
        logger.exception("admin_update_settings_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
