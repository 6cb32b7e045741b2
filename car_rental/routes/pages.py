"""
Localized page data for the storefront.

Each endpoint returns the data one page of the site needs, with texts
resolved for the locale in the path. Only ``en`` and ``ru`` are served;
any other locale is a 404.
"""

from datetime import date, time
from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.engine import Engine

from car_rental.db.readers.catalog import list_categories
from car_rental.db.readers.content import (
    get_content,
    get_published_post_by_slug,
    list_active_promotions,
    list_locations,
    list_published_posts,
)
from car_rental.dependencies import get_db_engine
from car_rental.i18n import is_supported, section, translate
from car_rental.routes._helpers import not_found
from car_rental.services.pricing import search_vehicles

logger = structlog.get_logger(__name__)
router = APIRouter()

HOME_POSTS_LIMIT = 3
LOCALIZED_POST_FIELDS = ("slug", "title", "summary", "content")


def require_locale(locale: str) -> str:
    """
    Path dependency rejecting locales the site is not translated into.

    Raises:
        HTTPException: 404 for an unsupported locale
    """
    if not is_supported(locale):
        raise not_found(f"Unsupported locale: {locale}")
    return locale


def localize_post(post: dict[str, Any], locale: str) -> dict[str, Any]:
    """
    Project a post onto one language.

    Russian fields replace the English ones when present; the ``*_ru``
    columns are dropped from the result.
    """
    result = {k: v for k, v in post.items() if not k.endswith("_ru")}
    if locale == "ru":
        for field in LOCALIZED_POST_FIELDS:
            if post.get(f"{field}_ru"):
                result[field] = post[f"{field}_ru"]
    return result


@router.get("/{locale}/home")
def home_page(
    locale: str = Depends(require_locale),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    try:
        with engine.connect() as conn:
            posts = list_published_posts(conn, locale=locale, limit=HOME_POSTS_LIMIT)
            promotions = list_active_promotions(conn, date.today())
            categories = list_categories(conn, visible_only=True)
            locations = list_locations(conn, visible_only=True)

        return {
            "locale": locale,
            "messages": {"nav": section(locale, "nav"), "home": section(locale, "home")},
            "posts": [localize_post(p, locale) for p in posts],
            "promotions": promotions,
            "categories": categories,
            "locations": locations,
        }

    except Exception as e:
        logger.exception("home_page_failed", locale=locale, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{locale}/search")
def search_page(
    locale: str = Depends(require_locale),
    pickup_date: Optional[date] = Query(None, alias="pickupDate"),
    dropoff_date: Optional[date] = Query(None, alias="dropoffDate"),
    pickup_time: Optional[time] = Query(None, alias="pickupTime"),
    dropoff_time: Optional[time] = Query(None, alias="dropoffTime"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Search page data.

    Without both dates only the texts and locations are returned; with them
    every visible, priced vehicle is included.
    """
    if pickup_date and dropoff_date and dropoff_date < pickup_date:
        raise HTTPException(status_code=400, detail="Dropoff date must not be before pickup date")

    try:
        with engine.connect() as conn:
            locations = list_locations(conn, visible_only=True)
            vehicles = []
            if pickup_date and dropoff_date:
                vehicles = search_vehicles(
                    conn, pickup_date, dropoff_date, pickup_time, dropoff_time
                )

        message = None
        if pickup_date and dropoff_date and not vehicles:
            message = translate(locale, "search.noResults")

        return {
            "locale": locale,
            "messages": {"nav": section(locale, "nav"), "search": section(locale, "search")},
            "locations": locations,
            "vehicles": vehicles,
            "message": message,
        }

    except Exception as e:
        logger.exception("search_page_failed", locale=locale, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{locale}/blog")
def blog_page(
    locale: str = Depends(require_locale),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    try:
        with engine.connect() as conn:
            posts = list_published_posts(conn, locale=locale)
        return {
            "locale": locale,
            "messages": {"nav": section(locale, "nav"), "blog": section(locale, "blog")},
            "posts": [localize_post(p, locale) for p in posts],
        }

    except Exception as e:
        logger.exception("blog_page_failed", locale=locale, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{locale}/blog/{slug}")
def blog_post_page(
    slug: str,
    locale: str = Depends(require_locale),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    A single post; Russian pages also accept the English slug.

    Raises:
        HTTPException: 404 if the post is not published in this locale
    """
    try:
        with engine.connect() as conn:
            post = get_published_post_by_slug(conn, slug, locale=locale)
        if post is None:
            raise not_found(translate(locale, "blog.notFound"))
        return {
            "locale": locale,
            "messages": {"nav": section(locale, "nav"), "blog": section(locale, "blog")},
            "post": localize_post(post, locale),
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("blog_post_page_failed", locale=locale, slug=slug, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{locale}/content/{key}")
def content_page(
    key: str,
    locale: str = Depends(require_locale),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    A block of editable site text.

    A ``<key>_<locale>`` entry wins over the plain key.
    """
    try:
        with engine.connect() as conn:
            row = get_content(conn, f"{key}_{locale}") or get_content(conn, key)
        if row is None:
            raise not_found(translate(locale, "errors.notFound"))
        return {"locale": locale, "key": key, "value": row["value"]}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("content_page_failed", locale=locale, key=key, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
