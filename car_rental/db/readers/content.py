"""Read queries for promotions, site content, blog posts and locations."""

from datetime import date
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.engine import Connection

from car_rental.models.content import Post, Promotion, SiteContent
from car_rental.models.locations import Location

promotions = Promotion.__table__
site_content = SiteContent.__table__
posts = Post.__table__
locations = Location.__table__


# =============================================================================
# Promotions
# =============================================================================


def list_promotions(conn: Connection) -> list[dict[str, Any]]:
    stmt = select(promotions).order_by(promotions.c.start_date.desc())
    return [dict(row) for row in conn.execute(stmt).mappings()]


def get_promotion(conn: Connection, promotion_id: str) -> Optional[dict[str, Any]]:
    row = (
        conn.execute(select(promotions).where(promotions.c.id == promotion_id))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def get_promotion_by_code(conn: Connection, code: str) -> Optional[dict[str, Any]]:
    stmt = select(promotions).where(func.upper(promotions.c.code) == code.strip().upper())
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def find_active_promotion(conn: Connection, code: str, today: date) -> Optional[dict[str, Any]]:
    """
    Find a visible promotion by code whose validity window contains ``today``.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        code (str): Promotion code, matched case-insensitively.
        today (date): Date the code is redeemed on.

    Returns:
        Optional[dict[str, Any]]: Promotion row or None.
    """
    stmt = select(promotions).where(
        func.upper(promotions.c.code) == code.strip().upper(),
        promotions.c.visible.is_(True),
        promotions.c.start_date <= today,
        promotions.c.end_date >= today,
    )
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def list_active_promotions(conn: Connection, today: date) -> list[dict[str, Any]]:
    stmt = (
        select(promotions)
        .where(
            promotions.c.visible.is_(True),
            promotions.c.start_date <= today,
            promotions.c.end_date >= today,
        )
        .order_by(promotions.c.end_date)
    )
    return [dict(row) for row in conn.execute(stmt).mappings()]


# =============================================================================
# Site content
# =============================================================================


def get_content(conn: Connection, key: str) -> Optional[dict[str, Any]]:
    row = (
        conn.execute(select(site_content).where(site_content.c.key == key)).mappings().fetchone()
    )
    return dict(row) if row else None


def list_content(conn: Connection, group: Optional[str] = None) -> list[dict[str, Any]]:
    stmt = select(site_content).order_by(site_content.c.group, site_content.c.key)
    if group:
        stmt = stmt.where(site_content.c.group == group)
    return [dict(row) for row in conn.execute(stmt).mappings()]


# =============================================================================
# Blog posts
# =============================================================================


def get_post(conn: Connection, post_id: str) -> Optional[dict[str, Any]]:
    row = conn.execute(select(posts).where(posts.c.id == post_id)).mappings().fetchone()
    return dict(row) if row else None


def slug_taken(conn: Connection, slug: str, exclude_id: Optional[str] = None) -> bool:
    """
    Check if a slug is used by another post, in either language.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        slug (str): Candidate slug.
        exclude_id (Optional[str]): Post being edited.

    Returns:
        bool: True if the slug is already taken.
    """
    stmt = select(posts.c.id).where((posts.c.slug == slug) | (posts.c.slug_ru == slug))
    if exclude_id:
        stmt = stmt.where(posts.c.id != exclude_id)
    return conn.execute(stmt).fetchone() is not None


def list_posts(conn: Connection) -> list[dict[str, Any]]:
    stmt = select(posts).order_by(posts.c.created_at.desc())
    return [dict(row) for row in conn.execute(stmt).mappings()]


def list_published_posts(
    conn: Connection,
    locale: str = "en",
    limit: Optional[int] = None,
) -> list[dict[str, Any]]:
    """
    List posts published in a locale, newest first.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        locale (str): ``en`` or ``ru``.
        limit (Optional[int]): Maximum number of posts.

    Returns:
        list[dict[str, Any]]: Post rows.
    """
    published = posts.c.published_ru if locale == "ru" else posts.c.published
    stmt = select(posts).where(published.is_(True)).order_by(posts.c.created_at.desc())
    if limit:
        stmt = stmt.limit(limit)
    return [dict(row) for row in conn.execute(stmt).mappings()]


def get_published_post_by_slug(
    conn: Connection, slug: str, locale: str = "en"
) -> Optional[dict[str, Any]]:
    if locale == "ru":
        stmt = select(posts).where(
            (posts.c.slug_ru == slug) | (posts.c.slug == slug),
            posts.c.published_ru.is_(True),
        )
    else:
        stmt = select(posts).where(posts.c.slug == slug, posts.c.published.is_(True))
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


# =============================================================================
# Locations
# =============================================================================


def list_locations(conn: Connection, visible_only: bool = False) -> list[dict[str, Any]]:
    stmt = select(locations).order_by(locations.c.display_order, locations.c.name)
    if visible_only:
        stmt = stmt.where(locations.c.visible.is_(True))
    return [dict(row) for row in conn.execute(stmt).mappings()]


def get_location(conn: Connection, location_id: str) -> Optional[dict[str, Any]]:
    row = (
        conn.execute(select(locations).where(locations.c.id == location_id))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def max_location_order(conn: Connection) -> int:
    value = conn.execute(select(func.max(locations.c.display_order))).scalar()
    return int(value) if value is not None else -1
