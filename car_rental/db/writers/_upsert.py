"""
Generic upsert helper with change detection.

Used by the seasonal pricing writer (admin row saves and the seed script). It emits
``INSERT ... ON CONFLICT DO UPDATE`` for both PostgreSQL and SQLite, and only
rewrites a row when one of the updated columns actually changed.
"""

from typing import Any

from sqlalchemy import or_
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection


def upsert_with_distinct_check(
    conn: Connection,
    table: type,
    rows: list[dict[str, Any]],
    conflict_columns: list[str],
    update_columns: list[str],
) -> None:
    """
    Perform upsert with IS DISTINCT FROM optimization.

    Only updates rows where at least one of ``update_columns`` changed, so
    ``updated_at`` does not move on no-op writes.

    Args:
        conn: Active database connection (within transaction)
        table: SQLAlchemy ORM table class (e.g., SeasonalPricing)
        rows: List of row dicts to upsert
        conflict_columns: Columns of the unique constraint to conflict on
        update_columns: Columns to overwrite on conflict (``updated_at`` is added
            automatically when present in the rows)

    Example:
        >>> with engine.begin() as conn:
        ...     upsert_with_distinct_check(
        ...         conn=conn,
        ...         table=SeasonalPricing,
        ...         rows=[{"category_id": "...", "group": "A3", "season_id": "...", ...}],
        ...         conflict_columns=["category_id", "group", "season_id"],
        ...         update_columns=["price_3_to_6_days", "price_7_to_14_days"],
        ...     )
    """
    if not rows:
        return

    dialect = sqlite if conn.dialect.name == "sqlite" else postgresql
    stmt = dialect.insert(table).values(rows)

    set_dict = {col: getattr(stmt.excluded, col) for col in update_columns}
    if "updated_at" in rows[0] and "updated_at" not in set_dict:
        set_dict["updated_at"] = stmt.excluded.updated_at

    distinct_check = or_(
        *[
            getattr(table, col).is_distinct_from(getattr(stmt.excluded, col))
            for col in update_columns
        ]
    )

    stmt = stmt.on_conflict_do_update(
        index_elements=conflict_columns,
        set_=set_dict,
        where=distinct_check,
    )

    conn.execute(stmt)
