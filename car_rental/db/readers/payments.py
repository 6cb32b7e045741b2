from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.engine import Connection

from car_rental.models.payments import PaymentLog

payment_logs = PaymentLog.__table__


def idempotency_key_exists(conn: Connection, idempotency_key: str) -> bool:
    """
    Check if a gateway event with this idempotency key was already recorded.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        idempotency_key (str): Key derived from the gateway event.

    Returns:
        bool: True if the event was already processed.
    """
    stmt = select(payment_logs.c.id).where(payment_logs.c.idempotency_key == idempotency_key)
    return conn.execute(stmt).fetchone() is not None


def find_successful_log(
    conn: Connection,
    gateway_order_id: str,
    payment_type: str,
) -> Optional[dict[str, Any]]:
    stmt = (
        select(payment_logs)
        .where(
            payment_logs.c.gateway_order_id == gateway_order_id,
            payment_logs.c.payment_type == payment_type,
            payment_logs.c.status == "success",
        )
        .order_by(payment_logs.c.created_at.desc())
        .limit(1)
    )
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def list_payment_logs(
    conn: Connection,
    status: Optional[str] = None,
    payment_type: Optional[str] = None,
    since: Optional[datetime] = None,
    limit: int = 100,
) -> list[dict[str, Any]]:
    """
    List payment logs, newest first.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        status (Optional[str]): success, failed or duplicate.
        payment_type (Optional[str]): create_order, verify_payment, callback or admin_update.
        since (Optional[datetime]): Only logs created at or after this time.
        limit (int): Maximum rows returned.

    Returns:
        list[dict[str, Any]]: Payment log rows.
    """
    stmt = select(payment_logs).order_by(payment_logs.c.created_at.desc()).limit(limit)
    if status:
        stmt = stmt.where(payment_logs.c.status == status)
    if payment_type:
        stmt = stmt.where(payment_logs.c.payment_type == payment_type)
    if since is not None:
        stmt = stmt.where(payment_logs.c.created_at >= since)
    return [dict(row) for row in conn.execute(stmt).mappings()]


def payment_log_stats(conn: Connection, since: Optional[datetime] = None) -> dict[str, Any]:
    """
    Summarize payment logs as totals and success rate.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        since (Optional[datetime]): Only count logs created at or after this time.

    Returns:
        dict[str, Any]: total, successful, failed and success_rate (percent, 2 decimals).
    """
    stmt = select(payment_logs.c.status, func.count(payment_logs.c.id)).group_by(
        payment_logs.c.status
    )
    if since is not None:
        stmt = stmt.where(payment_logs.c.created_at >= since)

    counts = {row[0]: int(row[1]) for row in conn.execute(stmt)}
    total = sum(counts.values())
    successful = counts.get("success", 0)
    failed = counts.get("failed", 0)

    return {
        "total": total,
        "successful": successful,
        "failed": failed,
        "success_rate": round(successful / total * 100, 2) if total else 0.0,
    }
