"""Back-office view of the payment audit trail."""

from datetime import datetime, timedelta
from typing import Any, Literal, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.engine import Engine

from car_rental.db.readers.payments import list_payment_logs, payment_log_stats
from car_rental.dependencies import get_db_engine
from car_rental.security import require_admin
from car_rental.utils.datetime import utc_now

logger = structlog.get_logger(__name__)
router = APIRouter(dependencies=[Depends(require_admin)])

DATE_RANGES = {"1d": timedelta(days=1), "7d": timedelta(days=7), "30d": timedelta(days=30)}
PAYMENT_LOG_LIMIT = 100


def range_start(date_range: Optional[str]) -> Optional[datetime]:
    if not date_range:
        return None
    return utc_now() - DATE_RANGES[date_range]


@router.get("/payment-logs")
def admin_payment_logs(
    status: Optional[str] = Query(None, description="success, failed or duplicate"),
    payment_type: Optional[str] = Query(None, alias="paymentType"),
    date_range: Optional[Literal["1d", "7d", "30d"]] = Query(None, alias="dateRange"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Latest payment log entries (at most 100) with summary statistics.

    Statistics cover the same date range as the entries.
    """
    try:
        since = range_start(date_range)
        with engine.connect() as conn:
            logs = list_payment_logs(
                conn,
                status=status,
                payment_type=payment_type,
                since=since,
                limit=PAYMENT_LOG_LIMIT,
            )
            stats = payment_log_stats(conn, since=since)
        return {"success": True, "logs": logs, "stats": stats}

    except Exception as e:
        logger.exception("admin_payment_logs_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
