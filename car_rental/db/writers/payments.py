import json
import logging
from typing import Any

from sqlalchemy.engine import Connection

from car_rental.config import DEBUG
from car_rental.db.writers.rows import insert_row
from car_rental.models.payments import PaymentLog

logger = logging.getLogger(__name__)


def insert_payment_log(conn: Connection, data: dict[str, Any]) -> str:
    """
    Append one entry to the payment audit trail.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        data (dict[str, Any]): PaymentLog column values; payment_type and status
            are required.

    Returns:
        str: New payment log ID.

    Raises:
        sqlalchemy.exc.IntegrityError: If idempotency_key was already recorded.
    """
    if DEBUG:
        logger.info(f"Payment log to insert:\n{json.dumps(data, default=str, indent=2)}")

    return insert_row(conn, PaymentLog, data)
