from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.engine import Engine

from car_rental.db.readers.bookings import list_customer_bookings
from car_rental.dependencies import get_db_engine
from car_rental.routes._helpers import get_customer_or_404

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/customer/bookings")
def customer_bookings(
    customer_id: str = Query(..., alias="customerId", description="Customer ID"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    List a customer's bookings, newest first.

    Args:
        customer_id: Customer whose bookings are listed
        engine: Database engine

    Returns:
        dict: success flag and bookings
    """
    try:
        with engine.connect() as conn:
            get_customer_or_404(conn, customer_id)
            bookings = list_customer_bookings(conn, customer_id)
        return {"success": True, "bookings": bookings}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("customer_bookings_failed", customer_id=customer_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
