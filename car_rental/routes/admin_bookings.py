"""Back-office booking management."""

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.engine import Engine

from car_rental.db.readers.bookings import existing_booking_ids, list_bookings
from car_rental.db.writers.bookings import delete_bookings
from car_rental.dependencies import get_db_engine
from car_rental.routes._helpers import get_booking_or_404, not_found
from car_rental.schemas.bookings import BulkDeletePayload
from car_rental.security import require_admin

logger = structlog.get_logger(__name__)
router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/bookings")
def admin_list_bookings(
    status: Optional[str] = Query(None, description="Booking status filter"),
    payment_status: Optional[str] = Query(None, alias="paymentStatus"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    try:
        with engine.connect() as conn:
            rows = list_bookings(
                conn, status=status, payment_status=payment_status, limit=limit, offset=offset
            )
        return {"success": True, "bookings": rows}

    except Exception as e:
        logger.exception("admin_list_bookings_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/bookings/{booking_id}")
def admin_get_booking(booking_id: str, engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    try:
        with engine.connect() as conn:
            booking = get_booking_or_404(conn, booking_id)
        return {"success": True, "booking": booking}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_get_booking_failed", booking_id=booking_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/bookings/{booking_id}")
def admin_delete_booking(
    booking_id: str, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Permanently delete one booking. Its payment logs are kept, detached.

    Raises:
        HTTPException: 404 if the booking doesn't exist
    """
    try:
        with engine.begin() as conn:
            if delete_bookings(conn, [booking_id]) == 0:
                raise not_found("Booking not found")

        logger.info("booking_deleted", booking_id=booking_id)
        return {"success": True, "message": "Booking deleted"}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_delete_booking_failed", booking_id=booking_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/bookings/bulk-delete")
def admin_bulk_delete_bookings(
    payload: BulkDeletePayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Delete several bookings at once. Unknown IDs are skipped.

    Returns:
        dict: deleted_count and requested_count

    Raises:
        HTTPException: 400 for an empty list, 404 if none of the bookings exist
    """
    if not payload.booking_ids:
        raise HTTPException(status_code=400, detail="bookingIds must not be empty")

    try:
        with engine.begin() as conn:
            found = existing_booking_ids(conn, payload.booking_ids)
            if not found:
                raise not_found("No matching bookings found")
            deleted = delete_bookings(conn, found)

        logger.info(
            "bookings_bulk_deleted", deleted=deleted, requested=len(payload.booking_ids)
        )
        return {
            "success": True,
            "deleted_count": deleted,
            "requested_count": len(payload.booking_ids),
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_bulk_delete_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
