"""Public booking endpoints: quote, create and lookup."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.engine import Engine

from car_rental.db.readers.bookings import find_booking_by_invoice_and_email
from car_rental.dependencies import get_db_engine
from car_rental.routes._helpers import not_found
from car_rental.schemas.bookings import BookingCreatePayload, BookingLookupPayload, QuotePayload
from car_rental.services.bookings import CustomerNotFoundError, create_booking
from car_rental.services.pricing import (
    InvalidPromotionError,
    PricingNotConfiguredError,
    build_quote,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


def pricing_error_to_http(error: Exception) -> HTTPException:
    """
    Translate a pricing failure into the HTTP error the storefront expects.

    Returns:
        HTTPException: 422 when prices are not configured, 400 for a bad
        promotion code, 404 for an unknown vehicle or customer
    """
    if isinstance(error, PricingNotConfiguredError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"No pricing configured: {error}",
        )
    if isinstance(error, InvalidPromotionError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    return not_found(str(error))


@router.post("/bookings/quote")
def quote_booking(
    payload: QuotePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Price a prospective booking without storing anything.

    Returns:
        dict: success flag and the price breakdown
    """
    try:
        with engine.connect() as conn:
            quote = build_quote(
                conn,
                vehicle_id=payload.vehicle_id,
                pickup=payload.pickup_date,
                dropoff=payload.dropoff_date,
                payment_type=payload.payment_type,
                pickup_time=payload.pickup_time,
                dropoff_time=payload.dropoff_time,
                extras=payload.selected_extras,
                promotion_code=payload.promotion_code,
            )
        return {"success": True, "quote": quote}

    except (LookupError, InvalidPromotionError) as e:
        raise pricing_error_to_http(e)
    except Exception as e:
        logger.exception("quote_failed", vehicle_id=payload.vehicle_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/bookings/create", status_code=status.HTTP_201_CREATED)
def create_booking_endpoint(
    payload: BookingCreatePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Create a booking.

    Online bookings start Pending/Pending and wait for payment; pay-on-arrival
    bookings start Confirmed/Pending.

    Returns:
        dict: success flag, the booking and its price breakdown
    """
    try:
        booking = create_booking(
            engine,
            customer_id=payload.customer_id,
            vehicle_id=payload.vehicle_id,
            pickup_date=payload.pickup_date,
            dropoff_date=payload.dropoff_date,
            pickup_location=payload.pickup_location,
            dropoff_location=payload.dropoff_location,
            payment_type=payload.payment_type,
            pickup_time=payload.pickup_time,
            dropoff_time=payload.dropoff_time,
            extras=payload.selected_extras,
            promotion_code=payload.promotion_code,
            flight_info=payload.flight_info,
            comments=payload.comments,
        )
        quote = booking.pop("quote")
        return {"success": True, "booking": booking, "quote": quote}

    except CustomerNotFoundError:
        raise not_found("Customer not found")
    except (LookupError, InvalidPromotionError) as e:
        raise pricing_error_to_http(e)
    except Exception as e:
        logger.exception("booking_creation_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/booking-lookup")
def booking_lookup(
    payload: BookingLookupPayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Find a booking by invoice number and the customer's email.

    Both must match; a correct invoice number with another email is a 404.
    """
    try:
        with engine.connect() as conn:
            booking = find_booking_by_invoice_and_email(conn, payload.invoice_no, payload.email)

        if booking is None:
            logger.info("booking_lookup_miss", invoice_no=payload.invoice_no)
            raise not_found("Booking not found. Check the invoice number and email address.")

        return {"success": True, "booking": booking}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("booking_lookup_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
