"""Booking creation: quoting, number allocation and initial status."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Any, Optional

import structlog
from sqlalchemy.engine import Engine

from car_rental.db.readers.bookings import get_booking
from car_rental.db.readers.customers import get_customer
from car_rental.db.writers.bookings import insert_booking
from car_rental.db.writers.settings import allocate_number
from car_rental.metrics import bookings_created
from car_rental.services.booking_status import CONFIRMED, PENDING
from car_rental.services.pricing import build_quote

logger = structlog.get_logger(__name__)


class CustomerNotFoundError(LookupError):
    """Raised when a booking references an unknown customer."""


def _combine(day: date, clock: Optional[time]) -> datetime:
    return datetime.combine(day, clock or time(0, 0), tzinfo=timezone.utc)


def initial_statuses(payment_type: str) -> tuple[str, str]:
    """
    Status pair for a new booking.

    Online bookings wait for the gateway; pay-on-arrival bookings are
    confirmed immediately while payment stays pending.
    """
    if payment_type == "arrival":
        return CONFIRMED, PENDING
    return PENDING, PENDING


def create_booking(
    engine: Engine,
    customer_id: str,
    vehicle_id: str,
    pickup_date: date,
    dropoff_date: date,
    pickup_location: str,
    dropoff_location: str,
    payment_type: str = "online",
    pickup_time: Optional[time] = None,
    dropoff_time: Optional[time] = None,
    extras: Optional[dict[str, int]] = None,
    promotion_code: Optional[str] = None,
    flight_info: Optional[str] = None,
    comments: Optional[str] = None,
) -> dict[str, Any]:
    """
    Price and store a new booking.

    The total is always computed server-side from the current price grid.
    The order number is allocated in the same transaction as the insert.

    Args:
        engine: SQLAlchemy engine
        customer_id: Existing customer making the booking
        vehicle_id: Visible vehicle being booked
        pickup_date: Pickup date
        dropoff_date: Dropoff date
        pickup_location: Pickup location name
        dropoff_location: Dropoff location name
        payment_type: ``online`` or ``arrival``
        pickup_time: Pickup time of day
        dropoff_time: Dropoff time of day
        extras: Mapping of rental option code to quantity
        promotion_code: Optional promotion code
        flight_info: Optional flight number for airport pickups
        comments: Optional free text from the customer

    Returns:
        dict: The stored booking with customer and vehicle details, plus ``quote``

    Raises:
        CustomerNotFoundError: If the customer does not exist
        LookupError: If the vehicle does not exist or is hidden
        PricingNotConfiguredError: If no season or pricing row applies
        InvalidPromotionError: If the promotion code cannot be used
    """
    with engine.begin() as conn:
        if get_customer(conn, customer_id) is None:
            raise CustomerNotFoundError(f"Customer {customer_id} not found")

        quote = build_quote(
            conn,
            vehicle_id=vehicle_id,
            pickup=pickup_date,
            dropoff=dropoff_date,
            payment_type=payment_type,
            pickup_time=pickup_time,
            dropoff_time=dropoff_time,
            extras=extras,
            promotion_code=promotion_code,
        )

        status, payment_status = initial_statuses(payment_type)
        order_number = allocate_number(conn, "next_order_number")

        booking_id = insert_booking(
            conn,
            {
                "customer_id": customer_id,
                "vehicle_id": vehicle_id,
                "start_date": _combine(pickup_date, pickup_time),
                "end_date": _combine(dropoff_date, dropoff_time),
                "pickup_location": pickup_location,
                "dropoff_location": dropoff_location,
                "total_price": quote["total"],
                "status": status,
                "payment_status": payment_status,
                "payment_type": payment_type,
                "order_number": order_number,
                "promotion_code": quote["promotion_code"],
                "flight_info": flight_info,
                "comments": comments,
                "extras": [
                    {
                        "code": e["code"],
                        "quantity": e["quantity"],
                        "total": str(e["total"]),
                    }
                    for e in quote["extras"]
                ],
            },
        )
        booking = get_booking(conn, booking_id)

    bookings_created.labels(payment_type=payment_type).inc()
    logger.info(
        "booking_created",
        booking_id=booking_id,
        order_number=order_number,
        customer_id=customer_id,
        vehicle_id=vehicle_id,
        payment_type=payment_type,
        total=str(quote["total"]),
    )

    result = dict(booking or {})
    result["quote"] = quote
    return result
