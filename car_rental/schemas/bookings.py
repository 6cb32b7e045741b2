from datetime import date, time
from typing import Literal, Optional

from pydantic import EmailStr, Field, model_validator

from car_rental.schemas.base import ApiModel

PaymentType = Literal["online", "arrival"]


class QuotePayload(ApiModel):
    """Schema for pricing a prospective booking."""

    vehicle_id: str = Field(..., description="Vehicle ID")
    pickup_date: date = Field(..., description="Pickup date")
    dropoff_date: date = Field(..., description="Dropoff date")
    pickup_time: Optional[time] = Field(None, description="Pickup time (HH:MM)")
    dropoff_time: Optional[time] = Field(None, description="Dropoff time (HH:MM)")
    payment_type: PaymentType = Field("online", description="online or arrival")
    selected_extras: dict[str, int] = Field(
        default_factory=dict, description="Rental option code to quantity"
    )
    promotion_code: Optional[str] = Field(None, description="Promotion code")

    @model_validator(mode="after")
    def check_dates(self) -> "QuotePayload":
        if self.dropoff_date < self.pickup_date:
            raise ValueError("dropoffDate must not be before pickupDate")
        return self


class BookingCreatePayload(QuotePayload):
    """Schema for creating a booking. The total is computed server-side."""

    customer_id: str = Field(..., description="Customer ID")
    pickup_location: str = Field(..., min_length=1, description="Pickup location")
    dropoff_location: str = Field(..., min_length=1, description="Dropoff location")
    flight_info: Optional[str] = Field(None, description="Flight number")
    comments: Optional[str] = Field(None, description="Customer comments")


class BookingLookupPayload(ApiModel):
    """Schema for finding a booking by invoice number and email."""

    invoice_no: str = Field(..., min_length=1, description="Invoice number")
    email: EmailStr = Field(..., description="Email of the booking's customer")


class BulkDeletePayload(ApiModel):
    """Schema for deleting several bookings at once."""

    booking_ids: list[str] = Field(..., description="Booking IDs to delete")
