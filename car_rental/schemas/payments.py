from decimal import Decimal
from typing import Optional

from pydantic import Field

from car_rental.schemas.base import ApiModel


class CreateOrderPayload(ApiModel):
    """Schema for registering a gateway order for a booking."""

    booking_id: str = Field(..., description="Booking ID")
    amount: Optional[Decimal] = Field(
        None, gt=0, description="Amount to charge (defaults to the booking total)"
    )
    currency: str = Field("EUR", min_length=3, max_length=3, description="ISO currency code")


class VerifyPaymentPayload(ApiModel):
    """Schema for verifying a gateway order after the payer returns."""

    order_id: str = Field(..., min_length=1, description="Gateway order ID")
    booking_id: str = Field(..., min_length=1, description="Booking ID")


class CallbackPayload(ApiModel):
    """Schema for a signed gateway callback."""

    booking_id: str = Field(..., description="Booking ID")
    order_id: str = Field(..., description="Gateway order ID")
    order_status: int = Field(..., description="Gateway order state (2 paid, 1 authorised)")
    event_id: Optional[str] = Field(None, description="Gateway notification ID")


class UpdateStatusPayload(ApiModel):
    """Schema for an admin status change."""

    booking_id: str = Field(..., description="Booking ID")
    status: str = Field(..., description="Target booking status")
    payment_status: str = Field(..., description="Target payment status")
