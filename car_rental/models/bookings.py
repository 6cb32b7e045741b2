"""SQLAlchemy model for rental bookings."""

from sqlalchemy import JSON, TIMESTAMP, Column, ForeignKey, Numeric, String, Text

from car_rental.models.base import Base, new_id
from car_rental.utils.datetime import utc_now


class Booking(Base):
    """
    ORM model for a booking.

    status and payment_status only move along the transitions allowed by
    car_rental.services.booking_status. order_number is assigned at creation,
    invoice_no once a payment succeeds.
    """

    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=new_id)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    start_date = Column(TIMESTAMP(timezone=True), nullable=False)
    end_date = Column(TIMESTAMP(timezone=True), nullable=False)
    pickup_location = Column(String, nullable=False)
    dropoff_location = Column(String, nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    status = Column(String, nullable=False, default="Pending", index=True)
    payment_status = Column(String, nullable=False, default="Pending")
    payment_type = Column(String, nullable=False, default="online")
    order_number = Column(String, nullable=True, unique=True)
    invoice_no = Column(String, nullable=True, unique=True, index=True)
    transaction_id = Column(String, nullable=True, index=True)
    promotion_code = Column(String, nullable=True)
    flight_info = Column(String, nullable=True)
    comments = Column(Text, nullable=True)
    extras = Column(JSON, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
