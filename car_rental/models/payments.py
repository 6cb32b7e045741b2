"""SQLAlchemy model for the payment gateway audit trail."""

from sqlalchemy import JSON, TIMESTAMP, Column, ForeignKey, Integer, Numeric, String, Text

from car_rental.models.base import Base, new_id
from car_rental.utils.datetime import utc_now


class PaymentLog(Base):
    """
    ORM model for one interaction with the payment gateway.

    Rows are append-only. idempotency_key is unique so a replayed gateway
    callback cannot be recorded (or applied) twice.
    """

    __tablename__ = "payment_logs"

    id = Column(String(36), primary_key=True, default=new_id)
    booking_id = Column(
        String(36), ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True, index=True
    )
    order_number = Column(String, nullable=True)
    amount = Column(Numeric(10, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="EUR")
    customer_email = Column(String, nullable=True)
    customer_first_name = Column(String, nullable=True)
    customer_last_name = Column(String, nullable=True)
    customer_phone = Column(String, nullable=True)
    payment_type = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, index=True)
    gateway_order_id = Column(String, nullable=True, index=True)
    gateway_status = Column(String, nullable=True)
    gateway_error_code = Column(String, nullable=True)
    gateway_error_message = Column(Text, nullable=True)
    form_url = Column(String, nullable=True)
    idempotency_key = Column(String, nullable=True, unique=True)
    processing_time_ms = Column(Integer, nullable=True)
    user_agent = Column(String, nullable=True)
    ip_address = Column(String, nullable=True)
    raw_response = Column(JSON, nullable=True)
    error_details = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now, index=True)
