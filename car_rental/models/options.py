"""SQLAlchemy models for rental add-ons (GPS, child seats, waivers)."""

from sqlalchemy import (
    TIMESTAMP,
    Boolean,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)

from car_rental.models.base import Base, new_id
from car_rental.utils.datetime import utc_now


class RentalOption(Base):
    """
    ORM model for an optional extra that can be added to a booking.

    price_type is one of ``per Day``, ``per Rental`` or ``per day per driver``.
    """

    __tablename__ = "rental_options"

    id = Column(String(36), primary_key=True, default=new_id)
    code = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    visible = Column(Boolean, nullable=False, default=True)
    max_qty = Column(Integer, nullable=False, default=1)
    price_type = Column(String, nullable=False, default="per Rental")
    max_cost = Column(Numeric(10, 2), nullable=True)
    free_over_days = Column(Integer, nullable=True)
    photo = Column(String, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)


class RentalOptionPricing(Base):
    """ORM model for one price tier of a rental option (comma-separated vehicle groups)."""

    __tablename__ = "rental_option_pricing"

    id = Column(String(36), primary_key=True, default=new_id)
    rental_option_id = Column(
        String(36),
        ForeignKey("rental_options.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    vehicle_groups = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
