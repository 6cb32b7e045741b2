"""SQLAlchemy model for pickup and dropoff locations."""

from sqlalchemy import TIMESTAMP, Boolean, Column, Integer, Numeric, String

from car_rental.models.base import Base, new_id
from car_rental.utils.datetime import utc_now


class Location(Base):
    """ORM model for an airport, office or hotel where cars change hands."""

    __tablename__ = "locations"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False, default="office")
    display_order = Column(Integer, nullable=False, default=0)
    visible = Column(Boolean, nullable=False, default=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    opening_hours = Column(String, nullable=True)
    is_pickup_point = Column(Boolean, nullable=False, default=True)
    is_dropoff_point = Column(Boolean, nullable=False, default=True)
    has_delivery = Column(Boolean, nullable=False, default=False)
    delivery_fee = Column(Numeric(10, 2), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
