"""SQLAlchemy models for the vehicle catalog."""

from sqlalchemy import TIMESTAMP, Boolean, Column, ForeignKey, Integer, String, Text

from car_rental.models.base import Base, new_id
from car_rental.utils.datetime import utc_now


class VehicleCategory(Base):
    """
    ORM model for vehicle categories (Saloon Manual, Cabrio, SUV 4WD...).

    Categories drive seasonal pricing and the image folder a vehicle's photos
    are stored under.
    """

    __tablename__ = "vehicle_categories"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)
    image = Column(String, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    visible = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)


class Vehicle(Base):
    """
    ORM model for a rentable vehicle model.

    ``group`` is the vehicle group code (e.g. ``A3``) used to look up
    seasonal prices and rental option price tiers.
    """

    __tablename__ = "vehicles"

    id = Column(String(36), primary_key=True, default=new_id)
    category_id = Column(
        String(36), ForeignKey("vehicle_categories.id"), nullable=False, index=True
    )
    name = Column(String, nullable=False)
    code = Column(String, nullable=True)
    group = Column(String, nullable=False, index=True)
    image = Column(String, nullable=True)
    visible = Column(Boolean, nullable=False, default=True)
    engine_size = Column(String, nullable=True)
    doors = Column(Integer, nullable=True)
    seats = Column(Integer, nullable=True)
    transmission = Column(String, nullable=True)
    has_ac = Column(Boolean, nullable=False, default=True)
    adults = Column(Integer, nullable=True)
    children = Column(Integer, nullable=True)
    big_luggages = Column(Integer, nullable=True)
    small_luggages = Column(Integer, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
