"""SQLAlchemy model for site customers."""

from sqlalchemy import TIMESTAMP, Boolean, Column, Date, String

from car_rental.models.base import Base, new_id
from car_rental.utils.datetime import utc_now


class Customer(Base):
    """
    ORM model for a customer.

    Guests book without a password; password_hash is set once the customer
    registers or upgrades the guest account.
    """

    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=new_id)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    phone = Column(String, nullable=True)
    password_hash = Column(String, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    address = Column(String, nullable=True)
    verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
