"""SQLAlchemy model for site-wide settings and document counters."""

from sqlalchemy import TIMESTAMP, Column, Integer, Numeric, String

from car_rental.models.base import Base
from car_rental.utils.datetime import utc_now

SETTINGS_ID = "default"


class GeneralSetting(Base):
    """
    ORM model for the single settings row.

    Besides the payment discounts it holds the counters order and invoice
    numbers are allocated from.
    """

    __tablename__ = "general_settings"

    id = Column(String(36), primary_key=True, default=SETTINGS_ID)
    vat_percentage = Column(Numeric(5, 2), nullable=False, default=19)
    pay_online_discount = Column(Numeric(5, 2), nullable=False, default=15)
    pay_on_arrival_discount = Column(Numeric(5, 2), nullable=False, default=10)
    next_order_number = Column(Integer, nullable=False, default=1)
    next_invoice_number = Column(Integer, nullable=False, default=1)
    contact_email = Column(String, nullable=True)
    contact_phone = Column(String, nullable=True)
    max_rows_per_page = Column(Integer, nullable=False, default=20)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
