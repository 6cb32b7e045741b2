"""SQLAlchemy models for seasons and seasonal price tiers."""

from sqlalchemy import (
    TIMESTAMP,
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
)

from car_rental.models.base import Base, new_id
from car_rental.utils.datetime import utc_now


class Season(Base):
    """
    ORM model for a pricing season (a named, inclusive date interval).

    Seasons never overlap; the season containing a rental's pickup date
    decides which price grid applies.
    """

    __tablename__ = "seasons"
    __table_args__ = (CheckConstraint("end_date > start_date", name="ck_seasons_date_order"),)

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False, index=True)
    type = Column(String, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)


class SeasonalPricing(Base):
    """
    ORM model for the daily rate of one category/group pair during one season.

    Three day-count tiers are stored. The optional ``base_*`` columns hold the
    reference prices that reset-to-base restores after percentage changes.
    """

    __tablename__ = "seasonal_pricing"
    __table_args__ = (
        UniqueConstraint(
            "category_id", "group", "season_id", name="uq_seasonal_pricing_category_group_season"
        ),
        CheckConstraint(
            "price_3_to_6_days >= 0 AND price_7_to_14_days >= 0 AND price_15_plus_days >= 0",
            name="ck_seasonal_pricing_non_negative",
        ),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    category_id = Column(
        String(36), ForeignKey("vehicle_categories.id"), nullable=False, index=True
    )
    group = Column(String, nullable=False)
    season_id = Column(
        String(36), ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False, index=True
    )
    price_3_to_6_days = Column(Numeric(10, 2), nullable=False)
    price_7_to_14_days = Column(Numeric(10, 2), nullable=False)
    price_15_plus_days = Column(Numeric(10, 2), nullable=False)
    base_price_3_to_6_days = Column(Numeric(10, 2), nullable=True)
    base_price_7_to_14_days = Column(Numeric(10, 2), nullable=True)
    base_price_15_plus_days = Column(Numeric(10, 2), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
