from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import Field, model_validator

from car_rental.schemas.base import ApiModel


class SeasonPayload(ApiModel):
    """Schema for creating a season, optionally copying another season's prices."""

    name: str = Field(..., min_length=1, description="Season name")
    start_date: date = Field(..., description="First day (inclusive)")
    end_date: date = Field(..., description="Last day (inclusive)")
    type: Optional[str] = Field(None, description="Season type tag (Summer, Winter...)")
    copy_from_id: Optional[str] = Field(None, description="Season to copy prices from")

    @model_validator(mode="after")
    def check_dates(self) -> "SeasonPayload":
        if self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        return self


class SeasonUpdatePayload(ApiModel):
    """Schema for updating a season. All fields are optional."""

    name: Optional[str] = Field(None, min_length=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    type: Optional[str] = None


class SeasonRefPayload(ApiModel):
    """Schema naming the season a bulk operation applies to."""

    season_id: str = Field(..., min_length=1, description="Season ID")


class PercentUpdatePayload(SeasonRefPayload):
    """Schema for a percentage change of every price in a season."""

    percent: Decimal = Field(..., ge=-100, description="Percentage change (e.g. 10 or -5)")


class PricingRowPayload(ApiModel):
    """Schema for one edited pricing row."""

    id: str = Field(..., description="Seasonal pricing row ID")
    price_3_to_6_days: Optional[Decimal] = Field(None, ge=0, alias="price3to6")
    price_7_to_14_days: Optional[Decimal] = Field(None, ge=0, alias="price7to14")
    price_15_plus_days: Optional[Decimal] = Field(None, ge=0, alias="price15Plus")


class PricingGridPayload(ApiModel):
    """Schema for saving several pricing rows at once."""

    rows: list[PricingRowPayload] = Field(..., description="Edited rows")


class PricingRowCreatePayload(ApiModel):
    """Schema for adding a category/group price row to a season."""

    season_id: str = Field(..., description="Season ID")
    category_id: str = Field(..., description="Vehicle category ID")
    group: str = Field(..., min_length=1, description="Vehicle group code")
    price_3_to_6_days: Decimal = Field(..., ge=0, alias="price3to6")
    price_7_to_14_days: Decimal = Field(..., ge=0, alias="price7to14")
    price_15_plus_days: Decimal = Field(..., ge=0, alias="price15Plus")
