from decimal import Decimal
from typing import Literal, Optional

from pydantic import Field

from car_rental.schemas.base import ApiModel

PriceType = Literal["per Day", "per Rental", "per day per driver"]


class CategoryPayload(ApiModel):
    """Schema for creating a vehicle category."""

    name: str = Field(..., min_length=1, description="Category name")
    description: Optional[str] = None
    image: Optional[str] = None
    visible: bool = True


class CategoryUpdatePayload(ApiModel):
    """Schema for updating a vehicle category. All fields are optional."""

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    visible: Optional[bool] = None


class VehiclePayload(ApiModel):
    """Schema for adding a vehicle model to a category."""

    category_id: str = Field(..., description="Vehicle category ID")
    name: str = Field(..., min_length=1, description="Model name, e.g. Toyota Yaris")
    group: str = Field(..., min_length=1, description="Vehicle group code, e.g. A3")
    visible: bool = True
    engine_size: Optional[str] = None
    doors: Optional[int] = Field(None, ge=0)
    seats: Optional[int] = Field(None, ge=0)
    transmission: Optional[str] = None
    has_ac: bool = Field(True, alias="hasAC")
    adults: Optional[int] = Field(None, ge=0)
    children: Optional[int] = Field(None, ge=0)
    big_luggages: Optional[int] = Field(None, ge=0)
    small_luggages: Optional[int] = Field(None, ge=0)


class VehicleUpdatePayload(ApiModel):
    """Schema for updating a vehicle. All fields are optional."""

    category_id: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1)
    group: Optional[str] = Field(None, min_length=1)
    visible: Optional[bool] = None
    engine_size: Optional[str] = None
    doors: Optional[int] = Field(None, ge=0)
    seats: Optional[int] = Field(None, ge=0)
    transmission: Optional[str] = None
    has_ac: Optional[bool] = Field(None, alias="hasAC")
    adults: Optional[int] = Field(None, ge=0)
    children: Optional[int] = Field(None, ge=0)
    big_luggages: Optional[int] = Field(None, ge=0)
    small_luggages: Optional[int] = Field(None, ge=0)


class OptionTierPayload(ApiModel):
    """Schema for one price tier of a rental option."""

    vehicle_groups: str = Field(..., min_length=1, description="Comma-separated group codes")
    price: Decimal = Field(..., ge=0)


class RentalOptionPayload(ApiModel):
    """Schema for creating a rental option with its price tiers."""

    code: str = Field(..., min_length=1, description="Unique option code, e.g. GPS")
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    visible: bool = True
    max_qty: int = Field(1, ge=1)
    price_type: PriceType = "per Rental"
    max_cost: Optional[Decimal] = Field(None, ge=0)
    free_over_days: Optional[int] = Field(None, ge=1)
    pricing: list[OptionTierPayload] = Field(default_factory=list)


class RentalOptionUpdatePayload(ApiModel):
    """Schema for updating a rental option; ``pricing`` replaces all tiers when given."""

    code: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    visible: Optional[bool] = None
    max_qty: Optional[int] = Field(None, ge=1)
    price_type: Optional[PriceType] = None
    max_cost: Optional[Decimal] = Field(None, ge=0)
    free_over_days: Optional[int] = Field(None, ge=1)
    pricing: Optional[list[OptionTierPayload]] = None


class ReorderPayload(ApiModel):
    """Schema for a new display order."""

    ids: list[str] = Field(..., min_length=1, description="Row IDs in their new order")


class MovePayload(ApiModel):
    """Schema for moving one row up or down in display order."""

    direction: Literal["up", "down"]
