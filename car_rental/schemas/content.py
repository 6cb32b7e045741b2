from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import EmailStr, Field, model_validator

from car_rental.schemas.base import ApiModel


class PromotionPayload(ApiModel):
    """Schema for creating a promotion code."""

    name: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, description="Code entered at checkout")
    discount: int = Field(..., ge=0, le=100, description="Discount percent")
    start_date: date
    end_date: date
    visible: bool = True
    type: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self) -> "PromotionPayload":
        if self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        return self


class PromotionUpdatePayload(ApiModel):
    """Schema for updating a promotion. All fields are optional."""

    name: Optional[str] = Field(None, min_length=1)
    code: Optional[str] = Field(None, min_length=1)
    discount: Optional[int] = Field(None, ge=0, le=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    visible: Optional[bool] = None
    type: Optional[str] = None


class SiteContentPayload(ApiModel):
    """Schema for creating or replacing a content block."""

    key: str = Field(..., min_length=1)
    value: str
    group: Optional[str] = None


class SiteContentUpdatePayload(ApiModel):
    value: Optional[str] = None
    group: Optional[str] = None


class PostPayload(ApiModel):
    """Schema for creating a bilingual blog post. Slugs are derived from titles."""

    title: str = Field(..., min_length=1)
    title_ru: Optional[str] = None
    summary: Optional[str] = None
    summary_ru: Optional[str] = None
    content: str = Field(..., min_length=1)
    content_ru: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    featured: bool = False
    published: bool = False
    published_ru: bool = False


class PostUpdatePayload(ApiModel):
    """Schema for updating a blog post. All fields are optional."""

    title: Optional[str] = Field(None, min_length=1)
    title_ru: Optional[str] = None
    summary: Optional[str] = None
    summary_ru: Optional[str] = None
    content: Optional[str] = Field(None, min_length=1)
    content_ru: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    featured: Optional[bool] = None
    published: Optional[bool] = None
    published_ru: Optional[bool] = None


class LocationPayload(ApiModel):
    """Schema for creating a pickup/dropoff location."""

    name: str = Field(..., min_length=1)
    type: str = "office"
    visible: bool = True
    address: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    opening_hours: Optional[str] = None
    is_pickup_point: bool = True
    is_dropoff_point: bool = True
    has_delivery: bool = False
    delivery_fee: Optional[Decimal] = Field(None, ge=0)


class LocationUpdatePayload(ApiModel):
    """Schema for updating a location. All fields are optional."""

    name: Optional[str] = Field(None, min_length=1)
    type: Optional[str] = None
    visible: Optional[bool] = None
    address: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    opening_hours: Optional[str] = None
    is_pickup_point: Optional[bool] = None
    is_dropoff_point: Optional[bool] = None
    has_delivery: Optional[bool] = None
    delivery_fee: Optional[Decimal] = Field(None, ge=0)


class SettingsUpdatePayload(ApiModel):
    """Schema for updating general settings."""

    vat_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    pay_online_discount: Optional[Decimal] = Field(None, ge=0, le=100)
    pay_on_arrival_discount: Optional[Decimal] = Field(None, ge=0, le=100)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    max_rows_per_page: Optional[int] = Field(None, ge=1, le=500)


class CustomerAdminUpdatePayload(ApiModel):
    """Schema for an admin edit of a customer."""

    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    verified: Optional[bool] = None
