from datetime import date
from typing import Optional

from pydantic import EmailStr, Field

from car_rental.schemas.base import ApiModel


class LoginPayload(ApiModel):
    """Schema for customer login."""

    email: EmailStr = Field(..., description="Customer email")
    password: str = Field(..., min_length=1, description="Plain-text password")


class FindCustomerPayload(ApiModel):
    """Schema for looking a customer up by email."""

    email: EmailStr = Field(..., description="Customer email")


class RegisterPayload(ApiModel):
    """
    Schema for registering a customer. Without a password the customer is a
    guest who can set one later.
    """

    first_name: str = Field(..., min_length=1, description="First name")
    last_name: str = Field(..., min_length=1, description="Last name")
    email: EmailStr = Field(..., description="Customer email")
    phone: Optional[str] = Field(None, description="Phone number")
    password: Optional[str] = Field(None, min_length=6, description="Password (optional)")
    date_of_birth: Optional[date] = Field(None, description="Date of birth")
    address: Optional[str] = Field(None, description="Postal address")


class UpdateCustomerPayload(ApiModel):
    """Schema for a partial customer profile update."""

    customer_id: str = Field(..., description="Customer ID")
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None


class SetPasswordPayload(ApiModel):
    """Schema for turning a guest account into a password account."""

    email: EmailStr = Field(..., description="Customer email")
    password: str = Field(..., min_length=6, description="New password")
