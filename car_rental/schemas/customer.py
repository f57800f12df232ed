"""
Input schemas for Customer.
"""
from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional

from car_rental.models.customer import validate_phone
from car_rental.models.vehicle import validate_text


class CustomerBase(BaseModel):
    """Base customer schema with common fields."""
    name: str
    email: EmailStr
    phone: str
    license_number: str

    @field_validator("name", "license_number")
    @classmethod
    def check_text(cls, value: str) -> str:
        return validate_text(value)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str) -> str:
        return validate_phone(value)


class CustomerCreate(CustomerBase):
    """Schema for registering a customer."""
    pass


class CustomerUpdate(BaseModel):
    """Schema for editing a customer; unset fields are left alone."""
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    license_number: Optional[str] = None

    @field_validator("name", "license_number")
    @classmethod
    def check_text(cls, value: Optional[str]) -> Optional[str]:
        return validate_text(value) if value is not None else None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: Optional[str]) -> Optional[str]:
        return validate_phone(value) if value is not None else None
