"""
Input schemas for Vehicle.
"""
from pydantic import BaseModel, field_validator
from typing import Optional

from car_rental.models.vehicle import normalize_category, validate_text, validate_year


class VehicleBase(BaseModel):
    """Base vehicle schema with common fields."""
    make: str
    model: str
    year: int
    category: str

    @field_validator("make", "model")
    @classmethod
    def check_text(cls, value: str) -> str:
        return validate_text(value)

    @field_validator("year")
    @classmethod
    def check_year(cls, value: int) -> int:
        return validate_year(value)

    @field_validator("category")
    @classmethod
    def check_category(cls, value: str) -> str:
        return normalize_category(value)


class VehicleCreate(VehicleBase):
    """Schema for adding a vehicle to the fleet."""
    pass


class VehicleUpdate(BaseModel):
    """Schema for editing a vehicle; unset fields are left alone."""
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    category: Optional[str] = None
    force_available: bool = False

    @field_validator("make", "model")
    @classmethod
    def check_text(cls, value: Optional[str]) -> Optional[str]:
        return validate_text(value) if value is not None else None

    @field_validator("year")
    @classmethod
    def check_year(cls, value: Optional[int]) -> Optional[int]:
        return validate_year(value) if value is not None else None

    @field_validator("category")
    @classmethod
    def check_category(cls, value: Optional[str]) -> Optional[str]:
        return normalize_category(value) if value is not None else None
