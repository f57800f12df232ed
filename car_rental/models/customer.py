"""
Customer model.
"""
from datetime import date

from pydantic import BaseModel, EmailStr, Field, field_validator

from car_rental.identifiers import CUSTOMER_ID_PATTERN, PHONE_PATTERN
from car_rental.models.vehicle import validate_text


class Customer(BaseModel):
    """A registered renter."""

    id: str
    name: str
    email: EmailStr
    phone: str
    license_number: str
    registration_date: date = Field(default_factory=date.today)

    @field_validator("id")
    @classmethod
    def check_id(cls, value: str) -> str:
        value = value.strip().upper()
        if not CUSTOMER_ID_PATTERN.match(value):
            raise ValueError("customer id must look like CUST001")
        return value

    @field_validator("name", "license_number")
    @classmethod
    def check_text(cls, value: str) -> str:
        return validate_text(value)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str) -> str:
        return validate_phone(value)

    def matches_search_term(self, term: str) -> bool:
        term = term.strip().lower()
        if not term:
            return False
        fields = (self.id, self.name, self.email, self.phone, self.license_number)
        return any(term in field.lower() for field in fields)

    def __str__(self) -> str:
        return (
            f"ID: {self.id} | Name: {self.name} | Email: {self.email} | "
            f"Phone: {self.phone} | License: {self.license_number} | "
            f"Registered: {self.registration_date}"
        )


def validate_phone(value: str) -> str:
    value = value.strip()
    if not PHONE_PATTERN.match(value):
        raise ValueError("phone must look like +359 888 123 456")
    return value
