"""
Rental agreement model.
"""
import enum
from datetime import date
from typing import Optional

from pydantic import BaseModel, computed_field, field_validator, model_validator

from car_rental.identifiers import CUSTOMER_ID_PATTERN, RENTAL_ID_PATTERN, VEHICLE_ID_PATTERN

# Surcharge per late day, as a fraction of the daily rate
LATE_FEE_MULTIPLIER = 0.5


class RentalStatus(str, enum.Enum):
    """Rental status enumeration."""
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


def days_between(start: date, end: date) -> int:
    return (end - start).days


def clean_notes(value: Optional[str]) -> str:
    """Fold multi-line notes onto one line; records are stored one per line."""
    return " ".join(part.strip() for part in (value or "").splitlines() if part.strip())


class RentalAgreement(BaseModel):
    """
    A rental of one vehicle by one customer.

    ``total_cost`` is always derived from the dates and the daily rate:
    the planned cost while no return has been recorded, the actual cost
    (including any late fee) afterwards.
    """

    id: str
    customer_id: str
    vehicle_id: str
    start_date: date
    end_date: date
    actual_return_date: Optional[date] = None
    daily_rate: float
    status: RentalStatus = RentalStatus.ACTIVE
    notes: str = ""

    @field_validator("id")
    @classmethod
    def check_id(cls, value: str) -> str:
        value = value.strip().upper()
        if not RENTAL_ID_PATTERN.match(value):
            raise ValueError("rental id must look like R001")
        return value

    @field_validator("customer_id")
    @classmethod
    def check_customer_id(cls, value: str) -> str:
        value = value.strip().upper()
        if not CUSTOMER_ID_PATTERN.match(value):
            raise ValueError("customer id must look like CUST001")
        return value

    @field_validator("vehicle_id")
    @classmethod
    def check_vehicle_id(cls, value: str) -> str:
        value = value.strip().upper()
        if not VEHICLE_ID_PATTERN.match(value):
            raise ValueError("vehicle id must look like C001")
        return value

    @field_validator("daily_rate")
    @classmethod
    def check_rate(cls, value: float) -> float:
        value = round(value, 2)
        if value <= 0:
            raise ValueError("daily rate must be at least 0.01")
        return value

    @field_validator("notes")
    @classmethod
    def check_notes(cls, value: str) -> str:
        return clean_notes(value)

    @model_validator(mode="after")
    def check_dates(self) -> "RentalAgreement":
        if self.end_date < self.start_date:
            raise ValueError("end date must not be before start date")
        return self

    @property
    def planned_days(self) -> int:
        return max(1, days_between(self.start_date, self.end_date))

    @property
    def actual_days(self) -> int:
        if self.actual_return_date is None:
            return self.planned_days
        return max(1, days_between(self.start_date, self.actual_return_date))

    @property
    def late_days(self) -> int:
        if self.actual_return_date is None or self.actual_return_date <= self.end_date:
            return 0
        return days_between(self.end_date, self.actual_return_date)

    @property
    def late_fee(self) -> float:
        return self.late_days * self.daily_rate * LATE_FEE_MULTIPLIER

    @computed_field
    @property
    def total_cost(self) -> float:
        if self.actual_return_date is None:
            return self.planned_days * self.daily_rate
        return self.actual_days * self.daily_rate + self.late_fee

    @property
    def is_active(self) -> bool:
        return self.status == RentalStatus.ACTIVE

    def is_overdue(self, today: Optional[date] = None) -> bool:
        return self.is_active and (today or date.today()) > self.end_date

    def days_overdue(self, today: Optional[date] = None) -> int:
        today = today or date.today()
        if not self.is_overdue(today):
            return 0
        return days_between(self.end_date, today)

    def complete(self, return_date: date) -> bool:
        """Close an active rental. Returns False for any other status."""
        if not self.is_active:
            return False

        self.actual_return_date = return_date
        self.status = RentalStatus.COMPLETED
        return True

    def cancel(self, reason: Optional[str] = None) -> bool:
        """
        Cancel the rental. Completed rentals cannot be cancelled; cancelling
        an already cancelled rental only replaces the reason.
        """
        if self.status == RentalStatus.COMPLETED:
            return False

        self.status = RentalStatus.CANCELLED
        self.notes = clean_notes(reason) or "Cancelled"
        return True

    def __str__(self) -> str:
        return (
            f"Rental ID: {self.id} | Customer: {self.customer_id} | Car: {self.vehicle_id} | "
            f"{self.start_date} to {self.end_date} | Status: {self.status.value} | "
            f"Cost: ${self.total_cost:.2f}"
        )
