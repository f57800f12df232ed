"""
Vehicle model for the rental fleet.
"""
from datetime import date
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from car_rental.identifiers import VEHICLE_ID_PATTERN

VEHICLE_CATEGORIES = ("Sedan", "SUV", "Hatchback", "Coupe", "Convertible", "Wagon", "Pickup")

STATUS_AVAILABLE = "Available"
STATUS_RENTED = "Rented"

MIN_YEAR = 1900


def normalize_category(value: str) -> str:
    """Return the canonical spelling of a vehicle category."""
    for category in VEHICLE_CATEGORIES:
        if category.lower() == value.strip().lower():
            return category
    raise ValueError(f"category must be one of: {', '.join(VEHICLE_CATEGORIES)}")


def validate_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    if "," in value:
        raise ValueError("must not contain commas")
    if len(value.splitlines()) > 1:
        raise ValueError("must be a single line")
    return value


def validate_year(value: int) -> int:
    latest = date.today().year + 2
    if not MIN_YEAR <= value <= latest:
        raise ValueError(f"year must be between {MIN_YEAR} and {latest}")
    return value


class Vehicle(BaseModel):
    """
    A car in the fleet.

    ``available`` is False exactly when ``current_renter`` is set. The
    occupancy fields (renter and rental dates) change only through
    :meth:`rent`, :meth:`return_item` and, when reconciling with loaded
    rentals, :meth:`restore_occupancy`.
    """

    id: str
    make: str
    model: str
    year: int
    category: str
    available: bool = True
    current_renter: Optional[str] = None
    rental_start: Optional[date] = None
    rental_end: Optional[date] = None

    @field_validator("id")
    @classmethod
    def check_id(cls, value: str) -> str:
        value = value.strip().upper()
        if not VEHICLE_ID_PATTERN.match(value):
            raise ValueError("vehicle id must look like C001")
        return value

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

    @model_validator(mode="after")
    def check_occupancy(self) -> "Vehicle":
        if self.available == (self.current_renter is not None):
            raise ValueError("a vehicle is rented exactly when it has a current renter")
        return self

    @property
    def status(self) -> str:
        return STATUS_AVAILABLE if self.available else STATUS_RENTED

    # Rentable

    def rent(self, customer_id: Optional[str], start: Optional[date],
             end: Optional[date], today: Optional[date] = None) -> bool:
        """
        Mark the vehicle as rented by ``customer_id`` from ``start`` to ``end``.

        Returns False without changing anything if the vehicle is already
        rented, an argument is missing, ``start`` is after ``end`` or
        ``start`` lies before ``today``.
        """
        if not self.available or not customer_id or start is None or end is None:
            return False
        if start > end or start < (today or date.today()):
            return False

        self._occupy(customer_id, start, end)
        return True

    def return_item(self) -> bool:
        """Release the vehicle. Returns False if it was not rented."""
        if self.available:
            return False

        self.available = True
        self.current_renter = None
        self.rental_start = None
        self.rental_end = None
        return True

    def restore_occupancy(self, customer_id: str, start: Optional[date],
                          end: Optional[date]) -> None:
        """Re-apply an existing rental, skipping the date checks of :meth:`rent`."""
        self._occupy(customer_id, start, end)

    def _occupy(self, customer_id: str, start: Optional[date], end: Optional[date]) -> None:
        self.available = False
        self.current_renter = customer_id
        self.rental_start = start
        self.rental_end = end

    # Searchable

    def matches_id(self, vehicle_id: str) -> bool:
        return self.id.lower() == vehicle_id.strip().lower()

    def matches_make(self, make: str) -> bool:
        return make.strip().lower() in self.make.lower()

    def matches_model(self, model: str) -> bool:
        return model.strip().lower() in self.model.lower()

    def matches_status(self, status: str) -> bool:
        return self.status.lower() == status.strip().lower()

    def matches_search_term(self, term: str) -> bool:
        term = term.strip().lower()
        if not term:
            return False
        fields = (self.id, self.make, self.model, self.category, str(self.year))
        return any(term in field.lower() for field in fields)

    def __str__(self) -> str:
        renter = f" | Renter: {self.current_renter}" if self.current_renter else ""
        return (
            f"ID: {self.id} | {self.make} {self.model} ({self.year}) | "
            f"Type: {self.category} | Status: {self.status}{renter}"
        )
