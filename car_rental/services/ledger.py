"""
Rental ledger: creates, completes and cancels rental agreements while keeping
vehicle availability in step with them.
"""
import logging
from datetime import date
from typing import Callable, Dict, List, Optional

from car_rental.config import Settings, get_settings
from car_rental.exceptions import NotFoundError, RentalStateError, ValidationError
from car_rental.identifiers import RENTAL_PREFIX, next_identifier
from car_rental.models.rental import RentalAgreement, RentalStatus
from car_rental.services.customers import CustomerRegistry
from car_rental.services.fleet import FleetRegistry

logger = logging.getLogger(__name__)


class RentalLedger:
    """
    Owns the rental agreements and enforces the rules that span vehicles,
    customers and rentals.

    ``clock`` returns the current date; every "today" comparison goes
    through it.
    """

    def __init__(
        self,
        fleet: FleetRegistry,
        customers: CustomerRegistry,
        rentals: Optional[List[RentalAgreement]] = None,
        clock: Callable[[], date] = date.today,
        settings: Optional[Settings] = None,
    ):
        self.fleet = fleet
        self.customers = customers
        self._rentals: List[RentalAgreement] = []
        self._clock = clock
        self._settings = settings or get_settings()
        for rental in rentals or []:
            if self.find(rental.id) is not None:
                logger.warning("Skipping rental record: rental %s already exists", rental.id)
                continue
            self._rentals.append(rental)

    def __len__(self) -> int:
        return len(self._rentals)

    def today(self) -> date:
        return self._clock()

    # Lifecycle

    def create(
        self,
        customer_id: str,
        vehicle_id: str,
        start: date,
        end: date,
        daily_rate: Optional[float] = None,
    ) -> RentalAgreement:
        """
        Rent ``vehicle_id`` to ``customer_id`` from ``start`` to ``end``.

        All checks run before anything is changed: the vehicle is marked
        rented only together with the new agreement being recorded.
        """
        customer = self.customers.get(customer_id)
        vehicle = self.fleet.get(vehicle_id)
        if not vehicle.available:
            raise RentalStateError(f"Vehicle {vehicle.id} is not available")

        today = self.today()
        if start < today:
            raise ValidationError("Start date cannot be in the past")
        if end <= start:
            raise ValidationError("End date must be after the start date")

        rate = self._settings.default_daily_rate if daily_rate is None else daily_rate
        rate = round(rate, 2)
        if rate <= 0:
            raise ValidationError("Daily rate must be at least 0.01")

        rental = RentalAgreement(
            id=self.next_id(),
            customer_id=customer.id,
            vehicle_id=vehicle.id,
            start_date=start,
            end_date=end,
            daily_rate=rate,
        )

        if not vehicle.rent(customer.id, start, end, today=today):
            raise RentalStateError(f"Vehicle {vehicle.id} could not be rented")
        self._rentals.append(rental)

        logger.info(
            "Created rental %s: %s -> %s (%s to %s, %.2f)",
            rental.id, customer.id, vehicle.id, start, end, rental.total_cost,
        )
        return rental

    def complete(self, rental_id: str, return_date: Optional[date] = None) -> RentalAgreement:
        """
        Close an active rental, release its vehicle and settle the final cost.

        Returning after the planned end date adds a late fee of half the daily
        rate for every day of overrun.
        """
        rental = self.get(rental_id)
        if not rental.is_active:
            raise RentalStateError(
                f"Rental {rental.id} is {rental.status.value.lower()}, not active"
            )
        return_date = return_date or self.today()
        vehicle = self.fleet.find(rental.vehicle_id)
        if vehicle is None:
            logger.warning("Rental %s refers to missing vehicle %s", rental.id, rental.vehicle_id)
        else:
            vehicle.return_item()
        rental.complete(return_date)

        if rental.late_days:
            logger.info(
                "Rental %s returned %d day(s) late, late fee %.2f",
                rental.id, rental.late_days, rental.late_fee,
            )
        logger.info("Completed rental %s, total %.2f", rental.id, rental.total_cost)
        return rental

    def cancel(self, rental_id: str, reason: Optional[str] = None) -> RentalAgreement:
        """
        Cancel a rental that has not been completed.

        Cancelling an active rental releases its vehicle; cancelling one that
        is already cancelled only replaces the reason.
        """
        rental = self.get(rental_id)
        if rental.status == RentalStatus.COMPLETED:
            raise RentalStateError(f"Rental {rental.id} is already completed")

        if rental.is_active:
            vehicle = self.fleet.find(rental.vehicle_id)
            if vehicle is not None:
                vehicle.return_item()
        rental.cancel(reason)

        logger.info("Cancelled rental %s: %s", rental.id, rental.notes)
        return rental

    def synchronize(self) -> int:
        """
        Bring vehicle occupancy back in line with the active rentals.

        A vehicle that is available while an active rental references it is
        marked rented again; only these count as repairs. A rented vehicle
        missing its rental dates, as every rented vehicle is after loading,
        gets them from its active rental. Dangling vehicle or customer
        references are left as they are.
        """
        repaired = 0
        for rental in self.active():
            vehicle = self.fleet.find(rental.vehicle_id)
            if vehicle is None:
                continue
            if vehicle.available:
                vehicle.restore_occupancy(rental.customer_id, rental.start_date, rental.end_date)
                repaired += 1
            elif vehicle.current_renter == rental.customer_id and vehicle.rental_start is None:
                vehicle.restore_occupancy(rental.customer_id, rental.start_date, rental.end_date)
                logger.debug("Restored rental dates of vehicle %s from %s", vehicle.id, rental.id)

        if repaired:
            logger.warning("Synchronized %d vehicle(s) with active rentals", repaired)
        return repaired

    def purge_completed(self) -> int:
        """Drop completed rentals from the ledger."""
        before = len(self._rentals)
        self._rentals = [r for r in self._rentals if r.status != RentalStatus.COMPLETED]
        removed = before - len(self._rentals)
        logger.info("Purged %d completed rental(s)", removed)
        return removed

    # Queries

    def find(self, rental_id: str) -> Optional[RentalAgreement]:
        key = rental_id.strip().lower()
        return next((r for r in self._rentals if r.id.lower() == key), None)

    def get(self, rental_id: str) -> RentalAgreement:
        rental = self.find(rental_id)
        if rental is None:
            raise NotFoundError(f"Rental {rental_id} not found")
        return rental

    def all(self) -> List[RentalAgreement]:
        return list(self._rentals)

    def active(self) -> List[RentalAgreement]:
        return [r for r in self._rentals if r.is_active]

    def completed(self) -> List[RentalAgreement]:
        return [r for r in self._rentals if r.status == RentalStatus.COMPLETED]

    def cancelled(self) -> List[RentalAgreement]:
        return [r for r in self._rentals if r.status == RentalStatus.CANCELLED]

    def overdue(self) -> List[RentalAgreement]:
        today = self.today()
        return [r for r in self._rentals if r.is_overdue(today)]

    def by_customer(self, customer_id: str) -> List[RentalAgreement]:
        key = customer_id.strip().upper()
        return [r for r in self._rentals if r.customer_id == key]

    def by_vehicle(self, vehicle_id: str) -> List[RentalAgreement]:
        key = vehicle_id.strip().upper()
        return [r for r in self._rentals if r.vehicle_id == key]

    def next_id(self) -> str:
        return next_identifier(RENTAL_PREFIX, (r.id for r in self._rentals))

    def statistics(self) -> Dict[str, object]:
        completed = self.completed()
        revenue = sum(r.total_cost for r in completed)
        return {
            "total": len(self._rentals),
            "active": len(self.active()),
            "completed": len(completed),
            "cancelled": len(self.cancelled()),
            "overdue": len(self.overdue()),
            "total_revenue": revenue,
            "average_cost": revenue / len(completed) if completed else 0.0,
            "average_duration": (
                sum(r.actual_days for r in completed) / len(completed) if completed else 0.0
            ),
        }
