"""
Fleet registry.
"""
import logging
from collections import Counter
from typing import Dict, List, Optional

from car_rental.exceptions import DuplicateError, NotFoundError, RentalStateError
from car_rental.identifiers import VEHICLE_PREFIX, next_identifier
from car_rental.models.vehicle import Vehicle
from car_rental.schemas.vehicle import VehicleCreate, VehicleUpdate

logger = logging.getLogger(__name__)


class FleetRegistry:
    """In-memory collection of the vehicles owned by the business."""

    def __init__(self, vehicles: Optional[List[Vehicle]] = None):
        self._vehicles: List[Vehicle] = []
        for vehicle in vehicles or []:
            try:
                self._check_unique(vehicle)
            except DuplicateError as e:
                logger.warning("Skipping vehicle record: %s", e)
                continue
            self._vehicles.append(vehicle)

    def __len__(self) -> int:
        return len(self._vehicles)

    def add(self, vehicle: Vehicle) -> Vehicle:
        """Add a vehicle, rejecting an identifier already in the fleet."""
        self._check_unique(vehicle)
        self._vehicles.append(vehicle)
        logger.info("Added vehicle %s", vehicle.id)
        return vehicle

    def _check_unique(self, vehicle: Vehicle) -> None:
        if self.find(vehicle.id) is not None:
            raise DuplicateError(f"Vehicle {vehicle.id} already exists")

    def create(self, data: VehicleCreate) -> Vehicle:
        """Register a new vehicle under the next free identifier."""
        vehicle = Vehicle(id=self.next_id(), **data.model_dump())
        return self.add(vehicle)

    def find(self, vehicle_id: str) -> Optional[Vehicle]:
        for vehicle in self._vehicles:
            if vehicle.matches_id(vehicle_id):
                return vehicle
        return None

    def get(self, vehicle_id: str) -> Vehicle:
        vehicle = self.find(vehicle_id)
        if vehicle is None:
            raise NotFoundError(f"Vehicle {vehicle_id} not found")
        return vehicle

    def edit(self, vehicle_id: str, changes: VehicleUpdate) -> Vehicle:
        """
        Update descriptive fields of a vehicle.

        Occupancy is never edited directly; ``force_available`` releases a
        rented vehicle through :meth:`Vehicle.return_item`.
        """
        vehicle = self.get(vehicle_id)

        update_data = changes.model_dump(exclude_unset=True, exclude={"force_available"})
        for field, value in update_data.items():
            if value is not None:
                setattr(vehicle, field, value)

        if changes.force_available and vehicle.return_item():
            logger.warning("Vehicle %s forced back to available", vehicle.id)

        logger.info("Updated vehicle %s", vehicle.id)
        return vehicle

    def remove(self, vehicle_id: str, force: bool = False) -> Vehicle:
        """Remove a vehicle. Rented vehicles are kept unless ``force`` is set."""
        vehicle = self.get(vehicle_id)
        if not vehicle.available and not force:
            raise RentalStateError(
                f"Vehicle {vehicle.id} is rented by {vehicle.current_renter}"
            )

        self._vehicles.remove(vehicle)
        logger.info("Removed vehicle %s", vehicle.id)
        return vehicle

    def all(self) -> List[Vehicle]:
        return list(self._vehicles)

    def available(self) -> List[Vehicle]:
        return [vehicle for vehicle in self._vehicles if vehicle.available]

    def rented(self) -> List[Vehicle]:
        return [vehicle for vehicle in self._vehicles if not vehicle.available]

    def search(self, term: Optional[str]) -> List[Vehicle]:
        """Case-insensitive search over all text fields; blank returns everything."""
        if term is None or not term.strip():
            return self.all()
        return [vehicle for vehicle in self._vehicles if vehicle.matches_search_term(term)]

    def search_by_id(self, vehicle_id: str) -> List[Vehicle]:
        return [vehicle for vehicle in self._vehicles if vehicle.matches_id(vehicle_id)]

    def search_by_make(self, make: str) -> List[Vehicle]:
        return [vehicle for vehicle in self._vehicles if vehicle.matches_make(make)]

    def search_by_model(self, model: str) -> List[Vehicle]:
        return [vehicle for vehicle in self._vehicles if vehicle.matches_model(model)]

    def search_by_status(self, status: str) -> List[Vehicle]:
        return [vehicle for vehicle in self._vehicles if vehicle.matches_status(status)]

    def next_id(self) -> str:
        return next_identifier(VEHICLE_PREFIX, (vehicle.id for vehicle in self._vehicles))

    def statistics(self) -> Dict[str, object]:
        return {
            "total": len(self._vehicles),
            "available": len(self.available()),
            "rented": len(self.rented()),
            "by_make": dict(Counter(vehicle.make for vehicle in self._vehicles)),
            "by_category": dict(Counter(vehicle.category for vehicle in self._vehicles)),
        }
