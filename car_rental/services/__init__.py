"""
In-memory registries and the rental ledger.
"""
from car_rental.services.customers import CustomerRegistry
from car_rental.services.fleet import FleetRegistry
from car_rental.services.ledger import RentalLedger

__all__ = ["CustomerRegistry", "FleetRegistry", "RentalLedger"]
