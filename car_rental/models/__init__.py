"""
Domain models: vehicles, customers and rental agreements.
"""
from car_rental.models.vehicle import Vehicle
from car_rental.models.customer import Customer
from car_rental.models.rental import RentalAgreement, RentalStatus

__all__ = ["Vehicle", "Customer", "RentalAgreement", "RentalStatus"]
