"""
Pydantic schemas for operator input.
"""
from car_rental.schemas.customer import CustomerCreate, CustomerUpdate
from car_rental.schemas.vehicle import VehicleCreate, VehicleUpdate

__all__ = ["CustomerCreate", "CustomerUpdate", "VehicleCreate", "VehicleUpdate"]
