"""
Flat-file persistence for vehicles, customers and rentals.

All three collections share one comma-delimited text file, one record per
line, each line starting with its record type::

    CAR,<id>,<make>,<model>,<year>,<category>,<Available|Rented>,<renter>
    CUSTOMER,<id>,<name>,<email>,<phone>,<license>,<registered>
    RENTAL,<id>,<customer>,<car>,<start>,<end>,<returned>,<rate>,<total>,<status>,<notes>

Lines starting with ``#`` are comments. Commas inside rental notes are
written as semicolons.
"""
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional, Union

from car_rental.config import get_settings
from car_rental.exceptions import StorageError
from car_rental.models.customer import Customer
from car_rental.models.rental import RentalAgreement
from car_rental.models.vehicle import STATUS_AVAILABLE, STATUS_RENTED, Vehicle

logger = logging.getLogger(__name__)

CAR_TAG = "CAR"
CUSTOMER_TAG = "CUSTOMER"
RENTAL_TAG = "RENTAL"

DELIMITER = ","
NOTES_ESCAPE = ";"

SAMPLE_CARS = (
    "CAR,C001,Toyota,Camry,2023,Sedan,Available,",
    "CAR,C002,Honda,Civic,2022,Sedan,Available,",
    "CAR,C003,Ford,Explorer,2024,SUV,Available,",
)


@dataclass
class DataSet:
    """Everything read from the data file."""
    vehicles: List[Vehicle] = field(default_factory=list)
    customers: List[Customer] = field(default_factory=list)
    rentals: List[RentalAgreement] = field(default_factory=list)


# -- Line codec ---------------------------------------------------------------

def format_vehicle(vehicle: Vehicle) -> str:
    return DELIMITER.join([
        CAR_TAG,
        vehicle.id,
        vehicle.make,
        vehicle.model,
        str(vehicle.year),
        vehicle.category,
        vehicle.status,
        vehicle.current_renter or "",
    ])


def format_customer(customer: Customer) -> str:
    return DELIMITER.join([
        CUSTOMER_TAG,
        customer.id,
        customer.name,
        customer.email,
        customer.phone,
        customer.license_number,
        customer.registration_date.isoformat(),
    ])


def format_rental(rental: RentalAgreement) -> str:
    return DELIMITER.join([
        RENTAL_TAG,
        rental.id,
        rental.customer_id,
        rental.vehicle_id,
        rental.start_date.isoformat(),
        rental.end_date.isoformat(),
        rental.actual_return_date.isoformat() if rental.actual_return_date else "",
        f"{rental.daily_rate:.2f}",
        f"{rental.total_cost:.2f}",
        rental.status.value,
        rental.notes.replace(DELIMITER, NOTES_ESCAPE),
    ])


def parse_vehicle(parts: List[str]) -> Vehicle:
    if len(parts) < 6:
        raise ValueError(f"expected at least 6 fields, got {len(parts)}")

    status = parts[6].strip() if len(parts) > 6 else STATUS_AVAILABLE
    renter = parts[7].strip() if len(parts) > 7 else ""
    rented = status.lower() == STATUS_RENTED.lower()

    if rented and not renter:
        logger.warning("Vehicle %s is marked rented without a renter, loading it as available",
                       parts[1].strip())
        rented = False
    elif renter and not rented:
        logger.warning("Vehicle %s is available but names renter %s, ignoring the renter",
                       parts[1].strip(), renter)

    return Vehicle(
        id=parts[1],
        make=parts[2],
        model=parts[3],
        year=int(parts[4]),
        category=parts[5],
        available=not rented,
        current_renter=renter if rented else None,
    )


def parse_customer(parts: List[str]) -> Customer:
    if len(parts) < 7:
        raise ValueError(f"expected 7 fields, got {len(parts)}")

    return Customer(
        id=parts[1],
        name=parts[2],
        email=parts[3].strip(),
        phone=parts[4],
        license_number=parts[5],
        registration_date=date.fromisoformat(parts[6].strip()),
    )


def parse_rental(parts: List[str]) -> RentalAgreement:
    if len(parts) < 10:
        raise ValueError(f"expected at least 10 fields, got {len(parts)}")

    returned = parts[6].strip()
    rental = RentalAgreement(
        id=parts[1],
        customer_id=parts[2],
        vehicle_id=parts[3],
        start_date=date.fromisoformat(parts[4].strip()),
        end_date=date.fromisoformat(parts[5].strip()),
        actual_return_date=date.fromisoformat(returned) if returned else None,
        daily_rate=float(parts[7]),
        status=parts[9].strip().upper(),
        notes=parts[10].replace(NOTES_ESCAPE, DELIMITER) if len(parts) > 10 else "",
    )

    stored_total = float(parts[8])
    if abs(stored_total - rental.total_cost) >= 0.005:
        logger.warning("Rental %s stored total %.2f, recomputed %.2f",
                       rental.id, stored_total, rental.total_cost)
    return rental


# -- Data store ---------------------------------------------------------------

class DataStore:
    """
    Reads and writes the data file, keeping a copy of the previous version
    next to it so a bad save can be undone with :meth:`restore_from_backup`.
    """

    def __init__(self, path: Union[str, Path, None] = None, backup_suffix: Optional[str] = None):
        settings = get_settings()
        self.path = Path(path) if path is not None else Path(settings.data_file)
        suffix = backup_suffix if backup_suffix is not None else settings.backup_suffix
        self.backup_path = self.path.with_name(self.path.name + suffix)

    def exists(self) -> bool:
        return self.path.exists()

    def read_all(self) -> DataSet:
        """
        Load every record in the file.

        Unknown record types and lines that fail to decode or parse are
        logged and skipped. A missing or unreadable file gives an empty data set.
        """
        data = DataSet()
        if not self.path.exists():
            logger.info("No data file at %s, starting empty", self.path)
            return data

        try:
            content = self.path.read_bytes()
        except OSError as e:
            logger.error("Error reading %s: %s", self.path, e)
            return data

        for number, raw in enumerate(content.splitlines(), start=1):
            try:
                line = raw.decode("utf-8").strip()
            except UnicodeDecodeError as e:
                logger.warning("Line %d: skipping undecodable line: %s", number, e)
                continue
            if not line or line.startswith("#"):
                continue

            parts = line.split(DELIMITER)
            tag = parts[0].strip().upper()
            try:
                if tag == CAR_TAG:
                    data.vehicles.append(parse_vehicle(parts))
                elif tag == CUSTOMER_TAG:
                    data.customers.append(parse_customer(parts))
                elif tag == RENTAL_TAG:
                    data.rentals.append(parse_rental(parts))
                else:
                    logger.warning("Line %d: unknown record type '%s'", number, parts[0])
            except (ValueError, IndexError) as e:
                logger.warning("Line %d: skipping malformed %s record: %s", number, tag, e)

        logger.info(
            "Loaded %d vehicles, %d customers, %d rentals from %s",
            len(data.vehicles), len(data.customers), len(data.rentals), self.path,
        )
        return data

    def write_all(
        self,
        vehicles: Iterable[Vehicle],
        customers: Iterable[Customer],
        rentals: Iterable[RentalAgreement],
    ) -> None:
        """
        Replace the data file with the given collections.

        The previous file is copied to the backup first. The new content goes
        to a temporary file that is renamed over the data file, so a failed
        save leaves the old file in place.
        """
        lines = [
            "# Car Rental System Data File",
            "# Format: RecordType,Data1,Data2,Data3,...",
            f"# Generated on: {date.today().isoformat()}",
        ]
        lines.extend(format_vehicle(v) for v in vehicles)
        lines.extend(format_customer(c) for c in customers)
        lines.extend(format_rental(r) for r in rentals)

        self.create_backup()
        self._replace(lines)
        logger.info("Saved %d records to %s", len(lines) - 3, self.path)

    def create_backup(self) -> bool:
        """Copy the data file to the backup path. Failures are only logged."""
        if not self.path.exists():
            return False
        try:
            shutil.copyfile(self.path, self.backup_path)
        except OSError as e:
            logger.error("Error creating backup %s: %s", self.backup_path, e)
            return False
        logger.debug("Backed up %s to %s", self.path, self.backup_path)
        return True

    def restore_from_backup(self) -> None:
        """Copy the backup over the data file."""
        if not self.backup_path.exists():
            raise StorageError(f"No backup file found at {self.backup_path}")
        try:
            shutil.copyfile(self.backup_path, self.path)
        except OSError as e:
            raise StorageError(f"Error restoring from backup: {e}") from e
        logger.info("Restored %s from %s", self.path, self.backup_path)

    def create_initial_file(self) -> bool:
        """Seed a new data file with a few sample cars. Returns False if one exists."""
        if self.exists():
            return False
        self._replace([
            "# Car Rental System - Initial Data File",
            "# Format: RecordType,Data1,Data2,Data3,...",
            f"# Generated on: {date.today().isoformat()}",
            *SAMPLE_CARS,
        ])
        logger.info("Created initial data file %s", self.path)
        return True

    def _replace(self, lines: List[str]) -> None:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.path.parent,
                prefix=f".{self.path.name}.", suffix=".tmp", delete=False,
            ) as fh:
                tmp_name = fh.name
                fh.write("\n".join(lines) + "\n")
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Error writing {self.path}: {e}") from e
