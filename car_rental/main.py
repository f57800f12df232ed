"""
Console entry point for the Car Rental Manager.
"""
import logging
import sys
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from car_rental.config import Settings, get_settings
from car_rental.exceptions import RentalSystemError
from car_rental.models import Customer, RentalAgreement, Vehicle
from car_rental.schemas import CustomerCreate, CustomerUpdate, VehicleCreate, VehicleUpdate
from car_rental.services import CustomerRegistry, FleetRegistry, RentalLedger
from car_rental.storage import DataStore

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    if settings.debug:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def describe_error(error: Exception) -> str:
    if isinstance(error, PydanticValidationError):
        return "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" if err["loc"] else err["msg"]
            for err in error.errors()
        )
    return str(error)


def truncate(value: Optional[str], width: int) -> str:
    if not value:
        return "-"
    return value if len(value) <= width else value[:width - 3] + "..."


def print_table(title: str, headers: Sequence[str], widths: Sequence[int], rows: List[Sequence]) -> None:
    print(f"\n=== {title} ===")
    if not rows:
        print("  (none)")
        return
    print("  ".join(f"{h:<{w}}" for h, w in zip(headers, widths)))
    print("  ".join("-" * w for w in widths))
    for row in rows:
        print("  ".join(f"{truncate(None if c is None else str(c), w):<{w}}" for c, w in zip(row, widths)))
    print(f"Total: {len(rows)}")


def show_vehicles(title: str, vehicles: List[Vehicle]) -> None:
    print_table(
        title,
        ("ID", "Make", "Model", "Year", "Type", "Status", "Renter"),
        (5, 12, 15, 5, 12, 10, 10),
        [(v.id, v.make, v.model, v.year, v.category, v.status, v.current_renter) for v in vehicles],
    )


def show_customers(title: str, customers: List[Customer]) -> None:
    print_table(
        title,
        ("ID", "Name", "Email", "Phone", "License", "Registered"),
        (8, 20, 25, 17, 12, 10),
        [(c.id, c.name, c.email, c.phone, c.license_number, c.registration_date) for c in customers],
    )


def show_rentals(title: str, rentals: List[RentalAgreement], today: date) -> None:
    rows = []
    for r in rentals:
        status = r.status.value
        if r.is_overdue(today):
            status += f" (LATE {r.days_overdue(today)}d)"
        rows.append((r.id, r.customer_id, r.vehicle_id, r.start_date, r.end_date,
                     f"{r.total_cost:.2f}", status, r.actual_days))
    print_table(
        title,
        ("Rental", "Customer", "Car", "Start", "End", "Cost", "Status", "Days"),
        (6, 8, 5, 10, 10, 9, 20, 4),
        rows,
    )


class RentalConsole:
    """Menu-driven front end over the registries, the ledger and the data store."""

    def __init__(self, store: DataStore, settings: Settings,
                 input_func: Callable[[str], str] = input):
        self.store = store
        self.settings = settings
        self._input = input_func
        self.fleet = FleetRegistry()
        self.customers = CustomerRegistry()
        self.ledger = RentalLedger(self.fleet, self.customers, settings=settings)

    # -- Data -----------------------------------------------------------------

    def load(self) -> None:
        data = self.store.read_all()
        self.fleet = FleetRegistry(data.vehicles)
        self.customers = CustomerRegistry(data.customers)
        self.ledger = RentalLedger(self.fleet, self.customers, data.rentals, settings=self.settings)
        self.ledger.synchronize()
        print(f"✅ Loaded {len(self.fleet)} cars, {len(self.customers)} customers, "
              f"{len(self.ledger)} rentals")

    def save(self) -> None:
        self.store.write_all(self.fleet.all(), self.customers.all(), self.ledger.all())
        print(f"✅ Data saved to {self.store.path}")

    # -- Prompts --------------------------------------------------------------

    def ask(self, prompt: str, default: Optional[str] = None) -> str:
        suffix = f" [{default}]" if default else ""
        answer = self._input(f"{prompt}{suffix}: ").strip()
        return answer or (default or "")

    def ask_date(self, prompt: str, default: Optional[date] = None) -> date:
        answer = self.ask(f"{prompt} (YYYY-MM-DD)", default.isoformat() if default else None)
        try:
            return date.fromisoformat(answer)
        except ValueError:
            raise RentalSystemError(f"'{answer}' is not a valid date") from None

    def ask_yes_no(self, prompt: str) -> bool:
        return self.ask(f"{prompt} (y/n)").lower() in ("y", "yes")

    def optional(self, prompt: str) -> Optional[str]:
        return self.ask(f"{prompt} (blank to keep)") or None

    # -- Actions --------------------------------------------------------------

    def add_vehicle(self) -> None:
        data = VehicleCreate(
            make=self.ask("Make (e.g. Toyota)"),
            model=self.ask("Model (e.g. Camry)"),
            year=int(self.ask("Year") or 0),
            category=self.ask("Type (Sedan/SUV/Hatchback/Coupe/Convertible/Wagon/Pickup)"),
        )
        print(f"✅ Added {self.fleet.create(data)}")

    def edit_vehicle(self) -> None:
        vehicle = self.fleet.get(self.ask("Car ID"))
        year = self.optional("Year")
        changes = VehicleUpdate(
            make=self.optional("Make"),
            model=self.optional("Model"),
            year=int(year) if year else None,
            category=self.optional("Type"),
            force_available=not vehicle.available and self.ask_yes_no("Force available"),
        )
        print(f"✅ Updated {self.fleet.edit(vehicle.id, changes)}")

    def remove_vehicle(self) -> None:
        vehicle = self.fleet.get(self.ask("Car ID"))
        force = not vehicle.available and self.ask_yes_no("Car is rented, remove anyway")
        if self.ask_yes_no(f"Remove {vehicle.id}"):
            print(f"✅ Removed {self.fleet.remove(vehicle.id, force=force)}")

    def search_vehicles(self) -> None:
        show_vehicles("Search results", self.fleet.search(self.ask("Search term")))

    def add_customer(self) -> None:
        data = CustomerCreate(
            name=self.ask("Full name"),
            email=self.ask("Email"),
            phone=self.ask("Phone (+359 XXX XXX XXX)"),
            license_number=self.ask("Driver's license"),
        )
        print(f"✅ Added {self.customers.create(data)}")

    def edit_customer(self) -> None:
        customer = self.customers.get(self.ask("Customer ID"))
        changes = CustomerUpdate(
            name=self.optional("Name"),
            email=self.optional("Email"),
            phone=self.optional("Phone"),
            license_number=self.optional("License"),
        )
        print(f"✅ Updated {self.customers.edit(customer.id, changes)}")

    def remove_customer(self) -> None:
        customer = self.customers.get(self.ask("Customer ID"))
        if self.ask_yes_no(f"Remove {customer.id} (rental history is kept)"):
            print(f"✅ Removed {self.customers.remove(customer.id)}")

    def search_customers(self) -> None:
        show_customers("Search results", self.customers.search(self.ask("Search term")))

    def create_rental(self) -> None:
        show_vehicles("Available cars", self.fleet.available())
        vehicle_id = self.ask("Car ID")
        customer_id = self.ask("Customer ID")
        today = self.ledger.today()
        start = self.ask_date("Start date", today)
        end = self.ask_date("End date")
        rate = self.ask("Daily rate", f"{self.settings.default_daily_rate:.2f}")
        rental = self.ledger.create(customer_id, vehicle_id, start, end, float(rate))
        print(f"✅ Created {rental}")

    def complete_rental(self) -> None:
        show_rentals("Active rentals", self.ledger.active(), self.ledger.today())
        rental_id = self.ask("Rental ID")
        return_date = self.ask_date("Return date", self.ledger.today())
        rental = self.ledger.complete(rental_id, return_date)
        if rental.late_days:
            print(f"⚠️  Returned {rental.late_days} day(s) late, late fee ${rental.late_fee:.2f}")
        print(f"✅ Completed {rental}")

    def cancel_rental(self) -> None:
        rental_id = self.ask("Rental ID")
        rental = self.ledger.cancel(rental_id, self.ask("Reason", "Cancelled"))
        print(f"✅ Cancelled {rental}")

    def show_reports(self) -> None:
        fleet = self.fleet.statistics()
        customers = self.customers.statistics()
        rentals = self.ledger.statistics()
        print("\n=== Reports ===")
        print(f"Cars: {fleet['total']} ({fleet['available']} available, {fleet['rented']} rented)")
        for make, count in sorted(fleet["by_make"].items()):
            print(f"  {make}: {count}")
        print(f"Customers: {customers['total']} "
              f"({customers['recent_registrations']} in the last 30 days)")
        print(f"Rentals: {rentals['total']} ({rentals['active']} active, "
              f"{rentals['completed']} completed, {rentals['cancelled']} cancelled, "
              f"{rentals['overdue']} overdue)")
        print(f"Revenue: ${rentals['total_revenue']:.2f} "
              f"(average ${rentals['average_cost']:.2f} over "
              f"{rentals['average_duration']:.1f} days)")
        for issue in self.customers.validate():
            print(f"⚠️  {issue}")

    def maintenance(self) -> None:
        repaired = self.ledger.synchronize()
        print(f"✅ Synchronized {repaired} car(s) with active rentals")
        if self.ask_yes_no("Purge completed rentals"):
            print(f"✅ Purged {self.ledger.purge_completed()} rental(s)")

    def restore_backup(self) -> None:
        if self.ask_yes_no("Replace the data file with its backup and reload"):
            self.store.restore_from_backup()
            self.load()

    # -- Menu -----------------------------------------------------------------

    def actions(self) -> Dict[str, tuple]:
        today = self.ledger.today
        return {
            "1": ("List cars", lambda: show_vehicles("All cars", self.fleet.all())),
            "2": ("Add car", self.add_vehicle),
            "3": ("Edit car", self.edit_vehicle),
            "4": ("Remove car", self.remove_vehicle),
            "5": ("Search cars", self.search_vehicles),
            "6": ("List customers", lambda: show_customers("All customers", self.customers.all())),
            "7": ("Add customer", self.add_customer),
            "8": ("Edit customer", self.edit_customer),
            "9": ("Remove customer", self.remove_customer),
            "10": ("Search customers", self.search_customers),
            "11": ("List rentals", lambda: show_rentals("All rentals", self.ledger.all(), today())),
            "12": ("Overdue rentals", lambda: show_rentals("Overdue", self.ledger.overdue(), today())),
            "13": ("Create rental", self.create_rental),
            "14": ("Complete rental", self.complete_rental),
            "15": ("Cancel rental", self.cancel_rental),
            "16": ("Reports", self.show_reports),
            "17": ("Maintenance", self.maintenance),
            "18": ("Save", self.save),
            "19": ("Restore backup", self.restore_backup),
        }

    def run(self) -> None:
        print("=" * 60)
        print(f"🚗 {self.settings.app_name.upper()} v{self.settings.app_version}")
        print("=" * 60)
        self.load()

        while True:
            actions = self.actions()
            print()
            for key, (label, _) in actions.items():
                print(f"{key:>3}. {label}")
            print("  0. Save and exit")

            choice = self.ask("Choose option")
            if choice == "0":
                try:
                    self.save()
                except RentalSystemError as e:
                    print(f"❌ {e}")
                    if not self.ask_yes_no("Exit without saving"):
                        continue
                print("👋 Goodbye")
                return

            action = actions.get(choice)
            if action is None:
                print("❌ Invalid choice")
                continue
            try:
                action[1]()
            except (RentalSystemError, PydanticValidationError, ValueError) as e:
                print(f"❌ {describe_error(e)}")


def main() -> int:
    settings = get_settings()
    configure_logging(settings)
    store = DataStore(settings.data_file, settings.backup_suffix)
    if store.create_initial_file():
        print(f"📊 Created sample data file at {store.path}")

    console = RentalConsole(store, settings)
    try:
        console.run()
    except (KeyboardInterrupt, EOFError):
        print("\n👋 Exiting without saving")
    return 0


if __name__ == "__main__":
    sys.exit(main())
