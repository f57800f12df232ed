import unittest
from datetime import date

from car_rental.config import Settings
from car_rental.exceptions import NotFoundError, RentalStateError, ValidationError
from car_rental.models import Customer, RentalAgreement, RentalStatus, Vehicle
from car_rental.services import CustomerRegistry, FleetRegistry, RentalLedger

TODAY = date(2024, 1, 1)


class LedgerTestCase(unittest.TestCase):
    """Two cars, two customers and a ledger whose clock is pinned to TODAY."""

    def setUp(self):
        self.today = TODAY
        self.fleet = FleetRegistry([
            Vehicle(id="C001", make="Toyota", model="Camry", year=2023, category="Sedan"),
            Vehicle(id="C002", make="BMW", model="X5", year=2024, category="SUV"),
        ])
        self.customers = CustomerRegistry([
            Customer(id="CUST001", name="Georgi Petrov", email="georgi.petrov@mail.bg",
                     phone="+359 888 123 456", license_number="BG1234567"),
            Customer(id="CUST002", name="Maria Ivanova", email="maria.ivanova@abv.bg",
                     phone="+359 887 234 567", license_number="BG2345678"),
        ])
        self.ledger = RentalLedger(
            self.fleet, self.customers,
            clock=lambda: self.today,
            settings=Settings(default_daily_rate=50.0),
        )

    def assertUnchanged(self):
        self.assertEqual(len(self.ledger), 0)
        for vehicle in self.fleet.all():
            self.assertTrue(vehicle.available)
            self.assertIsNone(vehicle.current_renter)


class TestCreateRental(LedgerTestCase):

    def test_create_rents_vehicle_and_records_agreement(self):
        rental = self.ledger.create("CUST001", "C001", date(2024, 1, 1), date(2024, 1, 5))
        vehicle = self.fleet.get("C001")

        self.assertEqual(rental.id, "R001")
        self.assertEqual(rental.status, RentalStatus.ACTIVE)
        self.assertEqual(rental.daily_rate, 50.0)
        self.assertEqual(rental.total_cost, 200.0)
        self.assertFalse(vehicle.available)
        self.assertEqual(vehicle.current_renter, "CUST001")
        self.assertEqual(vehicle.rental_end, date(2024, 1, 5))
        self.assertEqual(self.ledger.all(), [rental])

    def test_custom_rate_and_case_insensitive_ids(self):
        rental = self.ledger.create("cust002", "c002", date(2024, 1, 3), date(2024, 1, 4), 80)
        self.assertEqual(rental.customer_id, "CUST002")
        self.assertEqual(rental.vehicle_id, "C002")
        self.assertEqual(rental.total_cost, 80.0)

    def test_unknown_customer(self):
        with self.assertRaises(NotFoundError):
            self.ledger.create("CUST099", "C001", date(2024, 1, 1), date(2024, 1, 5))
        self.assertUnchanged()

    def test_unknown_vehicle(self):
        with self.assertRaises(NotFoundError):
            self.ledger.create("CUST001", "C099", date(2024, 1, 1), date(2024, 1, 5))
        self.assertUnchanged()

    def test_start_in_past(self):
        with self.assertRaises(ValidationError):
            self.ledger.create("CUST001", "C001", date(2023, 12, 31), date(2024, 1, 5))
        self.assertUnchanged()

    def test_end_must_follow_start(self):
        with self.assertRaises(ValidationError):
            self.ledger.create("CUST001", "C001", date(2024, 1, 5), date(2024, 1, 5))
        with self.assertRaises(ValidationError):
            self.ledger.create("CUST001", "C001", date(2024, 1, 5), date(2024, 1, 2))
        self.assertUnchanged()

    def test_bad_rate(self):
        with self.assertRaises(ValidationError):
            self.ledger.create("CUST001", "C001", date(2024, 1, 1), date(2024, 1, 5), 0)
        self.assertUnchanged()

    def test_rate_that_rounds_to_zero_is_rejected(self):
        """The rate is checked after rounding to cents, as it is stored"""
        with self.assertRaises(ValidationError):
            self.ledger.create("CUST001", "C001", date(2024, 1, 1), date(2024, 1, 5), 0.004)
        self.assertUnchanged()

        rental = self.ledger.create("CUST001", "C001", date(2024, 1, 1), date(2024, 1, 5), 0.006)
        self.assertEqual(rental.daily_rate, 0.01)

    def test_vehicle_cannot_be_double_booked(self):
        self.ledger.create("CUST001", "C001", date(2024, 1, 1), date(2024, 1, 5))
        with self.assertRaises(RentalStateError):
            self.ledger.create("CUST002", "C001", date(2024, 1, 10), date(2024, 1, 12))
        self.assertEqual(len(self.ledger), 1)
        self.assertEqual(self.fleet.get("C001").current_renter, "CUST001")

    def test_ids_increase(self):
        self.ledger.create("CUST001", "C001", date(2024, 1, 1), date(2024, 1, 5))
        second = self.ledger.create("CUST002", "C002", date(2024, 1, 1), date(2024, 1, 5))
        self.assertEqual(second.id, "R002")


class TestCompleteRental(LedgerTestCase):

    def setUp(self):
        super().setUp()
        self.rental = self.ledger.create("CUST001", "C001", date(2024, 1, 1), date(2024, 1, 5))

    def test_complete_on_time(self):
        rental = self.ledger.complete("R001", date(2024, 1, 5))
        self.assertEqual(rental.status, RentalStatus.COMPLETED)
        self.assertEqual(rental.actual_return_date, date(2024, 1, 5))
        self.assertEqual(rental.total_cost, 200.0)
        self.assertTrue(self.fleet.get("C001").available)

    def test_complete_late(self):
        rental = self.ledger.complete("R001", date(2024, 1, 8))
        self.assertEqual(rental.actual_days, 7)
        self.assertEqual(rental.late_fee, 75.0)
        self.assertEqual(rental.total_cost, 425.0)

    def test_complete_defaults_to_today(self):
        self.today = date(2024, 1, 3)
        rental = self.ledger.complete("R001")
        self.assertEqual(rental.actual_return_date, date(2024, 1, 3))
        self.assertEqual(rental.total_cost, 100.0)

    def test_complete_twice_fails_without_change(self):
        self.ledger.complete("R001", date(2024, 1, 5))
        self.ledger.create("CUST002", "C001", date(2024, 1, 6), date(2024, 1, 9))

        with self.assertRaises(RentalStateError):
            self.ledger.complete("R001", date(2024, 1, 9))

        self.assertEqual(self.rental.actual_return_date, date(2024, 1, 5))
        self.assertEqual(self.rental.total_cost, 200.0)
        self.assertEqual(self.fleet.get("C001").current_renter, "CUST002")

    def test_complete_cancelled_fails(self):
        self.ledger.cancel("R001")
        with self.assertRaises(RentalStateError):
            self.ledger.complete("R001", date(2024, 1, 5))
        self.assertEqual(self.rental.status, RentalStatus.CANCELLED)

    def test_complete_unknown(self):
        with self.assertRaises(NotFoundError):
            self.ledger.complete("R099", date(2024, 1, 5))

    def test_complete_after_vehicle_removed(self):
        self.fleet.remove("C001", force=True)
        rental = self.ledger.complete("R001", date(2024, 1, 5))
        self.assertEqual(rental.status, RentalStatus.COMPLETED)


class TestCancelRental(LedgerTestCase):

    def setUp(self):
        super().setUp()
        self.rental = self.ledger.create("CUST001", "C001", date(2024, 1, 1), date(2024, 1, 5))

    def test_cancel_releases_vehicle(self):
        rental = self.ledger.cancel("R001", "Changed plans, sorry")
        self.assertEqual(rental.status, RentalStatus.CANCELLED)
        self.assertEqual(rental.notes, "Changed plans, sorry")
        self.assertTrue(self.fleet.get("C001").available)

    def test_default_reason(self):
        self.assertEqual(self.ledger.cancel("R001").notes, "Cancelled")

    def test_recancel_only_replaces_reason(self):
        self.ledger.cancel("R001", "First")
        other = self.ledger.create("CUST002", "C001", date(2024, 1, 2), date(2024, 1, 4))

        rental = self.ledger.cancel("R001", "Second")

        self.assertEqual(rental.notes, "Second")
        self.assertEqual(rental.status, RentalStatus.CANCELLED)
        self.assertTrue(other.is_active)
        self.assertEqual(self.fleet.get("C001").current_renter, "CUST002")

    def test_cannot_cancel_completed(self):
        self.ledger.complete("R001", date(2024, 1, 5))
        with self.assertRaises(RentalStateError):
            self.ledger.cancel("R001", "Oops")
        self.assertEqual(self.rental.status, RentalStatus.COMPLETED)
        self.assertEqual(self.rental.notes, "")


class TestQueries(LedgerTestCase):

    def setUp(self):
        super().setUp()
        self.ledger.create("CUST001", "C001", date(2024, 1, 1), date(2024, 1, 5))
        self.ledger.create("CUST002", "C002", date(2024, 1, 2), date(2024, 1, 10))
        self.ledger.complete("R001", date(2024, 1, 8))

    def test_state_filters(self):
        self.assertEqual([r.id for r in self.ledger.active()], ["R002"])
        self.assertEqual([r.id for r in self.ledger.completed()], ["R001"])
        self.assertEqual(self.ledger.cancelled(), [])
        self.assertEqual([r.id for r in self.ledger.by_customer("cust002")], ["R002"])
        self.assertEqual([r.id for r in self.ledger.by_vehicle("C001")], ["R001"])

    def test_overdue_follows_clock(self):
        self.assertEqual(self.ledger.overdue(), [])
        self.today = date(2024, 1, 12)
        overdue = self.ledger.overdue()
        self.assertEqual([r.id for r in overdue], ["R002"])
        self.assertEqual(overdue[0].days_overdue(self.today), 2)

    def test_statistics(self):
        stats = self.ledger.statistics()
        self.assertEqual(stats["total"], 2)
        self.assertEqual(stats["active"], 1)
        self.assertEqual(stats["completed"], 1)
        self.assertEqual(stats["total_revenue"], 425.0)
        self.assertEqual(stats["average_cost"], 425.0)
        self.assertEqual(stats["average_duration"], 7)

    def test_purge_completed(self):
        self.assertEqual(self.ledger.purge_completed(), 1)
        self.assertEqual([r.id for r in self.ledger.all()], ["R002"])
        self.assertEqual(self.ledger.next_id(), "R003")


class TestSynchronize(LedgerTestCase):

    def test_remarks_available_vehicle_with_active_rental(self):
        rental = RentalAgreement(id="R001", customer_id="CUST002", vehicle_id="C002",
                                 start_date=date(2023, 12, 1), end_date=date(2023, 12, 20),
                                 daily_rate=50)
        ledger = RentalLedger(self.fleet, self.customers, [rental], clock=lambda: self.today)

        self.assertEqual(ledger.synchronize(), 1)

        vehicle = self.fleet.get("C002")
        self.assertFalse(vehicle.available)
        self.assertEqual(vehicle.current_renter, "CUST002")
        self.assertEqual(vehicle.rental_start, date(2023, 12, 1))
        self.assertEqual(ledger.synchronize(), 0)

    def test_fills_missing_dates(self):
        self.fleet.add(Vehicle(id="C003", make="Honda", model="Civic", year=2022,
                               category="Sedan", available=False, current_renter="CUST001"))
        rental = RentalAgreement(id="R001", customer_id="CUST001", vehicle_id="C003",
                                 start_date=date(2024, 1, 1), end_date=date(2024, 1, 4),
                                 daily_rate=50)
        ledger = RentalLedger(self.fleet, self.customers, [rental], clock=lambda: self.today)

        self.assertEqual(ledger.synchronize(), 0)
        self.assertEqual(self.fleet.get("C003").rental_start, date(2024, 1, 1))
        self.assertEqual(self.fleet.get("C003").rental_end, date(2024, 1, 4))

    def test_ignores_finished_and_dangling_rentals(self):
        finished = RentalAgreement(id="R001", customer_id="CUST001", vehicle_id="C001",
                                   start_date=date(2024, 1, 1), end_date=date(2024, 1, 4),
                                   daily_rate=50, status=RentalStatus.COMPLETED,
                                   actual_return_date=date(2024, 1, 4))
        dangling = RentalAgreement(id="R002", customer_id="CUST009", vehicle_id="C009",
                                   start_date=date(2024, 1, 1), end_date=date(2024, 1, 4),
                                   daily_rate=50)
        ledger = RentalLedger(self.fleet, self.customers, [finished, dangling],
                              clock=lambda: self.today)

        self.assertEqual(ledger.synchronize(), 0)
        self.assertTrue(self.fleet.get("C001").available)

    def test_duplicate_rental_ids_are_skipped(self):
        first = RentalAgreement(id="R001", customer_id="CUST001", vehicle_id="C001",
                                start_date=date(2024, 1, 1), end_date=date(2024, 1, 4),
                                daily_rate=50)
        second = RentalAgreement(id="R001", customer_id="CUST002", vehicle_id="C002",
                                 start_date=date(2024, 1, 1), end_date=date(2024, 1, 4),
                                 daily_rate=80)
        with self.assertLogs("car_rental.services.ledger", level="WARNING"):
            ledger = RentalLedger(self.fleet, self.customers, [first, second],
                                  clock=lambda: self.today)

        self.assertEqual(len(ledger), 1)
        self.assertEqual(ledger.get("R001").vehicle_id, "C001")


if __name__ == '__main__':
    unittest.main()
