"""
Customer registry.
"""
import logging
from collections import Counter
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional

from car_rental.exceptions import DuplicateError, NotFoundError
from car_rental.identifiers import CUSTOMER_PREFIX, next_identifier
from car_rental.models.customer import Customer
from car_rental.schemas.customer import CustomerCreate, CustomerUpdate

logger = logging.getLogger(__name__)

RECENT_REGISTRATION_DAYS = 30


class CustomerRegistry:
    """
    In-memory customer roster.

    Identifiers, e-mail addresses and license numbers are unique across the
    roster, compared case-insensitively.
    """

    def __init__(self, customers: Optional[List[Customer]] = None,
                 clock: Callable[[], date] = date.today):
        self._customers: List[Customer] = []
        self._clock = clock
        for customer in customers or []:
            try:
                self._check_unique(customer)
            except DuplicateError as e:
                logger.warning("Skipping customer record %s: %s", customer.id, e)
                continue
            self._customers.append(customer)

    def __len__(self) -> int:
        return len(self._customers)

    def add(self, customer: Customer) -> Customer:
        """Add a customer, rejecting a taken identifier, e-mail or license."""
        self._check_unique(customer)
        self._customers.append(customer)
        logger.info("Added customer %s", customer.id)
        return customer

    def _check_unique(self, customer: Customer) -> None:
        if self.find(customer.id) is not None:
            raise DuplicateError(f"Customer {customer.id} already exists")
        if self.find_by_email(customer.email) is not None:
            raise DuplicateError(f"E-mail {customer.email} is already registered")
        if self.find_by_license(customer.license_number) is not None:
            raise DuplicateError(f"License {customer.license_number} is already registered")

    def create(self, data: CustomerCreate) -> Customer:
        """Register a new customer under the next free identifier."""
        customer = Customer(
            id=self.next_id(),
            registration_date=self._clock(),
            **data.model_dump(),
        )
        return self.add(customer)

    def find(self, customer_id: str) -> Optional[Customer]:
        key = customer_id.strip().lower()
        return next((c for c in self._customers if c.id.lower() == key), None)

    def find_by_email(self, email: str) -> Optional[Customer]:
        key = email.strip().lower()
        return next((c for c in self._customers if c.email.lower() == key), None)

    def find_by_license(self, license_number: str) -> Optional[Customer]:
        key = license_number.strip().lower()
        return next((c for c in self._customers if c.license_number.lower() == key), None)

    def get(self, customer_id: str) -> Customer:
        customer = self.find(customer_id)
        if customer is None:
            raise NotFoundError(f"Customer {customer_id} not found")
        return customer

    def edit(self, customer_id: str, changes: CustomerUpdate) -> Customer:
        """Apply the set fields of ``changes``; e-mail and license stay unique."""
        customer = self.get(customer_id)
        update_data = {
            field: value
            for field, value in changes.model_dump(exclude_unset=True).items()
            if value is not None
        }

        # Check everything before touching the record
        if "email" in update_data:
            owner = self.find_by_email(update_data["email"])
            if owner is not None and owner is not customer:
                raise DuplicateError(f"E-mail {update_data['email']} is already registered")
        if "license_number" in update_data:
            owner = self.find_by_license(update_data["license_number"])
            if owner is not None and owner is not customer:
                raise DuplicateError(
                    f"License {update_data['license_number']} is already registered"
                )

        for field, value in update_data.items():
            setattr(customer, field, value)

        logger.info("Updated customer %s", customer.id)
        return customer

    def remove(self, customer_id: str) -> Customer:
        """Remove a customer. Their rental history is left in the ledger."""
        customer = self.get(customer_id)
        self._customers.remove(customer)
        logger.info("Removed customer %s", customer.id)
        return customer

    def all(self) -> List[Customer]:
        return list(self._customers)

    def search(self, term: Optional[str]) -> List[Customer]:
        """Case-insensitive search over all text fields; blank returns everyone."""
        if term is None or not term.strip():
            return self.all()
        return [c for c in self._customers if c.matches_search_term(term)]

    def search_by_name(self, name: str) -> List[Customer]:
        key = name.strip().lower()
        return [c for c in self._customers if key in c.name.lower()]

    def search_by_email(self, email: str) -> List[Customer]:
        key = email.strip().lower()
        return [c for c in self._customers if key in c.email.lower()]

    def next_id(self) -> str:
        return next_identifier(CUSTOMER_PREFIX, (c.id for c in self._customers))

    def statistics(self) -> Dict[str, object]:
        cutoff = self._clock() - timedelta(days=RECENT_REGISTRATION_DAYS)
        by_month = Counter(c.registration_date.strftime("%Y-%m") for c in self._customers)
        return {
            "total": len(self._customers),
            "registrations_by_month": dict(sorted(by_month.items(), reverse=True)),
            "recent_registrations": sum(
                1 for c in self._customers if c.registration_date > cutoff
            ),
        }

    def validate(self) -> List[str]:
        """Report duplicate e-mails and license numbers left by in-place changes to records."""
        issues = []
        emails = Counter(c.email.lower() for c in self._customers)
        issues.extend(f"Duplicate email: {email}" for email, n in emails.items() if n > 1)
        licenses = Counter(c.license_number.lower() for c in self._customers)
        issues.extend(
            f"Duplicate license: {number}" for number, n in licenses.items() if n > 1
        )
        return issues
