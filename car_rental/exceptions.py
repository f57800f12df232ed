"""
Exception types raised by the registries, the ledger and the data store.

Every operation that raises leaves the in-memory collections untouched, so
callers can report the message and carry on.
"""


class RentalSystemError(Exception):
    """Base class for all car rental errors."""

    def __init__(self, message: str = "Car rental error") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ValidationError(RentalSystemError):
    """Raised when input breaks a business rule (dates, ids, rates)."""


class DuplicateError(ValidationError):
    """Raised when a unique identifier, e-mail or license is already taken."""


class NotFoundError(RentalSystemError):
    """Raised when an identifier does not match any record."""


class RentalStateError(RentalSystemError):
    """Raised when a vehicle or rental is in the wrong state for an operation."""


class StorageError(RentalSystemError):
    """Raised when the data file or its backup cannot be read or written."""
