"""
Identifier formats and generation.
"""
import re
from typing import Iterable

from car_rental.exceptions import ValidationError

VEHICLE_PREFIX = "C"
CUSTOMER_PREFIX = "CUST"
RENTAL_PREFIX = "R"

VEHICLE_ID_PATTERN = re.compile(r"^C[0-9]{3}$")
CUSTOMER_ID_PATTERN = re.compile(r"^CUST[0-9]{3}$")
RENTAL_ID_PATTERN = re.compile(r"^R[0-9]{3}$")

# Bulgarian mobile numbers, e.g. "+359 888 123 456"
PHONE_PATTERN = re.compile(r"^\+359\s?[0-9]{3}\s?[0-9]{3}\s?[0-9]{3}$")

MAX_SEQUENCE = 999


def next_identifier(prefix: str, existing: Iterable[str]) -> str:
    """
    Return ``prefix`` followed by the highest numeric suffix in ``existing``
    plus one, zero-padded to three digits.

    Gaps are never reused: ``{C001, C003}`` yields ``C004``. Identifiers that
    do not start with ``prefix`` or have a non-numeric suffix are ignored.
    """
    highest = 0
    for identifier in existing:
        if not identifier or not identifier.upper().startswith(prefix):
            continue
        suffix = identifier[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))

    if highest >= MAX_SEQUENCE:
        raise ValidationError(f"No identifiers left for prefix '{prefix}'")

    return f"{prefix}{highest + 1:03d}"
