"""
Reservation field validation.

Every validator here is pure and total: it never raises and never touches
state, and it reports failure by returning False (or None for the parsing
helpers). Dates and times are handled in their fixed textual forms
(``YYYY-MM-DD`` and ``HH:MM``), which sort lexicographically in
chronological order.
"""

import re
from datetime import date
from typing import Any, Optional


# ============================================================================
# Patterns
# ============================================================================

PHONE_PATTERN = re.compile(r'[0-9]{3}-[0-9]{3}-[0-9]{4}')
DATE_PATTERN = re.compile(r'([0-9]{4})-([0-9]{2})-([0-9]{2})')
TIME_PATTERN = re.compile(r'([0-9]{2}):([0-9]{2})')
RESERVATION_ID_PATTERN = re.compile(r'ID ([0-9]+)A')
NUMERIC_PATTERN = re.compile(r'[0-9]+')
CREDENTIAL_PATTERN = re.compile(r'[A-Za-z0-9]+')

# Characters that would break the one-record-per-line storage format
NAME_FORBIDDEN_CHARS = re.compile(r'[|\r\n]')


# ============================================================================
# Contact details
# ============================================================================

def validate_phone(phone: Any) -> bool:
    """Check a phone number is exactly ``DDD-DDD-DDDD``."""
    return isinstance(phone, str) and PHONE_PATTERN.fullmatch(phone) is not None


def validate_customer_name(name: Any) -> bool:
    """Check a guest name is non-blank and safe to store on one record line."""
    if not isinstance(name, str) or not name.strip():
        return False
    return NAME_FORBIDDEN_CHARS.search(name) is None


def validate_credential(value: Any) -> bool:
    """Check an account username or password: letters and digits only."""
    return isinstance(value, str) and CREDENTIAL_PATTERN.fullmatch(value) is not None


# ============================================================================
# Date & time
# ============================================================================

def validate_date(value: Any, reference_date: str) -> bool:
    """
    Validate a reservation date.

    Args:
        value: Date in ``YYYY-MM-DD`` form
        reference_date: The reference "today" in the same form

    Returns:
        True if the date is well-formed, exists in the calendar and is not
        before the reference date
    """
    if not isinstance(value, str):
        return False
    match = DATE_PATTERN.fullmatch(value)
    if match is None:
        return False

    year, month, day = (int(part) for part in match.groups())
    if month < 1 or month > 12 or day < 1 or day > 31:
        return False

    # Reject dates like 2025-02-30 that pass the range check
    try:
        date(year, month, day)
    except ValueError:
        return False

    return value >= reference_date


def validate_time(value: Any, reservation_date: str, reference_date: str, reference_time: str) -> bool:
    """
    Validate a reservation time.

    Args:
        value: Time in ``HH:MM`` form
        reservation_date: Date the time applies to
        reference_date: The reference "today"
        reference_time: The reference time of day, ``HH:MM``

    Returns:
        True if the time is well-formed and, for a reservation on the
        reference date, strictly after the reference time
    """
    if not isinstance(value, str):
        return False
    match = TIME_PATTERN.fullmatch(value)
    if match is None:
        return False

    hour, minute = (int(part) for part in match.groups())
    if hour > 23 or minute > 59:
        return False

    if reservation_date == reference_date and value <= reference_time:
        return False
    return True


# ============================================================================
# Numbers & IDs
# ============================================================================

def validate_party_size(party_size: Any) -> bool:
    """Party size must be an integer of at least 1."""
    if isinstance(party_size, bool) or not isinstance(party_size, int):
        return False
    return party_size >= 1


def validate_reservation_id(reservation_id: Any) -> bool:
    """Case-insensitive check for the ``ID <digits>A`` form."""
    if not isinstance(reservation_id, str):
        return False
    return RESERVATION_ID_PATTERN.fullmatch(reservation_id.upper()) is not None


def reservation_id_number(reservation_id: Any) -> Optional[int]:
    """Numeric part of a well-formed reservation ID (``"id 12a"`` -> 12)."""
    if not isinstance(reservation_id, str):
        return None
    match = RESERVATION_ID_PATTERN.fullmatch(reservation_id.upper())
    if match is None:
        return None
    return int(match.group(1))


def format_reservation_id(number: int) -> str:
    """Canonical reservation ID for a counter value."""
    return f"ID {number}A"


def parse_numeric_input(value: Any, min_value: int, max_value: int) -> Optional[int]:
    """
    Parse menu-style numeric input.

    Only a non-empty run of ASCII digits is accepted: no sign, no
    whitespace, no fractional part, nothing trailing.

    Returns:
        The parsed integer if it lies within ``[min_value, max_value]``,
        otherwise None
    """
    if not isinstance(value, str) or NUMERIC_PATTERN.fullmatch(value) is None:
        return None
    number = int(value)
    if number < min_value or number > max_value:
        return None
    return number


def validate_numeric_input(value: Any, min_value: int, max_value: int) -> bool:
    """Boolean form of :func:`parse_numeric_input`."""
    return parse_numeric_input(value, min_value, max_value) is not None
