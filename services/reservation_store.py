"""
In-memory reservation store.

Owns the table pool, the reservation records keyed by canonical ID, and the
ID counter. Every mutating method validates all of its input before it
changes anything, so a failed call leaves the store untouched.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from core.utils_datetime import ReferenceClock
from domain.errors import (
    DuplicateIdError,
    InvalidIdFormatError,
    NotFoundError,
    TableBookedError,
    TableRangeError,
    ValidationError,
)
from domain.models import UNCHANGED, Reservation
from services.reservation_validation import (
    format_reservation_id,
    validate_customer_name,
    validate_date,
    validate_party_size,
    validate_phone,
    validate_reservation_id,
    validate_time,
)


logger = logging.getLogger(__name__)

DEFAULT_TABLE_COUNT = 10

# Error messages
INVALID_NAME = "Customer name must not be empty or contain '|' or line breaks."
INVALID_PHONE = "Invalid phone number format. Use XXX-XXX-XXXX."
INVALID_PARTY_SIZE = "Party size must be at least 1."
INVALID_DATE = "Invalid date format (use YYYY-MM-DD) or date is in the past."
INVALID_TIME = "Invalid time format (use HH:MM) or time is in the past for today."
INVALID_NEW_ID = "Invalid new reservation ID format. Use 'ID <number>A', e.g., ID 1A."
DUPLICATE_NEW_ID = "New reservation ID already exists. Choose a different ID."
TABLE_ALREADY_BOOKED = "Selected table is already booked."


def _is_supplied(value: Any) -> bool:
    return value is not UNCHANGED


class ReservationStore:
    """Reservation records plus the table-availability pool."""

    def __init__(self, table_count: int = DEFAULT_TABLE_COUNT, clock: Optional[ReferenceClock] = None):
        """
        Initialize an empty store.

        Args:
            table_count: Number of physical tables (N)
            clock: Source of the reference "now" for date/time checks
        """
        if table_count < 1:
            raise ValueError("table_count must be at least 1")
        self.table_count = table_count
        self.clock = clock or ReferenceClock()
        self.tables: List[bool] = [True] * table_count
        self.reservations: Dict[str, Reservation] = {}
        self.next_id = 1

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def restore(self, reservations: Iterable[Reservation], counter: int) -> None:
        """
        Replace the store contents with previously persisted state.

        Records are expected to satisfy the store invariants already (the
        persistence layer drops lines that do not).
        """
        self.tables = [True] * self.table_count
        self.reservations = {}
        for reservation in reservations:
            self._check_table(reservation.table_index)
            if reservation.id in self.reservations:
                raise DuplicateIdError(f"Duplicate reservation ID {reservation.id}.", field="id")
            self.tables[reservation.table_index] = False
            self.reservations[reservation.id] = reservation
        self.next_id = max(1, counter)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def id_exists(self, reservation_id: str, excluding_id: str = "") -> bool:
        """Check whether an active reservation other than ``excluding_id`` has this ID."""
        upper_id = reservation_id.upper()
        upper_excluding = excluding_id.upper()
        return upper_id in self.reservations and upper_id != upper_excluding

    def get(self, reservation_id: str) -> Reservation:
        """
        Get a reservation by ID (case-insensitive).

        Raises:
            InvalidIdFormatError: If the ID is malformed
            NotFoundError: If no active reservation has the ID
        """
        if not validate_reservation_id(reservation_id):
            raise InvalidIdFormatError()
        reservation = self.reservations.get(reservation_id.upper())
        if reservation is None:
            raise NotFoundError(f"No reservation with ID {reservation_id.upper()}.", field="id")
        return reservation

    def list_all(self) -> List[Reservation]:
        return list(self.reservations.values())

    def list_by_customer(self, customer_name: str) -> List[Reservation]:
        return [res for res in self.reservations.values() if res.customer_name == customer_name]

    def has_reservations(self, customer_name: str) -> bool:
        return any(res.customer_name == customer_name for res in self.reservations.values())

    def table_availability(self) -> List[bool]:
        """Availability per table, True meaning free."""
        return list(self.tables)

    def available_tables(self) -> List[int]:
        return [index for index, free in enumerate(self.tables) if free]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def reserve(
        self,
        customer_name: str,
        phone_number: str,
        party_size: int,
        date: str,
        time: str,
        table_index: int,
    ) -> Reservation:
        """
        Book a table.

        Fields are checked in a fixed order: name, phone, party size, date,
        time, table index, table occupancy.

        Returns:
            The new reservation, carrying a freshly allocated ID

        Raises:
            ValidationError: If a field is malformed or in the past
            TableRangeError: If the table index is outside the pool
            TableBookedError: If the table is already taken
        """
        reference_date = self.clock.today()
        if not validate_customer_name(customer_name):
            raise ValidationError(INVALID_NAME, field="customer_name")
        if not validate_phone(phone_number):
            raise ValidationError(INVALID_PHONE, field="phone_number")
        if not validate_party_size(party_size):
            raise ValidationError(INVALID_PARTY_SIZE, field="party_size")
        if not validate_date(date, reference_date):
            raise ValidationError(INVALID_DATE, field="date")
        if not validate_time(time, date, reference_date, self.clock.current_time()):
            raise ValidationError(INVALID_TIME, field="time")
        self._check_table(table_index)
        if not self.tables[table_index]:
            raise TableBookedError(TABLE_ALREADY_BOOKED, field="table_index")

        reservation = Reservation(
            id=self._allocate_id(),
            customer_name=customer_name,
            phone_number=phone_number,
            party_size=party_size,
            date=date,
            time=time,
            table_index=table_index,
        )
        self.tables[table_index] = False
        self.reservations[reservation.id] = reservation
        logger.debug(f"Reserved table {table_index} as {reservation.id}")
        return reservation

    def cancel(self, reservation_id: str) -> Reservation:
        """
        Remove a reservation and free its table.

        Returns:
            The removed reservation

        Raises:
            InvalidIdFormatError: If the ID is malformed
            NotFoundError: If no active reservation has the ID
        """
        reservation = self.get(reservation_id)
        self.tables[reservation.table_index] = True
        del self.reservations[reservation.id]
        logger.debug(f"Cancelled {reservation.id}, table {reservation.table_index} freed")
        return reservation

    def update(
        self,
        reservation_id: str,
        new_id: Any = UNCHANGED,
        customer_name: Any = UNCHANGED,
        phone_number: Any = UNCHANGED,
        party_size: Any = UNCHANGED,
        date: Any = UNCHANGED,
        time: Any = UNCHANGED,
        table_index: Any = UNCHANGED,
    ) -> Reservation:
        """
        Replace any subset of a reservation's fields.

        Fields left as ``UNCHANGED`` keep their current value. All supplied
        fields are validated (with the rules used by :meth:`reserve`) before
        anything is modified, so the update applies completely or not at all.
        Moving to the reservation's own current table is allowed.

        Returns:
            The updated reservation

        Raises:
            InvalidIdFormatError: If either ID is malformed
            NotFoundError: If the reservation does not exist
            DuplicateIdError: If ``new_id`` belongs to another reservation
            ValidationError: If a supplied field is invalid
            TableRangeError: If the new table index is outside the pool
            TableBookedError: If the new table is held by another reservation
        """
        current = self.get(reservation_id)
        changes: Dict[str, Any] = {}

        if _is_supplied(new_id):
            if not validate_reservation_id(new_id):
                raise InvalidIdFormatError(INVALID_NEW_ID, field="new_id")
            if self.id_exists(new_id, excluding_id=current.id):
                raise DuplicateIdError(DUPLICATE_NEW_ID, field="new_id")
            changes["id"] = new_id.upper()

        if _is_supplied(customer_name):
            if not validate_customer_name(customer_name):
                raise ValidationError(INVALID_NAME, field="customer_name")
            changes["customer_name"] = customer_name

        if _is_supplied(phone_number):
            if not validate_phone(phone_number):
                raise ValidationError(INVALID_PHONE, field="phone_number")
            changes["phone_number"] = phone_number

        if _is_supplied(party_size):
            if not validate_party_size(party_size):
                raise ValidationError(INVALID_PARTY_SIZE, field="party_size")
            changes["party_size"] = party_size

        reference_date = self.clock.today()
        if _is_supplied(date):
            if not validate_date(date, reference_date):
                raise ValidationError(INVALID_DATE, field="date")
            changes["date"] = date

        if _is_supplied(date) or _is_supplied(time):
            # Time is judged against whichever date holds after the update
            effective_date = changes.get("date", current.date)
            effective_time = time if _is_supplied(time) else current.time
            if not validate_time(effective_time, effective_date, reference_date, self.clock.current_time()):
                raise ValidationError(INVALID_TIME, field="time")
            changes["time"] = effective_time

        if _is_supplied(table_index):
            self._check_table(table_index)
            if table_index != current.table_index and not self.tables[table_index]:
                raise TableBookedError(TABLE_ALREADY_BOOKED, field="table_index")
            changes["table_index"] = table_index

        if not changes:
            return current

        updated = current.model_copy(update=changes)
        self.tables[current.table_index] = True
        self.tables[updated.table_index] = False
        # Rebuild to keep insertion order when the key changes
        self.reservations = {
            (updated.id if key == current.id else key): (updated if key == current.id else value)
            for key, value in self.reservations.items()
        }
        logger.debug(f"Updated {current.id}: {sorted(changes)}")
        return updated

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_table(self, table_index: Any) -> None:
        if isinstance(table_index, bool) or not isinstance(table_index, int):
            raise ValidationError("Table number must be an integer.", field="table_index")
        if table_index < 0 or table_index >= self.table_count:
            raise TableRangeError(
                f"Invalid table number. Must be between 1 and {self.table_count}.",
                field="table_index",
            )

    def _allocate_id(self) -> str:
        """Take the next free ``ID <n>A`` and advance the counter past it."""
        reservation_id = format_reservation_id(self.next_id)
        # Only possible after the records file was edited by hand
        while reservation_id in self.reservations:
            self.next_id += 1
            reservation_id = format_reservation_id(self.next_id)
        self.next_id += 1
        return reservation_id
