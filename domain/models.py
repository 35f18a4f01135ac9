"""Domain models for the table reservation system."""

from dataclasses import dataclass, fields
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import ErrorKind, Role
from .errors import ReservationError


RECORD_DELIMITER = "|"
RECORD_FIELD_COUNT = 7


class _Unchanged:
    """Sentinel type for "keep the current value" in updates."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNCHANGED"

    def __bool__(self) -> bool:
        return False


UNCHANGED: Any = _Unchanged()


class Reservation(BaseModel):
    """One booking of one table. Instances are immutable snapshots."""

    id: str = Field(..., min_length=1, description="Canonical reservation ID, e.g. 'ID 1A'")
    customer_name: str = Field(..., description="Guest name")
    phone_number: str = Field(..., description="Phone number in XXX-XXX-XXXX form")
    party_size: int = Field(..., ge=1, description="Number of guests")
    date: str = Field(..., description="Reservation date (YYYY-MM-DD)")
    time: str = Field(..., description="Reservation time (HH:MM)")
    table_index: int = Field(..., ge=0, description="0-based table index")

    model_config = ConfigDict(frozen=True)

    @field_validator("id", mode="before")
    @classmethod
    def canonicalize_id(cls, v: Any) -> Any:
        """Store IDs upper-cased so lookups can be case-insensitive."""
        if isinstance(v, str):
            return v.upper()
        return v

    def to_line(self) -> str:
        """Serialize as ``ID|name|phone|partySize|date|time|tableIndex``."""
        return RECORD_DELIMITER.join([
            self.id,
            self.customer_name,
            self.phone_number,
            str(self.party_size),
            self.date,
            self.time,
            str(self.table_index),
        ])

    @classmethod
    def from_line(cls, line: str) -> "Reservation":
        """
        Parse one persisted record line.

        Raises:
            ValueError: If the line is structurally malformed
        """
        parts = line.rstrip("\r\n").split(RECORD_DELIMITER)
        if len(parts) != RECORD_FIELD_COUNT:
            raise ValueError(f"expected {RECORD_FIELD_COUNT} fields, got {len(parts)}")
        res_id, name, phone, party_size, res_date, res_time, table_index = parts
        return cls(
            id=res_id,
            customer_name=name,
            phone_number=phone,
            party_size=int(party_size),
            date=res_date,
            time=res_time,
            table_index=int(table_index),
        )


class Actor(BaseModel):
    """Who performs an operation, as supplied by the account layer."""

    role: Role
    username: str

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class AuditSnapshot:
    """Field values attached to an audit entry; absent fields print as N/A."""

    id: Optional[str] = None
    customer_name: Optional[str] = None
    phone_number: Optional[str] = None
    party_size: Optional[int] = None
    date: Optional[str] = None
    time: Optional[str] = None
    table_index: Optional[int] = None

    @classmethod
    def from_reservation(cls, reservation: Reservation) -> "AuditSnapshot":
        return cls(**reservation.model_dump())

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) in (None, "") for f in fields(self))

    def render(self) -> str:
        def show(value: Any) -> str:
            return "N/A" if value in (None, "") else str(value)

        table: Any = self.table_index
        if isinstance(table, int) and not isinstance(table, bool):
            table = table + 1 if table >= 0 else None
        party: Any = self.party_size
        if isinstance(party, int) and not isinstance(party, bool) and party <= 0:
            party = None
        return " | ".join([
            f"ID: {show(self.id)}",
            f"Name: {show(self.customer_name)}",
            f"Contact: {show(self.phone_number)}",
            f"Party-Size: {show(party)}",
            f"Date: {show(self.date)}",
            f"Time: {show(self.time)}",
            f"Table: {show(table)}",
        ])


T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of a facade operation: a value, or a typed error."""

    ok: bool
    value: Optional[T] = None
    error: Optional[ReservationError] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "OperationResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: ReservationError) -> "OperationResult[T]":
        return cls(ok=False, error=error)

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error is not None else None

    def unwrap(self) -> T:
        """Return the value, or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value

    def __bool__(self) -> bool:
        return self.ok
