"""Typed failures raised by the reservation core."""

from typing import Optional

from .enums import ErrorKind


class ReservationError(Exception):
    """Base class for every failure the reservation core reports."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, field={self.field!r})"


class ValidationError(ReservationError):
    """Raised when a field is malformed or out of range."""

    kind = ErrorKind.VALIDATION


class InvalidIdFormatError(ValidationError):
    """Raised when a reservation ID does not look like ``ID <n>A``."""

    def __init__(self, message: str = "Invalid reservation ID format. Use 'ID <number>A', e.g., ID 1A.",
                 field: Optional[str] = "id"):
        super().__init__(message, field)


class InvalidCredentialError(ValidationError):
    """Raised when a username or password is not alphanumeric."""


class TableRangeError(ReservationError):
    """Raised when a table index falls outside the table pool."""

    kind = ErrorKind.TABLE_RANGE


class TableBookedError(ReservationError):
    """Raised when the requested table is already taken."""

    kind = ErrorKind.TABLE_BOOKED


class NotFoundError(ReservationError):
    """Raised when no active reservation has the given ID."""

    kind = ErrorKind.NOT_FOUND


class DuplicateIdError(ReservationError):
    """Raised when a requested new ID belongs to another reservation."""

    kind = ErrorKind.DUPLICATE_ID


class DuplicateAccountError(ReservationError):
    """Raised when creating an account whose username is taken."""

    kind = ErrorKind.DUPLICATE_ACCOUNT


class PersistenceError(ReservationError):
    """Raised when durable storage cannot be written."""

    kind = ErrorKind.PERSISTENCE


class AuditError(ReservationError):
    """Raised when the audit log cannot be appended to."""

    kind = ErrorKind.AUDIT


class AuthenticationError(ReservationError):
    """Raised when a username/password pair matches no account."""

    kind = ErrorKind.AUTHENTICATION
