"""Domain layer for the table reservation system."""

from .enums import (
    Role,
    ErrorKind,
    AuditKind,
    AuditAction,
)
from .errors import (
    ReservationError,
    ValidationError,
    InvalidIdFormatError,
    InvalidCredentialError,
    TableRangeError,
    TableBookedError,
    NotFoundError,
    DuplicateIdError,
    DuplicateAccountError,
    AuthenticationError,
    PersistenceError,
    AuditError,
)
from .models import (
    UNCHANGED,
    Reservation,
    Actor,
    AuditSnapshot,
    OperationResult,
)

__all__ = [
    # Enums
    "Role",
    "ErrorKind",
    "AuditKind",
    "AuditAction",
    # Errors
    "ReservationError",
    "ValidationError",
    "InvalidIdFormatError",
    "InvalidCredentialError",
    "TableRangeError",
    "TableBookedError",
    "NotFoundError",
    "DuplicateIdError",
    "DuplicateAccountError",
    "AuthenticationError",
    "PersistenceError",
    "AuditError",
    # Models
    "UNCHANGED",
    "Reservation",
    "Actor",
    "AuditSnapshot",
    "OperationResult",
]
