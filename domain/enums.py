"""Domain enums for the table reservation system."""

from enum import Enum


class Role(str, Enum):
    """Actor roles as written into the audit log."""

    CUSTOMER = "Customer"
    RECEPTIONIST = "Receptionist"
    ADMIN = "Admin"


class ErrorKind(str, Enum):
    """Discriminates failed operations; callers branch on this, not on messages."""

    VALIDATION = "validation"
    TABLE_RANGE = "table_range"
    TABLE_BOOKED = "table_booked"
    NOT_FOUND = "not_found"
    DUPLICATE_ID = "duplicate_id"
    DUPLICATE_ACCOUNT = "duplicate_account"
    AUTHENTICATION = "authentication"
    PERSISTENCE = "persistence"
    AUDIT = "audit"


class AuditKind(str, Enum):
    """Audit entry headers."""

    LOGIN = "Account Log"
    ACTION = "Reservation Log"
    ERROR = "Reservation Error Log"


class AuditAction(str, Enum):
    """Reservation actions recorded in the audit log."""

    RESERVED = "Reserved table"
    UPDATED = "Updated reservation"
    CANCELLED = "Cancelled reservation"
