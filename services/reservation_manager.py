"""
Reservation Manager for the restaurant's table bookings.

Composes the reservation store, the flat-file repository and the audit log.
Every mutating operation validates, changes the store, persists the full
store state and appends an audit entry, in that order. Operations report
their outcome as an ``OperationResult``; callers branch on ``result.kind``.
"""
import logging
from typing import Any, Callable, List, Optional, Tuple

from core.logging import LogContext
from core.settings import Settings
from core.utils_datetime import ReferenceClock, clock_from_settings
from domain.enums import AuditAction, Role
from domain.errors import AuditError, AuthenticationError, PersistenceError, ReservationError
from domain.models import UNCHANGED, Actor, AuditSnapshot, OperationResult, Reservation
from services.accounts import AccountService, AccountStore
from services.audit_log import AuditLog
from services.persistence import ReservationRepository
from services.reservation_store import ReservationStore


logger = logging.getLogger(__name__)


def _snapshot(**values: Any) -> AuditSnapshot:
    """Snapshot of submitted values; ``UNCHANGED`` fields are left out."""
    return AuditSnapshot(**{key: value for key, value in values.items() if value is not UNCHANGED})


class ReservationManager:
    """Validated, persisted and audited access to the reservation store."""

    def __init__(
        self,
        store: ReservationStore,
        repository: ReservationRepository,
        audit_log: AuditLog,
        accounts: Optional[AccountService] = None,
    ):
        """
        Initialize the manager and replay persisted state into the store.

        Args:
            store: Empty reservation store to populate
            repository: Source and destination of durable state
            audit_log: Audit trail for logins, actions and errors
            accounts: Authentication collaborator used by :meth:`login`

        Raises:
            PersistenceError: If existing files cannot be read
        """
        self.store = store
        self.repository = repository
        self.audit_log = audit_log
        self.accounts = accounts

        reservations, counter = self.repository.load()
        self.store.restore(reservations, counter)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def login(self, username: str, password: str) -> OperationResult[Actor]:
        """Authenticate through the account collaborator and audit the login."""
        if self.accounts is None:
            raise RuntimeError("No account service configured")
        try:
            role = self.accounts.verify(username, password)
            if role is None:
                raise AuthenticationError("Invalid credentials. Please try again.", field="username")
            self.audit_log.record_login(role, username, password)
        except ReservationError as e:
            logger.warning(f"Login failed for {username}: {e.message}")
            return OperationResult.failure(e)
        return OperationResult.success(Actor(role=role, username=username))

    def record_login(self, role: Role, username: str, secret: str) -> OperationResult[None]:
        """Audit a login performed by an external account layer."""
        try:
            self.audit_log.record_login(role, username, secret)
        except AuditError as e:
            return OperationResult.failure(e)
        return OperationResult.success()

    def record_action(
        self,
        actor: Actor,
        action: str,
        detail: str,
        snapshot: Optional[AuditSnapshot] = None,
    ) -> OperationResult[None]:
        """Audit an action performed outside the reservation operations."""
        try:
            self.audit_log.record_action(actor.role, actor.username, action, detail, snapshot)
        except AuditError as e:
            return OperationResult.failure(e)
        return OperationResult.success()

    def record_error(
        self,
        actor: Actor,
        action: str,
        error_message: str,
        snapshot: Optional[AuditSnapshot] = None,
    ) -> OperationResult[None]:
        """Audit an error raised outside the reservation operations."""
        try:
            self.audit_log.record_error(actor.role, actor.username, action, error_message, snapshot)
        except AuditError as e:
            return OperationResult.failure(e)
        return OperationResult.success()

    # ------------------------------------------------------------------
    # Reservation operations
    # ------------------------------------------------------------------

    def reserve(
        self,
        actor: Actor,
        customer_name: str,
        phone_number: str,
        party_size: int,
        date: str,
        time: str,
        table_index: int,
    ) -> OperationResult[str]:
        """
        Book a table.

        Args:
            actor: Who makes the booking
            customer_name: Guest name
            phone_number: Phone in ``XXX-XXX-XXXX`` form
            party_size: Number of guests (at least 1)
            date: ``YYYY-MM-DD``, not before the reference date
            time: ``HH:MM``, after the reference time when booking for today
            table_index: 0-based table index

        Returns:
            Result carrying the new reservation ID
        """
        def operation() -> Tuple[Reservation, str]:
            reservation = self.store.reserve(customer_name, phone_number, party_size, date, time, table_index)
            detail = f"#{table_index + 1} for {party_size} on {date} at {time}"
            return reservation, detail

        attempted = _snapshot(
            customer_name=customer_name,
            phone_number=phone_number,
            party_size=party_size,
            date=date,
            time=time,
            table_index=table_index,
        )
        result = self._mutate(actor, AuditAction.RESERVED, attempted, operation)
        if not result.ok:
            return OperationResult.failure(result.error)
        return OperationResult.success(result.value.id)

    def update(
        self,
        actor: Actor,
        reservation_id: str,
        new_id: Any = UNCHANGED,
        customer_name: Any = UNCHANGED,
        phone_number: Any = UNCHANGED,
        party_size: Any = UNCHANGED,
        date: Any = UNCHANGED,
        time: Any = UNCHANGED,
        table_index: Any = UNCHANGED,
    ) -> OperationResult[Reservation]:
        """
        Change any subset of a reservation's fields; ``UNCHANGED`` keeps the current value.

        Returns:
            Result carrying the updated reservation
        """
        def operation() -> Tuple[Reservation, str]:
            reservation = self.store.update(
                reservation_id,
                new_id=new_id,
                customer_name=customer_name,
                phone_number=phone_number,
                party_size=party_size,
                date=date,
                time=time,
                table_index=table_index,
            )
            return reservation, f"Reservation {reservation_id.upper()}"

        attempted = _snapshot(
            id=new_id if new_id is not UNCHANGED else reservation_id,
            customer_name=customer_name,
            phone_number=phone_number,
            party_size=party_size,
            date=date,
            time=time,
            table_index=table_index,
        )
        return self._mutate(actor, AuditAction.UPDATED, attempted, operation)

    def cancel(self, actor: Actor, reservation_id: str) -> OperationResult[Reservation]:
        """
        Cancel a reservation and free its table.

        Returns:
            Result carrying the removed reservation
        """
        def operation() -> Tuple[Reservation, str]:
            reservation = self.store.cancel(reservation_id)
            return reservation, f"Reservation {reservation.id}"

        return self._mutate(actor, AuditAction.CANCELLED, _snapshot(id=reservation_id), operation)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_all(self) -> List[Reservation]:
        return self.store.list_all()

    def list_by_customer(self, customer_name: str) -> List[Reservation]:
        return self.store.list_by_customer(customer_name)

    def has_reservations(self, customer_name: str) -> bool:
        return self.store.has_reservations(customer_name)

    def id_exists(self, reservation_id: str, excluding_id: str = "") -> bool:
        return self.store.id_exists(reservation_id, excluding_id)

    def get(self, reservation_id: str) -> OperationResult[Reservation]:
        try:
            return OperationResult.success(self.store.get(reservation_id))
        except ReservationError as e:
            return OperationResult.failure(e)

    def table_availability(self) -> List[bool]:
        return self.store.table_availability()

    def available_tables(self) -> List[int]:
        return self.store.available_tables()

    def read_audit_log(self) -> OperationResult[str]:
        try:
            return OperationResult.success(self.audit_log.read_text())
        except AuditError as e:
            return OperationResult.failure(e)

    def save(self) -> OperationResult[None]:
        """Persist the current store state, e.g. to retry after a ``PersistenceError``."""
        try:
            self._persist()
        except PersistenceError as e:
            return OperationResult.failure(e)
        return OperationResult.success()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _persist(self) -> None:
        self.repository.save(self.store.list_all(), self.store.next_id)

    def _mutate(
        self,
        actor: Actor,
        action: AuditAction,
        attempted: AuditSnapshot,
        operation: Callable[[], Tuple[Reservation, str]],
    ) -> OperationResult[Reservation]:
        """
        Run a store mutation, then persist and audit it.

        A ``PersistenceError`` is reported after the in-memory change has
        already happened; the store and the files disagree until the next
        successful save.
        """
        try:
            reservation, detail = operation()
            self._persist()
            self.audit_log.record_action(
                actor.role,
                actor.username,
                action.value,
                detail,
                AuditSnapshot.from_reservation(reservation),
            )
        except ReservationError as e:
            return self._fail(actor, action, attempted, e)

        logger.info(f"{action.value}: {reservation.id} by {actor.role.value} {actor.username}")
        return OperationResult.success(reservation)

    def _fail(
        self,
        actor: Actor,
        action: AuditAction,
        attempted: AuditSnapshot,
        error: ReservationError,
    ) -> OperationResult[Reservation]:
        logger.warning(f"{action.value} failed for {actor.username}: {error.message}")
        if isinstance(error, AuditError):
            return OperationResult.failure(error)
        try:
            self.audit_log.record_error(actor.role, actor.username, action.value, error.message, attempted)
        except AuditError as audit_error:
            return OperationResult.failure(audit_error)
        return OperationResult.failure(error)


def build_reservation_manager(
    settings: Settings,
    clock: Optional[ReferenceClock] = None,
) -> ReservationManager:
    """
    Wire a manager from settings: data files, table pool, clock and accounts.

    Raises:
        PersistenceError: If the data directory cannot be created or read
    """
    clock = clock or clock_from_settings(settings)
    with LogContext(data_dir=str(settings.data_dir), table_count=settings.table_count):
        try:
            settings.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Unable to create data directory {settings.data_dir}.") from e

        accounts = AccountService(
            customers=AccountStore(settings.customer_accounts_path),
            receptionists=AccountStore(settings.receptionist_accounts_path),
            admin_username=settings.admin_username,
            admin_password=settings.admin_password,
        )
        return ReservationManager(
            store=ReservationStore(table_count=settings.table_count, clock=clock),
            repository=ReservationRepository(
                settings.reservations_path,
                settings.counter_path,
                table_count=settings.table_count,
            ),
            audit_log=AuditLog(settings.audit_log_path, clock=clock),
            accounts=accounts,
        )
