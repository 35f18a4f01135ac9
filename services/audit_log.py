"""
Append-only audit trail of logins, reservation actions and errors.

Each entry is a human-readable text block followed by a blank line. Entries
are never rewritten. An audit trail that cannot be written is treated as a
failure of the operation that triggered it.
"""
import logging
from pathlib import Path
from typing import List, Optional, Union

from core.utils_datetime import ReferenceClock
from domain.enums import AuditKind, Role
from domain.errors import AuditError
from domain.models import AuditSnapshot


logger = logging.getLogger(__name__)

SECRET_MASK = "********"


def _role_name(role: Union[Role, str]) -> str:
    return role.value if isinstance(role, Role) else str(role)


class AuditLog:
    """Writes timestamped audit blocks to a single log file."""

    def __init__(self, path: Union[str, Path], clock: Optional[ReferenceClock] = None):
        self.path = Path(path)
        self.clock = clock or ReferenceClock()

    def record_login(self, role: Union[Role, str], username: str, secret: str) -> None:
        """Record a successful login. The secret is written masked."""
        masked = SECRET_MASK if secret else "N/A"
        self._append(
            f"{AuditKind.LOGIN.value}: ({self.clock.timestamp()}, {_role_name(role)}) "
            f"| User: {username} | Password: {masked}"
        )

    def record_action(
        self,
        role: Union[Role, str],
        username: str,
        action: str,
        detail: str,
        snapshot: Optional[AuditSnapshot] = None,
    ) -> None:
        """Record a completed reservation action."""
        self._append(self._block(AuditKind.ACTION, role, username, action, f"Details: {detail}", snapshot))

    def record_error(
        self,
        role: Union[Role, str],
        username: str,
        action: str,
        error_message: str,
        snapshot: Optional[AuditSnapshot] = None,
    ) -> None:
        """Record a failed reservation action."""
        self._append(self._block(AuditKind.ERROR, role, username, action, f"Error: {error_message}", snapshot))

    def read_text(self) -> str:
        """
        Return the whole log, or an empty string if nothing was logged yet.

        Raises:
            AuditError: If the log exists but cannot be read
        """
        if not self.path.exists():
            return ""
        try:
            return self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise AuditError("Unable to open log file.") from e

    def read_entries(self) -> List[str]:
        """Return the log split into individual entries, oldest first."""
        return [block.strip("\n") for block in self.read_text().split("\n\n") if block.strip()]

    def _block(
        self,
        kind: AuditKind,
        role: Union[Role, str],
        username: str,
        action: str,
        outcome_line: str,
        snapshot: Optional[AuditSnapshot],
    ) -> str:
        lines = [
            f"{kind.value} ({self.clock.timestamp()})",
            f"Action: {action} by {_role_name(role)}: {username}",
            outcome_line,
        ]
        if snapshot is not None and not snapshot.is_empty:
            lines.append(snapshot.render())
        return "\n".join(lines)

    def _append(self, entry: str) -> None:
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(f"{entry}\n\n")
        except OSError as e:
            logger.error(f"Error writing audit log {self.path}: {e}")
            raise AuditError("Unable to open log file.") from e
