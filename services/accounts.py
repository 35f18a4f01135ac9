"""
Customer and receptionist accounts.

The reservation core only needs "who is this and in which role"; this module
answers that from two flat files of ``username|password_hash`` lines plus the
built-in administrator credential from settings.
"""
import hashlib
import hmac
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from domain.enums import Role
from domain.errors import DuplicateAccountError, InvalidCredentialError, PersistenceError
from services.persistence import atomic_write_text
from services.reservation_validation import validate_credential


logger = logging.getLogger(__name__)


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def hash_password(username: str, password: str) -> str:
    """Salted SHA-256 of a password, hex encoded."""
    return hashlib.sha256(f"{username}:{password}".encode("utf-8")).hexdigest()


class AccountStore:
    """One accounts file: ``username|password_hash`` per line."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        accounts: Dict[str, str] = {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                for line in f:
                    username, sep, password_hash = line.rstrip("\r\n").partition("|")
                    if not sep or not username:
                        continue
                    accounts[username] = password_hash
        except OSError as e:
            raise PersistenceError(f"Unable to open {self.path.name} for reading.") from e
        return accounts

    def save(self, accounts: Dict[str, str]) -> None:
        text = "".join(f"{username}|{password_hash}\n" for username, password_hash in accounts.items())
        try:
            atomic_write_text(self.path, text)
        except OSError as e:
            raise PersistenceError(f"Unable to open {self.path.name} for writing.") from e


class AccountService:
    """Creates accounts and resolves credentials to a role."""

    def __init__(
        self,
        customers: AccountStore,
        receptionists: AccountStore,
        admin_username: str = "admin",
        admin_password: str = "admin123",
    ):
        self.stores = {
            Role.CUSTOMER: customers,
            Role.RECEPTIONIST: receptionists,
        }
        self.admin_username = admin_username
        self.admin_password = admin_password

    def exists(self, username: str, role: Role = Role.CUSTOMER) -> bool:
        if role == Role.ADMIN:
            return username == self.admin_username
        return username in self.stores[role].load()

    def create(self, username: str, password: str, role: Role = Role.CUSTOMER) -> None:
        """
        Create a customer or receptionist account.

        Raises:
            InvalidCredentialError: If username or password is not alphanumeric
            DuplicateAccountError: If the username is taken for that role
            PersistenceError: If the accounts file cannot be written
        """
        if role not in self.stores:
            raise ValueError(f"Accounts cannot be created for role {role.value}")
        if not validate_credential(username):
            raise InvalidCredentialError(
                "Invalid username. Use letters and numbers only (no spaces or special characters).",
                field="username",
            )
        if not validate_credential(password):
            raise InvalidCredentialError(
                "Invalid password. Use letters and numbers only (no spaces or special characters).",
                field="password",
            )

        store = self.stores[role]
        accounts = store.load()
        if username in accounts:
            raise DuplicateAccountError(
                "Account already exists. Please choose a different username.",
                field="username",
            )
        accounts[username] = hash_password(username, password)
        store.save(accounts)
        logger.info(f"Created {role.value} account {username}")

    def verify(self, username: str, password: str) -> Optional[Role]:
        """
        Resolve a credential pair to a role.

        The administrator is checked first, then receptionists, then
        customers.

        Returns:
            The matching role, or None if nothing matches
        """
        if _same(username, self.admin_username) and _same(password, self.admin_password):
            return Role.ADMIN

        candidate = hash_password(username, password)
        for role in (Role.RECEPTIONIST, Role.CUSTOMER):
            stored = self.stores[role].load().get(username)
            if stored is not None and _same(stored, candidate):
                return role
        return None
