"""Tests for customer and receptionist accounts."""
import pytest

from domain.enums import Role
from domain.errors import DuplicateAccountError, InvalidCredentialError, PersistenceError
from services.accounts import AccountService, AccountStore, hash_password


@pytest.fixture
def accounts(tmp_path):
    return AccountService(
        customers=AccountStore(tmp_path / "customer_accounts.txt"),
        receptionists=AccountStore(tmp_path / "receptionist_accounts.txt"),
        admin_username="admin",
        admin_password="admin123",
    )


@pytest.mark.unit
class TestAccounts:
    """Account creation and credential checks."""

    def test_create_and_verify_customer(self, accounts):
        accounts.create("alice", "secret1")

        assert accounts.verify("alice", "secret1") == Role.CUSTOMER
        assert accounts.verify("alice", "wrong") is None
        assert accounts.exists("alice") is True

    def test_create_and_verify_receptionist(self, accounts):
        accounts.create("desk1", "pass1", role=Role.RECEPTIONIST)

        assert accounts.verify("desk1", "pass1") == Role.RECEPTIONIST
        assert accounts.exists("desk1", Role.CUSTOMER) is False

    def test_admin_credentials(self, accounts):
        assert accounts.verify("admin", "admin123") == Role.ADMIN
        assert accounts.verify("admin", "admin") is None
        assert accounts.exists("admin", Role.ADMIN) is True

    def test_admin_accounts_cannot_be_created(self, accounts):
        with pytest.raises(ValueError):
            accounts.create("root", "pw", role=Role.ADMIN)

    def test_duplicate_account(self, accounts):
        accounts.create("alice", "secret1")
        with pytest.raises(DuplicateAccountError):
            accounts.create("alice", "other1")

    @pytest.mark.parametrize("username,password", [
        ("alice smith", "secret1"),
        ("alice", "se cret"),
        ("", "secret1"),
        ("alice", "p@ss"),
    ])
    def test_invalid_credentials(self, accounts, username, password):
        with pytest.raises(InvalidCredentialError):
            accounts.create(username, password)

    def test_passwords_are_not_stored_in_clear(self, accounts, tmp_path):
        accounts.create("alice", "secret1")

        content = (tmp_path / "customer_accounts.txt").read_text(encoding="utf-8")

        assert "secret1" not in content
        assert content == f"alice|{hash_password('alice', 'secret1')}\n"

    def test_accounts_survive_reload(self, accounts, tmp_path):
        accounts.create("alice", "secret1")

        reloaded = AccountService(
            customers=AccountStore(tmp_path / "customer_accounts.txt"),
            receptionists=AccountStore(tmp_path / "receptionist_accounts.txt"),
        )

        assert reloaded.verify("alice", "secret1") == Role.CUSTOMER

    def test_unwritable_accounts_file(self, tmp_path):
        accounts = AccountService(
            customers=AccountStore(tmp_path / "missing" / "customers.txt"),
            receptionists=AccountStore(tmp_path / "receptionists.txt"),
        )
        with pytest.raises(PersistenceError):
            accounts.create("alice", "secret1")
