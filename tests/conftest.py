"""Pytest configuration and fixtures for reservation tests."""
import logging
from datetime import datetime

import pytest

from core.settings import Settings
from core.utils_datetime import ReferenceClock
from domain.enums import Role
from domain.models import Actor
from services.audit_log import AuditLog
from services.persistence import ReservationRepository
from services.reservation_manager import build_reservation_manager
from services.reservation_store import ReservationStore


@pytest.fixture(scope="function")
def reference_now():
    """Fixed reference moment: 2025-05-22 22:19."""
    return datetime(2025, 5, 22, 22, 19)


@pytest.fixture(scope="function")
def clock(reference_now):
    return ReferenceClock(fixed=reference_now)


@pytest.fixture(scope="function")
def data_dir(tmp_path):
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture(scope="function")
def test_settings(data_dir):
    """Settings pointing every durable file into a temporary directory."""
    return Settings(
        _env_file=None,
        data_dir=data_dir,
        app_env="development",
        log_level="DEBUG",
        reference_now="2025-05-22 22:19",
    )


@pytest.fixture(scope="function")
def store(clock):
    return ReservationStore(table_count=10, clock=clock)


@pytest.fixture(scope="function")
def repository(test_settings):
    return ReservationRepository(
        test_settings.reservations_path,
        test_settings.counter_path,
        table_count=test_settings.table_count,
    )


@pytest.fixture(scope="function")
def audit_log(test_settings, clock):
    return AuditLog(test_settings.audit_log_path, clock=clock)


@pytest.fixture(scope="function")
def manager(test_settings, clock):
    """A manager wired over empty temporary files."""
    return build_reservation_manager(test_settings, clock=clock)


@pytest.fixture(scope="function")
def restart(test_settings, clock):
    """Factory simulating a process restart over the same data directory."""
    def _restart():
        return build_reservation_manager(test_settings, clock=clock)
    return _restart


@pytest.fixture(scope="function")
def customer():
    return Actor(role=Role.CUSTOMER, username="alice")


@pytest.fixture(scope="function")
def admin():
    return Actor(role=Role.ADMIN, username="admin")


@pytest.fixture(scope="function")
def sample_reservation_data():
    """Provide sample reservation data for testing."""
    return {
        "customer_name": "Alice",
        "phone_number": "123-456-7890",
        "party_size": 2,
        "date": "2025-06-01",
        "time": "19:00",
        "table_index": 0,
    }


@pytest.fixture(scope="function")
def create_sample_reservation(store, sample_reservation_data):
    """Factory fixture to create a reservation directly in the store."""
    def _create(**kwargs):
        data = sample_reservation_data.copy()
        data.update(kwargs)
        return store.reserve(**data)
    return _create


@pytest.fixture(scope="function")
def restore_root_logger():
    """Drop the console handler installed by setup_logging and restore the level."""
    root_logger = logging.getLogger()
    level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        # pytest's own capture handlers are StreamHandler subclasses
        if type(handler) is logging.StreamHandler:
            root_logger.removeHandler(handler)
    root_logger.setLevel(level)
