"""Tests for settings, the reference clock and logging setup."""
import json
import logging
import os
import subprocess
import sys
from datetime import datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

from core.logging import CustomJsonFormatter, LogContext, setup_logging
from core.settings import Settings, get_settings
from core.utils_datetime import ReferenceClock, clock_from_settings, parse_reference_now


PROJECT_ROOT = Path(__file__).resolve().parent.parent


@pytest.mark.unit
class TestSettings:
    """Settings defaults and validation."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.table_count == 10
        assert settings.reference_now == "2025-05-22 22:19"
        assert settings.reservations_path == Path("data") / "reservations.txt"
        assert settings.counter_path == Path("data") / "next_id.txt"
        assert settings.audit_log_path == Path("data") / "logs.txt"

    def test_environment_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TABLE_COUNT", "4")
        monkeypatch.setenv("DATA_DIR", str(tmp_path))

        settings = Settings(_env_file=None)

        assert settings.table_count == 4
        assert settings.customer_accounts_path == tmp_path / "customer_accounts.txt"

    def test_log_level_is_normalized(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_values(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="LOUD")
        with pytest.raises(ValidationError):
            Settings(_env_file=None, app_env="qa")
        with pytest.raises(ValidationError):
            Settings(_env_file=None, table_count=0)
        with pytest.raises(ValidationError):
            Settings(_env_file=None, reference_now="tomorrow")


@pytest.mark.unit
class TestReferenceClock:
    """The reference "now" used for validation and timestamps."""

    def test_fixed_clock(self, clock):
        assert clock.today() == "2025-05-22"
        assert clock.current_time() == "22:19"
        assert clock.timestamp() == "2025-05-22 22:19:00"

    def test_parse_reference_now(self):
        assert parse_reference_now("2025-05-22 22:19") == datetime(2025, 5, 22, 22, 19)
        assert parse_reference_now("") is None
        with pytest.raises(ValueError):
            parse_reference_now("22:19 2025-05-22")

    def test_clock_from_settings(self):
        clock = clock_from_settings(Settings(_env_file=None, reference_now="2026-01-02 08:30"))
        assert clock.today() == "2026-01-02"

    def test_wall_clock(self):
        clock = clock_from_settings(Settings(_env_file=None, reference_now=""))

        assert clock.fixed is None
        assert clock.now().tzinfo is not None
        assert isinstance(ReferenceClock().today(), str)


@pytest.mark.unit
@pytest.mark.usefixtures("restore_root_logger")
class TestLogging:
    """Logging setup per environment."""

    def test_development_uses_plain_formatter(self):
        setup_logging(Settings(_env_file=None, app_env="development", log_level="DEBUG"))

        root_logger = logging.getLogger()
        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 1
        assert not isinstance(root_logger.handlers[0].formatter, CustomJsonFormatter)

    def test_production_uses_json_formatter(self):
        setup_logging(Settings(_env_file=None, app_env="production"))

        formatter = logging.getLogger().handlers[0].formatter
        assert isinstance(formatter, CustomJsonFormatter)

        record = logging.LogRecord("services.reservation_store", logging.INFO, __file__, 10, "Reserved", None, None)
        payload = json.loads(formatter.format(record))
        assert payload["message"] == "Reserved"
        assert payload["level"] == "INFO"
        assert payload["app_name"] == "Table Reservations"
        assert payload["environment"] == "production"

    def test_log_context_logs_exceptions(self, caplog):
        with caplog.at_level(logging.ERROR):
            with pytest.raises(RuntimeError):
                with LogContext(reservation_id="ID 1A"):
                    raise RuntimeError("boom")

        assert "Exception in context: RuntimeError" in caplog.text

    def test_setup_logging_defaults_to_environment_settings(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "staging")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        get_settings.cache_clear()
        try:
            setup_logging()
        finally:
            get_settings.cache_clear()

        root_logger = logging.getLogger()
        assert root_logger.level == logging.WARNING
        assert isinstance(root_logger.handlers[0].formatter, CustomJsonFormatter)


@pytest.mark.unit
class TestImportsIgnoreEnvironment:
    """Importing the project never builds settings from the environment."""

    @pytest.mark.parametrize("module", ["core.logging", "services.reservation_manager"])
    def test_import_with_invalid_environment(self, module):
        env = {**os.environ, "APP_ENV": "qa", "PYTHONPATH": str(PROJECT_ROOT)}

        completed = subprocess.run(
            [sys.executable, "-c", f"import {module}"],
            cwd=PROJECT_ROOT,
            env=env,
            capture_output=True,
            text=True,
        )

        assert completed.returncode == 0, completed.stderr

    def test_explicit_settings_work_with_invalid_environment(self, monkeypatch, test_settings, clock):
        from services.reservation_manager import build_reservation_manager

        monkeypatch.setenv("APP_ENV", "qa")

        manager = build_reservation_manager(test_settings, clock=clock)

        assert manager.list_all() == []
