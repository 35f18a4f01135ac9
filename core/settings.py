"""
Application settings and configuration management using Pydantic Settings.
"""
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.utils_datetime import parse_reference_now


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Settings
    app_name: str = Field(default="Table Reservations", description="Application name")
    app_env: str = Field(default="development", description="Environment (development, staging, production)")
    log_level: str = Field(default="INFO", description="Logging level")

    # Storage Configuration
    data_dir: Path = Field(default=Path("data"), description="Directory holding all durable files")
    reservations_file: str = Field(default="reservations.txt", description="Reservation records file")
    counter_file: str = Field(default="next_id.txt", description="Reservation ID counter file")
    audit_log_file: str = Field(default="logs.txt", description="Append-only audit log")
    customer_accounts_file: str = Field(default="customer_accounts.txt", description="Customer accounts file")
    receptionist_accounts_file: str = Field(
        default="receptionist_accounts.txt",
        description="Receptionist accounts file"
    )

    # Restaurant Configuration
    table_count: int = Field(default=10, ge=1, description="Number of physical tables")
    reference_now: str = Field(
        default="2025-05-22 22:19",
        description="Fixed reference moment (YYYY-MM-DD HH:MM); empty uses the wall clock"
    )
    restaurant_timezone: str = Field(default="Europe/Bratislava", description="Restaurant timezone")

    # Built-in administrator
    admin_username: str = Field(default="admin", description="Administrator username")
    admin_password: str = Field(default="admin123", description="Administrator password")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed_levels:
            raise ValueError(f"log_level must be one of {allowed_levels}")
        return v_upper

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed_envs = ["development", "staging", "production"]
        v_lower = v.lower()
        if v_lower not in allowed_envs:
            raise ValueError(f"app_env must be one of {allowed_envs}")
        return v_lower

    @field_validator("reference_now")
    @classmethod
    def validate_reference_now(cls, v: str) -> str:
        """Validate the reference moment parses (or is empty)."""
        v = v.strip()
        parse_reference_now(v)
        return v

    @property
    def reservations_path(self) -> Path:
        return self.data_dir / self.reservations_file

    @property
    def counter_path(self) -> Path:
        return self.data_dir / self.counter_file

    @property
    def audit_log_path(self) -> Path:
        return self.data_dir / self.audit_log_file

    @property
    def customer_accounts_path(self) -> Path:
        return self.data_dir / self.customer_accounts_file

    @property
    def receptionist_accounts_path(self) -> Path:
        return self.data_dir / self.receptionist_accounts_file

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """Settings from the environment, built on first use and cached."""
    return Settings()
