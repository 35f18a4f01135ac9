"""
Logging configuration with JSON formatter for structured logging.
"""
import logging
import sys
from typing import Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

from core.settings import Settings, get_settings


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with additional fields."""

    def __init__(self, *args: Any, app_name: str = "", environment: str = "", **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.app_name = app_name
        self.environment = environment

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ) -> None:
        """Add custom fields to log record."""
        super().add_fields(log_record, record, message_dict)

        # Add standard fields
        log_record['timestamp'] = self.formatTime(record, self.datefmt)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['module'] = record.module
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno

        # Add application context
        log_record['app_name'] = self.app_name
        log_record['environment'] = self.environment

        # Add exception info if present
        if record.exc_info:
            log_record['exc_info'] = self.formatException(record.exc_info)


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure application logging.

    Structured JSON logging for staging/production, human-readable
    logging for development.
    """
    settings = settings or get_settings()
    use_json = settings.app_env in ["production", "staging"]

    if use_json:
        formatter: logging.Formatter = CustomJsonFormatter(
            fmt='%(timestamp)s %(level)s %(name)s %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
            app_name=settings.app_name,
            environment=settings.app_env,
        )
    else:
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level))

    # Remove existing handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.info(
        "Logging configured",
        extra={
            "log_level": settings.log_level,
            "environment": settings.app_env,
            "json_logging": use_json
        }
    )


# Context manager for adding context to logs
class LogContext:
    """Context manager for adding contextual information to logs."""

    def __init__(self, **kwargs: Any):
        """
        Initialize log context.

        Args:
            **kwargs: Key-value pairs to add to log context
        """
        self.context = kwargs
        self.logger = logging.getLogger(__name__)

    def __enter__(self) -> 'LogContext':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            self.logger.error(
                f"Exception in context: {exc_type.__name__}",
                extra=self.context,
                exc_info=True
            )

