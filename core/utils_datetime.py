"""
DateTime utilities for the reservation reference clock.

All past/future checks are judged against a single "reference now". It is
either pinned to a fixed moment (the default, see ``Settings.reference_now``)
or follows the wall clock in the restaurant timezone.
"""
from datetime import datetime
from typing import Optional, TYPE_CHECKING

import pytz

if TYPE_CHECKING:
    from core.settings import Settings


# Timezone configuration
TIMEZONE = pytz.timezone('Europe/Bratislava')

REFERENCE_FORMAT = '%Y-%m-%d %H:%M'
DATE_FORMAT = '%Y-%m-%d'
TIME_FORMAT = '%H:%M'
TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'


def get_current_datetime(tz=TIMEZONE) -> datetime:
    """Get current wall-clock datetime in the restaurant timezone."""
    return datetime.now(tz)


def parse_reference_now(text: Optional[str]) -> Optional[datetime]:
    """
    Parse a reference moment in ``YYYY-MM-DD HH:MM`` form.

    Args:
        text: Reference moment text; empty or None means "no fixed moment"

    Returns:
        Naive datetime or None

    Raises:
        ValueError: If the text is not empty and does not parse
    """
    if not text or not text.strip():
        return None
    return datetime.strptime(text.strip(), REFERENCE_FORMAT)


class ReferenceClock:
    """Source of the reference "now" used for date/time validation and audit timestamps."""

    def __init__(self, fixed: Optional[datetime] = None, tz=TIMEZONE):
        self.fixed = fixed
        self.tz = tz

    def now(self) -> datetime:
        if self.fixed is not None:
            return self.fixed
        return get_current_datetime(self.tz)

    def today(self) -> str:
        """Reference date as ``YYYY-MM-DD``."""
        return self.now().strftime(DATE_FORMAT)

    def current_time(self) -> str:
        """Reference time of day as ``HH:MM``."""
        return self.now().strftime(TIME_FORMAT)

    def timestamp(self) -> str:
        """Reference moment as ``YYYY-MM-DD HH:MM:SS``."""
        return self.now().strftime(TIMESTAMP_FORMAT)

    def __repr__(self) -> str:
        mode = self.fixed.strftime(REFERENCE_FORMAT) if self.fixed else str(self.tz)
        return f"ReferenceClock({mode})"


def clock_from_settings(settings: "Settings") -> ReferenceClock:
    """Build the reference clock described by the settings."""
    return ReferenceClock(
        fixed=parse_reference_now(settings.reference_now),
        tz=pytz.timezone(settings.restaurant_timezone),
    )
