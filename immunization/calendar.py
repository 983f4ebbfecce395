"""
Civil Calendar for the Child Immunization Tracker.

Every schedule comparison happens on plain calendar dates in one fixed UTC
offset (India Standard Time, +05:30 by default), never in the host's local
time zone. A visit stamped 23:50 UTC belongs to the next civil day in IST.
"""

from datetime import date as date_type, datetime, timedelta, timezone
from typing import Optional, Union

IST_OFFSET = timedelta(hours=5, minutes=30)

InstantLike = Union[datetime, date_type, str]


def add_days(day: date_type, days: int) -> date_type:
    """
    Calendar-day arithmetic; days may be negative.
    Results past date.min or date.max are clamped to that bound.
    """
    try:
        return day + timedelta(days=days)
    except OverflowError:
        return date_type.max if days > 0 else date_type.min


class CivilCalendar:
    """
    Maps absolute instants onto civil dates under a fixed UTC offset.
    """

    def __init__(self, offset: timedelta = IST_OFFSET, name: Optional[str] = None):
        self.offset = offset
        self.tz = timezone(offset, name) if name else timezone(offset)

    def to_local_date(self, instant: InstantLike) -> date_type:
        """
        Return the civil date an instant falls on.

        - Aware datetimes are shifted to this calendar's offset.
        - Naive datetimes are read as UTC.
        - Plain dates are already civil dates and pass through unchanged.
        - Strings are parsed as ISO-8601 first ('YYYY-MM-DD' is a plain date).
        """
        if isinstance(instant, str):
            instant = self._parse(instant)

        if isinstance(instant, datetime):
            if instant.tzinfo is None:
                instant = instant.replace(tzinfo=timezone.utc)
            try:
                return instant.astimezone(self.tz).date()
            except OverflowError:
                # Shifted past the last (or before the first) representable day
                return date_type.max if instant.year == date_type.max.year else date_type.min

        return instant

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date_type:
        """Current civil date under this calendar."""
        return self.now().date()

    @staticmethod
    def _parse(text: str) -> Union[datetime, date_type]:
        text = text.strip()
        if len(text) == 10:
            return date_type.fromisoformat(text)
        # fromisoformat only learned 'Z' in 3.11
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)

    def __repr__(self) -> str:
        return f"CivilCalendar(offset={self.offset})"


# Default calendar used across the tracker
IST = CivilCalendar(IST_OFFSET, "IST")
