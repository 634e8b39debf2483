"""Time sources for the store."""

from datetime import date, datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """Provides the current time and calendar date."""

    def now(self) -> datetime: ...

    def today(self) -> str: ...


class SystemClock:
    """Wall-clock time in UTC, read fresh on every call."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> str:
        return self.now().date().isoformat()


class FixedClock:
    """Clock pinned to a given instant, advanced by hand."""

    def __init__(self, start: datetime):
        self.current = start

    @classmethod
    def on(cls, day: str) -> "FixedClock":
        """Create a clock at noon UTC on an ISO date."""
        return cls(datetime.fromisoformat(day).replace(hour=12, tzinfo=timezone.utc))

    def now(self) -> datetime:
        return self.current

    def today(self) -> str:
        return self.current.date().isoformat()

    def advance(self, **kwargs):
        """Move forward by a timedelta given as keyword arguments."""
        self.current += timedelta(**kwargs)


def week_bounds(day: str) -> tuple[str, str]:
    """
    Get the Sunday-Saturday week containing a date.

    Args:
        day: ISO date (YYYY-MM-DD)

    Returns:
        Tuple of (week_start, week_end) as ISO dates
    """
    current = date.fromisoformat(day)

    # Python weekday: Monday=0, Sunday=6
    days_since_sunday = (current.weekday() + 1) % 7
    week_start = current - timedelta(days=days_since_sunday)
    week_end = week_start + timedelta(days=6)

    return week_start.isoformat(), week_end.isoformat()
