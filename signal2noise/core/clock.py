"""Clock sources supplying "now" and calendar-day identity."""

from datetime import date, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Source of the current time and the current calendar day."""

    def now(self) -> datetime:
        """Current local timestamp."""
        ...

    def today(self) -> date:
        """Current local calendar day."""
        ...


class SystemClock:
    """Clock backed by the local system time."""

    def now(self) -> datetime:
        return datetime.now()

    def today(self) -> date:
        return date.today()


class FixedClock:
    """Manually driven clock for deterministic tests and replays."""

    def __init__(self, current: datetime) -> None:
        """Initialize the clock at the given instant."""
        self._current = current

    def now(self) -> datetime:
        return self._current

    def today(self) -> date:
        return self._current.date()

    def set(self, current: datetime) -> None:
        self._current = current

    def advance(self, *, days: int = 0, hours: int = 0, minutes: int = 0) -> datetime:
        """Move the clock forward and return the new instant."""
        self._current += timedelta(days=days, hours=hours, minutes=minutes)
        return self._current


def day_key(day: date) -> str:
    """Stable string identity for a calendar day (``YYYY-MM-DD``)."""
    return day.isoformat()


def yesterday_of(day: date) -> date:
    return day - timedelta(days=1)
