"""Clock abstraction and calendar-day helpers."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        """Return the current time as an aware datetime."""


@dataclass
class SystemClock(Clock):
    """Clock backed by the system time."""

    def now(self) -> datetime:
        """Return the current UTC time."""
        return datetime.now(tz=UTC)


def local_today(clock: Clock, timezone_name: str) -> date:
    """Return today's date in the given timezone."""
    return clock.now().astimezone(ZoneInfo(timezone_name)).date()


def day_bounds(day: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """Return the UTC start and end (exclusive) of a local calendar day."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)


def local_day(moment: datetime, tz: tzinfo) -> date:
    """Return the calendar day a timestamp falls on in the given timezone."""
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(tz).date()
