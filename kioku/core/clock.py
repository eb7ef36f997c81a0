"""Injectable wall clocks for scheduling."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Anything that can tell the current time."""

    def now(self) -> datetime: ...


class SystemClock:
    """Real time in a configured IANA time zone."""

    def __init__(self, tz: tzinfo | str = "UTC"):
        self.tz = ZoneInfo(tz) if isinstance(tz, str) else tz

    def now(self) -> datetime:
        return datetime.now(self.tz)


class FixedClock:
    """A clock that only moves when told to. Used in tests and simulations."""

    def __init__(self, moment: datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        self.moment = moment

    def now(self) -> datetime:
        return self.moment

    def advance(self, **kwargs: float) -> datetime:
        """Move the clock forward by a timedelta built from kwargs."""
        self.moment = self.moment + timedelta(**kwargs)
        return self.moment


def add_calendar_days(moment: datetime, days: int) -> datetime:
    """
    Add whole calendar days, keeping the local wall-clock time.

    With a ZoneInfo-aware moment the UTC offset is recomputed for the target
    day, so a 09:00 review stays at 09:00 across a DST change instead of
    drifting by an hour.

    Args:
        moment: Starting point (naive or aware)
        days: Number of calendar days to add

    Returns:
        The shifted moment in the same time zone
    """
    wall = moment.replace(tzinfo=None) + timedelta(days=days)
    return wall.replace(tzinfo=moment.tzinfo, fold=0)


def to_utc(moment: datetime) -> datetime:
    """Normalize to UTC; naive moments are taken as UTC already."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
