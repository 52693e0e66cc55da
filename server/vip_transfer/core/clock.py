"""Time sources used by services and caches."""

import time
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from .config import settings


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime, as stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Clock:
    """
    Injectable clock.

    Services receive a Clock so tests can pin "now" for the lead-time rule,
    confirmation stamps and cache expiry.
    """

    def __init__(self, tz_name: str | None = None):
        self.tz = ZoneInfo(tz_name or settings.business_timezone)

    def now_utc(self) -> datetime:
        """Naive UTC timestamp for persisted audit fields."""
        return utcnow()

    def now_local(self) -> datetime:
        """Naive wall-clock time in the business timezone."""
        return datetime.now(self.tz).replace(tzinfo=None)

    def monotonic(self) -> float:
        return time.monotonic()


class FrozenClock(Clock):
    """Clock pinned to a fixed instant; advance it explicitly."""

    def __init__(self, now_utc: datetime, tz_name: str | None = None):
        super().__init__(tz_name)
        self._now_utc = now_utc.replace(tzinfo=None)
        self._monotonic = 0.0

    def now_utc(self) -> datetime:
        return self._now_utc

    def now_local(self) -> datetime:
        aware = self._now_utc.replace(tzinfo=timezone.utc).astimezone(self.tz)
        return aware.replace(tzinfo=None)

    def monotonic(self) -> float:
        return self._monotonic

    def advance(self, seconds: float) -> None:
        """Move both wall and monotonic time forward."""
        self._now_utc = self._now_utc + timedelta(seconds=seconds)
        self._monotonic += seconds


# Process-wide default clock
system_clock = Clock()
