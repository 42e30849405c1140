"""Time utilities and the clock policy every date-dependent rule goes through."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Return current UTC timestamp (timezone-aware)."""
    return datetime.now(timezone.utc)


class ClockPolicy:
    """Supplies "now", the property-local "today" and the season cutoff.

    The cutoff for a season period is a fixed calendar day (October 1 by
    default) of the period's applicable year, at local midnight. A moment
    strictly before it is "before the cutoff".
    """

    def __init__(
        self,
        tz: str = "Europe/Prague",
        cutoff_month: int = 10,
        cutoff_day: int = 1,
    ) -> None:
        self.tz = ZoneInfo(tz)
        self.cutoff_month = cutoff_month
        self.cutoff_day = cutoff_day

    def now(self) -> datetime:
        return utc_now()

    def today(self) -> date:
        return self.now().astimezone(self.tz).date()

    def cutoff_for(self, year: int) -> datetime:
        return datetime(year, self.cutoff_month, self.cutoff_day, tzinfo=self.tz)

    def is_before_cutoff(self, year: int, now: datetime | None = None) -> bool:
        if now is None:
            now = self.now()
        return now < self.cutoff_for(year)

    def expiry(self, ttl_minutes: int, now: datetime | None = None) -> datetime:
        if now is None:
            now = self.now()
        return now + timedelta(minutes=ttl_minutes)


class FixedClock(ClockPolicy):
    """Clock pinned to a settable instant. Used by tests and replays."""

    def __init__(self, at: datetime, **kwargs) -> None:
        super().__init__(**kwargs)
        if at.tzinfo is None:
            at = at.replace(tzinfo=timezone.utc)
        self._at = at

    def now(self) -> datetime:
        return self._at

    def set(self, at: datetime) -> None:
        if at.tzinfo is None:
            at = at.replace(tzinfo=timezone.utc)
        self._at = at

    def advance(self, **delta: float) -> None:
        self._at = self._at + timedelta(**delta)
