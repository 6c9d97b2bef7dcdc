"""Wall clock used for dedup windows, 'today' and live worked-time totals.

Times are naive server-local datetimes; the time clock is single-site and
does not do per-employee timezones.
"""
from datetime import datetime, date, time, timedelta
from typing import Tuple


class Clock:
    def now(self) -> datetime:
        return datetime.now()

    def today(self) -> date:
        return self.now().date()

    def today_bounds(self) -> Tuple[datetime, datetime]:
        """[local midnight, local midnight + 24h)."""
        start = datetime.combine(self.today(), time.min)
        return start, start + timedelta(days=1)


class FrozenClock(Clock):
    """Clock pinned to a fixed instant. Used by tests and replay scripts."""

    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


def to_local_naive(value: datetime) -> datetime:
    """Offset-aware values are converted to server-local time and stripped."""
    if value.tzinfo is not None and value.utcoffset() is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


_system_clock = Clock()


# Dependency for FastAPI routes
def get_clock() -> Clock:
    return _system_clock
