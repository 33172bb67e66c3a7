"""
Date/time and id helpers shared by the gamification components

RULES:
- Clocks return timezone-aware UTC datetimes
- Streak arithmetic works on calendar dates (epoch-day differences)
- Never mix naive and aware datetimes
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Callable
from uuid import uuid4

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]


def now_utc() -> datetime:
    """Current datetime in UTC (timezone-aware)"""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid4().hex


def days_between(earlier: date, later: date) -> int:
    """
    Whole calendar days from earlier to later

    Negative when later is actually before earlier.
    """
    return later.toordinal() - earlier.toordinal()


class ManualClock:
    """
    Clock that only moves when told to

    Used by the demo simulation and the test suite. Naive start times are
    treated as UTC.

    Example:
        clock = ManualClock(datetime(2024, 3, 1, 9, 0))
        engine = GamificationEngine(store, clock=clock)
        clock.advance(days=1)
    """

    def __init__(self, start: datetime):
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        self._now = start

    def __call__(self) -> datetime:
        return self._now

    def advance(self, days: int = 0, hours: int = 0, minutes: int = 0) -> datetime:
        self._now = self._now + timedelta(days=days, hours=hours, minutes=minutes)
        logger.debug(f"ManualClock advanced to {self._now.isoformat()}")
        return self._now

    def today(self) -> date:
        return self._now.date()
