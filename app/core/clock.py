"""School clock: "now" in the school's civil timezone and the absence cutoff."""

from datetime import datetime, time, timedelta, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from app.core.config import settings


class Clock:
    """Wall clock rendered in the school's fixed civil timezone."""

    def __init__(self, timezone: Optional[tzinfo] = None) -> None:
        self.timezone = timezone or ZoneInfo(settings.school_timezone)

    def now(self) -> datetime:
        return datetime.now(self.timezone)

    def local_now(self) -> datetime:
        """Current civil date-time without tzinfo, comparable with stored class dates."""
        return self.now().replace(tzinfo=None)

    def yesterday_end_of_day(self) -> datetime:
        """23:59:59.999 of the day before today, as a naive civil date-time.

        An absence only becomes countable once its class day has fully elapsed.
        """
        yesterday = self.now().date() - timedelta(days=1)
        return datetime.combine(yesterday, time(23, 59, 59, 999000))


class FixedClock(Clock):
    """Clock pinned to a given instant (tests, maintenance replays)."""

    def __init__(self, instant: datetime, timezone: Optional[tzinfo] = None) -> None:
        super().__init__(timezone or instant.tzinfo)
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=self.timezone)
        self.instant = instant

    def now(self) -> datetime:
        return self.instant.astimezone(self.timezone)


def get_clock() -> Clock:
    """FastAPI dependency; overridden in tests."""
    return Clock()
