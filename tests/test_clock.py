"""Unit tests for the school clock and the absence cutoff."""

from datetime import datetime
from zoneinfo import ZoneInfo

from app.core.clock import Clock, FixedClock

from conftest import NOW, SCHOOL_TZ


def test_yesterday_end_of_day() -> None:
    clock = FixedClock(NOW)
    assert clock.yesterday_end_of_day() == datetime(2025, 9, 4, 23, 59, 59, 999000)


def test_yesterday_end_of_day_crosses_month() -> None:
    clock = FixedClock(datetime(2025, 3, 1, 0, 30, tzinfo=SCHOOL_TZ))
    assert clock.yesterday_end_of_day() == datetime(2025, 2, 28, 23, 59, 59, 999000)


def test_now_is_rendered_in_school_timezone() -> None:
    """A UTC instant after local midnight still belongs to the previous civil day."""
    utc_instant = datetime(2025, 9, 6, 3, 0, tzinfo=ZoneInfo("UTC"))  # 22:00 on the 5th in Chicago
    clock = FixedClock(utc_instant, timezone=SCHOOL_TZ)
    assert clock.now().day == 5
    assert clock.local_now() == datetime(2025, 9, 5, 22, 0)
    assert clock.yesterday_end_of_day().day == 4


def test_naive_instant_uses_given_timezone() -> None:
    clock = FixedClock(datetime(2025, 9, 5, 12, 0), timezone=SCHOOL_TZ)
    assert clock.now().tzinfo is SCHOOL_TZ


def test_wall_clock_cutoff_precedes_now() -> None:
    clock = Clock(SCHOOL_TZ)
    assert clock.now().tzinfo is not None
    assert clock.yesterday_end_of_day() < clock.local_now()
