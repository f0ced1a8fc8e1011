"""
Clock and calendar-month helpers.

Every entry point that needs "today" receives a Clock instead of
reading wall-clock time itself. Month keys are always the first day of
the month.
"""

from datetime import date, datetime, timezone
from typing import Protocol

from dateutil.relativedelta import relativedelta


class Clock(Protocol):
    """Anything with a now() returning an aware datetime."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """A clock frozen at a given instant. Used by tests and replays."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance(self, **kwargs) -> None:
        """Move the clock forward by a relativedelta (e.g. months=1, days=3)."""
        self._instant = self._instant + relativedelta(**kwargs)


def today(clock: Clock) -> date:
    return clock.now().date()


def first_of_month(day: date) -> date:
    if isinstance(day, datetime):
        day = day.date()
    return day.replace(day=1)


def add_months(day: date, months: int) -> date:
    return day + relativedelta(months=months)


def month_offset(month: date, months: int) -> date:
    """First day of the month `months` after the month containing `month`."""
    return add_months(first_of_month(month), months)


def months_between(start: date, end: date) -> int:
    """
    Whole calendar months from start to end.

    Partial months are truncated toward zero, so 15 Jan -> 14 Mar is 1.
    Negative when end is before start.
    """
    delta = relativedelta(end, start)
    return delta.years * 12 + delta.months
