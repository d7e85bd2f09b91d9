"""Calendar-day helpers: durations, timeline windows and display formats.

All functions work on whole calendar days. ``datetime`` values are accepted
wherever a ``date`` is expected and their time-of-day is dropped.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from pmplanner.tasks.model import Task

EMPTY_WINDOW_DAYS = 30
WINDOW_MARGIN_DAYS = 7

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    @property
    def days(self) -> int:
        return days_between(self.end, self.start)


def _as_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def format_date(value: date) -> str:
    """``2024-01-05``"""
    return _as_date(value).strftime("%Y-%m-%d")


def format_display_date(value: date) -> str:
    """``Jan 05, 2024``"""
    return _as_date(value).strftime("%b %d, %Y")


def parse_date(text: str) -> date:
    """Parse a ``YYYY-MM-DD`` string. Raises ``ValueError`` on anything else."""
    return date.fromisoformat(text.strip())


def add_days(value: date, days: int) -> date:
    return _as_date(value) + timedelta(days=days)


def days_between(later: date, earlier: date) -> int:
    """Signed number of whole days from *earlier* to *later*."""
    return (_as_date(later) - _as_date(earlier)).days


def is_weekend(value: date) -> bool:
    return _as_date(value).weekday() >= 5


def each_day(start: date, end: date) -> list[date]:
    """Every calendar day from *start* to *end*, both included."""
    first = _as_date(start)
    count = days_between(end, first) + 1
    return [first + timedelta(days=i) for i in range(max(0, count))]


def calculate_duration(start: date, end: date) -> int:
    """Inclusive day count: start of *start* to end of *end*, truncated, plus one.

    ``end < start`` is not rejected; the truncation yields 1 for a one-day
    inversion and smaller values beyond that.
    """
    span = datetime.combine(_as_date(end), time.max) - datetime.combine(_as_date(start), time.min)
    return int(span / _ONE_DAY) + 1


def get_date_range(tasks: Iterable[Task], today: date | None = None) -> DateRange:
    """Timeline window covering every task with a one-week margin on each side.

    With no tasks the window is the 30 days starting *today*.
    """
    dates = [d for task in tasks for d in (_as_date(task.start_date), _as_date(task.end_date))]
    if not dates:
        first = _as_date(today) if today is not None else date.today()
        return DateRange(start=first, end=add_days(first, EMPTY_WINDOW_DAYS))
    return DateRange(
        start=add_days(min(dates), -WINDOW_MARGIN_DAYS),
        end=add_days(max(dates), WINDOW_MARGIN_DAYS),
    )
