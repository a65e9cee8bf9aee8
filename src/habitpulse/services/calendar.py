"""Day-granularity calendar arithmetic and the injectable clock.

Every calendar day is exchanged as the canonical ``YYYY-MM-DD`` string in
the device's local timezone. The helpers here accept either that string or a
``datetime.date`` and always hand back strings, so callers never deal with
time-of-day.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, Protocol, Union

from ..errors import InvalidCalendarDay, fails_closed

CalendarDay = str
DayLike = Union[str, date]

_DAY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class Clock(Protocol):
    """Source of the current calendar day."""

    def now(self) -> CalendarDay:  # pragma: no cover - interface
        ...


class SystemClock:
    """Clock backed by the local wall clock."""

    def now(self) -> CalendarDay:
        return format_day(date.today())


@dataclass(frozen=True)
class FixedClock:
    """Clock pinned to a single day, used by tests and the ``--today`` CLI flag."""

    day: CalendarDay

    def __post_init__(self) -> None:
        object.__setattr__(self, "day", format_day(parse_day(self.day)))

    def now(self) -> CalendarDay:
        return self.day


_SYSTEM_CLOCK = SystemClock()


def resolve_clock(clock: Clock | None) -> Clock:
    """Return ``clock`` or the shared system clock."""

    return clock if clock is not None else _SYSTEM_CLOCK


def parse_day(value: DayLike) -> date:
    """Parse a ``YYYY-MM-DD`` string (or pass through a date) into a ``date``."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DAY_PATTERN.match(value):
        raise InvalidCalendarDay(value)
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidCalendarDay(value) from exc


def format_day(value: date) -> CalendarDay:
    """Render a date as ``%04d-%02d-%02d``."""

    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def normalize_day(value: DayLike) -> CalendarDay:
    """Validate ``value`` and return its canonical string form."""

    return format_day(parse_day(value))


def today(clock: Clock | None = None) -> CalendarDay:
    """Return the current local day."""

    return normalize_day(resolve_clock(clock).now())


@fails_closed(False)
def is_past(day: DayLike, clock: Clock | None = None) -> bool:
    return parse_day(day) < parse_day(today(clock))


@fails_closed(False)
def is_future(day: DayLike, clock: Clock | None = None) -> bool:
    return parse_day(day) > parse_day(today(clock))


@fails_closed(False)
def is_today(day: DayLike, clock: Clock | None = None) -> bool:
    return parse_day(day) == parse_day(today(clock))


@fails_closed(None)
def day_of_week(day: DayLike) -> int | None:
    """Return 0 for Sunday through 6 for Saturday, or ``None`` for a malformed day."""

    return parse_day(day).isoweekday() % 7


@fails_closed(None)
def day_of_month(day: DayLike) -> int | None:
    return parse_day(day).day


@fails_closed(None)
def add_days(day: DayLike, n: int) -> CalendarDay | None:
    """Shift ``day`` by ``n`` days across month and year boundaries.

    Returns ``None`` for a malformed day or a result outside years 1..9999.
    """

    start = parse_day(day)
    try:
        return format_day(start + timedelta(days=n))
    except OverflowError as exc:
        raise InvalidCalendarDay(f"{format_day(start)} {n:+d} days") from exc


def days_between(start: DayLike, end: DayLike) -> int:
    """Signed number of days from ``start`` to ``end``."""

    return (parse_day(end) - parse_day(start)).days


@fails_closed(None)
def week_number(day: DayLike) -> tuple[int, int] | None:
    """ISO 8601 (year, week); week 1 holds the year's first Thursday."""

    iso = parse_day(day).isocalendar()
    return iso[0], iso[1]


def iter_days(start: DayLike, end: DayLike) -> Iterator[CalendarDay]:
    """Yield every day from ``start`` to ``end`` inclusive, ascending."""

    cursor = parse_day(start)
    last = parse_day(end)
    while cursor <= last:
        yield format_day(cursor)
        if cursor == last:
            break
        cursor += timedelta(days=1)


def trailing_window(days: int, clock: Clock | None = None) -> list[CalendarDay]:
    """Return the ``days`` calendar days ending today, oldest first."""

    if days <= 0:
        return []
    end = parse_day(today(clock))
    # Near 0001-01-01 the window is cut short rather than overflowing
    span = min(days - 1, (end - date.min).days)
    return list(iter_days(end - timedelta(days=span), end))


__all__ = [
    "CalendarDay",
    "Clock",
    "DayLike",
    "FixedClock",
    "SystemClock",
    "add_days",
    "day_of_month",
    "day_of_week",
    "days_between",
    "format_day",
    "is_future",
    "is_past",
    "is_today",
    "iter_days",
    "normalize_day",
    "parse_day",
    "resolve_clock",
    "today",
    "trailing_window",
    "week_number",
]
