"""Recurrence rules: deciding whether a habit is due on a given day."""

from __future__ import annotations

from ..domain.habit import Frequency, Habit, require_habit
from ..errors import fails_closed
from .calendar import (
    Clock,
    DayLike,
    day_of_month,
    day_of_week,
    is_future,
    is_past,
    is_today,
    parse_day,
)

WEEKDAY_RANGE = range(0, 7)
MONTHDAY_RANGE = range(1, 32)

DEFAULT_WEEKDAY = 1  # Monday
DEFAULT_MONTHDAY = 1

_DAY_NAMES = (
    ("Sunday", "Sun"),
    ("Monday", "Mon"),
    ("Tuesday", "Tue"),
    ("Wednesday", "Wed"),
    ("Thursday", "Thu"),
    ("Friday", "Fri"),
    ("Saturday", "Sat"),
)


def evaluate_rule(habit: Habit, day: DayLike) -> bool:
    """Evaluate the rule, raising ``InvalidCalendarDay`` on a malformed day."""

    day = parse_day(day)
    kind = habit.kind
    if kind is Frequency.DAILY:
        return True
    if kind is Frequency.WEEKLY:
        if habit.custom_days:
            return day_of_week(day) in habit.custom_days
        return day_of_week(day) == DEFAULT_WEEKDAY
    if kind is Frequency.MONTHLY:
        if habit.custom_days:
            return day_of_month(day) in habit.custom_days
        return day_of_month(day) == DEFAULT_MONTHDAY
    if kind is Frequency.CUSTOM:
        # No default for custom rules: an empty selection is never due.
        return bool(habit.custom_days) and day_of_week(day) in habit.custom_days
    return False


@fails_closed(False)
def is_due(habit: Habit | None, day: DayLike) -> bool:
    """Return True when ``habit``'s recurrence rule schedules it on ``day``.

    Unknown frequencies are never due. Out-of-range ``custom_days`` never match.
    This does not restrict anything to today; see :func:`can_toggle`.
    """

    return evaluate_rule(require_habit(habit), day)


def is_schedulable(habit: Habit) -> bool:
    """Return True when the habit's rule can be due on at least one day."""

    kind = habit.kind
    if kind is None:
        return False
    if kind is Frequency.DAILY:
        return True
    valid_range = MONTHDAY_RANGE if kind is Frequency.MONTHLY else WEEKDAY_RANGE
    if not habit.custom_days:
        return kind is not Frequency.CUSTOM
    return any(day in valid_range for day in habit.custom_days)


@fails_closed(False)
def can_toggle(habit: Habit | None, day: DayLike, clock: Clock | None = None) -> bool:
    """Interactive guard: completion may only be toggled for today, when due."""

    return is_today(day, clock) and evaluate_rule(require_habit(habit), day)


def toggle_block_message(day: DayLike, clock: Clock | None = None) -> dict[str, str] | None:
    """Message shown when a user tries to toggle a day other than today."""

    if is_past(day, clock):
        return {
            "title": "Can't Change the Past",
            "message": (
                "You can't go back in time, but you can use this moment to build "
                "better habits for your future self. Focus on today!"
            ),
            "icon": "history",
        }
    if is_future(day, clock):
        return {
            "title": "Future Not Yet Written",
            "message": (
                "The future is shaped by what you do today. Focus on your present "
                "habits, and tomorrow will take care of itself!"
            ),
            "icon": "update",
        }
    return None


def format_frequency(habit: Habit | None) -> str:
    """Human-readable label for a habit's recurrence rule."""

    if habit is None or not habit.id:
        return "Unknown"
    kind = habit.kind
    if kind is Frequency.DAILY:
        return "Daily"
    if kind in (Frequency.WEEKLY, Frequency.CUSTOM):
        names = [_DAY_NAMES[d][1] for d in habit.custom_days if d in WEEKDAY_RANGE]
        if names:
            return ", ".join(names)
        return "Weekly" if kind is Frequency.WEEKLY else "Custom"
    if kind is Frequency.MONTHLY:
        if habit.custom_days:
            return f"Monthly ({', '.join(str(d) for d in habit.custom_days)})"
        return "Monthly"
    return "Unknown" if not habit.frequency else "Custom"


def day_names() -> list[dict[str, object]]:
    """Weekday choices for the rule editor, Sunday first."""

    return [
        {"id": index, "name": name, "short": short}
        for index, (name, short) in enumerate(_DAY_NAMES)
    ]


def month_days() -> list[dict[str, object]]:
    return [{"id": day, "name": str(day)} for day in MONTHDAY_RANGE]


__all__ = [
    "can_toggle",
    "evaluate_rule",
    "day_names",
    "format_frequency",
    "is_due",
    "is_schedulable",
    "month_days",
    "toggle_block_message",
]
