"""Completion ledger: reading and editing a habit's completed days.

Edits return new ``Habit`` values; the input is never mutated. None of these
functions look at the recurrence rule, so historical data may legitimately
hold completions on days the habit was not due.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from ..domain.habit import Habit, require_habit
from ..errors import HabitPulseError, fails_closed
from ..logging_config import get_logger
from .calendar import CalendarDay, DayLike, iter_days, normalize_day
from .recurrence import evaluate_rule

logger = get_logger("services.ledger")


@dataclass(frozen=True, slots=True)
class DayStatus:
    """Calendar cell state for one habit on one day."""

    completed: bool
    due: bool


@fails_closed(False)
def is_completed(habit: Habit | None, day: DayLike) -> bool:
    return normalize_day(day) in require_habit(habit).completed_dates


def _edit(habit: Habit | None, day: DayLike, *, add: bool) -> Habit | None:
    try:
        habit = require_habit(habit)
        key = normalize_day(day)
    except HabitPulseError as exc:
        logger.warning(
            "Completion edit ignored: %s",
            exc,
            extra={"operation": "mark_completed" if add else "unmark"},
        )
        return habit
    present = key in habit.completed_dates
    if add and not present:
        return replace(habit, completed_dates=habit.completed_dates + (key,))
    if not add and present:
        return replace(
            habit, completed_dates=tuple(d for d in habit.completed_dates if d != key)
        )
    return habit


def mark_completed(habit: Habit | None, day: DayLike) -> Habit | None:
    """Return ``habit`` with ``day`` recorded as completed (idempotent).

    Malformed input is logged and the habit comes back unchanged.
    """

    return _edit(habit, day, add=True)


def unmark(habit: Habit | None, day: DayLike) -> Habit | None:
    """Return ``habit`` with ``day`` removed from its ledger (idempotent)."""

    return _edit(habit, day, add=False)


def toggle_completion(habit: Habit | None, day: DayLike) -> Habit | None:
    if is_completed(habit, day):
        return unmark(habit, day)
    return mark_completed(habit, day)


@fails_closed(dict)
def completion_status(
    habit: Habit | None, start: DayLike, end: DayLike
) -> dict[CalendarDay, DayStatus]:
    """Per-day completed/due state for every day in ``start``..``end``."""

    habit = require_habit(habit)
    completed = set(habit.completed_dates)
    return {
        day: DayStatus(completed=day in completed, due=evaluate_rule(habit, day))
        for day in iter_days(start, end)
    }


__all__ = [
    "DayStatus",
    "completion_status",
    "is_completed",
    "mark_completed",
    "toggle_completion",
    "unmark",
]
