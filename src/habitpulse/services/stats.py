"""Completion rates, the cross-habit heatmap and dashboard summaries."""

from __future__ import annotations

from collections import abc, defaultdict
from dataclasses import dataclass, field
from typing import Iterable

from ..domain.habit import Category, Habit, require_habit
from ..errors import InvalidHabitRecord, fails_closed
from ..logging_config import get_logger
from .calendar import CalendarDay, Clock, today, trailing_window
from .recurrence import evaluate_rule
from .streaks import DEFAULT_LOOKBACK_DAYS, StreakSummary, compute_streak

logger = get_logger("services.stats")

COMPLETION_WINDOW_DAYS = 30
HEATMAP_WINDOW_DAYS = 180
TOP_N = 3


@fails_closed(0.0)
def completion_rate(
    habit: Habit | None,
    *,
    clock: Clock | None = None,
    window_days: int = COMPLETION_WINDOW_DAYS,
) -> float:
    """Fraction of due days in the trailing window that were completed.

    A habit that was never due in the window reports 0.0. Completions on
    non-due days are ignored, and the result is clamped to 1.0.
    """

    habit = require_habit(habit)
    completed = set(habit.completed_dates)
    due_days = [day for day in trailing_window(window_days, clock) if evaluate_rule(habit, day)]
    if not due_days:
        return 0.0
    done = sum(1 for day in due_days if day in completed)
    return min(done / len(due_days), 1.0)


def _valid_habits(habits: Iterable[Habit | None]) -> list[Habit]:
    valid = []
    for habit in habits:
        if habit is None or not getattr(habit, "id", None):
            logger.warning("Skipping habit without an id", extra={"habit": repr(habit)})
            continue
        valid.append(habit)
    return valid


@fails_closed(dict)
def heatmap(
    habits: Iterable[Habit | None] | None,
    *,
    clock: Clock | None = None,
    window_days: int = HEATMAP_WINDOW_DAYS,
) -> dict[CalendarDay, int]:
    """Completions per day across all habits, for the window ending today.

    Every day in the window is present (oldest first) with at least 0.
    Raw completions count regardless of whether the habit was due.
    """

    if habits is None or isinstance(habits, (str, bytes)) or not isinstance(habits, abc.Iterable):
        raise InvalidHabitRecord("Habit collection is missing or not iterable")
    counts = dict.fromkeys(trailing_window(window_days, clock), 0)
    for habit in _valid_habits(habits):
        for day in habit.completed_dates:
            if day in counts:
                counts[day] += 1
    return counts


def due_today(
    habits: Iterable[Habit | None], *, clock: Clock | None = None
) -> tuple[list[Habit], list[Habit]]:
    """Split habits into (due today, not due today); invalid records are dropped."""

    day = today(clock)
    due: list[Habit] = []
    other: list[Habit] = []
    for habit in _valid_habits(habits):
        (due if evaluate_rule(habit, day) else other).append(habit)
    return due, other


@dataclass(slots=True)
class CategoryStats:
    name: str
    count: int = 0
    completion_rate: float = 0.0


@dataclass(slots=True)
class HabitSummary:
    """Aggregate numbers for the statistics screen."""

    total_habits: int = 0
    active_habits: int = 0
    completed_today: int = 0
    overall_completion_rate: float = 0.0
    top_by_completion: list[tuple[Habit, float]] = field(default_factory=list)
    top_by_streak: list[tuple[Habit, StreakSummary]] = field(default_factory=list)
    categories: list[CategoryStats] = field(default_factory=list)


def summarize(
    habits: Iterable[Habit | None],
    *,
    clock: Clock | None = None,
    window_days: int = COMPLETION_WINDOW_DAYS,
    lookback_days: int | None = DEFAULT_LOOKBACK_DAYS,
) -> HabitSummary:
    """Compute the dashboard numbers for a collection of habits."""

    valid = _valid_habits(habits)
    if not valid:
        return HabitSummary()

    day = today(clock)
    rates = {h.id: completion_rate(h, clock=clock, window_days=window_days) for h in valid}
    streaks = {h.id: compute_streak(h, clock=clock, lookback_days=lookback_days) for h in valid}

    by_category: dict[str, CategoryStats] = {}
    rate_totals: dict[str, float] = defaultdict(float)
    for habit in valid:
        name = habit.category or Category.OTHER.value
        stats = by_category.setdefault(name, CategoryStats(name=name))
        stats.count += 1
        rate_totals[name] += rates[habit.id]
    for name, stats in by_category.items():
        stats.completion_rate = rate_totals[name] / stats.count

    # sorted() is stable, so ties keep the stored order
    by_rate = sorted(valid, key=lambda h: rates[h.id], reverse=True)
    by_streak = sorted(valid, key=lambda h: streaks[h.id].current, reverse=True)

    return HabitSummary(
        total_habits=len(valid),
        active_habits=sum(1 for h in valid if not h.archived),
        completed_today=sum(1 for h in valid if day in h.completed_dates),
        overall_completion_rate=sum(rates.values()) / len(valid),
        top_by_completion=[(h, rates[h.id]) for h in by_rate[:TOP_N]],
        top_by_streak=[(h, streaks[h.id]) for h in by_streak[:TOP_N]],
        categories=list(by_category.values()),
    )


__all__ = [
    "COMPLETION_WINDOW_DAYS",
    "CategoryStats",
    "HEATMAP_WINDOW_DAYS",
    "HabitSummary",
    "completion_rate",
    "due_today",
    "heatmap",
    "summarize",
]
