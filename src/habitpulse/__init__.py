"""HabitPulse: habit scheduling, streaks and completion statistics."""

from __future__ import annotations

from .config import BaseConfig, TestConfig
from .domain.habit import Category, Frequency, Habit, new_habit
from .errors import HabitPulseError, InvalidCalendarDay, InvalidHabitRecord
from .services.calendar import (
    Clock,
    FixedClock,
    SystemClock,
    add_days,
    day_of_month,
    day_of_week,
    is_future,
    is_past,
    today,
    week_number,
)
from .services.ledger import is_completed, mark_completed, toggle_completion, unmark
from .services.recurrence import can_toggle, is_due
from .services.stats import completion_rate, heatmap
from .services.streaks import StreakSummary, compute_streak
from .services.tracker import HabitTracker

__all__ = [
    "BaseConfig",
    "Category",
    "Clock",
    "FixedClock",
    "Frequency",
    "Habit",
    "HabitPulseError",
    "HabitTracker",
    "InvalidCalendarDay",
    "InvalidHabitRecord",
    "StreakSummary",
    "SystemClock",
    "TestConfig",
    "add_days",
    "can_toggle",
    "completion_rate",
    "compute_streak",
    "day_of_month",
    "day_of_week",
    "heatmap",
    "is_completed",
    "is_due",
    "is_future",
    "is_past",
    "mark_completed",
    "new_habit",
    "today",
    "toggle_completion",
    "unmark",
    "week_number",
]
