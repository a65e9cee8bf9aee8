"""Clock-bound facade over the scheduling, ledger and statistics services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from ..config import BaseConfig
from ..domain.habit import Habit, edit_habit
from ..domain.repositories.habit import HabitRepository
from ..logging_config import get_logger
from . import ledger, recurrence, stats, streaks
from .calendar import CalendarDay, Clock, DayLike, FixedClock, SystemClock, is_today, normalize_day
from .calendar import today as calendar_today

logger = get_logger("services.tracker")

NOT_FOUND = "not_found"
NOT_TODAY = "not_today"
NOT_DUE = "not_due"
INVALID_DAY = "invalid_day"


@dataclass(frozen=True, slots=True)
class ToggleOutcome:
    """Result of an interactive completion toggle."""

    habit: Habit | None
    changed: bool
    completed: bool = False
    reason: str | None = None
    message: dict[str, str] | None = None


@dataclass
class HabitTracker:
    """Binds a clock and window settings to the pure habit functions."""

    clock: Clock = field(default_factory=SystemClock)
    streak_lookback_days: int | None = streaks.DEFAULT_LOOKBACK_DAYS
    completion_window_days: int = stats.COMPLETION_WINDOW_DAYS
    heatmap_window_days: int = stats.HEATMAP_WINDOW_DAYS

    @classmethod
    def from_config(cls, config: BaseConfig, clock: Clock | None = None) -> "HabitTracker":
        if clock is None:
            clock = FixedClock(config.FIXED_TODAY) if config.FIXED_TODAY else SystemClock()
        return cls(
            clock=clock,
            streak_lookback_days=config.streak_lookback,
            completion_window_days=config.COMPLETION_WINDOW_DAYS,
            heatmap_window_days=config.HEATMAP_WINDOW_DAYS,
        )

    def today(self) -> CalendarDay:
        return calendar_today(self.clock)

    def is_due(self, habit: Habit | None, day: DayLike | None = None) -> bool:
        return recurrence.is_due(habit, self.today() if day is None else day)

    def can_toggle(self, habit: Habit | None, day: DayLike | None = None) -> bool:
        return recurrence.can_toggle(habit, self.today() if day is None else day, self.clock)

    def is_completed(self, habit: Habit | None, day: DayLike | None = None) -> bool:
        return ledger.is_completed(habit, self.today() if day is None else day)

    def mark_completed(self, habit: Habit | None, day: DayLike | None = None) -> Habit | None:
        return ledger.mark_completed(habit, self.today() if day is None else day)

    def unmark(self, habit: Habit | None, day: DayLike | None = None) -> Habit | None:
        return ledger.unmark(habit, self.today() if day is None else day)

    def completion_status(
        self, habit: Habit | None, start: DayLike, end: DayLike
    ) -> dict[CalendarDay, ledger.DayStatus]:
        return ledger.completion_status(habit, start, end)

    def compute_streak(self, habit: Habit | None) -> streaks.StreakSummary:
        return streaks.compute_streak(
            habit, clock=self.clock, lookback_days=self.streak_lookback_days
        )

    def completion_rate(self, habit: Habit | None) -> float:
        return stats.completion_rate(
            habit, clock=self.clock, window_days=self.completion_window_days
        )

    def heatmap(self, habits: Iterable[Habit | None] | None) -> dict[CalendarDay, int]:
        return stats.heatmap(habits, clock=self.clock, window_days=self.heatmap_window_days)

    def due_today(self, habits: Iterable[Habit | None]) -> tuple[list[Habit], list[Habit]]:
        return stats.due_today(habits, clock=self.clock)

    def summarize(self, habits: Iterable[Habit | None]) -> stats.HabitSummary:
        return stats.summarize(
            habits,
            clock=self.clock,
            window_days=self.completion_window_days,
            lookback_days=self.streak_lookback_days,
        )

    def toggle_day(
        self, repo: HabitRepository, habit_id: str, day: DayLike | None = None
    ) -> ToggleOutcome:
        """Toggle completion for ``day`` (today by default) and persist the habit.

        Only today's due occurrence may be toggled; anything else is refused
        with a reason rather than an exception.
        """

        habit = repo.get_by_id(habit_id)
        if habit is None:
            logger.warning("Toggle requested for unknown habit", extra={"habit_id": habit_id})
            return ToggleOutcome(habit=None, changed=False, reason=NOT_FOUND)

        target = self.today() if day is None else day
        if not is_today(target, self.clock):
            try:
                normalize_day(target)
            except ValueError:
                return ToggleOutcome(habit=habit, changed=False, reason=INVALID_DAY)
            return ToggleOutcome(
                habit=habit,
                changed=False,
                reason=NOT_TODAY,
                message=recurrence.toggle_block_message(target, self.clock),
            )
        if not recurrence.is_due(habit, target):
            return ToggleOutcome(habit=habit, changed=False, reason=NOT_DUE)

        updated = ledger.toggle_completion(habit, target)
        repo.save(updated)
        completed = ledger.is_completed(updated, target)
        logger.info(
            "Toggled habit completion",
            extra={"habit_id": habit.id, "day": normalize_day(target), "completed": completed},
        )
        return ToggleOutcome(habit=updated, changed=True, completed=completed)

    def toggle_today(self, repo: HabitRepository, habit_id: str) -> ToggleOutcome:
        return self.toggle_day(repo, habit_id)

    def update_habit(self, repo: HabitRepository, habit_id: str, **changes: Any) -> Habit | None:
        """Apply ``changes`` to a stored habit, keeping its completion ledger.

        Returns ``None`` when the habit does not exist. Invalid changes raise
        ``InvalidHabitRecord`` and leave the stored habit as it was.
        """

        habit = repo.get_by_id(habit_id)
        if habit is None:
            logger.warning("Update requested for unknown habit", extra={"habit_id": habit_id})
            return None
        updated = repo.save(edit_habit(habit, **changes))
        logger.info(
            "Updated habit", extra={"habit_id": habit_id, "fields": sorted(changes)}
        )
        return updated


__all__ = ["HabitTracker", "ToggleOutcome"]
