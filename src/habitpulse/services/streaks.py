"""Current and longest streaks for habits on irregular schedules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from ..domain.habit import Habit, require_habit
from ..errors import InvalidCalendarDay, fails_closed
from ..logging_config import get_logger
from .calendar import Clock, parse_day, today
from .recurrence import evaluate_rule, is_schedulable

logger = get_logger("services.streaks")

DEFAULT_LOOKBACK_DAYS = 30

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True, slots=True)
class StreakSummary:
    current: int = 0
    longest: int = 0


def _completed_days(habit: Habit) -> set[date]:
    days: set[date] = set()
    for value in habit.completed_dates:
        try:
            days.add(parse_day(value))
        except InvalidCalendarDay:
            logger.warning(
                "Skipping malformed completed date",
                extra={"habit_id": habit.id, "value": value},
            )
    return days


def _gap_explained(habit: Habit, earlier: date, later: date, completed: set[date]) -> bool:
    """True when every due day strictly between the two dates was completed."""

    cursor = earlier + ONE_DAY
    while cursor < later:
        if evaluate_rule(habit, cursor) and cursor not in completed:
            return False
        cursor += ONE_DAY
    return True


def longest_streak(habit: Habit, completed: set[date]) -> int:
    """Longest run of completions whose gaps are made up of non-due days only.

    Habits whose rule can never be due only chain completions on adjacent days.
    """

    schedulable = is_schedulable(habit)
    longest = 0
    run = 0
    previous: date | None = None
    for day in sorted(completed):
        if previous is None:
            run = 1
        elif day - previous == ONE_DAY or (
            schedulable and _gap_explained(habit, previous, day, completed)
        ):
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day
    return longest


def current_streak(
    habit: Habit,
    completed: set[date],
    *,
    today_: date,
    lookback_days: int | None = DEFAULT_LOOKBACK_DAYS,
) -> int:
    """Count completed due days walking backward from the latest completion.

    The streak is alive when the latest completion is today, or yesterday while
    today's due occurrence is still pending. The walk stops at the first due day
    without a completion, or ``lookback_days`` before today when bounded.
    """

    if not is_schedulable(habit):
        return 0
    # Completions dated after today are inconsistent data; they never anchor.
    candidates = [day for day in completed if day <= today_]
    if not candidates:
        return 0
    anchor = max(candidates)
    pending_today = (
        today_ > date.min
        and anchor == today_ - ONE_DAY
        and evaluate_rule(habit, today_)
        and today_ not in completed
    )
    if anchor != today_ and not pending_today:
        return 0

    earliest = min(candidates)
    floor = None
    if lookback_days is not None:
        # The walk never goes below 0001-01-01
        floor = today_ - timedelta(days=min(lookback_days, (today_ - date.min).days))

    streak = 1
    if anchor == date.min:
        return streak
    cursor = anchor - ONE_DAY
    while True:
        if floor is not None and cursor < floor:
            break
        # Before the first completion any due day is a miss, so nothing can extend.
        if floor is None and cursor < earliest:
            break
        if evaluate_rule(habit, cursor):
            if cursor not in completed:
                break
            streak += 1
        if cursor == date.min:
            break
        cursor -= ONE_DAY
    return streak


@fails_closed(StreakSummary)
def compute_streak(
    habit: Habit | None,
    *,
    clock: Clock | None = None,
    lookback_days: int | None = DEFAULT_LOOKBACK_DAYS,
) -> StreakSummary:
    """Return the current and longest streaks for ``habit``.

    Args:
        habit: Habit to evaluate
        clock: Source of "today"; the system clock when omitted
        lookback_days: Bound on the backward walk for the current streak;
            ``None`` walks until the first missed due day

    Returns:
        StreakSummary, ``(0, 0)`` for an empty ledger or malformed input
    """

    habit = require_habit(habit)
    completed = _completed_days(habit)
    if not completed:
        return StreakSummary()

    return StreakSummary(
        current=current_streak(
            habit, completed, today_=parse_day(today(clock)), lookback_days=lookback_days
        ),
        longest=longest_streak(habit, completed),
    )


__all__ = ["DEFAULT_LOOKBACK_DAYS", "StreakSummary", "compute_streak"]
