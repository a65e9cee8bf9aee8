"""Tests for the clock-bound tracker and its persisted toggle flow."""

from __future__ import annotations

import pytest

from habitpulse.config import BaseConfig
from habitpulse.errors import InvalidHabitRecord
from habitpulse.services.calendar import FixedClock, SystemClock
from habitpulse.services.streaks import StreakSummary
from habitpulse.services.tracker import (
    INVALID_DAY,
    NOT_DUE,
    NOT_FOUND,
    NOT_TODAY,
    HabitTracker,
)

TODAY = "2024-01-15"  # Monday


def _tracker(day: str = TODAY) -> HabitTracker:
    return HabitTracker(clock=FixedClock(day))


class TestToggleToday:
    def test_unknown_habit(self, habit_repo):
        outcome = _tracker().toggle_today(habit_repo, "missing")
        assert outcome.reason == NOT_FOUND
        assert outcome.habit is None
        assert not outcome.changed

    def test_toggle_marks_and_persists(self, habit_repo, habit_factory):
        habit = habit_repo.save(habit_factory(name="Water"))

        outcome = _tracker().toggle_today(habit_repo, habit.id)

        assert outcome.changed and outcome.completed
        assert outcome.reason is None
        assert habit_repo.get_by_id(habit.id).completed_dates == (TODAY,)

    def test_second_toggle_unmarks(self, habit_repo, habit_factory):
        habit = habit_repo.save(habit_factory(completed_dates=["2024-01-14", TODAY]))

        outcome = _tracker().toggle_today(habit_repo, habit.id)

        assert outcome.changed and not outcome.completed
        assert habit_repo.get_by_id(habit.id).completed_dates == ("2024-01-14",)

    def test_not_due_today_is_refused(self, habit_repo, habit_factory):
        habit = habit_repo.save(habit_factory(frequency="weekly", custom_days=[3]))

        outcome = _tracker().toggle_today(habit_repo, habit.id)

        assert outcome.reason == NOT_DUE
        assert not outcome.changed
        assert habit_repo.get_by_id(habit.id).completed_dates == ()


class TestToggleDay:
    def test_past_day_is_refused_with_message(self, habit_repo, habit_factory):
        habit = habit_repo.save(habit_factory())

        outcome = _tracker().toggle_day(habit_repo, habit.id, "2024-01-10")

        assert outcome.reason == NOT_TODAY
        assert outcome.message["title"] == "Can't Change the Past"
        assert habit_repo.get_by_id(habit.id).completed_dates == ()

    def test_future_day_is_refused_with_message(self, habit_repo, habit_factory):
        habit = habit_repo.save(habit_factory())
        outcome = _tracker().toggle_day(habit_repo, habit.id, "2024-02-01")
        assert outcome.reason == NOT_TODAY
        assert outcome.message["title"] == "Future Not Yet Written"

    def test_malformed_day(self, habit_repo, habit_factory):
        habit = habit_repo.save(habit_factory())
        outcome = _tracker().toggle_day(habit_repo, habit.id, "15/01/2024")
        assert outcome.reason == INVALID_DAY
        assert outcome.message is None


class TestTrackerQueries:
    def test_defaults_to_today(self, habit_factory):
        tracker = _tracker()
        habit = habit_factory(completed_dates=["2024-01-14", TODAY])
        assert tracker.today() == TODAY
        assert tracker.is_due(habit)
        assert tracker.can_toggle(habit)
        assert tracker.is_completed(habit)
        assert tracker.compute_streak(habit) == StreakSummary(current=2, longest=2)

    def test_mark_and_unmark_default_day(self, habit_factory):
        tracker = _tracker()
        marked = tracker.mark_completed(habit_factory())
        assert marked.completed_dates == (TODAY,)
        assert tracker.unmark(marked).completed_dates == ()

    def test_window_settings_are_applied(self, habit_factory):
        tracker = HabitTracker(
            clock=FixedClock(TODAY), completion_window_days=2, heatmap_window_days=3
        )
        habit = habit_factory(completed_dates=[TODAY])
        assert tracker.completion_rate(habit) == 0.5
        assert list(tracker.heatmap([habit])) == ["2024-01-13", "2024-01-14", TODAY]


class TestFromConfig:
    def test_reads_windows_and_fixed_day(self, monkeypatch):
        monkeypatch.setenv("HABITPULSE_TODAY", "2024-05-01")
        monkeypatch.setenv("HABITPULSE_STREAK_LOOKBACK_DAYS", "0")
        monkeypatch.setenv("HABITPULSE_COMPLETION_WINDOW_DAYS", "7")
        monkeypatch.setenv("HABITPULSE_HEATMAP_WINDOW_DAYS", "28")

        tracker = HabitTracker.from_config(BaseConfig())

        assert tracker.today() == "2024-05-01"
        assert tracker.streak_lookback_days is None
        assert tracker.completion_window_days == 7
        assert tracker.heatmap_window_days == 28

    def test_system_clock_by_default(self):
        tracker = HabitTracker.from_config(BaseConfig())
        assert isinstance(tracker.clock, SystemClock)
        assert tracker.streak_lookback_days == 30

    def test_explicit_clock_wins(self, monkeypatch):
        monkeypatch.setenv("HABITPULSE_TODAY", "2024-05-01")
        tracker = HabitTracker.from_config(BaseConfig(), clock=FixedClock(TODAY))
        assert tracker.today() == TODAY


class TestUpdateHabit:
    def test_schedule_change_keeps_history(self, habit_repo, habit_factory):
        habit = habit_repo.save(habit_factory(name="Gym", completed_dates=["2024-01-14", TODAY]))

        updated = _tracker().update_habit(
            habit_repo, habit.id, frequency="weekly", custom_days=[1], archived=True
        )

        stored = habit_repo.get_by_id(habit.id)
        assert stored == updated
        assert stored.custom_days == (1,)
        assert stored.archived
        assert stored.completed_dates == ("2024-01-14", TODAY)

    def test_unknown_habit_returns_none(self, habit_repo):
        assert _tracker().update_habit(habit_repo, "missing", name="X") is None

    def test_invalid_change_leaves_store_untouched(self, habit_repo, habit_factory):
        habit = habit_repo.save(habit_factory(name="Gym"))
        with pytest.raises(InvalidHabitRecord):
            _tracker().update_habit(habit_repo, habit.id, name="")
        assert habit_repo.get_by_id(habit.id) == habit
