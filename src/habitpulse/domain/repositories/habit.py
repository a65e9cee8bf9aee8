"""Habit repository protocol."""

from __future__ import annotations

from typing import Iterable, Optional, Protocol

from ..habit import Habit


class HabitRepository(Protocol):
    """Keyed store for habits; callers always read and write whole habits."""

    def load_habits(self, include_archived: bool = True) -> list[Habit]:
        """Load every stored habit."""
        ...

    def save_habits(self, habits: Iterable[Habit]) -> None:
        """Replace the stored collection with a full snapshot."""
        ...

    def get_by_id(self, habit_id: str) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def save(self, habit: Habit) -> Habit:
        """Insert or update a single habit, including its completions."""
        ...

    def delete(self, habit_id: str) -> None:
        """Delete a habit by ID."""
        ...
