"""Domain value objects and repository protocols."""

from .habit import Category, Frequency, Habit, edit_habit, generate_id, new_habit

__all__ = ["Category", "Frequency", "Habit", "edit_habit", "generate_id", "new_habit"]
