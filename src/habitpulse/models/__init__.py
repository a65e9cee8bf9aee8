"""SQLModel table exports."""

from .habit import HabitCompletion, HabitRecord

__all__ = ["HabitCompletion", "HabitRecord"]
