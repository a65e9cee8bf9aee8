"""Repository protocols for the domain layer."""

from .habit import HabitRepository

__all__ = ["HabitRepository"]
