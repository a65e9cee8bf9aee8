"""Habit tracking tables."""

from __future__ import annotations

from datetime import date, datetime
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class HabitRecord(SQLModel, table=True):
    """Stored form of a habit's descriptive fields and recurrence rule."""

    __tablename__: ClassVar[str] = "habit"

    id: str = Field(primary_key=True, max_length=64)
    name: str = Field(nullable=False, max_length=80, index=True)
    description: str = Field(default="", max_length=255)
    category: str = Field(default="other", max_length=32)
    frequency: str = Field(default="daily", max_length=32)
    # Comma-separated integers, e.g. "1,3,5"
    custom_days: str = Field(default="", max_length=128)
    archived: bool = Field(default=False, nullable=False)
    created_at: Optional[datetime] = Field(default=None)


class HabitCompletion(SQLModel, table=True):
    """One calendar day on which a habit was marked done."""

    __tablename__: ClassVar[str] = "habit_completion"

    habit_id: str = Field(foreign_key="habit.id", primary_key=True)
    occurred_on: date = Field(primary_key=True, index=True)
    # Position in the ledger so snapshots keep their append order
    position: int = Field(default=0, nullable=False)
