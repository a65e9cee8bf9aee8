"""Habit value objects and validation at the persistence boundary."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Mapping

from ..errors import InvalidCalendarDay, InvalidHabitRecord
from ..logging_config import get_logger
from ..services.calendar import normalize_day

logger = get_logger("domain.habit")


class Frequency(str, Enum):
    """Recurrence kinds understood by the scheduler."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: Any) -> "Frequency | None":
        """Return the matching kind, or ``None`` for anything unrecognized."""

        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class Category(str, Enum):
    """Display grouping for habits; irrelevant to scheduling."""

    HEALTH = "health"
    FITNESS = "fitness"
    PRODUCTIVITY = "productivity"
    EDUCATION = "education"
    FINANCE = "finance"
    SOCIAL = "social"
    CREATIVITY = "creativity"
    MINDFULNESS = "mindfulness"
    OTHER = "other"

    @classmethod
    def normalize(cls, value: Any) -> str:
        if isinstance(value, cls):
            return value.value
        try:
            return cls(str(value).strip().lower()).value
        except ValueError:
            return cls.OTHER.value


@dataclass(frozen=True, slots=True)
class Habit:
    """A recurring behavior the user tracks.

    ``custom_days`` holds weekdays (0=Sunday..6=Saturday) for weekly/custom
    habits and days of the month (1..31) for monthly ones. ``completed_dates``
    keeps ``YYYY-MM-DD`` strings in the order they were marked.
    """

    id: str
    name: str
    frequency: str = Frequency.DAILY.value
    custom_days: tuple[int, ...] = ()
    completed_dates: tuple[str, ...] = ()
    description: str = ""
    category: str = Category.OTHER.value
    created_at: datetime | None = None
    archived: bool = False

    @property
    def kind(self) -> Frequency | None:
        return Frequency.parse(self.frequency)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Habit":
        """Build a habit from a stored record, accepting snake_case or camelCase keys.

        Raises:
            InvalidHabitRecord: when ``id`` or ``name`` is missing or blank
        """

        if not isinstance(data, Mapping):
            raise InvalidHabitRecord("Habit record must be a mapping", record=data)

        habit_id = str(data.get("id") or "").strip()
        if not habit_id:
            raise InvalidHabitRecord("Habit record is missing an id", record=data)
        name = str(data.get("name") or "").strip()
        if not name:
            raise InvalidHabitRecord(f"Habit {habit_id} is missing a name", record=data)

        frequency = data.get("frequency")
        if isinstance(frequency, Frequency):
            frequency = frequency.value

        return cls(
            id=habit_id,
            name=name,
            frequency=str(frequency).strip().lower() if frequency else "",
            custom_days=_coerce_days(
                _as_list(_pick(data, "custom_days", "customDays")), habit_id
            ),
            completed_dates=_coerce_dates(
                _as_list(_pick(data, "completed_dates", "completedDates")), habit_id
            ),
            description=str(data.get("description") or ""),
            category=Category.normalize(data.get("category") or Category.OTHER.value),
            created_at=_coerce_timestamp(_pick(data, "created_at", "createdAt")),
            archived=bool(data.get("archived", False)),
        )

    def to_mapping(self) -> dict[str, Any]:
        """Serialize to the camelCase snapshot form."""

        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "frequency": self.frequency,
            "customDays": list(self.custom_days),
            "completedDates": list(self.completed_dates),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "archived": self.archived,
        }


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _as_list(value: Any) -> list[Any]:
    # A lone day or date stands for a one-item list; strings are never iterated
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def _coerce_days(values: Iterable[Any], habit_id: str) -> tuple[int, ...]:
    days: list[int] = []
    for value in values:
        # bool is an int subclass; True/False are not days
        if isinstance(value, bool):
            continue
        try:
            day = int(value)
        except (TypeError, ValueError):
            logger.warning(
                "Dropping non-integer custom day",
                extra={"habit_id": habit_id, "value": value},
            )
            continue
        if day not in days:
            days.append(day)
    return tuple(days)


def _coerce_dates(values: Iterable[Any], habit_id: str) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for value in values:
        try:
            seen.setdefault(normalize_day(value), None)
        except InvalidCalendarDay:
            logger.warning(
                "Dropping malformed completed date",
                extra={"habit_id": habit_id, "value": value},
            )
    return tuple(seen)


def _coerce_timestamp(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def require_habit(habit: Habit | None) -> Habit:
    """Reject missing habits and habits without an id."""

    if habit is None:
        raise InvalidHabitRecord("Habit is missing")
    if not getattr(habit, "id", None):
        raise InvalidHabitRecord("Habit has no id", record=habit)
    return habit


def generate_id() -> str:
    return uuid.uuid4().hex


def new_habit(
    name: str,
    *,
    frequency: str | Frequency = Frequency.DAILY,
    custom_days: Iterable[int] = (),
    description: str = "",
    category: str | Category = Category.OTHER,
) -> Habit:
    """Create a fresh habit with an empty completion ledger."""

    return Habit.from_mapping(
        {
            "id": generate_id(),
            "name": name,
            "frequency": frequency.value if isinstance(frequency, Frequency) else frequency,
            "custom_days": list(custom_days),
            "description": description,
            "category": category.value if isinstance(category, Category) else category,
            "created_at": datetime.now(),
        }
    )


EDITABLE_FIELDS = frozenset(
    {"name", "description", "category", "frequency", "custom_days", "archived"}
)


def edit_habit(habit: Habit, **changes: Any) -> Habit:
    """Return ``habit`` with descriptive fields or its rule replaced.

    The id, creation time and completion ledger are carried over untouched.
    Changed values go through the same validation as stored records.

    Raises:
        InvalidHabitRecord: for a field that cannot be edited or a blank name
    """

    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise InvalidHabitRecord(f"Cannot edit habit field(s): {', '.join(sorted(unknown))}")
    record = {
        "id": habit.id,
        "name": habit.name,
        "description": habit.description,
        "category": habit.category,
        "frequency": habit.frequency,
        "custom_days": list(habit.custom_days),
        "archived": habit.archived,
    }
    record.update(changes)
    validated = Habit.from_mapping(record)
    return replace(
        validated, completed_dates=habit.completed_dates, created_at=habit.created_at
    )


__all__ = [
    "Category",
    "Frequency",
    "Habit",
    "edit_habit",
    "generate_id",
    "new_habit",
    "require_habit",
]
