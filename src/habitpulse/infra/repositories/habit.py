"""SQLModel implementation of the habit repository."""

from __future__ import annotations

from collections import defaultdict
from typing import Callable, Iterable, Optional

from sqlalchemy import delete
from sqlmodel import Session, select

from ...domain.habit import Habit
from ...errors import InvalidCalendarDay, InvalidHabitRecord
from ...logging_config import get_logger
from ...models.habit import HabitCompletion, HabitRecord
from ...services.calendar import format_day, parse_day

logger = get_logger("infra.repositories.habit")


def _record_from_habit(habit: Habit) -> HabitRecord:
    return HabitRecord(
        id=habit.id,
        name=habit.name,
        description=habit.description,
        category=habit.category,
        frequency=habit.frequency,
        custom_days=",".join(str(day) for day in habit.custom_days),
        archived=habit.archived,
        created_at=habit.created_at,
    )


def _completions_from_habit(habit: Habit) -> list[HabitCompletion]:
    rows = []
    for position, value in enumerate(habit.completed_dates):
        try:
            occurred_on = parse_day(value)
        except InvalidCalendarDay:
            logger.warning(
                "Not storing malformed completed date",
                extra={"habit_id": habit.id, "value": value},
            )
            continue
        rows.append(HabitCompletion(habit_id=habit.id, occurred_on=occurred_on, position=position))
    return rows


def _habit_from_rows(record: HabitRecord, completions: Iterable[HabitCompletion]) -> Optional[Habit]:
    """Validate a stored row; malformed rows are logged and dropped."""

    ordered = sorted(completions, key=lambda c: (c.position, c.occurred_on))
    try:
        return Habit.from_mapping(
            {
                "id": record.id,
                "name": record.name,
                "description": record.description,
                "category": record.category,
                "frequency": record.frequency,
                "custom_days": [d for d in (record.custom_days or "").split(",") if d.strip()],
                "completed_dates": [format_day(c.occurred_on) for c in ordered],
                "created_at": record.created_at,
                "archived": record.archived,
            }
        )
    except InvalidHabitRecord as exc:
        logger.warning("Skipping invalid habit row: %s", exc, extra={"habit_id": record.id})
        return None


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def load_habits(self, include_archived: bool = True) -> list[Habit]:
        """Load every stored habit, ordered by name."""
        with self.session_factory() as session:
            statement = select(HabitRecord).order_by(HabitRecord.name)  # type: ignore
            if not include_archived:
                statement = statement.where(HabitRecord.archived == False)  # noqa: E712
            records = list(session.exec(statement).all())

            by_habit: dict[str, list[HabitCompletion]] = defaultdict(list)
            for completion in session.exec(select(HabitCompletion)).all():
                by_habit[completion.habit_id].append(completion)

            habits = [_habit_from_rows(r, by_habit.get(r.id, [])) for r in records]
            return [h for h in habits if h is not None]

    def save_habits(self, habits: Iterable[Habit]) -> None:
        """Replace every stored habit with the given snapshot."""
        with self.session_factory() as session:
            session.execute(delete(HabitCompletion))
            session.execute(delete(HabitRecord))
            seen: set[str] = set()
            pending: list[HabitCompletion] = []
            for habit in habits:
                if habit is None or not getattr(habit, "id", None):
                    logger.warning("Skipping habit without an id in snapshot")
                    continue
                if habit.id in seen:
                    logger.warning("Skipping duplicate habit id", extra={"habit_id": habit.id})
                    continue
                seen.add(habit.id)
                session.add(_record_from_habit(habit))
                pending.extend(_completions_from_habit(habit))
            # Parent rows first so the completion foreign key holds
            session.flush()
            session.add_all(pending)
            session.commit()
        logger.info("Saved habit snapshot", extra={"count": len(seen)})

    def get_by_id(self, habit_id: str) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            record = session.get(HabitRecord, habit_id)
            if record is None:
                return None
            completions = session.exec(
                select(HabitCompletion).where(HabitCompletion.habit_id == habit_id)
            ).all()
            return _habit_from_rows(record, completions)

    def save(self, habit: Habit) -> Habit:
        """Insert or update a habit and rewrite its completion ledger."""
        if habit is None or not getattr(habit, "id", None):
            raise InvalidHabitRecord("Cannot save a habit without an id", record=habit)
        with self.session_factory() as session:
            session.merge(_record_from_habit(habit))
            session.flush()
            session.execute(delete(HabitCompletion).where(HabitCompletion.habit_id == habit.id))
            session.add_all(_completions_from_habit(habit))
            session.commit()
        return habit

    def delete(self, habit_id: str) -> None:
        """Delete a habit and its completions."""
        with self.session_factory() as session:
            session.execute(delete(HabitCompletion).where(HabitCompletion.habit_id == habit_id))
            session.execute(delete(HabitRecord).where(HabitRecord.id == habit_id))
            session.commit()
