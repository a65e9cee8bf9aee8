"""Pytest configuration and shared fixtures for HabitPulse tests.

Provides pinned clocks, habit factories and an isolated SQLite database per
test so nothing touches the real data directory.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

from habitpulse.domain.habit import Habit, generate_id
from habitpulse.infra.repositories import SQLModelHabitRepository
from habitpulse.logging_config import LOGGER_NAME
from habitpulse.models import HabitCompletion, HabitRecord  # noqa: F401
from habitpulse.services.calendar import FixedClock


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path, monkeypatch):
    """Keep configuration and logs inside the test's temporary directory."""

    monkeypatch.setenv("HABITPULSE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("HABITPULSE_DEV_MODE", "false")
    for name in (
        "HABITPULSE_DATABASE_URL",
        "HABITPULSE_TODAY",
        "HABITPULSE_STREAK_LOOKBACK_DAYS",
        "HABITPULSE_COMPLETION_WINDOW_DAYS",
        "HABITPULSE_HEATMAP_WINDOW_DAYS",
    ):
        monkeypatch.delenv(name, raising=False)

    yield

    # setup_logging may bind a handler to a stream the test runner has closed
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


# =============================================================================
# Clock and habit factories
# =============================================================================


@pytest.fixture
def fixed_clock():
    """Factory returning a clock pinned to the given ``YYYY-MM-DD`` day."""

    def _clock(day: str) -> FixedClock:
        return FixedClock(day)

    return _clock


@pytest.fixture
def habit_factory():
    """Factory for in-memory habits with sensible defaults.

    Returns:
        Callable: Function that builds Habit instances
    """

    def _create_habit(
        name: str = "Exercise",
        frequency: str = "daily",
        custom_days: tuple[int, ...] | list[int] = (),
        completed_dates: tuple[str, ...] | list[str] = (),
        category: str = "other",
        habit_id: str | None = None,
        archived: bool = False,
    ) -> Habit:
        return Habit(
            id=habit_id or generate_id(),
            name=name,
            frequency=frequency,
            custom_days=tuple(custom_days),
            completed_dates=tuple(completed_dates),
            category=category,
            archived=archived,
        )

    return _create_habit


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the Callable[[], Session] repositories expect."""

    def factory() -> Session:
        return Session(db_engine, expire_on_commit=False)

    return factory


@pytest.fixture
def habit_repo(session_factory) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(session_factory)
