"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from sqlmodel import Session

from .config import BaseConfig
from .infra.database import create_db_engine, create_session_factory, init_database
from .infra.repositories import SQLModelHabitRepository
from .services.calendar import Clock
from .services.tracker import HabitTracker


@dataclass
class AppContext:
    """Configuration, persistence and the clock-bound tracker in one place."""

    config: BaseConfig
    session_factory: Callable[[], Session]
    habit_repo: SQLModelHabitRepository
    tracker: HabitTracker


def create_app_context(
    config: Optional[BaseConfig] = None, *, clock: Optional[Clock] = None
) -> AppContext:
    """Create and initialize the application context."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    return AppContext(
        config=config,
        session_factory=session_factory,
        habit_repo=SQLModelHabitRepository(session_factory),
        tracker=HabitTracker.from_config(config, clock=clock),
    )
