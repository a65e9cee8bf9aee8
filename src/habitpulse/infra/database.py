"""Engine, schema and session plumbing for the habit store."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig
from ..logging_config import get_logger

logger = get_logger("infra.database")


def _install_sqlite_pragmas(engine: Engine, pragmas: dict[str, str]) -> None:
    """Run ``PRAGMA name=value`` on every new DBAPI connection."""

    @event.listens_for(engine, "connect")
    def _set_pragmas(dbapi_connection, connection_record) -> None:  # noqa: ARG001
        cursor = dbapi_connection.cursor()
        try:
            for name, value in pragmas.items():
                cursor.execute(f"PRAGMA {name}={value}")
        finally:
            cursor.close()


def create_db_engine(config: BaseConfig) -> Engine:
    """Create the SQLModel engine described by ``config``.

    SQLite connections get ``config.SQLITE_PRAGMAS`` applied, so the
    completion table's foreign key to ``habit`` is enforced.
    """
    engine = create_engine(config.DATABASE_URL, **config.sqlalchemy_engine_options())
    if engine.dialect.name == "sqlite":
        _install_sqlite_pragmas(engine, config.SQLITE_PRAGMAS)
    logger.info("Database engine created", extra={"dialect": engine.dialect.name})
    return engine


def init_database(engine: Engine) -> None:
    """Create any missing tables."""
    # Registers HabitRecord and HabitCompletion on SQLModel.metadata
    from .. import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def create_session_factory(engine: Engine) -> Callable[[], Iterator[Session]]:
    """Return a factory of transactional session scopes.

    Each scope commits on success and rolls back when the block raises.
    """

    @contextmanager
    def session_scope() -> Iterator[Session]:
        session = Session(engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return session_scope
