"""Database engine and session management."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from larder.config import get_settings
from larder.db.models import Base, StorageAreaORM
from larder.models.pantry import DEFAULT_STORAGE_AREAS

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None
logger = logging.getLogger(__name__)


def _install_sqlite_hooks(engine: Engine) -> None:
    """Enable foreign keys and make every transaction take the write lock up front."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:  # pragma: no cover - driver hook
        # Let SQLAlchemy emit BEGIN itself instead of pysqlite's deferred BEGIN.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(connection) -> None:  # pragma: no cover - driver hook
        connection.exec_driver_sql("BEGIN IMMEDIATE")


def _seed_default_areas(factory: sessionmaker[Session]) -> None:
    """Insert the fridge/freezer/pantry areas when the store has no areas yet."""

    with factory() as session, session.begin():
        if session.execute(select(StorageAreaORM.id).limit(1)).first():
            return
        for area in DEFAULT_STORAGE_AREAS:
            session.add(
                StorageAreaORM(
                    id=area.id,
                    name=area.name,
                    icon=area.icon,
                    color=area.color,
                    position=area.order,
                )
            )
    logger.info("Seeded %s default storage areas", len(DEFAULT_STORAGE_AREAS))


def get_engine(database_path: Path | None = None) -> Engine:
    """Return a shared SQLAlchemy engine configured for SQLite."""
    global _engine, _session_factory

    if _engine is not None:
        return _engine

    settings = get_settings()
    db_path = database_path or settings.database_path
    db_path.parent.mkdir(parents=True, exist_ok=True)

    _engine = create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    _install_sqlite_hooks(_engine)
    try:
        Base.metadata.create_all(_engine)
    except OperationalError as exc:
        if "already exists" in str(exc).lower():
            logger.debug("Database schema already initialized: %s", exc)
        else:
            raise
    _session_factory = sessionmaker(bind=_engine, autoflush=False, expire_on_commit=False)
    if settings.seed_default_areas:
        _seed_default_areas(_session_factory)
    logger.debug("SQLite engine ready path=%s", db_path)
    return _engine


def get_session() -> Session:
    """Return a new SQLAlchemy session."""

    if _session_factory is None:
        get_engine()
    assert _session_factory is not None  # for mypy
    return _session_factory()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Yield a session whose work commits as one unit or rolls back entirely."""

    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def reset_repository_state() -> None:
    """Reset cached engine/session state (intended for testing)."""

    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


__all__ = ["get_engine", "get_session", "session_scope", "reset_repository_state"]
