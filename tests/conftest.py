"""Root conftest for all tests.

Provides an in-memory SQLite entity store per test and helpers to seed
source rows and calendar events.
"""

from collections.abc import Callable
from typing import Any
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.models import Base
from app.db.store import EntityStore, StoreError, StoreResult


# Enable foreign key constraints for SQLite
@event.listens_for(Engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def engine():
    """Isolated in-memory SQLite engine with all tables created.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    test_engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(test_engine)
    try:
        yield test_engine
    finally:
        test_engine.dispose()


@pytest.fixture
def store(engine) -> EntityStore:
    return EntityStore(sessionmaker(bind=engine, autoflush=False))


@pytest.fixture
def user_id() -> str:
    return "u1"


@pytest.fixture
def seed(store) -> Callable[..., dict[str, Any]]:
    """Insert one row into a table and return it as stored."""

    def _seed(table: str, **row: Any) -> dict[str, Any]:
        result = store.insert(table, [row])
        assert result.error is None, result.error
        return result.data[0]

    return _seed


@pytest.fixture
def rows(store) -> Callable[..., list[dict[str, Any]]]:
    """Read rows back from a table."""

    def _rows(table: str, **filters: Any) -> list[dict[str, Any]]:
        result = store.select(table, filters)
        assert result.error is None, result.error
        return result.data

    return _rows


def failing(store: EntityStore, method: str, *, table: str | None = None, message: str = "network error") -> Mock:
    """Make ``store.<method>`` fail, optionally only for one table.

    Calls that are not made to fail go through to the real store. Returns
    the mock so tests can inspect its calls.
    """
    real = getattr(store, method)
    error = StoreError(message=message, code="OperationalError", details=table)

    def _call(table_name: str, *args: Any, **kwargs: Any) -> StoreResult:
        if table is None or table_name == table:
            return StoreResult(error=error)
        return real(table_name, *args, **kwargs)

    mock = Mock(side_effect=_call)
    setattr(store, method, mock)
    return mock


@pytest.fixture
def make_failing() -> Callable[..., Mock]:
    return failing
