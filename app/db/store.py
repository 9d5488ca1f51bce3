"""Table-addressed CRUD store.

The calendar sync layer talks to persistence only through ``EntityStore``:
select / insert / update / delete against a table name with equality
filters. Every call runs in its own session and commits on its own, so the
caller never gets a multi-statement transaction. Failures come back as a
``StoreError`` inside the ``StoreResult`` instead of being raised.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from app.db.models import Base

Row = dict[str, Any]


@dataclass(frozen=True)
class StoreError:
    """Error reported by the store.

    Attributes:
        message: Human readable error message
        code: Short machine code (e.g. "not_found", "IntegrityError")
        details: Optional extra context (offending table, column, ...)
    """

    message: str
    code: str
    details: str | None = None

    @classmethod
    def from_exception(cls, exc: Exception, details: str | None = None) -> StoreError:
        orig = getattr(exc, "orig", None)
        return cls(message=str(orig or exc), code=type(exc).__name__, details=details)


@dataclass(frozen=True)
class StoreResult:
    """Outcome of one store call: rows on success, an error otherwise."""

    data: list[Row] = field(default_factory=list)
    count: int = 0
    error: StoreError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class EntityStore:
    """Per-statement CRUD access to the tables registered on ``Base.metadata``."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self._tables = Base.metadata.tables

    def _table(self, name: str) -> Table | StoreError:
        table = self._tables.get(name)
        if table is None:
            return StoreError(message=f'relation "{name}" does not exist', code="undefined_table", details=name)
        return table

    @staticmethod
    def _where(table: Table, filters: Mapping[str, Any] | None) -> list[ColumnElement[bool]] | StoreError:
        clauses: list[ColumnElement[bool]] = []
        for column_name, value in (filters or {}).items():
            if column_name not in table.c:
                return StoreError(
                    message=f'column "{column_name}" does not exist',
                    code="undefined_column",
                    details=table.name,
                )
            column = table.c[column_name]
            if isinstance(value, (list, tuple, set, frozenset)):
                clauses.append(column.in_(list(value)))
            else:
                clauses.append(column == value)
        return clauses

    def select(
        self,
        table_name: str,
        filters: Mapping[str, Any] | None = None,
        *,
        columns: Iterable[str] | None = None,
        order_by: str | None = None,
    ) -> StoreResult:
        """Select rows matching all equality filters.

        A list/tuple/set filter value matches any of its members.
        """
        table = self._table(table_name)
        if isinstance(table, StoreError):
            return StoreResult(error=table)
        clauses = self._where(table, filters)
        if isinstance(clauses, StoreError):
            return StoreResult(error=clauses)

        try:
            selected = [table.c[name] for name in columns] if columns else list(table.c)
        except KeyError as e:
            return StoreResult(error=StoreError(message=f"column {e} does not exist", code="undefined_column"))

        stmt = select(*selected).where(*clauses)
        if order_by is not None:
            if order_by not in table.c:
                return StoreResult(error=StoreError(message=f'column "{order_by}" does not exist', code="undefined_column"))
            stmt = stmt.order_by(table.c[order_by])

        try:
            with self._session_factory() as session:
                rows = [dict(row) for row in session.execute(stmt).mappings()]
        except SQLAlchemyError as e:
            logger.warning("[STORE] select failed", table=table_name, error=str(e))
            return StoreResult(error=StoreError.from_exception(e, details=table_name))

        return StoreResult(data=rows, count=len(rows))

    def maybe_single(self, table_name: str, filters: Mapping[str, Any]) -> StoreResult:
        """Select at most one row. ``data`` holds zero or one row.

        More than one matching row is an error.
        """
        result = self.select(table_name, filters)
        if result.error is not None:
            return result
        if len(result.data) > 1:
            return StoreResult(
                error=StoreError(
                    message=f"expected at most one row, found {len(result.data)}",
                    code="multiple_rows",
                    details=table_name,
                )
            )
        return result

    def insert(self, table_name: str, rows: list[Row]) -> StoreResult:
        """Insert rows, generating ``id`` when the caller omits it.

        Returns the inserted rows as stored.
        """
        table = self._table(table_name)
        if isinstance(table, StoreError):
            return StoreResult(error=table)
        if not rows:
            return StoreResult()

        prepared = [dict(row) for row in rows]
        if "id" in table.c:
            for row in prepared:
                if row.get("id") is None:
                    row["id"] = str(uuid.uuid4())

        try:
            with self._session_factory() as session, session.begin():
                session.execute(insert(table), prepared)
                if "id" in table.c:
                    ids = [row["id"] for row in prepared]
                    stored = [dict(row) for row in session.execute(select(table).where(table.c.id.in_(ids))).mappings()]
                else:
                    stored = prepared
        except SQLAlchemyError as e:
            logger.warning("[STORE] insert failed", table=table_name, error=str(e))
            return StoreResult(error=StoreError.from_exception(e, details=table_name))

        return StoreResult(data=stored, count=len(prepared))

    def update(self, table_name: str, fields: Mapping[str, Any], filters: Mapping[str, Any]) -> StoreResult:
        """Apply ``fields`` to every row matching ``filters``.

        Unknown column names in ``fields`` are an error; nothing is written.
        """
        table = self._table(table_name)
        if isinstance(table, StoreError):
            return StoreResult(error=table)
        clauses = self._where(table, filters)
        if isinstance(clauses, StoreError):
            return StoreResult(error=clauses)
        unknown = [name for name in fields if name not in table.c]
        if unknown:
            return StoreResult(
                error=StoreError(
                    message=f"Could not find the '{unknown[0]}' column of '{table_name}'",
                    code="undefined_column",
                    details=table_name,
                )
            )
        if not fields:
            return StoreResult()

        try:
            with self._session_factory() as session, session.begin():
                result = session.execute(update(table).where(*clauses).values(**fields))
                count = result.rowcount
        except SQLAlchemyError as e:
            logger.warning("[STORE] update failed", table=table_name, error=str(e))
            return StoreResult(error=StoreError.from_exception(e, details=table_name))

        return StoreResult(count=count)

    def delete(self, table_name: str, filters: Mapping[str, Any]) -> StoreResult:
        """Delete every row matching ``filters``."""
        table = self._table(table_name)
        if isinstance(table, StoreError):
            return StoreResult(error=table)
        clauses = self._where(table, filters)
        if isinstance(clauses, StoreError):
            return StoreResult(error=clauses)
        if not clauses:
            return StoreResult(error=StoreError(message="DELETE requires a WHERE clause", code="missing_filter", details=table_name))

        try:
            with self._session_factory() as session, session.begin():
                result = session.execute(delete(table).where(*clauses))
                count = result.rowcount
        except SQLAlchemyError as e:
            logger.warning("[STORE] delete failed", table=table_name, error=str(e))
            return StoreResult(error=StoreError.from_exception(e, details=table_name))

        return StoreResult(count=count)
