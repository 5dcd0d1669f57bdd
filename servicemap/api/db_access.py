# This file wraps database access so API services can run parameterized SQL safely.
# Services pass either SQL text or SQLAlchemy Core statements; list-valued parameters expand into IN (...) lists.
# Multi-statement writes run through `transaction()` so they commit or roll back as one unit.

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from sqlalchemy import bindparam, inspect, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import Executable

from servicemap.common.db import build_engine

Statement = str | Executable


def _prepare(statement: Statement, params: Mapping[str, Any] | None) -> tuple[Executable, dict[str, Any]]:
    bound = dict(params or {})
    if not isinstance(statement, str):
        return statement, bound

    clause = text(statement)
    for key, value in list(bound.items()):
        if isinstance(value, (list, tuple, set, frozenset)):
            bound[key] = list(value)
            clause = clause.bindparams(bindparam(key, expanding=True))
    return clause, bound


class DatabaseClient:
    """Minimal SQLAlchemy wrapper for API read/write access."""

    def __init__(self, *, database_url: str | None = None, engine: Engine | None = None) -> None:
        if engine is None:
            if not database_url:
                raise ValueError("DatabaseClient needs a database_url or an engine.")
            engine = build_engine(database_url)
        self._engine: Engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def can_connect(self) -> bool:
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def table_exists(self, table_name: str) -> bool:
        return inspect(self._engine).has_table(table_name)

    def fetch_all(self, query: Statement, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        statement, bound = _prepare(query, params)
        with self._engine.connect() as connection:
            rows = connection.execute(statement, bound).mappings().all()
        return [dict(row) for row in rows]

    def fetch_one(self, query: Statement, params: Mapping[str, Any] | None = None) -> dict[str, Any] | None:
        statement, bound = _prepare(query, params)
        with self._engine.connect() as connection:
            row = connection.execute(statement, bound).mappings().first()
        return dict(row) if row is not None else None

    def fetch_scalar(self, query: Statement, params: Mapping[str, Any] | None = None) -> Any:
        statement, bound = _prepare(query, params)
        with self._engine.connect() as connection:
            return connection.execute(statement, bound).scalar_one()

    def execute(self, query: Statement, params: Mapping[str, Any] | None = None) -> int:
        """Run a write statement in its own transaction and return the affected row count."""

        statement, bound = _prepare(query, params)
        with self._engine.begin() as connection:
            result = connection.execute(statement, bound)
        return int(result.rowcount or 0)

    def insert(self, statement: Executable) -> int:
        """Run a Core INSERT and return the new primary key."""

        with self._engine.begin() as connection:
            result = connection.execute(statement)
        return int(result.inserted_primary_key[0])

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        with self._engine.begin() as connection:
            yield connection
