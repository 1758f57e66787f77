from __future__ import annotations

from contextlib import contextmanager
from typing import Any

import psycopg
import pytest
from psycopg.rows import dict_row

from seekstore.errors import StoreError
from seekstore.infrastructure.executor import ExecResult, PsycopgExecutor, StoreExecutor


class _FakeCursor:
    def __init__(self, rows: list[Any], description: Any, rowcount: int, error: Exception | None):
        self._rows = rows
        self.description = description
        self.rowcount = rowcount
        self._error = error
        self.executed: list[tuple[str, tuple[Any, ...]]] = []

    def execute(self, sql: str, params: tuple[Any, ...] | None = None) -> None:
        if self._error is not None:
            raise self._error
        self.executed.append((sql, params or ()))

    def fetchone(self) -> Any:
        return self._rows[0] if self._rows else None

    def fetchall(self) -> list[Any]:
        return list(self._rows)

    def __enter__(self) -> _FakeCursor:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        del exc_type, exc, tb
        return False


class _FakeConnection:
    def __init__(self, cursor: _FakeCursor) -> None:
        self._cursor = cursor
        self.row_factories: list[Any] = []

    def cursor(self, row_factory: Any = None) -> _FakeCursor:
        self.row_factories.append(row_factory)
        return self._cursor


class _FakeConnectionPool:
    def __init__(
        self,
        rows: list[Any] | None = None,
        description: Any = None,
        rowcount: int = 0,
        error: Exception | None = None,
    ) -> None:
        self.cursor = _FakeCursor(rows or [], description, rowcount, error)
        self.conn = _FakeConnection(self.cursor)
        self.checkouts = 0
        self.closed = False

    @contextmanager
    def connection(self):
        self.checkouts += 1
        yield self.conn

    def close(self) -> None:
        self.closed = True


def test_psycopg_executor_satisfies_protocol() -> None:
    assert isinstance(PsycopgExecutor(_FakeConnectionPool()), StoreExecutor)


def test_execute_reads_returning_id() -> None:
    pool = _FakeConnectionPool(rows=[(42,)], description=[("id",)], rowcount=1)
    executor = PsycopgExecutor(pool)

    result = executor.execute("INSERT INTO articles (title) VALUES (%s) RETURNING id", ["t"])

    assert result == ExecResult(rows_affected=1, last_insert_id=42)
    assert pool.cursor.executed == [
        ("INSERT INTO articles (title) VALUES (%s) RETURNING id", ("t",))
    ]
    assert pool.checkouts == 1


def test_execute_without_result_set() -> None:
    pool = _FakeConnectionPool(rowcount=3)
    result = PsycopgExecutor(pool).execute("DELETE FROM comments WHERE article_id = %s", (7,))
    assert result == ExecResult(rows_affected=3, last_insert_id=None)


def test_queries_use_dict_rows() -> None:
    rows = [{"id": 1, "title": "one"}, {"id": 2, "title": "two"}]
    pool = _FakeConnectionPool(rows=rows)
    executor = PsycopgExecutor(pool)

    assert executor.query_one("SELECT id, title FROM articles") == rows[0]
    assert executor.query_many("SELECT id, title FROM articles") == rows
    assert pool.conn.row_factories == [dict_row, dict_row]
    assert pool.checkouts == 2


def test_driver_errors_become_store_errors() -> None:
    pool = _FakeConnectionPool(error=psycopg.OperationalError("connection lost"))
    executor = PsycopgExecutor(pool)

    with pytest.raises(StoreError) as excinfo:
        executor.query_many("SELECT 1")
    assert excinfo.value.sql == "SELECT 1"
    assert isinstance(excinfo.value.__cause__, psycopg.OperationalError)

    with pytest.raises(StoreError):
        executor.execute("DELETE FROM articles WHERE id = %s", (1,))


def test_close_closes_pool() -> None:
    pool = _FakeConnectionPool()
    PsycopgExecutor(pool).close()
    assert pool.closed
