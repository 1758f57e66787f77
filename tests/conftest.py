"""
Pytest configuration for seekstore.

Provides fixtures for:
- An in-memory SQLite implementation of the StoreExecutor protocol, so unit
  tests exercise the real SQL the accessors and pager emit
- Accessors for the shipped record kinds
- Settings and DSN for the Postgres integration tests
"""

from __future__ import annotations

import os
import sqlite3
from datetime import datetime
from typing import Any, Callable, Dict, Generator, List, Optional, Sequence, Tuple

import pytest

from seekstore.config import Settings
from seekstore.domain.kinds import ARTICLE, COMMENT
from seekstore.errors import StoreError
from seekstore.infrastructure.executor import ExecResult
from seekstore.persistence.accessor import RecordAccessor

sqlite3.register_adapter(datetime, lambda value: value.isoformat())

SQLITE_SCHEMA = """
CREATE TABLE articles (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    title      VARCHAR(255) NOT NULL DEFAULT '',
    text       TEXT,
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL
);
CREATE TABLE comments (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    commenter  VARCHAR(255) NOT NULL DEFAULT '',
    body       TEXT,
    article_id INTEGER,
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL
);
"""


class SqliteExecutor:
    """
    StoreExecutor over an in-memory SQLite database.

    ``%s`` placeholders are rewritten to ``?`` and ``%%`` to ``%``. Every
    statement is recorded in `statements` so tests can assert what reached
    the store.
    """

    def __init__(self) -> None:
        self.conn = sqlite3.connect(":memory:")
        self.conn.row_factory = sqlite3.Row
        self.conn.executescript(SQLITE_SCHEMA)
        self.statements: List[Tuple[str, Tuple[Any, ...]]] = []
        self.fail_when: Optional[Callable[[str], bool]] = None

    def _cursor(self, sql: str, params: Sequence[Any]) -> sqlite3.Cursor:
        params = tuple(params)
        self.statements.append((sql, params))
        if self.fail_when is not None and self.fail_when(sql):
            raise StoreError("simulated store failure", sql=sql)
        try:
            return self.conn.execute(sql.replace("%s", "?").replace("%%", "%"), params)
        except sqlite3.Error as exc:
            raise StoreError(f"sqlite failed: {exc}", sql=sql) from exc

    def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecResult:
        cur = self._cursor(sql, params)
        last_id = None
        if cur.description is not None:
            rows = cur.fetchall()
            last_id = int(rows[0][0]) if rows else None
        rows_affected = cur.rowcount
        self.conn.commit()
        return ExecResult(rows_affected=rows_affected, last_insert_id=last_id)

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        row = self._cursor(sql, params).fetchone()
        return dict(row) if row is not None else None

    def query_many(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        return [dict(row) for row in self._cursor(sql, params).fetchall()]

    def writes(self) -> List[str]:
        return [
            sql for sql, _ in self.statements if sql.split(None, 1)[0] in ("INSERT", "UPDATE", "DELETE")
        ]

    def row_count(self, table: str) -> int:
        return self.conn.execute(f"SELECT count(*) FROM {table}").fetchone()[0]


@pytest.fixture
def executor() -> Generator[SqliteExecutor, None, None]:
    store = SqliteExecutor()
    try:
        yield store
    finally:
        store.conn.close()


@pytest.fixture
def articles(executor: SqliteExecutor) -> RecordAccessor:
    return RecordAccessor(ARTICLE, executor)


@pytest.fixture
def comments(executor: SqliteExecutor) -> RecordAccessor:
    return RecordAccessor(COMMENT, executor)


def seed_articles(accessor: RecordAccessor, count: int, **overrides: Any) -> List[int]:
    """Insert `count` articles through the attribute-map path; returns their ids."""
    ids = []
    for n in range(1, count + 1):
        attrs = {"title": f"Article number {n:03d}", "text": f"Body of article {n} " * 3}
        attrs.update(overrides)
        ids.append(accessor.create_from_map(attrs))
    return ids


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "seekstore"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return test_settings.dsn


@pytest.fixture
def seed(articles: RecordAccessor) -> Callable[..., List[int]]:
    def _seed(count: int, **overrides: Any) -> List[int]:
        return seed_articles(articles, count, **overrides)

    return _seed
