"""
Store executor: the single seam between seekstore and the database driver.

Accessors and pagers only ever talk to a `StoreExecutor`. The psycopg
implementation borrows one pooled connection per statement, commits on
success, rolls back on failure, and wraps driver errors in `StoreError`.
Placeholders are psycopg positional ``%s``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from seekstore.errors import StoreError
from seekstore.utils.logging import get_logger

log = get_logger(__name__)

Row = Mapping[str, Any]


@dataclass(frozen=True)
class ExecResult:
    """Outcome of a DML statement."""

    rows_affected: int
    last_insert_id: Optional[int] = None


@runtime_checkable
class StoreExecutor(Protocol):
    """
    Contract consumed by accessors and pagers.

    ``params`` are bound left to right onto the ``%s`` placeholders of ``sql``.
    """

    def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecResult:
        """Run a DML statement. A ``RETURNING id`` row becomes `last_insert_id`."""
        ...

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Row]:
        """Run a SELECT and return its first row, or None."""
        ...

    def query_many(self, sql: str, params: Sequence[Any] = ()) -> List[Row]:
        """Run a SELECT and return every row."""
        ...


class PsycopgExecutor:
    """
    StoreExecutor backed by a psycopg `ConnectionPool`.

    Each call checks out a connection for exactly one statement; multi-statement
    sequences (count then fetch, cascade then delete) are not transactional.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    @classmethod
    def from_dsn(cls, dsn: str, min_size: int = 1, max_size: int = 10) -> "PsycopgExecutor":
        pool = ConnectionPool(conninfo=dsn, min_size=min_size, max_size=max_size, open=True)
        return cls(pool)

    @property
    def pool(self) -> ConnectionPool:
        return self._pool

    def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecResult:
        try:
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, tuple(params))
                    last_id: Optional[int] = None
                    if cur.description is not None:
                        row = cur.fetchone()
                        if row is not None:
                            last_id = int(row[0])
                    return ExecResult(rows_affected=cur.rowcount, last_insert_id=last_id)
        except psycopg.Error as exc:
            log.error("Statement failed", extra={"sql": sql, "error": str(exc)})
            raise StoreError(f"execute failed: {exc}", sql=sql) from exc

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Row]:
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(sql, tuple(params))
                    return cur.fetchone()
        except psycopg.Error as exc:
            log.error("Query failed", extra={"sql": sql, "error": str(exc)})
            raise StoreError(f"query failed: {exc}", sql=sql) from exc

    def query_many(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(sql, tuple(params))
                    return cur.fetchall()
        except psycopg.Error as exc:
            log.error("Query failed", extra={"sql": sql, "error": str(exc)})
            raise StoreError(f"query failed: {exc}", sql=sql) from exc

    def close(self) -> None:
        self._pool.close()


__all__ = ["ExecResult", "Row", "StoreExecutor", "PsycopgExecutor"]
