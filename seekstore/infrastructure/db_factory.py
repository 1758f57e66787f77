"""
Connection and executor factory for seekstore.

`PoolManager` keeps one `PsycopgExecutor` (and so one `ConnectionPool`) per
DSN for the life of the process and closes them all at exit. One-off work
such as applying the schema uses `get_sync_connection`, which retries
transient connect failures with tenacity. Statements run through an executor
are never retried.
"""

from __future__ import annotations

import atexit
import threading
from typing import Dict, Optional

import psycopg
from psycopg import Connection
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from seekstore.config import get_settings
from seekstore.infrastructure.executor import PsycopgExecutor
from seekstore.utils.logging import get_logger

log = get_logger(__name__)


class PoolManager:
    """
    Process-wide registry of pooled executors, keyed by DSN.

    Thread-safe; the first `PoolManager()` registers `close_all` with atexit.
    """

    _instance: Optional["PoolManager"] = None
    _lock = threading.Lock()
    _executors: Dict[str, PsycopgExecutor]

    def __new__(cls) -> "PoolManager":
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._executors = {}
                atexit.register(instance.close_all)
                cls._instance = instance
            return cls._instance

    def executor(self, dsn: str, min_size: int, max_size: int) -> PsycopgExecutor:
        """Return the executor for `dsn`, opening its pool on first use."""
        with self._lock:
            executor = self._executors.get(dsn)
            if executor is None:
                log.debug(
                    "Opening connection pool",
                    extra={"min_size": min_size, "max_size": max_size},
                )
                executor = PsycopgExecutor.from_dsn(dsn, min_size=min_size, max_size=max_size)
                self._executors[dsn] = executor
            return executor

    def close_all(self) -> None:
        """Close every managed pool. Safe to call more than once."""
        with self._lock:
            executors, self._executors = list(self._executors.values()), {}
        for executor in executors:
            try:
                executor.close()
            except psycopg.Error as exc:
                log.warning("Closing connection pool failed", extra={"error": str(exc)})


def build_dsn() -> str:
    """DSN from the current settings."""
    return get_settings().dsn


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn: Optional[str] = None) -> Connection:
    """
    Open a dedicated connection, retrying transient failures.

    Parameters
    ----------
    dsn : str, optional
        Overrides the DSN built from settings.

    Raises
    ------
    psycopg.OperationalError
        When the third attempt still fails.
    """
    return psycopg.connect(dsn or build_dsn())


def get_executor(dsn: Optional[str] = None) -> PsycopgExecutor:
    """
    Pooled executor for `dsn` (settings DSN by default), sized by
    ``DB_POOL_MIN`` / ``DB_POOL_MAX``.
    """
    settings = get_settings()
    return PoolManager().executor(
        dsn or settings.dsn, min_size=settings.db_pool_min, max_size=settings.db_pool_max
    )


__all__ = ["PoolManager", "build_dsn", "get_sync_connection", "get_executor"]
