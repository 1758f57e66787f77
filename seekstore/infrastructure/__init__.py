"""
Infrastructure package for seekstore.

Centralizes database connectivity concerns (pool factory, the psycopg store
executor, schema DDL). Keep this layer focused on I/O and resource
management, decoupled from accessor/pager logic.
"""

from seekstore.infrastructure.db_factory import (
    PoolManager,
    build_dsn,
    get_executor,
    get_sync_connection,
)
from seekstore.infrastructure.executor import ExecResult, PsycopgExecutor, StoreExecutor
from seekstore.infrastructure.schema import apply_schema

__all__ = [
    "PoolManager",
    "build_dsn",
    "get_executor",
    "get_sync_connection",
    "ExecResult",
    "PsycopgExecutor",
    "StoreExecutor",
    "apply_schema",
]
