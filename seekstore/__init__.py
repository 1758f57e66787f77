"""
seekstore - generic record access and keyset pagination over PostgreSQL.

This package provides:

- Attribute-map driven creates and partial updates
- A record-kind-generic accessor (find/count/create/update/destroy)
- Best-effort cascade deletion of dependent records
- Keyset ("seek") pagination that walks forward and backward by id
- A declarative validation gate for single-record writes
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from seekstore.config import Settings, get_settings
from seekstore.domain import ARTICLE, COMMENT, Article, Comment, Record, RecordKind
from seekstore.errors import (
    EmptyAttributesError,
    InvalidDirectionError,
    InvalidIdentityError,
    MissingOrderKeyError,
    MissingPredicateError,
    NoNextPageError,
    NoPreviousPageError,
    NotFoundError,
    SeekStoreError,
    StoreError,
    UnknownColumnError,
    ValidationError,
)
from seekstore.infrastructure.executor import ExecResult, PsycopgExecutor, StoreExecutor
from seekstore.persistence import (
    AttributeMap,
    KeysetPager,
    Page,
    PageDirection,
    Predicate,
    RecordAccessor,
)
from seekstore.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "Record",
    "Article",
    "Comment",
    "RecordKind",
    "ARTICLE",
    "COMMENT",
    # Store
    "StoreExecutor",
    "ExecResult",
    "PsycopgExecutor",
    # Persistence
    "RecordAccessor",
    "AttributeMap",
    "Predicate",
    "KeysetPager",
    "Page",
    "PageDirection",
    # Errors
    "SeekStoreError",
    "InvalidIdentityError",
    "NotFoundError",
    "ValidationError",
    "EmptyAttributesError",
    "UnknownColumnError",
    "MissingPredicateError",
    "MissingOrderKeyError",
    "NoPreviousPageError",
    "NoNextPageError",
    "InvalidDirectionError",
    "StoreError",
    # Logging
    "configure_logging",
    "get_logger",
]
