"""
Error taxonomy for seekstore.

Argument-shape and validation errors are raised before any statement reaches
the store. `StoreError` wraps whatever the store executor raised and keeps the
original exception as ``__cause__``.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence


class SeekStoreError(Exception):
    """Base class for every error raised by seekstore."""


class InvalidIdentityError(SeekStoreError):
    """A zero or missing id was given where a persisted identity is required."""


class NotFoundError(SeekStoreError):
    """A single-record lookup matched no row."""

    def __init__(self, kind: str, detail: str) -> None:
        super().__init__(f"{kind} not found: {detail}")
        self.kind = kind


class ValidationError(SeekStoreError):
    """One or more field constraints failed; nothing was written."""

    def __init__(self, kind: str, violations: Sequence[Any]) -> None:
        self.kind = kind
        self.violations = list(violations)
        detail = "; ".join(str(v) for v in self.violations) or "unknown error"
        super().__init__(f"Validate {kind} error: {detail}")


class EmptyAttributesError(SeekStoreError):
    """An attribute map with zero entries was given to a write path."""


class UnknownColumnError(SeekStoreError):
    """A column name is not part of the record kind."""

    def __init__(self, kind: str, column: str) -> None:
        super().__init__(f"Unknown column {column!r} for {kind}")
        self.kind = kind
        self.column = column


class MissingPredicateError(SeekStoreError):
    """A predicate-driven destroy, or a raw SQL call, got a blank clause."""


class MissingOrderKeyError(SeekStoreError):
    """Pagination was requested without ordering on the id column."""


class NoPreviousPageError(SeekStoreError):
    """The cursor is on the first page."""


class NoNextPageError(SeekStoreError):
    """The cursor is on the last page."""


class InvalidDirectionError(SeekStoreError):
    """A page direction other than previous, current or next was given."""


class StoreError(SeekStoreError):
    """A failure surfaced from the store executor."""

    def __init__(self, message: str, sql: Optional[str] = None) -> None:
        super().__init__(message)
        self.sql = sql


__all__ = [
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
]
