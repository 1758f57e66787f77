"""
Trusted predicate fragments.

A `Predicate` is raw boolean SQL (no leading WHERE) plus the positional
parameters for its ``%s`` placeholders. The text is spliced into statements
as-is, so it must come from code, never from unsanitized external input;
only parameter values are bound.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Tuple, Union


@dataclass(frozen=True)
class Predicate:
    sql: str = ""
    params: Tuple[Any, ...] = ()

    @classmethod
    def of(cls, sql: str = "", *params: Any) -> "Predicate":
        return cls(sql.strip(), tuple(params))

    @classmethod
    def coerce(cls, where: "PredicateLike", params: Iterable[Any] = ()) -> "Predicate":
        """
        Accept either a Predicate or a raw string with separate parameters.
        """
        params = tuple(params)
        if isinstance(where, Predicate):
            if params:
                raise TypeError("parameters are already bound to the Predicate")
            return where
        return cls.of(where or "", *params)

    @classmethod
    def in_ids(cls, column: str, ids: Iterable[int]) -> "Predicate":
        """``column IN (%s, ...)`` over `ids`; empty when `ids` is empty."""
        ids = tuple(ids)
        if not ids:
            return cls()
        holders = ", ".join(["%s"] * len(ids))
        return cls(f"{column} IN ({holders})", ids)

    @property
    def is_empty(self) -> bool:
        return not self.sql

    def and_(self, other: "Predicate") -> "Predicate":
        """Conjoin two predicates; an empty side is dropped."""
        if self.is_empty:
            return other
        if other.is_empty:
            return self
        return Predicate(f"({self.sql}) AND {other.sql}", self.params + other.params)

    def where_clause(self) -> str:
        return f" WHERE {self.sql}" if self.sql else ""


PredicateLike = Union[Predicate, str, None]


__all__ = ["Predicate", "PredicateLike"]
