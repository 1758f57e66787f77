"""
Record kinds: the table-level description the generic accessor works from.

A RecordKind ties a pydantic model to its table and lists the columns that
may be written. Column names in generated SQL only ever come from here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Tuple, Type

from seekstore.domain.models import Article, Comment, Record

ID_COLUMN = "id"
CREATED_AT = "created_at"
UPDATED_AT = "updated_at"


@dataclass(frozen=True)
class RecordKind:
    """
    Attributes
    ----------
    name : str
        Short identifier used in logs and error messages.
    table : str
        Table name.
    model : type[Record]
        Model rows are materialized into.
    columns : tuple[str, ...]
        Writable columns, excluding the id.
    coalesce : frozenset[str]
        Nullable text columns selected as ``COALESCE(col, '')``.
    timestamps : bool
        Whether the kind keeps created_at/updated_at bookkeeping.
    """

    name: str
    table: str
    model: Type[Record]
    columns: Tuple[str, ...]
    coalesce: FrozenSet[str] = field(default_factory=frozenset)
    timestamps: bool = True

    @property
    def all_columns(self) -> Tuple[str, ...]:
        return (ID_COLUMN,) + self.columns

    @property
    def content_columns(self) -> Tuple[str, ...]:
        """Writable columns minus the timestamp bookkeeping ones."""
        return tuple(c for c in self.columns if c not in (CREATED_AT, UPDATED_AT))

    def has_column(self, name: str) -> bool:
        return name in self.all_columns

    def select_list(self) -> str:
        parts = []
        for column in self.all_columns:
            if column in self.coalesce:
                parts.append(f"COALESCE({self.table}.{column}, '') AS {column}")
            else:
                parts.append(f"{self.table}.{column}")
        return ", ".join(parts)


ARTICLE = RecordKind(
    name="article",
    table="articles",
    model=Article,
    columns=("title", "text", CREATED_AT, UPDATED_AT),
    coalesce=frozenset({"text"}),
)

COMMENT = RecordKind(
    name="comment",
    table="comments",
    model=Comment,
    columns=("commenter", "body", "article_id", CREATED_AT, UPDATED_AT),
    coalesce=frozenset({"body"}),
)


__all__ = ["RecordKind", "ARTICLE", "COMMENT", "ID_COLUMN", "CREATED_AT", "UPDATED_AT"]
