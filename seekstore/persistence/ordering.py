"""
ORDER BY specifications.

An ordering is a tuple of `OrderKey` (column, direction). Columns are checked
against the record kind before any SQL is rendered.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, Tuple, Union

from seekstore.domain.kinds import RecordKind
from seekstore.errors import UnknownColumnError


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def parse(cls, value: Union["SortDirection", str]) -> "SortDirection":
        if isinstance(value, SortDirection):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown sort direction {value!r}, expected asc or desc") from None

    def inverted(self) -> "SortDirection":
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


@dataclass(frozen=True)
class OrderKey:
    column: str
    direction: SortDirection = SortDirection.ASC

    def inverted(self) -> "OrderKey":
        return OrderKey(self.column, self.direction.inverted())


Ordering = Tuple[OrderKey, ...]
OrderingLike = Union[
    Mapping[str, str],
    Iterable[Union[OrderKey, Tuple[str, Union[SortDirection, str]], str]],
    None,
]


def coerce_ordering(spec: OrderingLike) -> Ordering:
    """
    Normalize an ordering given as a mapping (``{"id": "desc"}``), a sequence
    of ``(column, direction)`` pairs, bare column names (ascending), or
    OrderKey instances.
    """
    if spec is None:
        return ()
    items = spec.items() if isinstance(spec, Mapping) else spec
    keys = []
    for item in items:
        if isinstance(item, OrderKey):
            keys.append(item)
        elif isinstance(item, str):
            keys.append(OrderKey(item))
        else:
            column, direction = item
            keys.append(OrderKey(column, SortDirection.parse(direction)))
    return tuple(keys)


def invert(ordering: Ordering) -> Ordering:
    return tuple(key.inverted() for key in ordering)


def direction_of(ordering: Ordering, column: str) -> Union[SortDirection, None]:
    for key in ordering:
        if key.column == column:
            return key.direction
    return None


def render_order_by(kind: RecordKind, ordering: Ordering) -> str:
    if not ordering:
        return ""
    parts = []
    for key in ordering:
        if not kind.has_column(key.column):
            raise UnknownColumnError(kind.name, key.column)
        parts.append(f"{kind.table}.{key.column} {key.direction.value}")
    return " ORDER BY " + ", ".join(parts)


__all__ = [
    "SortDirection",
    "OrderKey",
    "Ordering",
    "OrderingLike",
    "coerce_ordering",
    "invert",
    "direction_of",
    "render_order_by",
]
