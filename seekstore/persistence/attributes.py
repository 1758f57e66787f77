"""
Attribute map codec.

Turns a sparse column -> value map into the ordered column list, placeholder
list and bind parameters of an INSERT, or the ``column = %s`` assignments of
an UPDATE. The same iteration order feeds columns and parameters, so one
statement is always internally consistent.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

from seekstore.domain.kinds import CREATED_AT, ID_COLUMN, UPDATED_AT, RecordKind
from seekstore.errors import EmptyAttributesError, InvalidIdentityError, UnknownColumnError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AttributeMap(Mapping[str, Any]):
    """
    Non-empty, insertion-ordered column/value pairs bound to one record kind.

    Columns the kind does not have are rejected here rather than when the
    statement is built.
    """

    __slots__ = ("_kind", "_values")

    def __init__(
        self, kind: RecordKind, values: Optional[Mapping[str, Any]] = None, **kwargs: Any
    ) -> None:
        merged: Dict[str, Any] = dict(values or {})
        merged.update(kwargs)
        if not merged:
            raise EmptyAttributesError(f"Zero key in the attributes map for {kind.name}")
        for column in merged:
            if not kind.has_column(column):
                raise UnknownColumnError(kind.name, column)
        self._kind = kind
        self._values = merged

    @classmethod
    def coerce(
        cls, kind: RecordKind, attrs: Union["AttributeMap", Mapping[str, Any]]
    ) -> "AttributeMap":
        if isinstance(attrs, AttributeMap):
            if attrs.kind is not kind:
                raise TypeError(f"attribute map for {attrs.kind.name} used with {kind.name}")
            return attrs
        return cls(kind, attrs)

    @property
    def kind(self) -> RecordKind:
        return self._kind

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"AttributeMap({self._kind.name}, {self._values!r})"

    def merged(self, **overrides: Any) -> "AttributeMap":
        """Return a copy with `overrides` applied; existing keys keep their position."""
        values = dict(self._values)
        values.update(overrides)
        return AttributeMap(self._kind, values)


@dataclass(frozen=True)
class EncodedAttributes:
    columns: Tuple[str, ...]
    params: Tuple[Any, ...]

    @property
    def placeholders(self) -> str:
        return ", ".join(["%s"] * len(self.columns))

    @property
    def assignments(self) -> Tuple[str, ...]:
        return tuple(f"{column} = %s" for column in self.columns)


def encode(attrs: AttributeMap) -> EncodedAttributes:
    if len(attrs) == 0:
        raise EmptyAttributesError("Zero key in the attributes map")
    columns = tuple(attrs)
    return EncodedAttributes(columns=columns, params=tuple(attrs[c] for c in columns))


def stamp_for_create(attrs: AttributeMap, now: Optional[datetime] = None) -> AttributeMap:
    """Fill absent (or None) created_at/updated_at with the current instant."""
    if not attrs.kind.timestamps:
        return attrs
    now = now or utcnow()
    missing = {c: now for c in (CREATED_AT, UPDATED_AT) if attrs.get(c) is None}
    return attrs.merged(**missing) if missing else attrs


def stamp_for_update(attrs: AttributeMap, now: Optional[datetime] = None) -> AttributeMap:
    """Overwrite updated_at with the current instant, even when supplied."""
    if not attrs.kind.timestamps:
        return attrs
    return attrs.merged(**{UPDATED_AT: now or utcnow()})


def insert_statement(
    attrs: AttributeMap, now: Optional[datetime] = None
) -> Tuple[str, Tuple[Any, ...]]:
    encoded = encode(stamp_for_create(attrs, now))
    sql = (
        f"INSERT INTO {attrs.kind.table} ({', '.join(encoded.columns)}) "
        f"VALUES ({encoded.placeholders}) RETURNING {ID_COLUMN}"
    )
    return sql, encoded.params


def update_statement(
    attrs: AttributeMap, record_id: int, now: Optional[datetime] = None
) -> Tuple[str, Tuple[Any, ...]]:
    if ID_COLUMN in attrs:
        raise InvalidIdentityError(
            f"The {ID_COLUMN} column of {attrs.kind.name} can't be rewritten by an update"
        )
    encoded = encode(stamp_for_update(attrs, now))
    sql = (
        f"UPDATE {attrs.kind.table} SET {', '.join(encoded.assignments)} "
        f"WHERE {ID_COLUMN} = %s"
    )
    return sql, encoded.params + (record_id,)


__all__ = [
    "AttributeMap",
    "EncodedAttributes",
    "encode",
    "stamp_for_create",
    "stamp_for_update",
    "insert_statement",
    "update_statement",
    "utcnow",
]
