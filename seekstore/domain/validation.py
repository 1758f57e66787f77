"""
Declarative field constraints and the single validator that checks them.

Each record kind publishes a constraint table (field -> FieldConstraint);
`validate` walks the table in order and reports every violation. The accessor
calls it before `create` and `save` touch the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, List, Mapping, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class FieldConstraint:
    """Required flag and inclusive character-length bounds for one field."""

    required: bool = False
    min_length: Optional[int] = None
    max_length: Optional[int] = None

    def describe(self) -> str:
        if self.min_length is not None and self.max_length is not None:
            return f"length({self.min_length}|{self.max_length})"
        if self.min_length is not None:
            return f"length(>={self.min_length})"
        if self.max_length is not None:
            return f"length(<={self.max_length})"
        return "required"


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@runtime_checkable
class Validatable(Protocol):
    """Anything exposing a constraint table and attribute access to its fields."""

    constraints: ClassVar[Mapping[str, FieldConstraint]]


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    return False


def validate(record: Validatable) -> List[FieldViolation]:
    """
    Check `record` against its kind's constraint table.

    Returns
    -------
    list[FieldViolation]
        Violations in table order; empty when the record is valid.
    """
    violations: List[FieldViolation] = []
    for name, constraint in record.constraints.items():
        value = getattr(record, name, None)
        if _is_blank(value):
            if constraint.required:
                violations.append(FieldViolation(name, "non zero value required"))
            continue
        length = len(value) if isinstance(value, str) else len(str(value))
        too_short = constraint.min_length is not None and length < constraint.min_length
        too_long = constraint.max_length is not None and length > constraint.max_length
        if too_short or too_long:
            violations.append(
                FieldViolation(
                    name, f"{value!r} does not validate as {constraint.describe()}"
                )
            )
    return violations


__all__ = ["FieldConstraint", "FieldViolation", "Validatable", "validate"]
