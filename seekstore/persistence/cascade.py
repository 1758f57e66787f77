"""
Cascade delete coordinator.

Associations are registered per parent kind. Before a parent row goes, every
registered child kind is deleted through its own accessor's `destroy_where`
with ``foreign_key IN (...)``. Child failures are logged and reported in the
returned `CascadeOutcome`; they never stop the parent delete. Nothing here is
transactional: a failed child delete leaves orphans behind.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, Tuple

from seekstore.domain.kinds import ARTICLE, COMMENT, RecordKind
from seekstore.errors import SeekStoreError
from seekstore.persistence.predicate import Predicate
from seekstore.utils.logging import get_logger

if TYPE_CHECKING:
    from seekstore.persistence.accessor import RecordAccessor

log = get_logger(__name__)


@dataclass(frozen=True)
class Association:
    """
    One parent has-many child link.

    Attributes
    ----------
    parent, child : RecordKind
        The two kinds.
    foreign_key : str
        Column on the child holding the parent id.
    name : str
        Attribute on the parent model that receives the children.
    inverse : str | None
        Attribute on the child model that receives the parent.
    """

    parent: RecordKind
    child: RecordKind
    foreign_key: str
    name: str
    inverse: Optional[str] = None


class AssociationRegistry:
    def __init__(self, associations: Iterable[Association] = ()) -> None:
        self._items: List[Association] = []
        for association in associations:
            self.register(association)

    def register(self, association: Association) -> None:
        if not association.child.has_column(association.foreign_key):
            raise ValueError(
                f"{association.child.name} has no column {association.foreign_key!r}"
            )
        self._items.append(association)

    def children_of(self, kind: RecordKind) -> Tuple[Association, ...]:
        return tuple(a for a in self._items if a.parent == kind)

    def parents_of(self, kind: RecordKind) -> Tuple[Association, ...]:
        return tuple(a for a in self._items if a.child == kind and a.inverse)

    def __iter__(self):
        return iter(self._items)


@dataclass(frozen=True)
class ChildDeletion:
    association: str
    child: str
    deleted: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CascadeOutcome:
    """Per-association result of one cascade run."""

    parent: str
    parent_ids: Tuple[int, ...] = ()
    results: List[ChildDeletion] = field(default_factory=list)
    resolution_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.resolution_error is None and all(r.ok for r in self.results)

    @property
    def failures(self) -> List[ChildDeletion]:
        return [r for r in self.results if not r.ok]

    @property
    def deleted(self) -> Dict[str, int]:
        return {r.association: r.deleted for r in self.results if r.ok}


class CascadeDeleteCoordinator:
    """
    Deletes dependent rows of registered associations ahead of their parent.

    Parameters
    ----------
    registry : AssociationRegistry
        Where child associations are looked up.
    accessor_for : callable
        Builds the accessor for a child kind.
    """

    def __init__(
        self,
        registry: AssociationRegistry,
        accessor_for: Callable[[RecordKind], "RecordAccessor"],
    ) -> None:
        self._registry = registry
        self._accessor_for = accessor_for

    def cascade(self, parent: RecordKind, ids: Iterable[int]) -> CascadeOutcome:
        ids = tuple(ids)
        outcome = CascadeOutcome(parent=parent.name, parent_ids=ids)
        if not ids:
            return outcome
        for association in self._registry.children_of(parent):
            predicate = Predicate.in_ids(association.foreign_key, ids)
            try:
                result = self._accessor_for(association.child).destroy_where(predicate)
            except SeekStoreError as exc:
                log.warning(
                    f"Destroy associated object {association.name} error: {exc}",
                    extra={"parent": parent.name, "association": association.name},
                )
                outcome.results.append(
                    ChildDeletion(association.name, association.child.name, error=str(exc))
                )
                continue
            outcome.results.append(
                ChildDeletion(association.name, association.child.name, deleted=result.deleted)
            )
        return outcome


DEFAULT_ASSOCIATIONS = AssociationRegistry(
    [
        Association(
            parent=ARTICLE,
            child=COMMENT,
            foreign_key="article_id",
            name="comments",
            inverse="article",
        ),
    ]
)


__all__ = [
    "Association",
    "AssociationRegistry",
    "ChildDeletion",
    "CascadeOutcome",
    "CascadeDeleteCoordinator",
    "DEFAULT_ASSOCIATIONS",
]
