"""
Persistence package for seekstore.

Re-exports the generic record accessor, the keyset pager and the pieces they
are assembled from (attribute maps, predicates, orderings, cascade deletes).
"""

from seekstore.persistence.accessor import DestroyResult, RecordAccessor
from seekstore.persistence.attributes import AttributeMap
from seekstore.persistence.cascade import (
    DEFAULT_ASSOCIATIONS,
    Association,
    AssociationRegistry,
    CascadeDeleteCoordinator,
    CascadeOutcome,
    ChildDeletion,
)
from seekstore.persistence.ordering import OrderKey, SortDirection
from seekstore.persistence.pager import KeysetPager, Page, PageCursor, PageDirection
from seekstore.persistence.predicate import Predicate

__all__ = [
    # Accessor
    "RecordAccessor",
    "DestroyResult",
    "AttributeMap",
    "Predicate",
    # Cascade
    "Association",
    "AssociationRegistry",
    "CascadeDeleteCoordinator",
    "CascadeOutcome",
    "ChildDeletion",
    "DEFAULT_ASSOCIATIONS",
    # Pagination
    "KeysetPager",
    "Page",
    "PageCursor",
    "PageDirection",
    "OrderKey",
    "SortDirection",
]
