"""
Keyset ("seek") pager.

Walks an ordered, optionally filtered record set page by page by comparing the
id column against the first/last id of the page last fetched, instead of
skipping an offset. The id column must be part of the ordering so every page
boundary is unambiguous.

Counts come from a separate `count_where` on the static filter and are not
read in the same snapshot as the rows: inserts or deletes between the two
statements can make `total_pages` disagree with what `next()` finds. That
window is accepted; nothing here opens a transaction.

A `KeysetPager` and its `PageCursor` belong to one browsing session and are
not safe to share between threads.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple, Union

from seekstore.domain.kinds import ID_COLUMN
from seekstore.domain.models import Record
from seekstore.errors import (
    InvalidDirectionError,
    MissingOrderKeyError,
    NoNextPageError,
    NoPreviousPageError,
)
from seekstore.persistence.accessor import RecordAccessor
from seekstore.persistence.ordering import (
    Ordering,
    OrderingLike,
    SortDirection,
    coerce_ordering,
    direction_of,
    invert,
)
from seekstore.persistence.predicate import Predicate, PredicateLike
from seekstore.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_PAGE_SIZE = 10


class PageDirection(str, Enum):
    PREVIOUS = "previous"
    CURRENT = "current"
    NEXT = "next"

    @classmethod
    def parse(cls, value: Union["PageDirection", str]) -> "PageDirection":
        if isinstance(value, PageDirection):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidDirectionError(
                f"Wrong direction {value!r}: none of previous, current or next"
            ) from None


@dataclass
class PageCursor:
    """
    Pagination state of one session. Mutated only by `KeysetPager`.

    `first_id`/`last_id` are 0 until a page has been fetched; `total_items`
    and `total_pages` are None until counted.
    """

    order: Ordering
    filter: Predicate = field(default_factory=Predicate)
    page_size: int = 0
    page_index: int = 0
    first_id: int = 0
    last_id: int = 0
    total_items: Optional[int] = None
    total_pages: Optional[int] = None

    @property
    def is_fresh(self) -> bool:
        return self.page_index == 0 and self.first_id == 0 and self.last_id == 0

    @property
    def id_direction(self) -> Optional[SortDirection]:
        return direction_of(self.order, ID_COLUMN)


@dataclass(frozen=True)
class Page:
    """One fetched page plus the cursor position it left behind."""

    items: List[Record]
    index: int
    page_size: int
    total_items: int
    total_pages: int
    first_id: int
    last_id: int

    @property
    def ids(self) -> List[int]:
        return [r.id for r in self.items]

    @property
    def has_previous(self) -> bool:
        return self.index > 0

    @property
    def has_next(self) -> bool:
        return self.index < self.total_pages - 1

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


class KeysetPager:
    """
    Parameters
    ----------
    accessor : RecordAccessor
        Accessor of the kind being paged.
    order : mapping or sequence
        Ordering, e.g. ``[("id", "asc")]`` or ``{"created_at": "desc", "id": "desc"}``.
        Must include the id column.
    where, *params
        Static filter applied to counts and pages.
    page_size : int
        Rows per page; 0 falls back to 10.

    Example
    -------
        pager = KeysetPager(articles, order=[("id", "asc")], page_size=10)
        first = pager.current()
        second = pager.next()
    """

    def __init__(
        self,
        accessor: RecordAccessor,
        order: OrderingLike,
        where: PredicateLike = "",
        *params: Any,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._accessor = accessor
        self._cursor = PageCursor(
            order=coerce_ordering(order),
            filter=Predicate.coerce(where, params),
            page_size=page_size,
        )

    @property
    def cursor(self) -> PageCursor:
        return self._cursor

    # ------------------------------------------------------------------
    # Cursor maintenance

    def reset(self) -> None:
        """Rewind to a fresh cursor, keeping the filter and cached counts."""
        self._cursor.page_index = 0
        self._cursor.first_id = 0
        self._cursor.last_id = 0

    def set_filter(self, where: PredicateLike = "", *params: Any) -> None:
        """Replace the static filter; cached counts are dropped and the cursor rewound."""
        self._cursor.filter = Predicate.coerce(where, params)
        self._cursor.total_items = None
        self._cursor.total_pages = None
        self.reset()

    def _require_id_order(self) -> SortDirection:
        direction = self._cursor.id_direction
        if direction is None:
            raise MissingOrderKeyError("No id order specified in the ordering")
        return direction

    def refresh_page_count(self) -> Tuple[int, int]:
        """Recount the static filter; returns (total_items, total_pages)."""
        cursor = self._cursor
        total = self._accessor.count_where(cursor.filter)
        if cursor.page_size <= 0:
            cursor.page_size = DEFAULT_PAGE_SIZE
        cursor.total_items = total
        cursor.total_pages = int(math.ceil(total / cursor.page_size))
        return cursor.total_items, cursor.total_pages

    def _ensure_page_count(self) -> None:
        if self._cursor.total_pages is None:
            self.refresh_page_count()

    # ------------------------------------------------------------------
    # Query construction

    def build_seek_predicate(self, direction: Union[PageDirection, str]) -> Predicate:
        """
        The id-boundary predicate for `direction`, conjoined with the static filter.
        """
        direction = PageDirection.parse(direction)
        descending = self._require_id_order() is SortDirection.DESC
        cursor = self._cursor
        if direction is PageDirection.PREVIOUS:
            seek = Predicate.of(f"{ID_COLUMN} {'>' if descending else '<'} %s", cursor.first_id)
        elif direction is PageDirection.NEXT:
            seek = Predicate.of(f"{ID_COLUMN} {'<' if descending else '>'} %s", cursor.last_id)
        elif cursor.is_fresh:
            seek = Predicate.of(f"{ID_COLUMN} > %s", 0)
        elif descending:
            seek = Predicate.of(
                f"{ID_COLUMN} <= %s AND {ID_COLUMN} >= %s", cursor.first_id, cursor.last_id
            )
        else:
            seek = Predicate.of(
                f"{ID_COLUMN} >= %s AND {ID_COLUMN} <= %s", cursor.first_id, cursor.last_id
            )
        return cursor.filter.and_(seek)

    def _fetch(self, direction: PageDirection) -> List[Record]:
        cursor = self._cursor
        predicate = self.build_seek_predicate(direction)
        if direction is PageDirection.PREVIOUS:
            # Seek backwards from first_id, then restore the configured order.
            rows = self._accessor.find_where(
                predicate, order_by=invert(cursor.order), limit=cursor.page_size
            )
            rows.reverse()
        else:
            rows = self._accessor.find_where(
                predicate, order_by=cursor.order, limit=cursor.page_size
            )
        if rows:
            cursor.first_id, cursor.last_id = rows[0].id, rows[-1].id
        return rows

    def _page(self, items: List[Record]) -> Page:
        cursor = self._cursor
        return Page(
            items=items,
            index=cursor.page_index,
            page_size=cursor.page_size,
            total_items=cursor.total_items or 0,
            total_pages=cursor.total_pages or 0,
            first_id=cursor.first_id,
            last_id=cursor.last_id,
        )

    # ------------------------------------------------------------------
    # Paging

    def current(self) -> Page:
        """Re-read the page the cursor is on (the first page on a fresh cursor)."""
        self._require_id_order()
        self.refresh_page_count()
        items = self._fetch(PageDirection.CURRENT)
        return self._page(items)

    def previous(self) -> Page:
        if self._cursor.page_index == 0:
            raise NoPreviousPageError("This is the first page, no previous page yet")
        self._require_id_order()
        self._ensure_page_count()
        items = self._fetch(PageDirection.PREVIOUS)
        self._cursor.page_index -= 1
        return self._page(items)

    def next(self) -> Page:
        self._require_id_order()
        self._ensure_page_count()
        cursor = self._cursor
        if cursor.page_index >= (cursor.total_pages or 0) - 1:
            raise NoNextPageError("This is the last page, no next page yet")
        items = self._fetch(PageDirection.NEXT)
        cursor.page_index += 1
        return self._page(items)

    def page(self, direction: Union[PageDirection, str]) -> Page:
        """
        Dispatch to `previous`, `current` or `next`. Errors from the
        dispatched call propagate exactly as from a direct call.
        """
        direction = PageDirection.parse(direction)
        log.debug("Fetching page", extra={"direction": direction.value})
        if direction is PageDirection.PREVIOUS:
            return self.previous()
        if direction is PageDirection.NEXT:
            return self.next()
        return self.current()


__all__ = ["KeysetPager", "PageCursor", "Page", "PageDirection", "DEFAULT_PAGE_SIZE"]
