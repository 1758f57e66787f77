"""
Generic record accessor.

One `RecordAccessor` per record kind provides find/count/create/update/destroy
over a `StoreExecutor`. Filtered reads take a trusted predicate fragment (raw
boolean SQL without the leading WHERE, ``%s`` placeholders) plus its
parameters; the keyset pager is built on `find_where` and `count_where`.

Argument and validation errors are raised before any statement is sent.
Store failures propagate as `StoreError` and are never retried; the one
exception is dependent-row cleanup, which is best effort (see `cascade`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from seekstore.domain.kinds import ID_COLUMN, RecordKind
from seekstore.domain.models import Record
from seekstore.domain.validation import validate
from seekstore.errors import (
    InvalidIdentityError,
    MissingPredicateError,
    NotFoundError,
    StoreError,
    UnknownColumnError,
    ValidationError,
)
from seekstore.infrastructure.executor import Row, StoreExecutor
from seekstore.persistence.attributes import AttributeMap, insert_statement, update_statement, utcnow
from seekstore.persistence.cascade import (
    DEFAULT_ASSOCIATIONS,
    Association,
    AssociationRegistry,
    CascadeDeleteCoordinator,
    CascadeOutcome,
)
from seekstore.persistence.ordering import OrderingLike, coerce_ordering, render_order_by
from seekstore.persistence.predicate import Predicate, PredicateLike
from seekstore.utils.logging import get_logger

log = get_logger(__name__)

Attributes = Union[AttributeMap, Mapping[str, Any]]


@dataclass
class DestroyResult:
    """Rows removed from the parent table plus the cascade report."""

    deleted: int
    cascade: CascadeOutcome


class RecordAccessor:
    """
    Parameters
    ----------
    kind : RecordKind
        The record kind served by this accessor.
    executor : StoreExecutor
        Where statements run.
    associations : AssociationRegistry | None
        Child associations used for cascade deletes and eager loading.
        Defaults to the shipped Article -> Comment registry.
    """

    def __init__(
        self,
        kind: RecordKind,
        executor: StoreExecutor,
        associations: Optional[AssociationRegistry] = None,
    ) -> None:
        self.kind = kind
        self._executor = executor
        self._associations = associations if associations is not None else DEFAULT_ASSOCIATIONS
        self._cascade = CascadeDeleteCoordinator(self._associations, self.accessor_for)

    def accessor_for(self, kind: RecordKind) -> "RecordAccessor":
        """Accessor for another kind sharing this executor and registry."""
        if kind == self.kind:
            return self
        return RecordAccessor(kind, self._executor, self._associations)

    # ------------------------------------------------------------------
    # Statement helpers

    def _check_column(self, column: str) -> str:
        if not self.kind.has_column(column):
            raise UnknownColumnError(self.kind.name, column)
        return column

    def _select_sql(
        self,
        predicate: Predicate,
        order_by: OrderingLike = None,
        limit: Optional[int] = None,
    ) -> Tuple[str, Tuple[Any, ...]]:
        sql = f"SELECT {self.kind.select_list()} FROM {self.kind.table}"
        sql += predicate.where_clause()
        sql += render_order_by(self.kind, coerce_ordering(order_by))
        params = predicate.params
        if limit is not None:
            sql += " LIMIT %s"
            params = params + (int(limit),)
        return sql, params

    def _materialize(self, rows: Iterable[Row]) -> List[Record]:
        return [self.kind.model.model_validate(dict(row)) for row in rows]

    def _one(self, predicate: Predicate, detail: str, order_by: OrderingLike = None) -> Record:
        sql, params = self._select_sql(predicate, order_by=order_by, limit=1)
        row = self._executor.query_one(sql, params)
        if row is None:
            raise NotFoundError(self.kind.name, detail)
        return self.kind.model.model_validate(dict(row))

    # ------------------------------------------------------------------
    # Reads

    def find_by_id(self, record_id: int) -> Record:
        if not record_id:
            raise InvalidIdentityError("Invalid ID: it can't be zero")
        predicate = Predicate.of(f"{self.kind.table}.{ID_COLUMN} = %s", record_id)
        return self._one(predicate, f"id={record_id}")

    def find_by_ids(self, *ids: int) -> List[Record]:
        if not ids:
            raise InvalidIdentityError("At least one or more ids needed")
        return self.find_where(Predicate.in_ids(f"{self.kind.table}.{ID_COLUMN}", ids))

    def find_by(self, column: str, value: Any) -> Record:
        self._check_column(column)
        return self._one(Predicate.of(f"{column} = %s", value), f"{column}={value!r}")

    def find_all_by(self, column: str, value: Any) -> List[Record]:
        self._check_column(column)
        return self.find_where(Predicate.of(f"{column} = %s", value))

    def first(self) -> Record:
        return self._one(Predicate(), "table is empty", order_by=[(ID_COLUMN, "ASC")])

    def first_n(self, n: int) -> List[Record]:
        return self.find_where(order_by=[(ID_COLUMN, "ASC")], limit=n)

    def last(self) -> Record:
        return self._one(Predicate(), "table is empty", order_by=[(ID_COLUMN, "DESC")])

    def last_n(self, n: int) -> List[Record]:
        return self.find_where(order_by=[(ID_COLUMN, "DESC")], limit=n)

    def all(self) -> List[Record]:
        return self.find_where()

    def find_where(
        self,
        where: PredicateLike = "",
        *params: Any,
        order_by: OrderingLike = None,
        limit: Optional[int] = None,
    ) -> List[Record]:
        """
        Records matching a predicate fragment, e.g.
        ``find_where("title = %s AND id > %s", "Hello", 18)``.
        An empty predicate matches every row.
        """
        predicate = Predicate.coerce(where, params)
        sql, bound = self._select_sql(predicate, order_by=order_by, limit=limit)
        return self._materialize(self._executor.query_many(sql, bound))

    def count(self) -> int:
        return self.count_where()

    def count_where(self, where: PredicateLike = "", *params: Any) -> int:
        predicate = Predicate.coerce(where, params)
        sql = f"SELECT count(*) AS count FROM {self.kind.table}" + predicate.where_clause()
        row = self._executor.query_one(sql, predicate.params)
        if row is None:
            return 0
        return int(row["count"])

    def column_where(self, column: str, where: PredicateLike = "", *params: Any) -> List[Any]:
        """Project a single column of the rows matching the predicate."""
        self._check_column(column)
        predicate = Predicate.coerce(where, params)
        sql = f"SELECT {column} FROM {self.kind.table}" + predicate.where_clause()
        return [row[column] for row in self._executor.query_many(sql, predicate.params)]

    def ids_where(self, where: PredicateLike = "", *params: Any) -> List[int]:
        return [int(v) for v in self.column_where(ID_COLUMN, where, *params)]

    def _require_sql(self, sql: str) -> str:
        if not sql or not sql.strip():
            raise MissingPredicateError("A blank SQL clause")
        return sql

    def find_by_sql(self, sql: str, *params: Any) -> Record:
        """
        First row of a complete, trusted SELECT, e.g.
        ``find_by_sql("SELECT * FROM articles WHERE title = %s LIMIT 1", "Hello")``.
        """
        row = self._executor.query_one(self._require_sql(sql), params)
        if row is None:
            raise NotFoundError(self.kind.name, "no row for the given SQL")
        return self.kind.model.model_validate(dict(row))

    def find_all_by_sql(self, sql: str, *params: Any) -> List[Record]:
        """Every row of a complete, trusted SELECT."""
        return self._materialize(self._executor.query_many(self._require_sql(sql), params))

    # ------------------------------------------------------------------
    # Associations

    def _association(self, name: str) -> Tuple[Association, bool]:
        """Resolve `name` to (association, is_has_many)."""
        for association in self._associations.children_of(self.kind):
            if association.name == name:
                return association, True
        for association in self._associations.parents_of(self.kind):
            if association.inverse == name:
                return association, False
        raise ValueError(f"{self.kind.name} has no association named {name!r}")

    def load_association(self, record: Record, name: str) -> Record:
        """Populate one association attribute of `record` and return the record."""
        association, has_many = self._association(name)
        if has_many:
            if not record.id:
                raise InvalidIdentityError("Invalid Id field: it can't be a zero value")
            children = self.accessor_for(association.child).find_all_by(
                association.foreign_key, record.id
            )
            setattr(record, name, children)
        else:
            parent_id = getattr(record, association.foreign_key)
            parent = self.accessor_for(association.parent).find_by_id(parent_id)
            setattr(record, name, parent)
        return record

    def includes_where(
        self, names: Sequence[str], where: PredicateLike = "", *params: Any
    ) -> List[Record]:
        """
        `find_where` followed by one preload query per named association.
        """
        records = self.find_where(where, *params)
        if not records or not names:
            return records
        for name in names:
            association, has_many = self._association(name)
            if has_many:
                ids = [r.id for r in records]
                children = self.accessor_for(association.child).find_where(
                    Predicate.in_ids(association.foreign_key, ids)
                )
                grouped: dict = {r.id: [] for r in records}
                for child in children:
                    grouped.setdefault(getattr(child, association.foreign_key), []).append(child)
                for record in records:
                    setattr(record, name, grouped[record.id])
            else:
                parent_ids = sorted({getattr(r, association.foreign_key) for r in records} - {0})
                parents = {}
                if parent_ids:
                    parents = {
                        p.id: p
                        for p in self.accessor_for(association.parent).find_by_ids(*parent_ids)
                    }
                for record in records:
                    setattr(record, name, parents.get(getattr(record, association.foreign_key)))
        return records

    def create_associated(self, record: Record, name: str, attrs: Attributes) -> int:
        """
        Create the associated row named `name` from `attrs` and link it to
        `record`; returns the new row's id.

        For a has-many association the child is inserted with its foreign key
        set to ``record.id``. For a belongs-to association the parent is
        inserted first, then ``record``'s foreign key is updated to point at it.
        """
        association, has_many = self._association(name)
        if not record.id:
            raise InvalidIdentityError("Invalid Id field: it can't be a zero value")
        if has_many:
            child_attrs = dict(attrs)
            child_attrs[association.foreign_key] = record.id
            return self.accessor_for(association.child).create_from_map(child_attrs)
        parent_id = self.accessor_for(association.parent).create_from_map(attrs)
        self.update(record.id, {association.foreign_key: parent_id})
        setattr(record, association.foreign_key, parent_id)
        return parent_id

    # ------------------------------------------------------------------
    # Writes

    def _gate(self, record: Record) -> None:
        if not isinstance(record, self.kind.model):
            raise TypeError(f"expected {self.kind.model.__name__}, got {type(record).__name__}")
        violations = validate(record)
        if violations:
            error = ValidationError(self.kind.model.__name__, violations)
            log.info(str(error), extra={"kind": self.kind.name})
            raise error

    def _insert(self, attrs: AttributeMap) -> int:
        sql, params = insert_statement(attrs)
        result = self._executor.execute(sql, params)
        if result.last_insert_id is None:
            raise StoreError(f"No id returned when inserting {self.kind.name}", sql=sql)
        return result.last_insert_id

    def create(self, record: Record) -> int:
        """
        Validate, stamp timestamps, insert, and return the new id (also set on
        `record`).
        """
        self._gate(record)
        attrs = {c: getattr(record, c) for c in self.kind.content_columns}
        now = utcnow()
        if self.kind.timestamps:
            attrs.update(created_at=now, updated_at=now)
        new_id = self._insert(AttributeMap(self.kind, attrs))
        record.id = new_id
        if self.kind.timestamps:
            record.created_at = now
            record.updated_at = now
        log.debug("Record created", extra={"kind": self.kind.name, "id": new_id})
        return new_id

    def create_from_map(self, attrs: Attributes) -> int:
        """
        Insert the given columns without running the validation gate; missing
        timestamps are stamped.
        """
        new_id = self._insert(AttributeMap.coerce(self.kind, attrs))
        log.debug("Record created", extra={"kind": self.kind.name, "id": new_id})
        return new_id

    def update(self, record_id: int, attrs: Attributes) -> int:
        """Rewrite only the supplied columns plus updated_at; returns rows affected."""
        if not record_id:
            raise InvalidIdentityError("Invalid Id field: it can't be a zero value")
        sql, params = update_statement(AttributeMap.coerce(self.kind, attrs), record_id)
        return self._executor.execute(sql, params).rows_affected

    def update_by_sql(self, sql: str, *params: Any) -> int:
        """Run a complete, trusted UPDATE; returns rows affected. No timestamps are touched."""
        return self._executor.execute(self._require_sql(sql), params).rows_affected

    def save(self, record: Record) -> int:
        """
        Validate, then create when the record has no id or rewrite every
        content column otherwise. Returns the record id.
        """
        self._gate(record)
        if not record.id:
            return self.create(record)
        attrs = {c: getattr(record, c) for c in self.kind.content_columns}
        now = utcnow()
        sql, params = update_statement(AttributeMap(self.kind, attrs), record.id, now=now)
        self._executor.execute(sql, params)
        if self.kind.timestamps:
            record.updated_at = now
        return record.id

    # ------------------------------------------------------------------
    # Destroys

    def _delete(self, predicate: Predicate) -> int:
        sql = f"DELETE FROM {self.kind.table}" + predicate.where_clause()
        return self._executor.execute(sql, predicate.params).rows_affected

    def destroy(self, record: Record) -> DestroyResult:
        return self.destroy_by_id(record.id)

    def destroy_by_id(self, record_id: int) -> DestroyResult:
        if not record_id:
            raise InvalidIdentityError("Invalid Id field: it can't be a zero value")
        return self.destroy_by_ids(record_id)

    def destroy_by_ids(self, *ids: int) -> DestroyResult:
        if not ids:
            raise InvalidIdentityError("At least one or more ids needed")
        outcome = self._cascade.cascade(self.kind, ids)
        deleted = self._delete(Predicate.in_ids(ID_COLUMN, ids))
        return DestroyResult(deleted=deleted, cascade=outcome)

    def destroy_where(self, where: PredicateLike = "", *params: Any) -> DestroyResult:
        """
        Delete rows matching the predicate after cascading to their children.
        An empty predicate is refused so the whole table cannot go by accident.
        """
        predicate = Predicate.coerce(where, params)
        if predicate.is_empty:
            raise MissingPredicateError("No WHERE conditions provided")
        if self._associations.children_of(self.kind):
            try:
                ids = self.ids_where(predicate)
            except StoreError as exc:
                log.warning(
                    f"Delete associated objects error: {exc}", extra={"kind": self.kind.name}
                )
                outcome = CascadeOutcome(parent=self.kind.name, resolution_error=str(exc))
            else:
                outcome = self._cascade.cascade(self.kind, ids)
        else:
            outcome = CascadeOutcome(parent=self.kind.name)
        return DestroyResult(deleted=self._delete(predicate), cascade=outcome)


__all__ = ["RecordAccessor", "DestroyResult"]
