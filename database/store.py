#!/usr/bin/env python3
"""
Record Store - generic tabular access used by matchmaking and deletion.

Services depend on the RecordStore protocol rather than on a concrete
session, so tests can substitute an in-memory double.

Predicates:
    eq("user_id", uid)             equality
    gte("rating", 4) / lte(...)    range
    in_("tutor_id", [...])         in-set
    ilike("email", "%budi%")       case-insensitive pattern
"""

import contextlib
import logging
import re
from typing import Any, ContextManager, Dict, Iterator, List, Optional, Protocol, Sequence

from sqlalchemy import delete, func, insert, select, text, update
from sqlalchemy.exc import DBAPIError, IntegrityError, ProgrammingError, SQLAlchemyError

from core.exceptions import SchemaMismatchError
from database.models import Base
from database.predicates import Predicate, eq, gte, lte, in_, ilike  # noqa: F401
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

FOREIGN_KEY_VIOLATION = '23503'
UNDEFINED_TABLE = '42P01'
UNDEFINED_COLUMN = '42703'


class RecordStoreError(Exception):
    """Raised when the backing store fails an operation."""
    pass


class ReferentialIntegrityViolation(RecordStoreError):
    """Raised when a delete is blocked by a foreign key without cascade."""

    def __init__(self, constraint: str, table: str, message: str):
        self.constraint = constraint
        self.table = table
        super().__init__(message)


class AggregatePreviewUnavailable(RecordStoreError):
    """Raised when the store has no usable aggregate cascade preview."""
    pass


def parse_foreign_key_violation(message: str) -> ReferentialIntegrityViolation:
    """Extract constraint and table names from a Postgres FK violation message."""
    constraint_match = re.search(r'constraint "([^"]+)"', message)
    # DETAIL line names the referencing table; the primary message names it after the constraint
    table_match = (
        re.search(r'from table "([^"]+)"', message)
        or re.search(r'constraint "[^"]+" on table "([^"]+)"', message)
    )
    return ReferentialIntegrityViolation(
        constraint=constraint_match.group(1) if constraint_match else 'unknown',
        table=table_match.group(1) if table_match else 'unknown',
        message=message
    )


class RecordStore(Protocol):
    def select(
        self,
        table: str,
        filters: Sequence[Predicate] = (),
        columns: Optional[Sequence[str]] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]: ...

    def count(self, table: str, filters: Sequence[Predicate] = ()) -> int: ...

    def insert(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]: ...

    def update(self, table: str, filters: Sequence[Predicate], values: Dict[str, Any]) -> int: ...

    def delete(self, table: str, filters: Sequence[Predicate]) -> int: ...

    def preview_cascade(self, table: str, record_id: str) -> List[Dict[str, Any]]: ...

    def savepoint(self) -> ContextManager[None]: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class SqlAlchemyRecordStore(BaseRepository):
    """RecordStore backed by a SQLAlchemy session over the declared metadata."""

    # SQL function installed by migrations/001_cascade_user_deletion.py
    PREVIEW_FUNCTIONS = {
        'users_universal': 'preview_user_deletion',
    }

    def _table(self, name: str):
        table = Base.metadata.tables.get(name)
        if table is None:
            raise SchemaMismatchError(f"Table '{name}' is not part of the declared schema")
        return table

    def _column(self, table, name: str):
        if name not in table.c:
            raise SchemaMismatchError(f"Column '{name}' is not declared on table '{table.name}'")
        return table.c[name]

    def _where(self, table, filters: Sequence[Predicate]):
        clauses = []
        for predicate in filters:
            column = self._column(table, predicate.column)
            if predicate.op == 'eq':
                clauses.append(column == predicate.value)
            elif predicate.op == 'gte':
                clauses.append(column >= predicate.value)
            elif predicate.op == 'lte':
                clauses.append(column <= predicate.value)
            elif predicate.op == 'in':
                clauses.append(column.in_(predicate.value))
            elif predicate.op == 'ilike':
                clauses.append(column.ilike(predicate.value))
            else:
                raise ValueError(f"Unsupported predicate operator: {predicate.op}")
        return clauses

    def select(
        self,
        table: str,
        filters: Sequence[Predicate] = (),
        columns: Optional[Sequence[str]] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        t = self._table(table)
        targets = [self._column(t, c) for c in columns] if columns else [t]
        stmt = select(*targets).where(*self._where(t, filters))
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            rows = self.db.execute(stmt).mappings().all()
        except ProgrammingError as e:
            if getattr(e.orig, 'pgcode', None) in (UNDEFINED_TABLE, UNDEFINED_COLUMN):
                raise SchemaMismatchError(f"Database schema does not match '{table}': {e.orig}") from e
            raise RecordStoreError(f"Select on {table} failed: {e}") from e
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Select on {table} failed: {e}") from e
        return [dict(row) for row in rows]

    def count(self, table: str, filters: Sequence[Predicate] = ()) -> int:
        t = self._table(table)
        stmt = select(func.count()).select_from(t).where(*self._where(t, filters))
        try:
            return int(self.db.execute(stmt).scalar_one())
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Count on {table} failed: {e}") from e

    def insert(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        t = self._table(table)
        stmt = insert(t).values(**values).returning(t)
        try:
            row = self.db.execute(stmt).mappings().one()
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Insert into {table} failed: {e}") from e
        return dict(row)

    def update(self, table: str, filters: Sequence[Predicate], values: Dict[str, Any]) -> int:
        t = self._table(table)
        stmt = update(t).where(*self._where(t, filters)).values(**values)
        try:
            return self.db.execute(stmt).rowcount
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Update on {table} failed: {e}") from e

    def delete(self, table: str, filters: Sequence[Predicate]) -> int:
        t = self._table(table)
        stmt = delete(t).where(*self._where(t, filters))
        try:
            return self.db.execute(stmt).rowcount
        except IntegrityError as e:
            pgcode = getattr(e.orig, 'pgcode', None)
            message = str(e.orig)
            if pgcode == FOREIGN_KEY_VIOLATION or 'foreign key constraint' in message:
                raise parse_foreign_key_violation(message) from e
            raise RecordStoreError(f"Delete on {table} failed: {message}") from e
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Delete on {table} failed: {e}") from e

    def preview_cascade(self, table: str, record_id: str) -> List[Dict[str, Any]]:
        """
        Run the aggregate cascade preview function for a core table.

        Executed inside a savepoint so a missing function does not abort
        the surrounding transaction.
        """
        function_name = self.PREVIEW_FUNCTIONS.get(table)
        if function_name is None:
            raise AggregatePreviewUnavailable(f"No aggregate preview for table {table}")

        stmt = text(
            f"SELECT table_name, records_affected, data_type FROM {function_name}(:p_user_id)"
        )
        try:
            with self.db.begin_nested():
                rows = self.db.execute(stmt, {'p_user_id': str(record_id)}).mappings().all()
        except DBAPIError as e:
            raise AggregatePreviewUnavailable(f"{function_name} failed: {e.orig}") from e
        return [dict(row) for row in rows]

    @contextlib.contextmanager
    def savepoint(self) -> Iterator[None]:
        """
        Scope for optional reads. A statement failing inside it rolls back
        to the savepoint and leaves the surrounding transaction usable.
        """
        try:
            nested = self.db.begin_nested()
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Savepoint failed: {e}") from e
        with nested:
            yield

    def commit(self) -> None:
        # Deferred foreign keys are only checked here
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            message = str(e.orig)
            if getattr(e.orig, 'pgcode', None) == FOREIGN_KEY_VIOLATION:
                raise parse_foreign_key_violation(message) from e
            raise RecordStoreError(f"Commit failed: {message}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RecordStoreError(f"Commit failed: {e}") from e

    def rollback(self) -> None:
        try:
            self.db.rollback()
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Rollback failed: {e}") from e
