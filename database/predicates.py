"""
Filter predicates understood by every RecordStore implementation.

    eq("user_id", uid)             equality
    gte("rating", 4) / lte(...)    range
    in_("tutor_id", [...])         in-set
    ilike("email", "%budi%")       case-insensitive pattern
"""

from dataclasses import dataclass
from typing import Any, Iterable


@dataclass(frozen=True)
class Predicate:
    column: str
    op: str
    value: Any


def eq(column: str, value: Any) -> Predicate:
    return Predicate(column, 'eq', value)


def gte(column: str, value: Any) -> Predicate:
    return Predicate(column, 'gte', value)


def lte(column: str, value: Any) -> Predicate:
    return Predicate(column, 'lte', value)


def in_(column: str, values: Iterable[Any]) -> Predicate:
    return Predicate(column, 'in', tuple(values))


def ilike(column: str, pattern: str) -> Predicate:
    return Predicate(column, 'ilike', pattern)
