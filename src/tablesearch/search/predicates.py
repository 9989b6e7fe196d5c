"""Predicate tree handed to data sources.

A predicate is either a single-column ``Condition`` or an ``AllOf`` /
``AnyOf`` group of predicates. Data sources translate the tree into their
own filter language; the engine never builds query strings.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeAlias


class Operator(str, Enum):
    """Primitive column comparisons every data source must support."""

    EQ = "eq"
    CONTAINS = "contains"  # case-sensitive substring
    ICONTAINS = "icontains"  # case-insensitive substring
    GTE = "gte"
    LTE = "lte"
    IN = "in"


@dataclass(frozen=True)
class Condition:
    """A boolean condition over one column."""

    column: str
    op: Operator
    value: Any

    def __post_init__(self) -> None:
        if self.op is Operator.IN and not isinstance(self.value, frozenset):
            object.__setattr__(self, "value", frozenset(self.value))


@dataclass(frozen=True)
class AllOf:
    """Conjunction of predicates."""

    items: tuple[Predicate, ...]


@dataclass(frozen=True)
class AnyOf:
    """Disjunction of predicates."""

    items: tuple[Predicate, ...]


Predicate: TypeAlias = Condition | AllOf | AnyOf

MATCH_NOTHING = AnyOf(())
"""An empty disjunction: no row satisfies it."""


def all_of(predicates: Iterable[Predicate | None]) -> Predicate | None:
    """AND the given predicates, dropping ``None`` and collapsing singletons."""
    items = tuple(p for p in predicates if p is not None)
    if not items:
        return None
    if len(items) == 1:
        return items[0]
    return AllOf(items)


def any_of(predicates: Iterable[Predicate | None]) -> Predicate | None:
    """OR the given predicates, dropping ``None`` and collapsing singletons."""
    items = tuple(p for p in predicates if p is not None)
    if not items:
        return None
    if len(items) == 1:
        return items[0]
    return AnyOf(items)


def referenced_columns(predicate: Predicate | None) -> set[str]:
    """Collect every column name a predicate tree touches."""
    if predicate is None:
        return set()
    if isinstance(predicate, Condition):
        return {predicate.column}
    columns: set[str] = set()
    for item in predicate.items:
        columns |= referenced_columns(item)
    return columns
