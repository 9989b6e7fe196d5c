"""Search term interpretation and predicate building.

The executor lives in ``tablesearch.search.engine`` and the optional
read-through cache in ``tablesearch.search.cache``; both depend on
``tablesearch.datasource`` and are imported from their modules directly.
"""

from tablesearch.search.classifier import ClassifiedTerm, TermClassifier, TermKind, classify
from tablesearch.search.conditions import build_condition, build_search_predicate
from tablesearch.search.predicates import (
    MATCH_NOTHING,
    AllOf,
    AnyOf,
    Condition,
    Operator,
    Predicate,
    all_of,
    any_of,
)
from tablesearch.search.result import Pagination, SearchResult, SortState

__all__ = [
    # Classification
    "ClassifiedTerm",
    "TermClassifier",
    "TermKind",
    "classify",
    # Conditions
    "build_condition",
    "build_search_predicate",
    # Predicates
    "MATCH_NOTHING",
    "AllOf",
    "AnyOf",
    "Condition",
    "Operator",
    "Predicate",
    "all_of",
    "any_of",
    # Results
    "Pagination",
    "SearchResult",
    "SortState",
]
