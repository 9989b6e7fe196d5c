"""Per-field predicate construction.

Each search field contributes zero or more predicates for a classified
term. Predicates from one field are ANDed (a date range has two bounds);
the per-field groups are ORed together so one term searches every field.
Foreign-key fields are resolved separately by the engine.
"""

from collections.abc import Iterable
from decimal import Decimal

from tablesearch.core.logging import get_logger
from tablesearch.schema.table import FieldDefinition
from tablesearch.schema.types import FieldType
from tablesearch.search.classifier import ClassifiedTerm, TermKind
from tablesearch.search.predicates import Condition, Operator, Predicate, all_of, any_of

logger = get_logger(__name__)

BOOLEAN_TERMS: dict[str, bool] = {
    "true": True,
    "yes": True,
    "1": True,
    "false": False,
    "no": False,
    "0": False,
}


def build_condition(field: FieldDefinition, term: ClassifiedTerm) -> list[Condition]:
    """Build the predicates one field contributes for a classified term.

    Args:
        field: The search field definition
        term: The classified (non-empty) search term

    Returns:
        Conditions to be ANDed; empty when the field does not accept the term
    """
    match field.type:
        case FieldType.TEXT:
            # Status keywords are still words and may appear inside names
            if term.kind in (TermKind.TEXT, TermKind.STATUS):
                op = Operator.CONTAINS if field.case_sensitive else Operator.ICONTAINS
                return [Condition(field.name, op, term.raw_value)]
            return []

        case FieldType.EXACT:
            return [Condition(field.name, Operator.EQ, term.raw_value)]

        case FieldType.NUMBER:
            if term.kind is TermKind.NUMBER:
                return [Condition(field.name, Operator.EQ, _numeric(term.raw_value))]
            return []

        case FieldType.STATUS:
            accepts = term.kind is TermKind.STATUS or (
                term.kind is TermKind.TEXT and field.is_status_keyword(term.raw_value)
            )
            if not accepts:
                return []
            canonical = field.canonical_status(term.raw_value) or field.canonical_status(
                term.value
            )
            if canonical is None:
                return []
            return [Condition(field.name, Operator.EQ, canonical)]

        case FieldType.DATE:
            if term.kind is TermKind.DATE_RANGE and term.start and term.end:
                return [
                    Condition(field.name, Operator.GTE, term.start),
                    Condition(field.name, Operator.LTE, term.end),
                ]
            return []

        case FieldType.BOOLEAN:
            flag = BOOLEAN_TERMS.get(term.raw_value.lower())
            if flag is None:
                return []
            return [Condition(field.name, Operator.EQ, flag)]

        case FieldType.FOREIGN_KEY:
            return []

        case FieldType.JSON | FieldType.ARRAY:
            logger.debug("field_type_not_searchable", field=field.name, type=field.type.value)
            return []

    return []


def _numeric(raw: str) -> int | Decimal:
    if "." in raw:
        return Decimal(raw)
    return int(raw)


def build_search_predicate(
    fields: Iterable[FieldDefinition],
    term: ClassifiedTerm,
) -> Predicate | None:
    """OR the per-field predicates of every field.

    Returns:
        The combined predicate, or None when no field accepts the term
    """
    return any_of(all_of(build_condition(field, term)) for field in fields)
