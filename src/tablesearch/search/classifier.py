"""Search term classification.

A free-text term is given one dominant shape before any predicate is
built. Rules are tried in priority order and the first match wins:

1. Number: an integer or decimal numeral
2. Date: ``M/D/YY[YY]``, ``YYYY-M-D`` or a month name prefix
3. Status: an enum value or exact-match keyword of a Status field
4. Text: everything else
"""

from __future__ import annotations

import calendar
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from zoneinfo import ZoneInfo

from tablesearch.schema.table import FieldDefinition, TableConfig
from tablesearch.schema.types import FieldType

_NUMBER = re.compile(r"^[+-]?\d+(\.\d+)?$")
_MONTH_DAY_YEAR = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{2,4})$")
_YEAR_MONTH_DAY = re.compile(r"^(\d{4})[/-](\d{1,2})[/-](\d{1,2})$")
_MONTH_NAME = re.compile(r"^[a-z]{3,}$")

_MONTH_NAMES = tuple(name.lower() for name in calendar.month_name[1:])

_END_OF_DAY = time(23, 59, 59, 999000)


class TermKind(str, Enum):
    """Dominant shape of a search term."""

    NUMBER = "number"
    DATE_RANGE = "date_range"
    STATUS = "status"
    TEXT = "text"


@dataclass(frozen=True)
class ClassifiedTerm:
    """A search term together with its inferred shape.

    Attributes:
        kind: The shape the term was classified as
        raw_value: The trimmed term as typed
        value: Canonical form (the enum casing for Status terms, else raw_value)
        start: First instant of the date range (DATE_RANGE only)
        end: Last instant of the date range (DATE_RANGE only)
    """

    kind: TermKind
    raw_value: str
    value: str
    start: datetime | None = None
    end: datetime | None = None

    @property
    def is_empty(self) -> bool:
        """Empty terms apply no filtering."""
        return not self.raw_value


class TermClassifier:
    """Classifies search terms against the Status fields of one table.

    Args:
        fields: A table config or the search fields to consult for Status values
        today: Fixed "today" used to resolve bare month names (defaults to now)
        tz: Time zone for resolved ranges; naive datetimes when None
    """

    def __init__(
        self,
        fields: TableConfig | Iterable[FieldDefinition] = (),
        *,
        today: date | None = None,
        tz: ZoneInfo | None = None,
    ) -> None:
        if isinstance(fields, TableConfig):
            fields = fields.search_fields
        self._status_fields = tuple(f for f in fields if f.type is FieldType.STATUS)
        self._today = today
        self._tz = tz

    def classify(self, term: str) -> ClassifiedTerm:
        """Classify a raw search term.

        Args:
            term: The term as entered by the user

        Returns:
            The classified term; an empty term is returned as TEXT
        """
        trimmed = term.strip()
        if not trimmed:
            return ClassifiedTerm(kind=TermKind.TEXT, raw_value="", value="")

        if _NUMBER.match(trimmed):
            return ClassifiedTerm(kind=TermKind.NUMBER, raw_value=trimmed, value=trimmed)

        date_range = self.parse_date_range(trimmed)
        if date_range is not None:
            start, end = date_range
            return ClassifiedTerm(
                kind=TermKind.DATE_RANGE,
                raw_value=trimmed,
                value=trimmed,
                start=start,
                end=end,
            )

        canonical = self._match_status(trimmed)
        if canonical is not None:
            return ClassifiedTerm(kind=TermKind.STATUS, raw_value=trimmed, value=canonical)

        return ClassifiedTerm(kind=TermKind.TEXT, raw_value=trimmed, value=trimmed)

    def parse_date_range(self, term: str) -> tuple[datetime, datetime] | None:
        """Resolve a date-shaped term to the instants it covers.

        Exact dates cover one calendar day; a month name covers that month
        of the current year. Impossible dates such as ``13/45/2024`` are
        not dates.

        Returns:
            ``(start, end)`` or None when the term is not a date
        """
        lowered = term.lower()

        match = _MONTH_DAY_YEAR.match(lowered)
        if match:
            month, day, year = (int(part) for part in match.groups())
            if year < 100:
                year += 2000
            return self._day_range(year, month, day)

        match = _YEAR_MONTH_DAY.match(lowered)
        if match:
            year, month, day = (int(part) for part in match.groups())
            return self._day_range(year, month, day)

        if _MONTH_NAME.match(lowered):
            for index, month_name in enumerate(_MONTH_NAMES, start=1):
                if month_name.startswith(lowered):
                    return self._month_range(index)

        return None

    def _match_status(self, term: str) -> str | None:
        for status_field in self._status_fields:
            canonical = status_field.canonical_status(term)
            if canonical is not None:
                return canonical
        for status_field in self._status_fields:
            if status_field.is_status_keyword(term):
                return status_field.canonical_status(term) or term
        return None

    def _day_range(self, year: int, month: int, day: int) -> tuple[datetime, datetime] | None:
        try:
            day_value = date(year, month, day)
        except ValueError:
            return None
        return (
            datetime.combine(day_value, time.min, tzinfo=self._tz),
            datetime.combine(day_value, _END_OF_DAY, tzinfo=self._tz),
        )

    def _month_range(self, month: int) -> tuple[datetime, datetime]:
        year = (self._today or datetime.now(self._tz).date()).year
        first = date(year, month, 1)
        last = first.replace(day=calendar.monthrange(year, month)[1])
        return (
            datetime.combine(first, time.min, tzinfo=self._tz),
            datetime.combine(last, _END_OF_DAY, tzinfo=self._tz),
        )


def classify(
    term: str,
    fields: TableConfig | Iterable[FieldDefinition] = (),
    *,
    today: date | None = None,
    tz: ZoneInfo | None = None,
) -> ClassifiedTerm:
    """Classify ``term`` without keeping a classifier around."""
    return TermClassifier(fields, today=today, tz=tz).classify(term)
