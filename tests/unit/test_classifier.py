"""Unit tests for search term classification."""

from datetime import date, datetime, time
from zoneinfo import ZoneInfo

import pytest

from tablesearch.schema import DIVISIONS_CONFIG, FieldDefinition, FieldType
from tablesearch.search.classifier import TermClassifier, TermKind, classify

STATUS_FIELD = FieldDefinition(
    name="status",
    type=FieldType.STATUS,
    enum_values=("Active", "Inactive"),
)

END_OF_DAY = time(23, 59, 59, 999000)


class TestEmptyTerms:
    """Tests for blank input."""

    @pytest.mark.parametrize("term", ["", "   ", "\t"])
    def test_blank_term_is_empty_text(self, term: str):
        """Test blank terms classify as empty TEXT."""
        result = classify(term)

        assert result.kind is TermKind.TEXT
        assert result.is_empty
        assert result.raw_value == ""

    def test_term_is_trimmed(self):
        """Test surrounding whitespace is removed."""
        result = classify("  north  ")

        assert result.raw_value == "north"
        assert not result.is_empty


class TestNumberClassification:
    """Tests for numeral detection."""

    @pytest.mark.parametrize("term", ["0", "42", "-7", "+3", "12.50", "007"])
    def test_numerals_are_numbers(self, term: str):
        """Test integer and decimal numerals classify as NUMBER."""
        assert classify(term).kind is TermKind.NUMBER

    @pytest.mark.parametrize("term", ["12a", "1.2.3", ".5", "5.", "1,000"])
    def test_non_numerals_are_not_numbers(self, term: str):
        """Test near-numerals do not classify as NUMBER."""
        assert classify(term).kind is not TermKind.NUMBER

    def test_number_wins_over_status(self):
        """Test NUMBER has priority even if a status value looks numeric."""
        field = FieldDefinition(name="level", type=FieldType.STATUS, enum_values=("1", "2"))

        assert classify("1", [field]).kind is TermKind.NUMBER


class TestDateClassification:
    """Tests for date and month detection."""

    def test_month_day_year_covers_whole_day(self):
        """Test MM/DD/YYYY resolves to the full calendar day."""
        result = classify("03/15/2024")

        assert result.kind is TermKind.DATE_RANGE
        assert result.start == datetime(2024, 3, 15, 0, 0, 0)
        assert result.end == datetime.combine(date(2024, 3, 15), END_OF_DAY)

    def test_single_digit_month_and_day(self):
        """Test M/D/YYYY is accepted."""
        result = classify("1/5/2024")

        assert result.start == datetime(2024, 1, 5)

    def test_two_digit_year_is_2000_based(self):
        """Test two-digit years are normalized to 2000+yy."""
        result = classify("1/5/24")

        assert result.start == datetime(2024, 1, 5)

    def test_dash_separator(self):
        """Test dashes work like slashes."""
        assert classify("12-31-2023").start == datetime(2023, 12, 31)

    def test_year_month_day(self):
        """Test YYYY-MM-DD resolves to the full calendar day."""
        result = classify("2024-02-29")

        assert result.kind is TermKind.DATE_RANGE
        assert result.start == datetime(2024, 2, 29)
        assert result.end == datetime.combine(date(2024, 2, 29), END_OF_DAY)

    @pytest.mark.parametrize("term", ["13/45/2024", "2/30/2024", "2023-02-29", "00/10/2024"])
    def test_impossible_dates_fall_through(self, term: str):
        """Test impossible calendar dates are not classified as dates."""
        assert classify(term).kind is TermKind.TEXT

    def test_month_name_covers_month_of_current_year(self):
        """Test a month name resolves to that month of today's year."""
        result = classify("February", today=date(2024, 6, 1))

        assert result.kind is TermKind.DATE_RANGE
        assert result.start == datetime(2024, 2, 1)
        assert result.end == datetime.combine(date(2024, 2, 29), END_OF_DAY)

    @pytest.mark.parametrize(
        ("term", "month"),
        [("jan", 1), ("Sept", 9), ("DEC", 12), ("novem", 11)],
    )
    def test_month_prefixes(self, term: str, month: int):
        """Test three or more leading letters of a month name match."""
        result = classify(term, today=date(2024, 6, 1))

        assert result.kind is TermKind.DATE_RANGE
        assert result.start.month == month

    @pytest.mark.parametrize("term", ["ja", "janx", "marc h", "month"])
    def test_non_month_words(self, term: str):
        """Test short or non-prefix words are not months."""
        assert classify(term).kind is not TermKind.DATE_RANGE

    def test_time_zone_makes_ranges_aware(self):
        """Test a configured zone produces aware datetimes."""
        tz = ZoneInfo("America/Chicago")
        result = TermClassifier(tz=tz).classify("2024-07-04")

        assert result.start.tzinfo is tz
        assert result.end.tzinfo is tz

    def test_date_wins_over_status(self):
        """Test a month name beats a status value with the same spelling."""
        field = FieldDefinition(
            name="season", type=FieldType.STATUS, enum_values=("May", "Other")
        )

        assert classify("may", [field]).kind is TermKind.DATE_RANGE


class TestStatusClassification:
    """Tests for enum value detection."""

    @pytest.mark.parametrize("term", ["active", "ACTIVE", "Active", " aCtIvE "])
    def test_enum_value_any_casing(self, term: str):
        """Test enum values match case-insensitively and canonicalize."""
        result = classify(term, [STATUS_FIELD])

        assert result.kind is TermKind.STATUS
        assert result.value == "Active"

    def test_raw_value_keeps_user_casing(self):
        """Test raw_value is the trimmed term as typed."""
        result = classify("INACTIVE", [STATUS_FIELD])

        assert result.raw_value == "INACTIVE"
        assert result.value == "Inactive"

    def test_exact_match_keyword(self):
        """Test exact-match keywords force STATUS classification."""
        field = FieldDefinition(
            name="status",
            type=FieldType.STATUS,
            enum_values=("Enabled", "Disabled"),
            exact_match_keywords=("on",),
        )

        result = classify("ON", [field])

        assert result.kind is TermKind.STATUS

    def test_accepts_table_config(self):
        """Test a TableConfig supplies its Status fields."""
        assert classify("inactive", DIVISIONS_CONFIG).value == "Inactive"

    def test_without_status_fields_is_text(self):
        """Test status words are plain text when no Status field exists."""
        assert classify("active").kind is TermKind.TEXT

    def test_partial_enum_value_is_text(self):
        """Test a substring of an enum value is not a status."""
        assert classify("act", [STATUS_FIELD]).kind is TermKind.TEXT

    def test_first_matching_field_wins(self):
        """Test the first Status field's casing is used."""
        first = FieldDefinition(name="a", type=FieldType.STATUS, enum_values=("OPEN",))
        second = FieldDefinition(name="b", type=FieldType.STATUS, enum_values=("Open",))

        assert classify("open", [first, second]).value == "OPEN"


class TestTextClassification:
    """Tests for the text fallback."""

    @pytest.mark.parametrize("term", ["north", "Proactive Labs", "a/b", "jo@example.com"])
    def test_fallback_is_text(self, term: str):
        """Test unmatched terms classify as TEXT with value equal to raw."""
        result = classify(term, [STATUS_FIELD])

        assert result.kind is TermKind.TEXT
        assert result.value == result.raw_value == term
        assert result.start is None
        assert result.end is None
