"""Tests for the parsing orchestrator.

Reference instant: Monday 2024-01-15 10:00 UTC.
"""

from datetime import UTC, date, datetime
from unittest.mock import patch

import pytest

from taskparser.config import settings
from taskparser.services.confidence import AMBIGUOUS_DATE_CONFIDENCE
from taskparser.services.models import (
    AmbiguousElementType,
    Category,
    InvalidInputError,
    InvalidReferenceDateError,
    InvalidTimezoneError,
    ParseResult,
    Priority,
)
from taskparser.services.parser import (
    TaskParser,
    clean_title,
    parse_input,
    validate_parse_result,
)
from taskparser.services.timezone import TimezoneService

REFERENCE = datetime(2024, 1, 15, 10, 0, tzinfo=UTC)


class TestFullParse:
    """End-to-end parses of realistic task text."""

    def test_groceries(self):
        """Date, time, priority and category are all extracted."""
        result = parse_input("Buy groceries tomorrow at 3pm high priority", REFERENCE, "UTC")
        assert result.title == "Buy groceries"
        assert result.due_date == date(2024, 1, 16)
        assert result.due_time == "15:00"
        assert result.priority == Priority.HIGH
        assert result.category == Category.PERSONAL
        assert result.ambiguous_elements == ()
        assert 0 < result.confidence < 1

    def test_next_weekday_with_time(self):
        """next <weekday> and an embedded H:MMam time."""
        result = parse_input("Dentist appointment next friday at 9:30am", REFERENCE, "UTC")
        assert result.title == "Dentist appointment"
        assert result.due_date == date(2024, 1, 19)
        assert result.due_time == "09:30"
        assert result.category == Category.PERSONAL
        assert result.priority is None

    def test_month_day_with_preposition(self):
        """The preposition goes with the date, not the title."""
        result = parse_input("Finish essay on Jan 20", REFERENCE, "UTC")
        assert result.title == "Finish essay"
        assert result.due_date == date(2024, 1, 20)
        assert result.category == Category.SCHOOL

    def test_bare_weekday(self):
        """by <weekday> is consumed whole."""
        result = parse_input("Pay bills by Friday", REFERENCE, "UTC")
        assert result.title == "Pay bills"
        assert result.due_date == date(2024, 1, 19)

    def test_priority_keywords_removed_from_title(self):
        """Urgency words do not survive in the title."""
        result = parse_input("urgent: fix the login page", REFERENCE, "UTC")
        assert result.title == "fix the login page"
        assert result.priority == Priority.HIGH

    def test_category_keywords_stay_in_title(self):
        """Topical words are part of what the task is."""
        result = parse_input("Prepare presentation", REFERENCE, "UTC")
        assert result.title == "Prepare presentation"
        assert result.category == Category.WORK

    def test_plain_title(self):
        """Nothing recognized: the text is the title and confidence is 0."""
        result = parse_input("Water the plants", REFERENCE, "UTC")
        assert result.title == "Water the plants"
        assert result.due_date is None
        assert result.due_time is None
        assert result.priority is None
        assert result.category is None
        assert result.confidence == 0.0

    def test_whitespace_collapsed(self):
        """Runs of whitespace collapse in the title."""
        result = parse_input("  Water   the\tplants  ", REFERENCE, "UTC")
        assert result.title == "Water the plants"

    def test_trailing_word_kept(self):
        """A final word that only looks like a preposition stays in the title."""
        result = parse_input("Turn the lights on", REFERENCE, "UTC")
        assert result.title == "Turn the lights on"
        assert result.due_date is None

    def test_preposition_before_date_dropped(self):
        """A preposition left in front of a consumed date goes with it."""
        result = parse_input("Buy cake for tomorrow", REFERENCE, "UTC")
        assert result.title == "Buy cake"
        assert result.due_date == date(2024, 1, 16)

    @pytest.mark.parametrize("phrase", ["in 9999999 days", "in 99999999999999 weeks"])
    def test_huge_offset_is_not_a_date(self, phrase):
        """Offsets past the calendar limit leave the text in the title."""
        result = parse_input(f"Renew passport {phrase}", REFERENCE, "UTC")
        assert result.due_date is None
        assert result.title == f"Renew passport {phrase}"


class TestTitleFallback:
    """Tests for inputs that are entirely consumed."""

    def test_only_date(self):
        """A bare date phrase keeps the original text as title."""
        result = parse_input("tomorrow", REFERENCE, "UTC")
        assert result.title == "tomorrow"
        assert result.due_date == date(2024, 1, 16)

    def test_only_priority(self):
        """A bare priority word keeps the original text as title."""
        result = parse_input("  urgent ", REFERENCE, "UTC")
        assert result.title == "urgent"
        assert result.priority == Priority.HIGH


class TestAmbiguousDates:
    """Tests for range phrases handed to disambiguation."""

    def test_meeting_next_week(self):
        """next week yields one element with eight suggestions."""
        result = parse_input("meeting next week", REFERENCE, "UTC")
        assert result.title == "meeting"
        assert result.due_date is None
        assert result.is_ambiguous is True
        assert len(result.ambiguous_elements) == 1

        element = result.ambiguous_elements[0]
        assert element.type == AmbiguousElementType.DATE
        assert element.original_text == "next week"
        assert [s.value for s in element.suggestions] == [date(2024, 1, d) for d in range(22, 30)]
        assert all(s.confidence == 0.8 for s in element.suggestions)
        assert element.suggestions[0].display == "Monday, Jan 22"

    def test_end_of_month(self):
        """Suggestions stay inside the reference month."""
        result = parse_input("Submit report by the end of the month", REFERENCE, "UTC")
        assert result.title == "Submit report"
        element = result.ambiguous_elements[0]
        assert element.original_text == "end of the month"
        assert all(s.value.month == 1 and s.confidence == 0.7 for s in element.suggestions)

    def test_only_first_phrase_surfaced(self):
        """Several range phrases still give a single element."""
        result = parse_input("plan next week or end of month", REFERENCE, "UTC")
        assert len(result.ambiguous_elements) == 1
        assert result.ambiguous_elements[0].original_text == "next week"

    def test_ambiguous_confidence(self):
        """An ambiguous date contributes a fixed confidence."""
        result = parse_input("plan next week", REFERENCE, "UTC")
        assert result.confidence == pytest.approx(AMBIGUOUS_DATE_CONFIDENCE)

    def test_specific_date_not_ambiguous(self):
        """A resolved date means no ambiguous element."""
        result = parse_input("call next friday", REFERENCE, "UTC")
        assert result.is_ambiguous is False


class TestTimezones:
    """Tests for timezone-correct relative dates."""

    def test_today_in_tokyo(self):
        """Late evening UTC is already the next day in Tokyo."""
        result = parse_input("Meeting today", "2024-01-15T23:30:00Z", "Asia/Tokyo")
        assert result.due_date == date(2024, 1, 16)

    def test_today_in_new_york(self):
        """The same instant is still the 15th in New York."""
        result = parse_input("Meeting today", "2024-01-15T23:30:00Z", "America/New_York")
        assert result.due_date == date(2024, 1, 15)

    def test_default_zone_from_service(self):
        """Without an explicit zone the service default applies."""
        parser = TaskParser(timezone_service=TimezoneService("Asia/Tokyo"))
        result = parser.parse("Meeting today", "2024-01-15T23:30:00Z")
        assert result.due_date == date(2024, 1, 16)

    def test_naive_reference_is_wall_time(self):
        """A naive reference is already local to the zone and is not shifted."""
        result = parse_input("Meeting today", datetime(2024, 1, 15, 23, 30), "Asia/Tokyo")
        assert result.due_date == date(2024, 1, 15)


class TestValidation:
    """Tests for rejected input."""

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank(self, text):
        """Blank text is rejected."""
        with pytest.raises(InvalidInputError):
            parse_input(text, REFERENCE, "UTC")

    def test_not_a_string(self):
        """Non-string text is rejected."""
        with pytest.raises(InvalidInputError):
            parse_input(None, REFERENCE, "UTC")  # type: ignore[arg-type]

    def test_too_long(self):
        """Text over the configured limit is rejected."""
        with patch.object(settings, "max_input_length", 10):
            with pytest.raises(InvalidInputError):
                parse_input("Buy groceries tomorrow", REFERENCE, "UTC")

    def test_invalid_reference(self):
        """An unusable reference date is rejected."""
        with pytest.raises(InvalidReferenceDateError):
            parse_input("Buy milk", "yesterday-ish", "UTC")

    def test_invalid_timezone(self):
        """An unknown explicit timezone is rejected."""
        with pytest.raises(InvalidTimezoneError):
            parse_input("Buy milk", REFERENCE, "Nowhere/Special")

    def test_errors_are_value_errors(self):
        """Callers catching ValueError see parser errors too."""
        with pytest.raises(ValueError):
            parse_input("", REFERENCE, "UTC")


class TestDeterminism:
    """Tests for idempotent parsing."""

    def test_same_input_same_result(self):
        """Parsing the same input twice gives equal results."""
        text = "Meeting with client about project deadline next friday at 2pm asap"
        assert parse_input(text, REFERENCE, "UTC") == parse_input(text, REFERENCE, "UTC")

    def test_parser_instances_agree(self):
        """Independent parsers produce the same result."""
        text = "Study for exam in 3 days"
        assert TaskParser().parse(text, REFERENCE, "UTC") == TaskParser().parse(text, REFERENCE, "UTC")


class TestToDict:
    """Tests for ParseResult serialization."""

    def test_json_safe(self):
        """Dates are ISO strings and enums are values."""
        data = parse_input("Buy groceries tomorrow at 3pm high priority", REFERENCE, "UTC").to_dict()
        assert data["title"] == "Buy groceries"
        assert data["due_date"] == "2024-01-16"
        assert data["due_time"] == "15:00"
        assert data["priority"] == "high"
        assert data["category"] == "personal"
        assert data["ambiguous_elements"] == []


class TestCleanTitle:
    """Tests for title cleanup."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("  by Buy milk , ", "Buy milk"),
            ("Pay rent -", "Pay rent"),
            ("for the team: ", "the team"),
            ("Send report to", "Send report to"),
            ("Call Sam on", "Call Sam on"),
            ("a   b", "a b"),
        ],
    )
    def test_clean_title(self, raw, expected):
        """Leftover prepositions and punctuation are trimmed."""
        assert clean_title(raw) == expected


class TestValidateParseResult:
    """Tests for validate_parse_result."""

    def test_valid(self):
        """A parsed result has no problems."""
        result = parse_input("Buy groceries tomorrow at 3pm", REFERENCE, "UTC")
        assert validate_parse_result(result) == []

    def test_problems_reported(self):
        """Each problem is reported."""
        result = ParseResult(title=" ", confidence=1.5, due_time="25:00")
        errors = validate_parse_result(result)
        assert "Title cannot be empty" in errors
        assert "Confidence must be between 0 and 1" in errors
        assert "Due time must be in HH:MM format" in errors
        assert len(errors) == 3
