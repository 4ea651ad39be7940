"""Disambiguation of date phrases that denote a range of days.

"next week" could mean any of the days 7 to 14 days out and "end of month"
any of the last few days of the current month. Instead of guessing, each
such phrase becomes an AmbiguousElement carrying ordered candidate dates.
"""

import logging
from calendar import monthrange
from datetime import date, timedelta

from taskparser.config import settings
from taskparser.services.dates import (
    MONTH_ABBREVIATIONS,
    WEEKDAY_NAMES,
    find_range_phrases,
)
from taskparser.services.models import (
    AmbiguousElement,
    AmbiguousElementType,
    DateSuggestion,
    InvalidInputError,
)
from taskparser.services.timezone import ReferenceDate, get_timezone_service

logger = logging.getLogger(__name__)

NEXT_WEEK_CONFIDENCE = 0.8
END_OF_MONTH_CONFIDENCE = 0.7
NEXT_WEEK_FIRST_DAY = 7
NEXT_WEEK_LAST_DAY = 14


def format_suggestion_label(value: date) -> str:
    """Human label like "Monday, Jan 22"."""
    return f"{WEEKDAY_NAMES[value.weekday()]}, {MONTH_ABBREVIATIONS[value.month - 1]} {value.day}"


def _suggestion(value: date, confidence: float) -> DateSuggestion:
    return DateSuggestion(value=value, display=format_suggestion_label(value), confidence=confidence)


def next_week_suggestions(today: date) -> tuple[DateSuggestion, ...]:
    """One suggestion per day from 7 to 14 days after ``today``, inclusive."""
    return tuple(
        _suggestion(today + timedelta(days=offset), NEXT_WEEK_CONFIDENCE)
        for offset in range(NEXT_WEEK_FIRST_DAY, NEXT_WEEK_LAST_DAY + 1)
    )


def end_of_month_suggestions(today: date) -> tuple[DateSuggestion, ...]:
    """Trailing days of ``today``'s month, never before ``today``."""
    last_day = monthrange(today.year, today.month)[1]
    window = max(settings.end_of_month_window_days, 1)
    start_day = max(last_day - window + 1, today.day)
    return tuple(
        _suggestion(date(today.year, today.month, day), END_OF_MONTH_CONFIDENCE)
        for day in range(start_day, last_day + 1)
    )


def suggestions_for_phrase(phrase: str, today: date) -> tuple[DateSuggestion, ...]:
    """Candidate dates for a normalized range phrase; empty if unknown."""
    if phrase == "next week":
        return next_week_suggestions(today)
    if phrase in ("end of month", "end of the month"):
        return end_of_month_suggestions(today)
    return ()


def build_ambiguous_element(phrase: str, today: date) -> AmbiguousElement:
    return AmbiguousElement(
        original_text=phrase,
        type=AmbiguousElementType.DATE,
        suggestions=suggestions_for_phrase(phrase, today),
    )


def generate_disambiguation_suggestions(
    text: str,
    reference: ReferenceDate = None,
    timezone: str | None = None,
) -> list[AmbiguousElement]:
    """Ambiguous elements for every range idiom in ``text``.

    Matching is case-insensitive and ``original_text`` is the normalized
    phrase. Text without a range idiom yields an empty list.

    Args:
        text: Date text such as "next week" or "by the end of the month".
        reference: Reference instant (see TimezoneService.local_date).
        timezone: IANA zone the reference is projected into.

    Raises:
        InvalidInputError: text is not a string or is too long.
        InvalidReferenceDateError: reference is not a usable instant.
        InvalidTimezoneError: timezone is not a known IANA zone.
    """
    if not isinstance(text, str):
        raise InvalidInputError("Date text must be a string")
    if len(text) > settings.max_date_text_length:
        raise InvalidInputError(
            f"Date text must be at most {settings.max_date_text_length} characters"
        )

    today = get_timezone_service().local_date(reference, timezone)
    elements = [build_ambiguous_element(r.phrase, today) for r in find_range_phrases(text)]
    logger.debug(f"{len(elements)} ambiguous date phrase(s) found")
    return elements
