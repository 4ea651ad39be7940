"""Parsing orchestrator: free text in, structured task out.

The extractors run in a fixed order over a shrinking working copy of the
input. Each one that matches removes what it consumed, so later extractors
never re-match it and whatever is left becomes the title:

    date (or range -> disambiguation) -> time -> priority -> category -> title

The working copy is threaded through the steps as an immutable ParseState,
never shared between calls.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import date
from functools import reduce

from taskparser.config import settings
from taskparser.services.category import CategoryExtractor
from taskparser.services.confidence import AMBIGUOUS_DATE_CONFIDENCE, ConfidenceBreakdown
from taskparser.services.dates import DateExtractor
from taskparser.services.disambiguation import build_ambiguous_element
from taskparser.services.keywords import Extractor, remove_keywords
from taskparser.services.models import (
    AmbiguousElement,
    Category,
    InvalidInputError,
    ParseResult,
    Priority,
)
from taskparser.services.priority import PriorityExtractor
from taskparser.services.time_parser import TimeParser
from taskparser.services.timezone import ReferenceDate, TimezoneService, get_timezone_service

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_EDGE_PUNCTUATION = re.compile(r"^[,\s\-:;]+|[,\s\-:;]+$")
_LEADING_PREPOSITION = re.compile(r"^(?:by|for|at)\s+", re.IGNORECASE)
_DANGLING_PREPOSITION = re.compile(r"\b(?:by|for|at|on|due|before|until)\s*$", re.IGNORECASE)
_VALID_TIME = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


@dataclass(frozen=True)
class ParseState:
    """Accumulator threaded through the extraction steps."""

    text: str
    today: date
    due_date: date | None = None
    due_time: str | None = None
    priority: Priority | None = None
    category: Category | None = None
    ambiguous_elements: tuple[AmbiguousElement, ...] = ()
    breakdown: ConfidenceBreakdown = field(default_factory=ConfidenceBreakdown)
    anchor: int | None = None  # where the date phrase was consumed


def _consume(text: str, span: tuple[int, int]) -> str:
    """Cut ``span`` out of ``text`` along with a preposition left hanging in front of it."""
    start, end = span
    head = _DANGLING_PREPOSITION.sub("", text[:start])
    return f"{head} {text[end:]}"


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def clean_title(text: str) -> str:
    """Tidy leftover text: single spaces, no edge punctuation or leading by/for/at."""
    title = collapse_whitespace(text)
    title = _EDGE_PUNCTUATION.sub("", title)
    title = _LEADING_PREPOSITION.sub("", title)
    return _EDGE_PUNCTUATION.sub("", title).strip()


class TaskParser:
    """Turns one line of free text into a ParseResult.

    Stateless apart from its extractors, which only read static keyword
    tables, so one instance can serve concurrent calls.
    """

    def __init__(self, timezone_service: TimezoneService | None = None):
        self._tz_service = timezone_service
        self.date_extractor = DateExtractor()
        self.priority_extractor: Extractor[Priority] = PriorityExtractor()
        self.category_extractor: Extractor[Category] = CategoryExtractor()
        self._steps: tuple[Callable[[ParseState], ParseState], ...] = (
            self._extract_date,
            self._extract_time,
            self._extract_priority,
            self._extract_category,
        )

    @property
    def timezone_service(self) -> TimezoneService:
        return self._tz_service or get_timezone_service()

    def parse(
        self,
        text: str,
        reference: ReferenceDate = None,
        timezone: str | None = None,
    ) -> ParseResult:
        """Parse ``text`` relative to ``reference`` in ``timezone``.

        Args:
            text: Free-text task, e.g. "Buy groceries tomorrow at 3pm".
            reference: Reference instant; defaults to now. A naive datetime is
                read as wall time in ``timezone`` and is not converted.
            timezone: IANA zone of the user; defaults to the configured zone.

        Returns:
            ParseResult with the cleaned title, any extracted fields, overall
            confidence and at most one ambiguous date element.

        Raises:
            InvalidInputError: text is not a string, blank, or too long.
            InvalidReferenceDateError: reference is not a usable instant.
            InvalidTimezoneError: timezone is not a known IANA zone.
        """
        self._validate_input(text)
        today = self.timezone_service.local_date(reference, timezone)

        state = reduce(lambda acc, step: step(acc), self._steps, ParseState(text=text, today=today))

        title = clean_title(state.text) or collapse_whitespace(text)
        logger.debug(f"Parsed task: {state.breakdown.explain()}")

        return ParseResult(
            title=title,
            confidence=state.breakdown.total,
            due_date=state.due_date,
            due_time=state.due_time,
            priority=state.priority,
            category=state.category,
            ambiguous_elements=state.ambiguous_elements,
        )

    @staticmethod
    def _validate_input(text: str) -> None:
        if not isinstance(text, str):
            raise InvalidInputError("Input must be a string")
        if not text.strip():
            raise InvalidInputError("Input must not be blank")
        if len(text) > settings.max_input_length:
            raise InvalidInputError(
                f"Input must be at most {settings.max_input_length} characters"
            )

    def _extract_date(self, state: ParseState) -> ParseState:
        match = self.date_extractor.extract(state.text, state.today)
        if match.span is None:
            return state

        text = _consume(state.text, match.span)
        anchor = len(_DANGLING_PREPOSITION.sub("", state.text[: match.span[0]]))

        if match.is_range:
            # Only the first range phrase is surfaced per parse
            element = build_ambiguous_element(match.phrase, state.today)
            return replace(
                state,
                text=text,
                anchor=anchor,
                ambiguous_elements=state.ambiguous_elements + (element,),
                breakdown=replace(state.breakdown, date=AMBIGUOUS_DATE_CONFIDENCE),
            )

        return replace(
            state,
            text=text,
            anchor=anchor,
            due_date=match.value,
            breakdown=replace(state.breakdown, date=match.confidence),
        )

    def _extract_time(self, state: ParseState) -> ParseState:
        result = TimeParser.extract(state.text, anchor=state.anchor)
        if not result.matched or result.span is None:
            return state
        return replace(
            state,
            text=_consume(state.text, result.span),
            due_time=result.value,
            breakdown=replace(state.breakdown, time=result.confidence),
        )

    def _extract_priority(self, state: ParseState) -> ParseState:
        result = self.priority_extractor.extract(state.text)
        if not result.matched:
            return state
        return replace(
            state,
            text=remove_keywords(state.text, result.matched_keywords),
            priority=result.value,
            breakdown=replace(state.breakdown, priority=result.confidence),
        )

    def _extract_category(self, state: ParseState) -> ParseState:
        result = self.category_extractor.extract(state.text)
        if not result.matched:
            return state
        # Topical keywords stay in the title; nothing is consumed
        return replace(
            state,
            category=result.value,
            breakdown=replace(state.breakdown, category=result.confidence),
        )


_parser = TaskParser()


def parse_input(
    text: str,
    reference: ReferenceDate = None,
    timezone: str | None = None,
) -> ParseResult:
    """Parse free text into a ParseResult (see TaskParser.parse).

    A naive ``reference`` datetime is taken as wall time in ``timezone``, not
    converted from UTC or process local time.
    """
    return _parser.parse(text, reference, timezone)


def validate_parse_result(result: ParseResult) -> list[str]:
    """Human-readable problems with ``result``; empty when it is well formed."""
    errors = []

    if not result.title or not result.title.strip():
        errors.append("Title cannot be empty")

    if not 0 <= result.confidence <= 1:
        errors.append("Confidence must be between 0 and 1")

    if result.due_time is not None and not _VALID_TIME.match(result.due_time):
        errors.append("Due time must be in HH:MM format")

    if result.priority is not None and not isinstance(result.priority, Priority):
        errors.append("Priority must be low, medium, or high")

    if result.category is not None and not isinstance(result.category, Category):
        errors.append("Category must be work, personal, or school")

    return errors
