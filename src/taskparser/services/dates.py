"""Date extraction from relative and absolute date idioms.

Idiom classes are tried most specific first, so a generic token like
"week" never swallows a more specific phrase:

1. Absolute dates: ISO ``2024-01-20``, ``Jan 20``, ``20th of January 2024``
2. Weekdays: ``next friday`` (and bare / ``this`` weekdays)
3. Offsets: ``in 3 days``, ``2 weeks from now``
4. Keywords: ``today``, ``tonight``, ``tomorrow``, ``day after tomorrow``
5. Ranges: ``next week``, ``end of (the) month``

Within a class the leftmost match wins. Ranges resolve to no single date;
the orchestrator hands them to the disambiguation engine.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, timedelta

from taskparser.config import settings
from taskparser.services.models import ExtractionResult, InvalidInputError
from taskparser.services.regex_cache import pattern_regex
from taskparser.services.timezone import ReferenceDate, get_timezone_service

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_MONTHS = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}  # fmt: skip

_NUMBER_WORDS = {
    "a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5, "six": 6,
    "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11, "twelve": 12,
}  # fmt: skip

_KEYWORD_OFFSETS = {"today": 0, "tonight": 0, "tomorrow": 1, "day after tomorrow": 2}

CONFIDENCE_ABSOLUTE = 0.95
CONFIDENCE_MONTH_DAY = 0.9
CONFIDENCE_NEXT_WEEKDAY = 0.9
CONFIDENCE_WEEKDAY = 0.85
CONFIDENCE_OFFSET = 0.9
CONFIDENCE_KEYWORD = 0.95

_PREP = r"(?:\b(?:on|by|due|before|until)\s+)?"
_MONTH = "|".join(sorted(_MONTHS, key=len, reverse=True))
_WEEKDAY = "|".join(name.lower() for name in WEEKDAY_NAMES)
_NUMBER = r"\d+|" + "|".join(_NUMBER_WORDS)
_NOT_TIME = r"(?!\s*(?::|[ap]\.?m\b))"

ISO_DATE = _PREP + r"\b(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})\b"
MONTH_DAY = (
    _PREP
    + rf"\b(?P<month>{_MONTH})\.?\s+(?P<day>\d{{1,2}})(?:st|nd|rd|th)?\b{_NOT_TIME}"
    + r"(?:,?\s+(?P<year>\d{4})\b)?"
)
DAY_MONTH = (
    _PREP
    + rf"\b(?P<day>\d{{1,2}})(?:st|nd|rd|th)?\s+(?:of\s+)?(?P<month>{_MONTH})\b\.?"
    + r"(?:,?\s+(?P<year>\d{4})\b)?"
)
NEXT_WEEKDAY = _PREP + rf"\bnext\s+(?P<weekday>{_WEEKDAY})\b"
WEEKDAY = _PREP + rf"(?:\bthis\s+)?\b(?P<weekday>{_WEEKDAY})\b"
IN_OFFSET = _PREP + rf"\bin\s+(?P<n>{_NUMBER})\s+(?P<unit>day|week)s?\b"
FROM_NOW_OFFSET = rf"\b(?P<n>{_NUMBER})\s+(?P<unit>day|week)s?\s+from\s+(?:now|today)\b"
KEYWORD = _PREP + r"\b(?P<keyword>day\s+after\s+tomorrow|tomorrow|today|tonight)\b"

NEXT_WEEK = _PREP + r"\bnext\s+week\b"
END_OF_MONTH = _PREP + r"\b(?:the\s+)?end\s+of\s+(?:the\s+)?month\b"
RANGE_PATTERNS = (NEXT_WEEK, END_OF_MONTH)

Resolver = Callable[[re.Match[str], date], tuple[date, float] | None]


@dataclass(frozen=True)
class DateMatch(ExtractionResult[date]):
    """Date extractor verdict.

    ``kind`` names the idiom class. For ranges ``value`` stays None and
    ``phrase`` carries the normalized idiom ("next week").
    """

    kind: str = ""
    phrase: str = ""

    @property
    def is_range(self) -> bool:
        return self.kind == "range"


@dataclass(frozen=True)
class RangePhrase:
    phrase: str  # normalized, e.g. "end of the month"
    span: tuple[int, int]


def normalize_phrase(text: str) -> str:
    return " ".join(text.lower().split())


def _strip_lead_in(text: str) -> str:
    return re.sub(r"^(?:(?:on|by|due|before|until)\s+)?(?:the\s+)?", "", text, flags=re.IGNORECASE)


def find_range_phrases(text: str) -> list[RangePhrase]:
    """Every range idiom in ``text``, in order of appearance."""
    found = []
    for pattern in RANGE_PATTERNS:
        for match in pattern_regex(pattern).finditer(text):
            phrase = normalize_phrase(_strip_lead_in(match.group(0)))
            found.append(RangePhrase(phrase=phrase, span=match.span()))
    return sorted(found, key=lambda r: r.span[0])


def _number(token: str) -> int:
    token = token.lower()
    return int(token) if token.isdigit() else _NUMBER_WORDS[token]


def _resolve_iso(match: re.Match[str], today: date) -> tuple[date, float] | None:
    try:
        value = date(int(match["year"]), int(match["month"]), int(match["day"]))
    except ValueError:
        return None
    return value, CONFIDENCE_ABSOLUTE


def _resolve_month_name(match: re.Match[str], today: date) -> tuple[date, float] | None:
    month = _MONTHS[match["month"].lower()]
    day = int(match["day"])

    if match["year"]:
        try:
            return date(int(match["year"]), month, day), CONFIDENCE_ABSOLUTE
        except ValueError:
            return None

    # Next occurrence on or after the reference date; Feb 29 may be years out
    for year in range(today.year, today.year + 8):
        try:
            candidate = date(year, month, day)
        except ValueError:
            continue
        if candidate >= today:
            return candidate, CONFIDENCE_MONTH_DAY
    return None


def _days_until_weekday(today: date, weekday_name: str) -> int:
    target = [name.lower() for name in WEEKDAY_NAMES].index(weekday_name.lower())
    # Strictly after the reference day: same weekday jumps a full week
    return (target - today.weekday()) % 7 or 7


def _resolve_next_weekday(match: re.Match[str], today: date) -> tuple[date, float] | None:
    return today + timedelta(days=_days_until_weekday(today, match["weekday"])), CONFIDENCE_NEXT_WEEKDAY


def _resolve_weekday(match: re.Match[str], today: date) -> tuple[date, float] | None:
    return today + timedelta(days=_days_until_weekday(today, match["weekday"])), CONFIDENCE_WEEKDAY


def _resolve_offset(match: re.Match[str], today: date) -> tuple[date, float] | None:
    amount = _number(match["n"])
    days = amount * 7 if match["unit"].lower() == "week" else amount
    try:
        return today + timedelta(days=days), CONFIDENCE_OFFSET
    except OverflowError:
        return None


def _resolve_keyword(match: re.Match[str], today: date) -> tuple[date, float] | None:
    offset = _KEYWORD_OFFSETS[normalize_phrase(match["keyword"])]
    return today + timedelta(days=offset), CONFIDENCE_KEYWORD


# (kind, [(pattern, resolver), ...]) in matching priority order
IDIOM_CLASSES: tuple[tuple[str, tuple[tuple[str, Resolver], ...]], ...] = (
    (
        "absolute",
        ((ISO_DATE, _resolve_iso), (MONTH_DAY, _resolve_month_name), (DAY_MONTH, _resolve_month_name)),
    ),
    ("weekday", ((NEXT_WEEKDAY, _resolve_next_weekday), (WEEKDAY, _resolve_weekday))),
    ("offset", ((IN_OFFSET, _resolve_offset), (FROM_NOW_OFFSET, _resolve_offset))),
    ("keyword", ((KEYWORD, _resolve_keyword),)),
)


class DateExtractor:
    """Recognizes date idioms and resolves them against a calendar date."""

    def extract(self, text: str, today: date) -> DateMatch:
        """Find the highest-priority date idiom in ``text``.

        Args:
            text: Working text.
            today: Reference calendar date, already projected into the
                user's timezone.
        """
        for kind, patterns in IDIOM_CLASSES:
            found = self._first_in_class(text, today, patterns)
            if found is not None:
                match, value, confidence = found
                logger.debug(f"Date {value.isoformat()} ({kind}) from {match.group(0)!r}")
                return DateMatch(
                    value=value,
                    matched_text=match.group(0),
                    confidence=confidence,
                    span=match.span(),
                    kind=kind,
                )

        ranges = find_range_phrases(text)
        if ranges:
            first = ranges[0]
            logger.debug(f"Range date phrase {first.phrase!r}")
            return DateMatch(
                matched_text=text[first.span[0] : first.span[1]],
                span=first.span,
                kind="range",
                phrase=first.phrase,
            )

        return DateMatch()

    @staticmethod
    def _first_in_class(
        text: str, today: date, patterns: tuple[tuple[str, Resolver], ...]
    ) -> tuple[re.Match[str], date, float] | None:
        best: tuple[re.Match[str], date, float] | None = None
        for pattern, resolver in patterns:
            for match in pattern_regex(pattern).finditer(text):
                resolved = resolver(match, today)
                if resolved is None:
                    continue
                if best is None or match.start() < best[0].start():
                    best = (match, *resolved)
                break
        return best


def parse_relative_date(
    text: str,
    reference: ReferenceDate = None,
    timezone: str | None = None,
) -> date | None:
    """Resolve a short date phrase ("next friday") to a calendar date.

    Range idioms ("next week") have no single date and return None.

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
    return DateExtractor().extract(text, today).value
