"""Time parsing for standalone time input and times embedded in task text.

Accepted forms, tried in order (first structural match wins):

1. 24-hour ``H:MM`` / ``HH:MM``
2. 12-hour ``H:MM am`` / ``H:MMpm``
3. Compact digits ``930`` / ``1430`` (and ``930pm``)
4. ``noon`` / ``midnight``
5. Hour with meridiem ``9 AM`` / ``3pm``

Out-of-range values are failures, never clamped.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from taskparser.services.models import ExtractionResult
from taskparser.services.regex_cache import pattern_regex

logger = logging.getLogger(__name__)

GENERIC_SUGGESTIONS = ["9:00 AM", "2:30 PM", "14:30", "18:00"]
DEFAULT_COMPLETIONS = ["9:00 AM", "12:00 PM", "2:30 PM", "6:00 PM"]
MAX_SUGGESTIONS = 4
MAX_COMPLETIONS = 6

TEXT_TIME_CONFIDENCE = 0.9

# Shapes, not ranges: range checks happen after matching
_24H = re.compile(r"^(\d{1,2}):(\d{2})$")
_12H = re.compile(r"^(\d{1,2}):(\d{2})\s*(am|pm)$", re.IGNORECASE)
_COMPACT = re.compile(r"^\d{3,4}$")
_COMPACT_12H = re.compile(r"^(\d{1,2})(\d{2})\s*(am|pm)$", re.IGNORECASE)
_HOUR_12H = re.compile(r"^(\d{1,2})\s*(am|pm)$", re.IGNORECASE)
_MERIDIEM_DOTS = re.compile(r"\b([ap])\.m\.?", re.IGNORECASE)

_NATURAL = {"noon": (12, 0), "midnight": (0, 0)}

# Time-shaped substrings inside free text. The optional "at"/"@" is consumed
# together with the time.
_TEXT_TIME_PATTERNS = (
    r"(?:(?:\bat|@)\s*)?\b(?P<core>\d{1,2}:\d{2}(?:\s*(?:[ap]m|[ap]\.m\.?))?)(?!\w)",
    r"(?:(?:\bat|@)\s*)?\b(?P<core>\d{1,2}\s*(?:[ap]m|[ap]\.m\.?))(?!\w)",
    r"(?:\bat\s+)?\b(?P<core>noon|midnight)\b",
    r"(?:\bat\s*|@\s*)(?P<core>\d{3,4})\b",
)


@dataclass(frozen=True)
class TimeParseResult:
    success: bool
    time: str | None = None  # "HH:MM"
    display_time: str | None = None  # "2:30 PM"
    error: str | None = None
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "time": self.time, "display_time": self.display_time}
        return {"success": False, "error": self.error, "suggestions": list(self.suggestions)}


@dataclass(frozen=True)
class TimeValidationResult:
    is_valid: bool
    error: str | None = None
    suggestion: str | None = None


def _format_display(hours: int, minutes: int) -> str:
    period = "PM" if hours >= 12 else "AM"
    display_hour = 12 if hours % 12 == 0 else hours % 12
    return f"{display_hour}:{minutes:02d} {period}"


def _ok(hours: int, minutes: int) -> TimeParseResult:
    return TimeParseResult(
        success=True,
        time=f"{hours:02d}:{minutes:02d}",
        display_time=_format_display(hours, minutes),
    )


def _to_24_hour(hours: int, period: str) -> int:
    period = period.lower()
    if period == "am":
        return 0 if hours == 12 else hours
    return hours if hours == 12 else hours + 12


class TimeParser:
    """Parses time expressions into canonical 24-hour ``HH:MM``."""

    @classmethod
    def parse_time(cls, text: str | None) -> TimeParseResult:
        if not text or not text.strip():
            return TimeParseResult(
                success=False,
                error="Please enter a time",
                suggestions=list(GENERIC_SUGGESTIONS),
            )

        value = _MERIDIEM_DOTS.sub(lambda m: f"{m.group(1)}m", text.strip())
        result = cls._parse_shape(value)
        if result is not None and result.success:
            return result

        return TimeParseResult(
            success=False,
            error=result.error if result is not None else "Invalid time format",
            suggestions=cls.generate_suggestions(value),
        )

    @classmethod
    def _parse_shape(cls, value: str) -> TimeParseResult | None:
        """Parse the first matching shape, or None if no shape matches."""
        if match := _24H.match(value):
            return cls._validated(int(match.group(1)), int(match.group(2)))

        if match := _12H.match(value):
            return cls._validated_12h(int(match.group(1)), int(match.group(2)), match.group(3))

        if _COMPACT.match(value):
            # HMM or HHMM
            return cls._validated(int(value[:-2]), int(value[-2:]))

        if match := _COMPACT_12H.match(value):
            return cls._validated_12h(int(match.group(1)), int(match.group(2)), match.group(3))

        if (natural := _NATURAL.get(value.lower())) is not None:
            return _ok(*natural)

        if match := _HOUR_12H.match(value):
            return cls._validated_12h(int(match.group(1)), 0, match.group(2))

        return None

    @staticmethod
    def _validated(hours: int, minutes: int) -> TimeParseResult:
        if not (0 <= hours <= 23 and 0 <= minutes <= 59):
            return TimeParseResult(success=False, error="Invalid time values")
        return _ok(hours, minutes)

    @staticmethod
    def _validated_12h(hours: int, minutes: int, period: str) -> TimeParseResult:
        if not (1 <= hours <= 12 and 0 <= minutes <= 59):
            return TimeParseResult(success=False, error="Invalid time values")
        return _ok(_to_24_hour(hours, period), minutes)

    @staticmethod
    def generate_suggestions(text: str) -> list[str]:
        """Ranked guesses built from the digit groups found in ``text``."""
        suggestions: list[str] = []
        numbers = [int(n) for n in re.findall(r"\d+", text)]

        if numbers:
            first = numbers[0]
            second = numbers[1] if len(numbers) > 1 and numbers[1] <= 59 else None

            if 1 <= first <= 12:
                suggestions += [f"{first}:00 AM", f"{first}:00 PM"]
                if second is not None:
                    suggestions += [f"{first}:{second:02d} AM", f"{first}:{second:02d} PM"]

            if 0 <= first <= 23:
                suggestions.append(f"{first:02d}:00")
                if second is not None:
                    suggestions.append(f"{first:02d}:{second:02d}")

        if not suggestions:
            suggestions = list(GENERIC_SUGGESTIONS)

        return suggestions[:MAX_SUGGESTIONS]

    @classmethod
    def validate_time(cls, text: str | None) -> TimeValidationResult:
        if not text:
            return TimeValidationResult(
                is_valid=False,
                error="Time is required",
                suggestion='Try formats like "9:00 AM" or "14:30"',
            )
        result = cls.parse_time(text)
        return TimeValidationResult(
            is_valid=result.success,
            error=result.error,
            suggestion=result.suggestions[0] if result.suggestions else None,
        )

    @staticmethod
    def format_time_for_display(time: str) -> str:
        """Convert "14:30" to "2:30 PM"; anything unparseable is returned unchanged."""
        if not time or ":" not in time:
            return time
        hours_str, _, minutes_str = time.partition(":")
        if not (hours_str.isdigit() and minutes_str.isdigit()):
            return time
        return _format_display(int(hours_str), int(minutes_str))

    @classmethod
    def parse_display_time(cls, display_time: str) -> str:
        """Convert "2:30 PM" back to "14:30"; empty string when it does not parse."""
        result = cls.parse_time(display_time)
        return result.time if result.success and result.time else ""

    @staticmethod
    def format_time_for_calendar(time: str) -> str:
        """Pad a valid ``H:MM`` to ``HH:MM``; return anything else unchanged."""
        match = _24H.match(time or "")
        if match:
            hours, minutes = int(match.group(1)), int(match.group(2))
            if 0 <= hours <= 23 and 0 <= minutes <= 59:
                return f"{hours:02d}:{minutes:02d}"
        return time

    @staticmethod
    def get_auto_complete_suggestions(partial: str | None) -> list[str]:
        """Candidate completions for a time being typed."""
        if not partial:
            return list(DEFAULT_COMPLETIONS)

        trimmed = partial.strip().lower()
        suggestions: list[str] = []

        if re.fullmatch(r"\d{1,2}", trimmed):
            hour = int(trimmed)
            if 1 <= hour <= 12:
                suggestions += [f"{hour}:00 AM", f"{hour}:00 PM", f"{hour}:30 AM", f"{hour}:30 PM"]
            if hour <= 23:
                suggestions += [f"{hour:02d}:00", f"{hour:02d}:30"]

        if re.fullmatch(r"\d{1,2}:", trimmed):
            hour = int(trimmed[:-1])
            if 1 <= hour <= 12:
                suggestions += [
                    f"{hour}:00 AM",
                    f"{hour}:00 PM",
                    f"{hour}:15 AM",
                    f"{hour}:30 AM",
                    f"{hour}:45 AM",
                ]
            if hour <= 23:
                suggestions += [f"{hour:02d}:{m}" for m in ("00", "15", "30", "45")]

        if trimmed:
            suggestions += [word for word in _NATURAL if word.startswith(trimmed)]

        return suggestions[:MAX_COMPLETIONS]

    @classmethod
    def extract(cls, text: str, anchor: int | None = None) -> ExtractionResult[str]:
        """Find a time inside free text.

        Every time-shaped substring is a candidate; those that parse are
        ranked by distance to ``anchor`` (where a date phrase was consumed),
        then by position. The matched text includes a leading "at".
        """
        candidates: list[tuple[int, int, tuple[int, int], str]] = []
        for pattern in _TEXT_TIME_PATTERNS:
            for match in pattern_regex(pattern).finditer(text):
                parsed = cls.parse_time(match.group("core"))
                if not parsed.success or parsed.time is None:
                    continue
                start, end = match.span()
                distance = 0 if anchor is None else _distance(anchor, start, end)
                candidates.append((distance, start, (start, end), parsed.time))

        if not candidates:
            return ExtractionResult.no_match()

        _, _, span, time = min(candidates, key=lambda c: (c[0], c[1]))
        logger.debug(f"Time {time} from {text[span[0]:span[1]]!r}")
        return ExtractionResult(
            value=time,
            matched_text=text[span[0] : span[1]],
            confidence=TEXT_TIME_CONFIDENCE,
            span=span,
        )


def _distance(anchor: int, start: int, end: int) -> int:
    if start <= anchor <= end:
        return 0
    return min(abs(anchor - start), abs(anchor - end))


def parse_time(text: str | None) -> TimeParseResult:
    return TimeParser.parse_time(text)


def validate_time(text: str | None) -> TimeValidationResult:
    return TimeParser.validate_time(text)


def format_time_for_display(time: str) -> str:
    return TimeParser.format_time_for_display(time)


def get_auto_complete_suggestions(partial: str | None) -> list[str]:
    return TimeParser.get_auto_complete_suggestions(partial)
