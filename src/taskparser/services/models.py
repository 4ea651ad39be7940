"""Data model shared by the extractors and the parsing orchestrator.

Dates are plain ``datetime.date`` values: a calendar day with no timezone
attached, so no UTC arithmetic can shift the day a user meant. Times travel
separately as canonical 24-hour ``"HH:MM"`` strings.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def urgency(self) -> int:
        """Rank used to break scoring ties (higher wins)."""
        return _URGENCY[self]


_URGENCY = {Priority.LOW: 0, Priority.MEDIUM: 1, Priority.HIGH: 2}


class Category(str, Enum):
    WORK = "work"
    PERSONAL = "personal"
    SCHOOL = "school"


class AmbiguousElementType(str, Enum):
    DATE = "date"
    TIME = "time"
    PRIORITY = "priority"
    CATEGORY = "category"


class TaskParserError(Exception):
    """Base class for caller errors raised by the parsing core."""


class InvalidReferenceDateError(TaskParserError, ValueError):
    """Reference date is not a usable instant."""


class InvalidTimezoneError(TaskParserError, ValueError):
    """Timezone is not a known IANA identifier."""


class InvalidInputError(TaskParserError, ValueError):
    """Input text is missing, blank, or too long."""


@dataclass(frozen=True)
class ExtractionResult(Generic[T]):
    """One extractor's verdict on the current working text.

    ``value`` is None exactly when nothing matched, in which case
    ``confidence`` is 0. ``matched_text`` is the substring the extractor
    consumes from the working text (may be empty), and ``span`` its
    position when the consumption is positional.
    """

    value: T | None = None
    matched_text: str = ""
    confidence: float = 0.0
    matched_keywords: tuple[str, ...] = ()
    span: tuple[int, int] | None = None

    @property
    def matched(self) -> bool:
        return self.value is not None

    @classmethod
    def no_match(cls) -> "ExtractionResult[T]":
        return cls()


@dataclass(frozen=True)
class DateSuggestion:
    """One candidate resolution for an ambiguous date phrase."""

    value: date
    display: str  # e.g. "Monday, Jan 22"
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.value.isoformat(),
            "display": self.display,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class AmbiguousElement:
    """An input phrase that maps to several plausible dates."""

    original_text: str
    type: AmbiguousElementType
    suggestions: tuple[DateSuggestion, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "original_text": self.original_text,
            "type": self.type.value,
            "suggestions": [s.to_dict() for s in self.suggestions],
        }


@dataclass(frozen=True)
class CategorySuggestion:
    """Result of classifying text into a category."""

    category: Category | None
    confidence: float
    matched_keywords: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value if self.category else None,
            "confidence": self.confidence,
            "matched_keywords": list(self.matched_keywords),
        }


@dataclass(frozen=True)
class ParseResult:
    """Structured task produced from one line of free text."""

    title: str
    confidence: float
    due_date: date | None = None
    due_time: str | None = None  # "HH:MM", 24-hour
    priority: Priority | None = None
    category: Category | None = None
    ambiguous_elements: tuple[AmbiguousElement, ...] = ()

    @property
    def is_ambiguous(self) -> bool:
        return bool(self.ambiguous_elements)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "due_time": self.due_time,
            "priority": self.priority.value if self.priority else None,
            "category": self.category.value if self.category else None,
            "confidence": self.confidence,
            "ambiguous_elements": [e.to_dict() for e in self.ambiguous_elements],
        }
