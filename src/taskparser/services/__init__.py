"""Task parsing services.

This module exposes the parsing core: extractors for dates, times,
priorities and categories, the disambiguation engine and the orchestrator
that combines them. Imports are lazy so importing one service does not pull
in the rest.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS: dict[str, tuple[str, str]] = {
    # Models
    "AmbiguousElement": ("taskparser.services.models", "AmbiguousElement"),
    "AmbiguousElementType": ("taskparser.services.models", "AmbiguousElementType"),
    "Category": ("taskparser.services.models", "Category"),
    "CategorySuggestion": ("taskparser.services.models", "CategorySuggestion"),
    "DateSuggestion": ("taskparser.services.models", "DateSuggestion"),
    "ExtractionResult": ("taskparser.services.models", "ExtractionResult"),
    "InvalidInputError": ("taskparser.services.models", "InvalidInputError"),
    "InvalidReferenceDateError": ("taskparser.services.models", "InvalidReferenceDateError"),
    "InvalidTimezoneError": ("taskparser.services.models", "InvalidTimezoneError"),
    "ParseResult": ("taskparser.services.models", "ParseResult"),
    "Priority": ("taskparser.services.models", "Priority"),
    "TaskParserError": ("taskparser.services.models", "TaskParserError"),
    # Orchestrator
    "TaskParser": ("taskparser.services.parser", "TaskParser"),
    "parse_input": ("taskparser.services.parser", "parse_input"),
    "validate_parse_result": ("taskparser.services.parser", "validate_parse_result"),
    # Dates
    "DateExtractor": ("taskparser.services.dates", "DateExtractor"),
    "parse_relative_date": ("taskparser.services.dates", "parse_relative_date"),
    # Disambiguation
    "generate_disambiguation_suggestions": (
        "taskparser.services.disambiguation",
        "generate_disambiguation_suggestions",
    ),
    # Category
    "CategoryExtractor": ("taskparser.services.category", "CategoryExtractor"),
    "get_category_keywords": ("taskparser.services.category", "get_category_keywords"),
    "get_category_suggestion": ("taskparser.services.category", "get_category_suggestion"),
    # Priority
    "PriorityExtractor": ("taskparser.services.priority", "PriorityExtractor"),
    # Time
    "TimeParser": ("taskparser.services.time_parser", "TimeParser"),
    "TimeParseResult": ("taskparser.services.time_parser", "TimeParseResult"),
    "format_time_for_display": ("taskparser.services.time_parser", "format_time_for_display"),
    "get_auto_complete_suggestions": (
        "taskparser.services.time_parser",
        "get_auto_complete_suggestions",
    ),
    "parse_time": ("taskparser.services.time_parser", "parse_time"),
    "validate_time": ("taskparser.services.time_parser", "validate_time"),
    # Timezone
    "TimezoneService": ("taskparser.services.timezone", "TimezoneService"),
    "get_timezone_service": ("taskparser.services.timezone", "get_timezone_service"),
    "reset_timezone_service": ("taskparser.services.timezone", "reset_timezone_service"),
}

__all__ = list(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = _EXPORTS[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_EXPORTS.keys()))
