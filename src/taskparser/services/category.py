"""Category suggestion from topical keywords.

Unlike priority words, topical keywords carry the meaning of the task
("Buy groceries"), so the category extractor never consumes text from the
title: its ``matched_text`` is always empty.
"""

import logging
from types import MappingProxyType

from taskparser.services.keywords import keyword_confidence, score_labels
from taskparser.services.models import Category, CategorySuggestion, ExtractionResult

logger = logging.getLogger(__name__)

CATEGORY_KEYWORDS: MappingProxyType[Category, tuple[str, ...]] = MappingProxyType(
    {
        Category.WORK: (
            "meeting",
            "presentation",
            "report",
            "project",
            "deadline",
            "client",
            "office",
            "conference",
            "email",
            "call",
            "review",
            "proposal",
            "budget",
            "team",
            "manager",
            "colleague",
            "business",
            "professional",
            "work",
            "job",
            "career",
            "interview",
            "resume",
            "salary",
            "promotion",
            "training",
            "workshop",
            "seminar",
        ),
        Category.PERSONAL: (
            "grocery",
            "groceries",
            "shopping",
            "doctor",
            "appointment",
            "dentist",
            "gym",
            "exercise",
            "workout",
            "family",
            "friend",
            "birthday",
            "anniversary",
            "vacation",
            "travel",
            "hobby",
            "personal",
            "home",
            "house",
            "cleaning",
            "laundry",
            "cooking",
            "meal",
            "dinner",
            "lunch",
            "breakfast",
            "health",
            "medical",
            "pharmacy",
            "bank",
            "finance",
            "bills",
            "insurance",
            "car",
            "maintenance",
            "repair",
        ),
        Category.SCHOOL: (
            "assignment",
            "homework",
            "study",
            "exam",
            "test",
            "quiz",
            "class",
            "lecture",
            "professor",
            "teacher",
            "student",
            "school",
            "university",
            "college",
            "course",
            "semester",
            "grade",
            "paper",
            "essay",
            "research",
            "thesis",
            "dissertation",
            "lab",
            "laboratory",
            "textbook",
            "library",
            "campus",
            "tuition",
            "scholarship",
            "degree",
            "graduation",
            "academic",
            "education",
        ),
    }
)


class CategoryExtractor:
    """Picks the category whose keywords score strictly highest.

    A tie between the top categories is treated as no match rather than a
    guess.
    """

    keywords = CATEGORY_KEYWORDS

    def extract(self, text: str) -> ExtractionResult[Category]:
        scores = score_labels(text, self.keywords)
        if not scores:
            return ExtractionResult.no_match()

        ranked = sorted(scores, key=lambda s: s.score, reverse=True)
        best = ranked[0]
        if len(ranked) > 1 and ranked[1].score == best.score:
            logger.debug(
                f"Category tie between {best.label.value} and {ranked[1].label.value}"
            )
            return ExtractionResult.no_match()

        return ExtractionResult(
            value=best.label,
            matched_text="",
            confidence=keyword_confidence(best.score, len(best.matches)),
            matched_keywords=best.matches,
        )


_extractor = CategoryExtractor()


def get_category_suggestion(text: str) -> CategorySuggestion:
    """Suggest a category for ``text`` with the keywords that support it."""
    result = _extractor.extract(text)
    return CategorySuggestion(
        category=result.value,
        confidence=result.confidence,
        matched_keywords=list(result.matched_keywords),
    )


def get_category_keywords() -> dict[Category, list[str]]:
    """Read-only view of the keyword dictionary, for autocomplete."""
    return {category: list(keywords) for category, keywords in CATEGORY_KEYWORDS.items()}
