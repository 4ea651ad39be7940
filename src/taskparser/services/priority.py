"""Priority extraction from urgency keywords."""

import logging

from taskparser.services.keywords import first_occurrence, keyword_confidence, score_labels
from taskparser.services.models import ExtractionResult, Priority

logger = logging.getLogger(__name__)

PRIORITY_KEYWORDS: dict[Priority, tuple[str, ...]] = {
    Priority.HIGH: (
        "urgent",
        "urgently",
        "asap",
        "important",
        "critical",
        "emergency",
        "high priority",
        "top priority",
    ),
    Priority.MEDIUM: (
        "medium priority",
        "normal priority",
        "regular priority",
    ),
    Priority.LOW: (
        "whenever",
        "someday",
        "low priority",
        "optional",
        "no rush",
        "eventually",
    ),
}


class PriorityExtractor:
    """Classifies urgency keywords into low, medium or high.

    The level with the highest weighted score wins; equal scores go to the
    more urgent level. No default is injected: text without any urgency
    keyword yields no match.
    """

    keywords = PRIORITY_KEYWORDS

    def extract(self, text: str) -> ExtractionResult[Priority]:
        scores = score_labels(text, self.keywords)
        if not scores:
            return ExtractionResult.no_match()

        best = max(scores, key=lambda s: (s.score, s.label.urgency))
        span = first_occurrence(text, best.matches)
        matched_text = text[span[0] : span[1]] if span else ""
        logger.debug(f"Priority {best.label.value} from keywords {best.matches}")

        return ExtractionResult(
            value=best.label,
            matched_text=matched_text,
            confidence=keyword_confidence(best.score, len(best.matches)),
            matched_keywords=best.matches,
            span=span,
        )
