"""Overall confidence for a parsed task.

Each field that matched contributes its extractor's confidence; fields that
did not match contribute nothing, so a plain title with only a due date is
not dragged down by the missing priority. Nothing matched means 0.
"""

from dataclasses import dataclass, fields
from typing import Any

# A range phrase ("next week") was understood but not resolved to one day
AMBIGUOUS_DATE_CONFIDENCE = 0.6


@dataclass
class ConfidenceBreakdown:
    """Per-field confidence components (None = field not matched)."""

    date: float | None = None
    time: float | None = None
    priority: float | None = None
    category: float | None = None

    @property
    def contributions(self) -> dict[str, float]:
        return {f.name: v for f in fields(self) if (v := getattr(self, f.name)) is not None}

    @property
    def total(self) -> float:
        """Mean of the matched fields' confidences, within [0, 1]."""
        values = list(self.contributions.values())
        if not values:
            return 0.0
        return max(0.0, min(1.0, sum(values) / len(values)))

    def explain(self) -> str:
        matched = ", ".join(self.contributions) or "nothing matched"
        return f"Confidence {self.total:.2f} ({matched})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "time": self.time,
            "priority": self.priority,
            "category": self.category,
            "total": self.total,
        }
