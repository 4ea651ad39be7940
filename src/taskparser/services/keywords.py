"""Keyword matching primitives shared by the priority and category extractors.

Each extractor owns a static dictionary mapping a label to an ordered tuple
of keywords. Matching is whole-word and case-insensitive; a label's weighted
score sums one weight per matched keyword:

- multi-word phrases weigh 2
- keywords longer than 6 characters weigh 1.5
- everything else weighs 1
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Protocol, TypeVar

from taskparser.services.models import ExtractionResult
from taskparser.services.regex_cache import word_boundary_regex

L = TypeVar("L")
R_co = TypeVar("R_co", covariant=True)

PHRASE_WEIGHT = 2.0
LONG_KEYWORD_WEIGHT = 1.5
LONG_KEYWORD_MIN_LENGTH = 7
KEYWORD_COUNT_WEIGHT = 0.25


class Extractor(Protocol[R_co]):
    """Anything that classifies working text into a typed field."""

    def extract(self, text: str) -> ExtractionResult[R_co]: ...


@dataclass(frozen=True)
class LabelScore:
    label: object
    score: float
    matches: tuple[str, ...]


def find_keyword_matches(text: str, keywords: Iterable[str]) -> list[str]:
    """Return the keywords that occur in ``text`` as whole words, in keyword order."""
    return [kw for kw in keywords if word_boundary_regex(kw).search(text)]


def keyword_weight(keyword: str) -> float:
    if " " in keyword:
        return PHRASE_WEIGHT
    if len(keyword) >= LONG_KEYWORD_MIN_LENGTH:
        return LONG_KEYWORD_WEIGHT
    return 1.0


def calculate_weighted_score(matches: Iterable[str]) -> float:
    return sum(keyword_weight(kw) for kw in matches)


def keyword_confidence(score: float, count: int) -> float:
    """Map a weighted score and match count onto [0, 1).

    Strictly increasing in both arguments, so a richer set of matches always
    yields a higher confidence. No matches gives exactly 0.
    """
    if count <= 0 or score <= 0:
        return 0.0
    return 1.0 - 1.0 / (1.0 + score + KEYWORD_COUNT_WEIGHT * count)


def score_labels(text: str, dictionary: Mapping[L, Iterable[str]]) -> list[LabelScore]:
    """Score every label of ``dictionary`` against ``text``.

    Labels with no matches are left out; order follows the dictionary.
    """
    scores = []
    for label, keywords in dictionary.items():
        matches = find_keyword_matches(text, keywords)
        if matches:
            scores.append(
                LabelScore(label=label, score=calculate_weighted_score(matches), matches=tuple(matches))
            )
    return scores


def first_occurrence(text: str, keywords: Iterable[str]) -> tuple[int, int] | None:
    """Span of the earliest whole-word occurrence of any keyword."""
    best: tuple[int, int] | None = None
    for kw in keywords:
        match = word_boundary_regex(kw).search(text)
        if match and (best is None or match.start() < best[0]):
            best = match.span()
    return best


def remove_keywords(text: str, keywords: Iterable[str]) -> str:
    """Delete every whole-word occurrence of ``keywords`` from ``text``.

    Longer keywords go first so a phrase is not split by one of its words.
    """
    for kw in sorted(keywords, key=len, reverse=True):
        text = word_boundary_regex(kw).sub("", text)
    return text
