"""Confidence gating and refinement suggestions for parsed prompts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .types import DEFAULT_MIN_CONFIDENCE, ParsedPrompt

# Suggestion texts. Generic hints come in Hebrew and English; field hints
# use Hebrew examples because canonical values are Hebrew.
SUGGEST_MORE_SPECIFIC_HE = "נסה להיות יותר ספציפי בחיפוש"
SUGGEST_MORE_SPECIFIC_EN = "Try to be more specific in your search"
SUGGEST_MANUFACTURER = "הוסף יצרן לחיפוש (למשל: טויוטה, מאזדה)"
SUGGEST_YEAR = "הוסף שנת ייצור (למשל: משנת 2015, 2010-2020)"
SUGGEST_COLOR = "הוסף צבע (למשל: לבן, שחור)"


@dataclass
class SearchDecision:
    """Whether a parsed prompt is good enough to run a vehicle search.

    Attributes:
        should_search: True if confidence meets the threshold
        confidence: Overall parse confidence
        filters: Filters the search layer should apply (wire keys)
        suggestions: Refinement hints, only filled when the search is rejected
    """

    should_search: bool
    confidence: float
    filters: dict[str, Any] = field(default_factory=dict)
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "shouldSearch": self.should_search,
            "confidence": self.confidence,
            "extractedFilters": self.filters,
            "suggestions": self.suggestions,
        }


class ConfidenceEvaluator:
    """Decide whether a parse is usable and how the user could improve it.

    Both checks are pure functions of the ParsedPrompt and the configured
    threshold.
    """

    def __init__(self, min_confidence_threshold: float = DEFAULT_MIN_CONFIDENCE) -> None:
        self.min_confidence_threshold = min_confidence_threshold

    def has_minimum_confidence(self, parsed: ParsedPrompt) -> bool:
        """Check if the parse meets the confidence threshold."""
        return parsed.confidence >= self.min_confidence_threshold

    def get_suggestions(self, parsed: ParsedPrompt) -> list[str]:
        """Suggest how to refine a prompt.

        Order is fixed: generic low-confidence hints first, then
        manufacturer, year and color hints for whichever are missing.

        Args:
            parsed: Result of a prompt parse

        Returns:
            List of suggestion strings (may be empty)
        """
        suggestions: list[str] = []
        filters = parsed.filters

        if not self.has_minimum_confidence(parsed):
            suggestions.append(SUGGEST_MORE_SPECIFIC_HE)
            suggestions.append(SUGGEST_MORE_SPECIFIC_EN)

        if filters.manufacturer is None:
            suggestions.append(SUGGEST_MANUFACTURER)

        if filters.year_from is None and filters.year_to is None:
            suggestions.append(SUGGEST_YEAR)

        if filters.color is None:
            suggestions.append(SUGGEST_COLOR)

        return suggestions

    def evaluate(self, parsed: ParsedPrompt) -> SearchDecision:
        """Gate a parse: search with its filters, or return suggestions."""
        should_search = self.has_minimum_confidence(parsed)
        return SearchDecision(
            should_search=should_search,
            confidence=parsed.confidence,
            filters=parsed.filters.to_dict(),
            suggestions=[] if should_search else self.get_suggestions(parsed),
        )


__all__ = [
    "ConfidenceEvaluator",
    "SearchDecision",
]
