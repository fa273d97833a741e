"""Deterministic prompt extraction for carfind.

This is the fallback path for the whole parse: it needs no network and never
fails. Year ranges are found with an ordered list of regex rules, and
manufacturer/color/fuel/ownership tokens are resolved against the entity
dictionary.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Mapping

from .dictionary import ENTITY_DICTIONARY, YEAR_KEYWORD_ROLES, EntityDictionary
from .types import (
    DEFAULT_MAX_YEAR_DIFF,
    EntityPosition,
    EntityType,
    ExtractedEntity,
    ParsedPrompt,
    ParseSource,
    PromptSearchConfig,
    VehicleSearchFilters,
)

logger = logging.getLogger(__name__)

YEAR = r"(\d{4})"

DASHED_RANGE = re.compile(rf"(?<!\d){YEAR}\s*-\s*{YEAR}(?!\d)")
BARE_YEAR = re.compile(r"(?<!\d)(\d{4})(?!\d)")

LATIN = re.compile(r"[a-z]")

# Hebrew aliases may carry one attached prefix letter (הטויוטה, בלבן) but must
# not sit inside a longer word (פרטים, ארגז).
HEBREW_PREFIX = "[הובלמשכ]"
NOT_AFTER_HEBREW = r"(?<![\u0590-\u05FF])"
NOT_BEFORE_HEBREW = r"(?![\u0590-\u05FF])"

# Confidence assigned to each kind of deterministic match. Dictionary hits
# stay below 0.8 so a single hit plus the breadth bonus does not reach the 1.0
# cap, and every additional field still raises the overall score.
EXPLICIT_YEAR_CONFIDENCE = 1.0
BARE_YEAR_CONFIDENCE = 0.9
DICTIONARY_CONFIDENCE = 0.75


def calculate_confidence(entities: list[ExtractedEntity]) -> float:
    """Overall confidence for a set of extracted entities.

    Mean entity confidence plus a breadth bonus of 0.1 per entity (at most
    0.3), capped at 1.0. No entities means 0.
    """
    if not entities:
        return 0.0

    average = sum(e.confidence for e in entities) / len(entities)
    bonus = min(len(entities) * 0.1, 0.3)
    return min(average + bonus, 1.0)


def keyword_alternation(keywords: Iterable[str]) -> str | None:
    """Regex alternation for a keyword list, longest first; None if empty."""
    ordered = sorted(set(keywords), key=len, reverse=True)
    if not ordered:
        return None
    return "(?:" + "|".join(re.escape(keyword) for keyword in ordered) + ")"


@dataclass
class YearRange:
    """Year constraint found in a prompt.

    Attributes:
        year_from: Lower bound (inclusive)
        year_to: Upper bound (inclusive), None for open-ended
        entities: One year entity per year mentioned
        rule: Name of the rule that produced the range
    """

    year_from: int | None = None
    year_to: int | None = None
    entities: list[ExtractedEntity] = field(default_factory=list)
    rule: str = ""


class YearRangeExtractor:
    """Find year ranges using ordered pattern rules.

    Rules are tried in strict priority order and the first rule that yields
    valid years wins:

    1. Dashed range: ``2015-2020``
    2. From-to phrase: ``משנת 2015 עד 2020``, ``from 2015 to 2020``
    3. Between phrase: ``בין 2015 ל-2020``, ``between 2015 and 2020``
    4. Single from-phrase: ``משנת 2015``, ``since 2015``
    5. Bare years: one year is a lower bound; two or more become a range from
       the smallest to the largest, even if they were not written as a range.

    Phrase keywords come from the dictionary's ``year_keywords`` roles; a
    phrase rule whose roles have no keywords is skipped.

    A year is valid only within ``[current_year - max_year_diff, current_year + 1]``.
    """

    def __init__(
        self,
        max_year_diff: int = DEFAULT_MAX_YEAR_DIFF,
        clock: Callable[[], datetime] = datetime.now,
        keywords: Mapping[str, Iterable[str]] | None = None,
    ) -> None:
        self.max_year_diff = max_year_diff
        self._clock = clock

        if keywords is None:
            keywords = ENTITY_DICTIONARY.year_keywords
        words = {role: keyword_alternation(keywords.get(role, ())) for role in YEAR_KEYWORD_ROLES}

        self._pair_rules: list[tuple[str, re.Pattern[str]]] = [("dashed", DASHED_RANGE)]
        if words["from"] and words["to"]:
            self._pair_rules.append(
                ("from_to", re.compile(rf"{words['from']}\s*{YEAR}\s*{words['to']}\s*{YEAR}(?!\d)"))
            )
        if words["between"] and words["and"]:
            self._pair_rules.append(
                (
                    "between",
                    re.compile(rf"{words['between']}\s*{YEAR}\s*{words['and']}\s*{YEAR}(?!\d)"),
                )
            )
        self._from_single = (
            re.compile(rf"{words['from']}\s*{YEAR}(?!\d)") if words["from"] else None
        )

    @property
    def bounds(self) -> tuple[int, int]:
        """Current (min_year, max_year) validity window."""
        current_year = self._clock().year
        return current_year - self.max_year_diff, current_year + 1

    def is_valid_year(self, year: int) -> bool:
        min_year, max_year = self.bounds
        return min_year <= year <= max_year

    def extract(self, text: str) -> YearRange | None:
        """Extract a year range from lowercased, sanitized text.

        Args:
            text: Sanitized prompt

        Returns:
            YearRange, or None if no valid year was found
        """
        for rule, pattern in self._pair_rules:
            year_range = self._match_pair(rule, pattern, text)
            if year_range is not None:
                return year_range

        match = self._from_single.search(text) if self._from_single else None
        if match and self.is_valid_year(int(match.group(1))):
            return YearRange(
                year_from=int(match.group(1)),
                entities=[self._entity(match, 1, EXPLICIT_YEAR_CONFIDENCE)],
                rule="from",
            )

        return self._bare_years(text)

    def _match_pair(self, rule: str, pattern: re.Pattern[str], text: str) -> YearRange | None:
        """Apply a two-year rule; both years must be valid."""
        match = pattern.search(text)
        if not match:
            return None

        year_from, year_to = int(match.group(1)), int(match.group(2))
        if not (self.is_valid_year(year_from) and self.is_valid_year(year_to)):
            logger.debug(f"Rejected {rule} year range {year_from}-{year_to}: out of bounds")
            return None

        return YearRange(
            year_from=year_from,
            year_to=year_to,
            entities=[
                self._entity(match, 1, EXPLICIT_YEAR_CONFIDENCE),
                self._entity(match, 2, EXPLICIT_YEAR_CONFIDENCE),
            ],
            rule=rule,
        )

    def _bare_years(self, text: str) -> YearRange | None:
        """Collect every standalone valid 4-digit token."""
        entities = [
            self._entity(match, 1, BARE_YEAR_CONFIDENCE)
            for match in BARE_YEAR.finditer(text)
            if self.is_valid_year(int(match.group(1)))
        ]
        if not entities:
            return None

        years = sorted(int(e.value) for e in entities)
        if len(years) == 1:
            return YearRange(year_from=years[0], entities=entities, rule="bare")

        # Two or more unmarked years are read as an implied range
        return YearRange(year_from=years[0], year_to=years[-1], entities=entities, rule="bare")

    @staticmethod
    def _entity(match: re.Match[str], group: int, confidence: float) -> ExtractedEntity:
        return ExtractedEntity(
            type=EntityType.YEAR,
            value=int(match.group(group)),
            confidence=confidence,
            position=EntityPosition(match.start(group), match.end(group)),
        )


class DeterministicExtractor:
    """Dictionary and pattern based prompt parser.

    For each dictionary-backed class (manufacturer, color, fuel type,
    ownership) at most one value is set: the first alias found, checking
    longer aliases before shorter ones so that e.g. "הונדאי" resolves to
    Hyundai rather than to the Honda spelling "הונדא" it contains.

    Latin aliases must match whole words. Hebrew aliases must not be followed
    by another Hebrew letter and may carry one attached prefix letter, so
    "הטויוטה" resolves while "פרטים" is not read as "פרטי". Inflections such
    as "לבנה" are listed as aliases of their own.

    Example:
        extractor = DeterministicExtractor()
        parsed = extractor.extract("טויוטה לבנה 2020", "טויוטה לבנה 2020!")
        assert parsed.filters.manufacturer == "טויוטה"
    """

    def __init__(
        self,
        dictionary: EntityDictionary = ENTITY_DICTIONARY,
        config: PromptSearchConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.dictionary = dictionary
        self.config = config or PromptSearchConfig()
        self.year_extractor = YearRangeExtractor(
            self.config.max_year_diff, clock, dictionary.year_keywords
        )

        # Per class: (compiled alias, canonical) sorted longest alias first
        self._compiled: dict[EntityType, list[tuple[re.Pattern[str], str]]] = {}
        for entity_type, table in dictionary.classes():
            pairs = [(alias, canonical) for canonical, aliases in table.items() for alias in aliases]
            pairs.sort(key=lambda pair: len(pair[0]), reverse=True)
            self._compiled[entity_type] = [
                (self._compile_alias(alias), canonical) for alias, canonical in pairs
            ]

    @staticmethod
    def _compile_alias(alias: str) -> re.Pattern[str]:
        escaped = re.escape(alias)
        if LATIN.search(alias):
            return re.compile(rf"(?<![a-z0-9])({escaped})(?![a-z0-9])")
        return re.compile(rf"{NOT_AFTER_HEBREW}{HEBREW_PREFIX}?({escaped}){NOT_BEFORE_HEBREW}")

    def extract(self, sanitized: str, original: str) -> ParsedPrompt:
        """Parse sanitized text into filters and entities.

        Args:
            sanitized: Prompt after sanitization
            original: Caller's untouched prompt

        Returns:
            ParsedPrompt; zero entities and confidence 0 if nothing matched
        """
        text = sanitized.lower()
        filters = VehicleSearchFilters()
        entities: list[ExtractedEntity] = []

        year_range = self.year_extractor.extract(text)
        if year_range is not None:
            filters.year_from = year_range.year_from
            filters.year_to = year_range.year_to
            entities.extend(year_range.entities)

        for entity_type, entity in self._resolve(text):
            setattr(filters, _FILTER_ATTRS[entity_type], entity.value)
            entities.append(entity)

        confidence = calculate_confidence(entities)
        logger.info(
            f"Deterministic extraction: {len(entities)} entities, confidence {confidence:.2f}"
        )

        return ParsedPrompt(
            filters=filters,
            confidence=confidence,
            extracted_entities=entities,
            original_prompt=original,
            source=ParseSource.DETERMINISTIC,
        )

    def _resolve(self, text: str) -> list[tuple[EntityType, ExtractedEntity]]:
        """Match dictionary aliases, first hit per class."""
        found: list[tuple[EntityType, ExtractedEntity]] = []
        for entity_type, patterns in self._compiled.items():
            for pattern, canonical in patterns:
                match = pattern.search(text)
                if match:
                    found.append(
                        (
                            entity_type,
                            ExtractedEntity(
                                type=entity_type,
                                value=canonical,
                                confidence=DICTIONARY_CONFIDENCE,
                                position=EntityPosition(match.start(1), match.end(1)),
                            ),
                        )
                    )
                    break
        return found


_FILTER_ATTRS: dict[EntityType, str] = {
    EntityType.MANUFACTURER: "manufacturer",
    EntityType.COLOR: "color",
    EntityType.FUEL_TYPE: "fuel_type",
    EntityType.OWNERSHIP: "ownership",
}


__all__ = [
    "DeterministicExtractor",
    "YearRange",
    "YearRangeExtractor",
    "calculate_confidence",
]
