"""Data model for natural-language vehicle search.

This module defines the entity types, the structured filter object handed to
the search layer, and the aggregate result of a single prompt parse.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class EntityType(str, Enum):
    """Kinds of entity that can be recognized in a prompt."""

    MANUFACTURER = "manufacturer"
    MODEL = "model"
    YEAR = "year"
    COLOR = "color"
    FUEL_TYPE = "fuelType"
    OWNERSHIP = "ownership"


class ParseSource(str, Enum):
    """Which path produced a ParsedPrompt."""

    REMOTE = "remote"
    DETERMINISTIC = "deterministic"
    EMPTY = "empty"


@dataclass(frozen=True)
class EntityPosition:
    """Character span of an entity in the sanitized prompt.

    Remote-path entities always carry (0, 0) because the backend does not
    report offsets.
    """

    start: int = 0
    end: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}


@dataclass
class ExtractedEntity:
    """A single recognized token or span.

    Attributes:
        type: Entity class (manufacturer, year, color, ...)
        value: Canonical string value, or int for years
        confidence: Match confidence 0.0-1.0
        position: Span in the sanitized prompt
    """

    type: EntityType
    value: str | int
    confidence: float
    position: EntityPosition = field(default_factory=EntityPosition)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire representation."""
        return {
            "type": self.type.value,
            "value": self.value,
            "confidence": self.confidence,
            "position": self.position.to_dict(),
        }


# Wire key -> attribute name. Wire keys are what the remote backend emits and
# what callers receive from to_dict().
FILTER_KEYS: dict[str, str] = {
    "manufacturer": "manufacturer",
    "model": "model",
    "yearFrom": "year_from",
    "yearTo": "year_to",
    "color": "color",
    "fuelType": "fuel_type",
    "ownership": "ownership",
}

FILTER_ENTITY_TYPES: dict[str, EntityType] = {
    "manufacturer": EntityType.MANUFACTURER,
    "model": EntityType.MODEL,
    "yearFrom": EntityType.YEAR,
    "yearTo": EntityType.YEAR,
    "color": EntityType.COLOR,
    "fuelType": EntityType.FUEL_TYPE,
    "ownership": EntityType.OWNERSHIP,
}


@dataclass
class VehicleSearchFilters:
    """Structured search constraints extracted from a prompt.

    A field left as None means "no constraint". Every string field holds the
    canonical (Hebrew) value except ``model``, which is passed through as
    written.
    """

    manufacturer: str | None = None
    model: str | None = None
    year_from: int | None = None
    year_to: int | None = None
    color: str | None = None
    fuel_type: str | None = None
    ownership: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "VehicleSearchFilters":
        """Build filters from wire keys (yearFrom) or attribute names (year_from).

        Unknown keys are ignored. None and empty-string values are treated as
        absent.
        """
        kwargs: dict[str, Any] = {}
        attrs = set(FILTER_KEYS.values())
        for key, value in data.items():
            attr = FILTER_KEYS.get(key, key if key in attrs else None)
            if attr is None or value is None or value == "":
                continue
            kwargs[attr] = value
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Return present fields only, keyed by wire name."""
        result: dict[str, Any] = {}
        for key, attr in FILTER_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                result[key] = value
        return result

    def is_empty(self) -> bool:
        """Check if no constraint is set."""
        return not self.to_dict()


@dataclass
class ParsedPrompt:
    """Result of parsing one prompt.

    Attributes:
        filters: Structured filters derived from the sanitized prompt
        confidence: Overall confidence 0.0-1.0
        extracted_entities: Entities recognized in the sanitized prompt
        original_prompt: The caller's input before sanitization
        source: Path that produced this result
    """

    filters: VehicleSearchFilters = field(default_factory=VehicleSearchFilters)
    confidence: float = 0.0
    extracted_entities: list[ExtractedEntity] = field(default_factory=list)
    original_prompt: str = ""
    source: ParseSource = ParseSource.DETERMINISTIC

    @classmethod
    def empty(cls, original_prompt: str) -> "ParsedPrompt":
        """Result for prompts with nothing left after sanitization."""
        return cls(original_prompt=original_prompt, source=ParseSource.EMPTY)

    def entities_of(self, entity_type: EntityType) -> list[ExtractedEntity]:
        """Return extracted entities of the given type."""
        return [e for e in self.extracted_entities if e.type == entity_type]

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire representation."""
        return {
            "filters": self.filters.to_dict(),
            "confidence": self.confidence,
            "extractedEntities": [e.to_dict() for e in self.extracted_entities],
            "originalPrompt": self.original_prompt,
            "source": self.source.value,
        }


DEFAULT_MIN_CONFIDENCE = 0.5
DEFAULT_MAX_YEAR_DIFF = 50
DEFAULT_MAX_PROMPT_LENGTH = 500


@dataclass(frozen=True)
class PromptSearchConfig:
    """Tunables for prompt parsing.

    Attributes:
        min_confidence_threshold: Minimum confidence to run a search
        max_year_diff: How many years back from the current year are valid
        max_prompt_length: Longer prompts are truncated before parsing
    """

    min_confidence_threshold: float = DEFAULT_MIN_CONFIDENCE
    max_year_diff: int = DEFAULT_MAX_YEAR_DIFF
    max_prompt_length: int = DEFAULT_MAX_PROMPT_LENGTH


__all__ = [
    "DEFAULT_MAX_PROMPT_LENGTH",
    "DEFAULT_MAX_YEAR_DIFF",
    "DEFAULT_MIN_CONFIDENCE",
    "EntityPosition",
    "EntityType",
    "ExtractedEntity",
    "FILTER_ENTITY_TYPES",
    "FILTER_KEYS",
    "ParseSource",
    "ParsedPrompt",
    "PromptSearchConfig",
    "VehicleSearchFilters",
]
