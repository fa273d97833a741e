"""Natural-language vehicle search for carfind.

This package turns a free-text query in Hebrew, English or both into
structured vehicle search filters with a confidence score.

The pipeline has two paths:
1. Remote parse (~500-2000ms) - Ollama model returns JSON filters
2. Deterministic parse (~1ms) - dictionary and regex extraction, used
   whenever the remote path is unavailable or fails

Example usage:
    ```python
    from carfind.core.prompt_search import PromptSearchService

    service = PromptSearchService()  # no backend: deterministic only

    result = service.parse_deterministic("טויוטה לבנה משנת 2018 עד 2022")
    assert result.filters.manufacturer == "טויוטה"
    assert result.filters.year_to == 2022

    # Async with remote backend and fallback
    result = await service.parse_prompt("white toyota from 2018")
    if not service.has_minimum_confidence(result):
        print(service.get_suggestions(result))
    ```
"""

from .confidence import (
    ConfidenceEvaluator,
    SearchDecision,
)
from .dictionary import (
    ENTITY_DICTIONARY,
    EntityDictionary,
    build_entity_map,
    build_keyword_map,
)
from .extractor import (
    DeterministicExtractor,
    YearRange,
    YearRangeExtractor,
    calculate_confidence,
)
from .prompts import (
    PARSE_INSTRUCTIONS,
    build_parse_prompt,
)
from .service import (
    PromptSearchService,
    create_service,
    sanitize_prompt,
)
from .types import (
    DEFAULT_MAX_PROMPT_LENGTH,
    DEFAULT_MAX_YEAR_DIFF,
    DEFAULT_MIN_CONFIDENCE,
    EntityPosition,
    EntityType,
    ExtractedEntity,
    ParsedPrompt,
    ParseSource,
    PromptSearchConfig,
    VehicleSearchFilters,
)

__all__ = [
    # Orchestrator
    "PromptSearchService",
    "create_service",
    "sanitize_prompt",
    # Deterministic extraction
    "DeterministicExtractor",
    "YearRange",
    "YearRangeExtractor",
    "calculate_confidence",
    # Confidence & suggestions
    "ConfidenceEvaluator",
    "SearchDecision",
    # Dictionary
    "ENTITY_DICTIONARY",
    "EntityDictionary",
    "build_entity_map",
    "build_keyword_map",
    # Remote instructions
    "PARSE_INSTRUCTIONS",
    "build_parse_prompt",
    # Types
    "DEFAULT_MAX_PROMPT_LENGTH",
    "DEFAULT_MAX_YEAR_DIFF",
    "DEFAULT_MIN_CONFIDENCE",
    "EntityPosition",
    "EntityType",
    "ExtractedEntity",
    "ParsedPrompt",
    "ParseSource",
    "PromptSearchConfig",
    "VehicleSearchFilters",
]
