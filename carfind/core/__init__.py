"""Core components for carfind."""

from __future__ import annotations

from .backends import (
    BackendError,
    BackendUnavailable,
    MalformedResponse,
    PromptParserBackend,
    create_backend,
)
from .prompt_search import (
    ENTITY_DICTIONARY,
    EntityType,
    ExtractedEntity,
    ParsedPrompt,
    PromptSearchService,
    VehicleSearchFilters,
    create_service,
)

__all__ = [
    "BackendError",
    "BackendUnavailable",
    "ENTITY_DICTIONARY",
    "EntityType",
    "ExtractedEntity",
    "MalformedResponse",
    "ParsedPrompt",
    "PromptParserBackend",
    "PromptSearchService",
    "VehicleSearchFilters",
    "create_backend",
    "create_service",
]
