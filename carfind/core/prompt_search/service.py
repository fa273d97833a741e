"""Prompt-search orchestrator for carfind.

Turns a free-text vehicle query (Hebrew, English or mixed) into structured
search filters:

1. Sanitize - keep only Hebrew/Latin letters, digits, whitespace and hyphens
2. Remote parse - ask the configured backend (Ollama); authoritative on success
3. Deterministic parse - dictionary and pattern extraction on any remote failure

parse_prompt() never raises. The worst case is a result with confidence 0
and no entities; callers treat low confidence, not exceptions, as failure.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from ..backends import BackendError
from .confidence import ConfidenceEvaluator, SearchDecision
from .dictionary import ENTITY_DICTIONARY, EntityDictionary
from .extractor import DeterministicExtractor
from .types import ParsedPrompt, PromptSearchConfig

if TYPE_CHECKING:
    from ...config import AppConfig
    from ..backends import PromptParserBackend

logger = logging.getLogger(__name__)

# Quote marks and dots inside Hebrew abbreviations are dropped so that
# פיג'ו, גפ"מ and ב.מ.וו collapse to a single word.
INTRA_WORD_MARKS = re.compile(
    "['\"`\u05F3\u05F4\u2018\u2019\u201C\u201D]"
    r"|(?<=[\u0590-\u05FF])\.(?=[\u0590-\u05FF])"
)

# Everything except Hebrew letters, Latin letters, ASCII digits, whitespace
# and hyphen. Hyphens carry ranges (2015-2020) and prefix forms (מ-2015).
DISALLOWED_CHARS = re.compile(r"[^\u0590-\u05FFa-zA-Z0-9\s-]")
WHITESPACE = re.compile(r"\s+")
WORD_CHAR = re.compile(r"[\u0590-\u05FFa-zA-Z0-9]")


def sanitize_prompt(prompt: str) -> str:
    """Strip symbols from a prompt.

    Quote marks and abbreviation dots are deleted, any other disallowed
    character becomes a space (so "2015/2020" stays two tokens), whitespace
    runs collapse to one space, and the ends are trimmed. Text with no letter
    or digit left (e.g. only hyphens) sanitizes to "".

    Args:
        prompt: Raw user prompt

    Returns:
        Sanitized prompt, possibly empty
    """
    cleaned = INTRA_WORD_MARKS.sub("", prompt)
    cleaned = DISALLOWED_CHARS.sub(" ", cleaned)
    if not WORD_CHAR.search(cleaned):
        return ""
    return WHITESPACE.sub(" ", cleaned).strip()


class PromptSearchService:
    """Public entry point for natural-language vehicle search parsing.

    Example:
        service = PromptSearchService(backend=OllamaParserBackend())
        parsed = await service.parse_prompt("טויוטה לבנה משנת 2018")
        if service.has_minimum_confidence(parsed):
            run_search(parsed.filters)
        else:
            show(service.get_suggestions(parsed))

    Attributes:
        backend: Optional remote parser; None means deterministic only
        config: Parsing tunables
        extractor: Deterministic fallback extractor
        evaluator: Confidence gate and suggestion engine
    """

    def __init__(
        self,
        backend: "PromptParserBackend | None" = None,
        dictionary: EntityDictionary = ENTITY_DICTIONARY,
        config: PromptSearchConfig | None = None,
    ) -> None:
        self.backend = backend
        self.config = config or PromptSearchConfig()
        self.extractor = DeterministicExtractor(dictionary, self.config)
        self.evaluator = ConfidenceEvaluator(self.config.min_confidence_threshold)

    def _prepare(self, prompt: str) -> str:
        if len(prompt) > self.config.max_prompt_length:
            logger.warning(
                f"Prompt truncated from {len(prompt)} to {self.config.max_prompt_length} chars"
            )
            prompt = prompt[: self.config.max_prompt_length]
        return sanitize_prompt(prompt)

    async def parse_prompt(self, prompt: str) -> ParsedPrompt:
        """Parse a natural-language prompt into vehicle search filters.

        Args:
            prompt: Raw user prompt

        Returns:
            ParsedPrompt from the remote backend, or from the deterministic
            extractor if the backend is missing or fails
        """
        logger.info(f'Parsing prompt: "{prompt}"')

        sanitized = self._prepare(prompt)
        if not sanitized:
            return ParsedPrompt.empty(prompt)

        if self.backend is not None:
            try:
                return await self.backend.parse(sanitized, prompt)
            except BackendError as e:
                logger.warning(f"Remote parsing failed: {e}. Using deterministic extraction.")
            except Exception as e:
                logger.warning(
                    f"Remote parsing raised {type(e).__name__}: {e}. "
                    "Using deterministic extraction."
                )

        return self.extractor.extract(sanitized, prompt)

    def parse_deterministic(self, prompt: str) -> ParsedPrompt:
        """Parse without the remote backend.

        Args:
            prompt: Raw user prompt

        Returns:
            ParsedPrompt from the deterministic extractor
        """
        sanitized = self._prepare(prompt)
        if not sanitized:
            return ParsedPrompt.empty(prompt)
        return self.extractor.extract(sanitized, prompt)

    def has_minimum_confidence(self, parsed: ParsedPrompt) -> bool:
        """Check if a parse is confident enough to run a search."""
        return self.evaluator.has_minimum_confidence(parsed)

    def get_suggestions(self, parsed: ParsedPrompt) -> list[str]:
        """Get refinement hints for a parse."""
        return self.evaluator.get_suggestions(parsed)

    def evaluate(self, parsed: ParsedPrompt) -> SearchDecision:
        """Decide between searching and asking the user to refine."""
        return self.evaluator.evaluate(parsed)

    async def close(self) -> None:
        """Close the remote backend, if any."""
        if self.backend is not None:
            await self.backend.close()

    async def __aenter__(self) -> "PromptSearchService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def create_service(config: "AppConfig | None" = None) -> PromptSearchService:
    """Factory function to create a PromptSearchService.

    Args:
        config: Application configuration; defaults to AppConfig()

    Returns:
        Service with an Ollama backend, or none if remote parsing is disabled
    """
    from ...config import AppConfig
    from ..backends import create_backend

    config = config or AppConfig()
    backend = create_backend(config) if config.remote_enabled else None

    logger.info("Prompt search initialized")
    if backend is not None:
        logger.info(f"- Ollama endpoint: {config.ollama_endpoint}")

    return PromptSearchService(backend=backend, config=config.to_prompt_search_config())


__all__ = [
    "PromptSearchService",
    "create_service",
    "sanitize_prompt",
]
