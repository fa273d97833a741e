"""Abstract base class for remote prompt-parsing backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..prompt_search.types import ParsedPrompt


class PromptParserBackend(ABC):
    """Abstract base class for remote prompt parsers.

    Lifecycle:
    1. Create backend instance with model name and endpoint
    2. Call parse() any number of times (client is created lazily)
    3. Call close() to release the HTTP client (must be idempotent)

    Contract:
    - parse() is stateless per call and safe to retry, but never retries itself
    - Every failure is raised as a BackendError subclass
    - Entities it returns carry a (0, 0) position span
    """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the remote model name."""
        ...

    @abstractmethod
    async def parse(self, sanitized: str, original: str) -> "ParsedPrompt":
        """Parse a sanitized prompt remotely.

        Args:
            sanitized: Prompt after sanitization
            original: Caller's untouched prompt

        Returns:
            ParsedPrompt built from the backend reply

        Raises:
            BackendUnavailable: If the call could not complete
            MalformedResponse: If the reply could not be parsed
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release network resources.

        Must be idempotent - safe to call multiple times.
        """
        ...

    @classmethod
    @abstractmethod
    async def is_available(cls, endpoint: str) -> bool:
        """Check if the remote service is reachable."""
        ...

    async def __aenter__(self) -> "PromptParserBackend":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


__all__ = ["PromptParserBackend"]
