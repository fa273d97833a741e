"""Remote prompt-parsing backends for carfind.

A backend sends a sanitized prompt to an external text-generation service
and turns its JSON reply into a ParsedPrompt. Any failure is raised as a
BackendError subclass so the caller can fall back to deterministic parsing.

Usage:
    from carfind.core.backends import create_backend
    from carfind.config import AppConfig

    backend = create_backend(AppConfig())
    try:
        parsed = await backend.parse(sanitized, original)
    except BackendError:
        ...  # fall back
    finally:
        await backend.close()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import PromptParserBackend

if TYPE_CHECKING:
    from ...config import AppConfig


# Exceptions
class BackendError(Exception):
    """Base exception for remote parsing errors."""

    pass


class BackendUnavailable(BackendError):
    """The remote call could not complete (network error, timeout, non-2xx)."""

    pass


class MalformedResponse(BackendError):
    """The remote call completed but the reply was not usable JSON."""

    pass


def create_backend(config: "AppConfig") -> PromptParserBackend:
    """Create the remote parsing backend described by the configuration.

    Uses a lazy import so the HTTP stack is only loaded when needed.

    Args:
        config: Application configuration (endpoint, model, timeout)

    Returns:
        Configured PromptParserBackend (client is created on first use)
    """
    from .ollama import OllamaParserBackend

    return OllamaParserBackend(
        model_name=config.ollama_model,
        endpoint=config.ollama_endpoint,
        timeout=config.request_timeout,
    )


__all__ = [
    "BackendError",
    "BackendUnavailable",
    "MalformedResponse",
    "PromptParserBackend",
    "create_backend",
]
