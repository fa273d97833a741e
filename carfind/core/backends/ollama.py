"""Ollama HTTP backend for carfind prompt parsing.

Sends the parse instructions plus the sanitized query to a running Ollama
instance (/api/generate, JSON format, non-streaming) and converts the JSON
object embedded in the reply into a ParsedPrompt.

Ollama API documentation: https://github.com/ollama/ollama/blob/main/docs/api.md
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ..prompt_search.prompts import build_parse_prompt
from ..prompt_search.types import (
    FILTER_ENTITY_TYPES,
    FILTER_KEYS,
    EntityPosition,
    ExtractedEntity,
    ParsedPrompt,
    ParseSource,
    VehicleSearchFilters,
)
from . import BackendUnavailable, MalformedResponse
from .base import PromptParserBackend

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "http://ollama:11434"
DEFAULT_MODEL = "llama3.2"

# Used when the reply carries no usable confidence field
DEFAULT_REMOTE_CONFIDENCE = 0.85

YEAR_KEYS = ("yearFrom", "yearTo")


def _coerce_confidence(raw: Any) -> float:
    if raw is None or isinstance(raw, bool):
        return DEFAULT_REMOTE_CONFIDENCE
    try:
        return max(0.0, min(1.0, float(raw)))
    except (TypeError, ValueError):
        return DEFAULT_REMOTE_CONFIDENCE


def _coerce_value(key: str, value: Any) -> str | int | None:
    """Normalize one filter value; None means absent.

    Raises:
        MalformedResponse: If the value has the wrong shape
    """
    if value is None:
        return None

    if key in YEAR_KEYS:
        if isinstance(value, bool):
            raise MalformedResponse(f"Invalid year for '{key}': {value!r}")
        try:
            return int(str(value).strip()) if isinstance(value, str) else int(value)
        except (TypeError, ValueError) as e:
            raise MalformedResponse(f"Invalid year for '{key}': {value!r}") from e

    if isinstance(value, (dict, list, bool)):
        raise MalformedResponse(f"Invalid value for '{key}': {value!r}")

    text = str(value).strip()
    return text or None


def parse_model_reply(reply: str, original: str) -> ParsedPrompt:
    """Convert the model's JSON text into a ParsedPrompt.

    The optional ``confidence`` field becomes the overall confidence (0.85 if
    missing) and is removed from the filters. Null, empty and unknown fields
    are dropped. Every remaining field yields one entity with the overall
    confidence and a (0, 0) span, since the model reports no offsets.

    Args:
        reply: JSON text generated by the model
        original: Caller's untouched prompt

    Returns:
        ParsedPrompt with source REMOTE

    Raises:
        MalformedResponse: If the reply is not a JSON object of filters
    """
    try:
        data = json.loads(reply)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedResponse(f"Model reply is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedResponse(f"Model reply is not a JSON object: {type(data).__name__}")

    confidence = _coerce_confidence(data.pop("confidence", None))

    unknown = sorted(set(data) - set(FILTER_KEYS))
    if unknown:
        logger.debug(f"Ignoring unknown fields in model reply: {unknown}")

    values: dict[str, str | int] = {}
    for key in FILTER_KEYS:
        value = _coerce_value(key, data.get(key))
        if value is not None:
            values[key] = value

    entities = [
        ExtractedEntity(
            type=FILTER_ENTITY_TYPES[key],
            value=value,
            confidence=confidence,
            position=EntityPosition(0, 0),
        )
        for key, value in values.items()
    ]

    return ParsedPrompt(
        filters=VehicleSearchFilters.from_mapping(values),
        confidence=confidence,
        extracted_entities=entities,
        original_prompt=original,
        source=ParseSource.REMOTE,
    )


class OllamaParserBackend(PromptParserBackend):
    """HTTP client backend that parses prompts with an Ollama model.

    Example:
        async with OllamaParserBackend("llama3.2", "http://localhost:11434") as backend:
            parsed = await backend.parse("white toyota 2018", "white toyota 2018!")

    Attributes:
        _name: The Ollama model name (e.g., "llama3.2")
        _endpoint: Ollama API base URL
        _timeout: Request timeout in seconds
        _client: httpx.AsyncClient, created on first request
    """

    def __init__(
        self,
        model_name: str = DEFAULT_MODEL,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = 10.0,
    ) -> None:
        """Initialize the Ollama backend.

        Args:
            model_name: Name of the model in Ollama
            endpoint: Ollama API base URL
            timeout: Per-request timeout in seconds. An unresponsive Ollama
                must not hold up the deterministic fallback for long.
        """
        self._name = model_name
        self._endpoint = endpoint.rstrip("/")
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def model_name(self) -> str:
        """Get the Ollama model name."""
        return self._name

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def parse(self, sanitized: str, original: str) -> ParsedPrompt:
        """Parse a sanitized prompt with Ollama.

        Args:
            sanitized: Prompt after sanitization
            original: Caller's untouched prompt

        Returns:
            ParsedPrompt built from the model reply

        Raises:
            BackendUnavailable: On connection errors, timeouts or non-2xx status
            MalformedResponse: If the reply envelope or embedded JSON is unusable
        """
        payload = {
            "model": self._name,
            "prompt": build_parse_prompt(sanitized),
            "stream": False,
            "format": "json",
        }

        try:
            response = await self._get_client().post(
                f"{self._endpoint}/api/generate",
                json=payload,
            )
        except httpx.TimeoutException as e:
            raise BackendUnavailable(f"Timeout waiting for Ollama at {self._endpoint}") from e
        except httpx.HTTPError as e:
            raise BackendUnavailable(f"Cannot reach Ollama at {self._endpoint}: {e}") from e

        if not 200 <= response.status_code < 300:
            error_msg = f"Ollama API error (status {response.status_code})"
            try:
                data = response.json()
                if isinstance(data, dict) and "error" in data:
                    error_msg = f"Ollama error: {data['error']}"
            except ValueError:
                pass
            raise BackendUnavailable(error_msg)

        try:
            envelope = response.json()
        except ValueError as e:
            raise MalformedResponse(f"Ollama returned a non-JSON body: {e}") from e

        reply = envelope.get("response") if isinstance(envelope, dict) else None
        if not isinstance(reply, str):
            raise MalformedResponse("Ollama reply has no 'response' text")

        reply = reply.strip()
        logger.debug(f"Ollama response: {reply}")

        parsed = parse_model_reply(reply, original)
        logger.info(
            f"Ollama parsed {len(parsed.extracted_entities)} entities, "
            f"confidence {parsed.confidence:.2f}"
        )
        return parsed

    async def close(self) -> None:
        """Close the HTTP client.

        This method is idempotent - safe to call multiple times.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @classmethod
    async def is_available(cls, endpoint: str = DEFAULT_ENDPOINT) -> bool:
        """Check if Ollama is running and accessible.

        Makes a GET request to /api/tags. Times out after 2 seconds.

        Args:
            endpoint: Ollama API base URL to check

        Returns:
            True if Ollama responds, False otherwise
        """
        try:
            async with httpx.AsyncClient(timeout=2.0) as client:
                response = await client.get(f"{endpoint.rstrip('/')}/api/tags")
                return response.status_code == 200
        except httpx.HTTPError:
            return False


__all__ = [
    "DEFAULT_ENDPOINT",
    "DEFAULT_MODEL",
    "DEFAULT_REMOTE_CONFIDENCE",
    "OllamaParserBackend",
    "parse_model_reply",
]
