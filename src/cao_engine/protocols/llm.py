"""Protocol for completion-service providers."""

from __future__ import annotations

from collections.abc import AsyncIterator
from enum import Enum
from typing import Protocol


class GenerationMode(str, Enum):
    """How the completion service should answer.

    STRICT_JSON and GROUNDED are mutually exclusive in the service contract:
    live web retrieval cannot be combined with a JSON response mime type.
    """

    TEXT = "text"
    STRICT_JSON = "strict_json"
    GROUNDED = "grounded"


class LLMProvider(Protocol):
    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        mode: GenerationMode = GenerationMode.TEXT,
    ) -> str: ...

    def generate_stream(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        mode: GenerationMode = GenerationMode.TEXT,
    ) -> AsyncIterator[str]: ...
