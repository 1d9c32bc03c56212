"""Google Gemini completion provider using the google-genai SDK."""

from __future__ import annotations

from collections.abc import AsyncIterator

from google import genai
from google.genai import types

from cao_engine.exceptions import ConfigurationError, GenerationError
from cao_engine.observability.logger import get_logger
from cao_engine.protocols.llm import GenerationMode

logger = get_logger("gemini")


class GeminiProvider:
    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        grounded_model: str = "gemini-2.5-flash",
        temperature: float = 0.7,
        max_tokens: int = 4096,
    ) -> None:
        if not api_key:
            raise ConfigurationError("Gemini provider requires CAO_GOOGLE_API_KEY")
        self._client = genai.Client(api_key=api_key)
        self._model = model
        self._grounded_model = grounded_model
        self._temperature = temperature
        self._max_tokens = max_tokens

    def _config(
        self,
        system: str | None,
        temperature: float | None,
        max_tokens: int | None,
        mode: GenerationMode,
    ) -> tuple[str, types.GenerateContentConfig]:
        config = types.GenerateContentConfig(
            temperature=self._temperature if temperature is None else temperature,
            max_output_tokens=max_tokens or self._max_tokens,
        )
        if system:
            config.system_instruction = system

        model = self._model
        if mode is GenerationMode.STRICT_JSON:
            config.response_mime_type = "application/json"
        elif mode is GenerationMode.GROUNDED:
            config.tools = [types.Tool(google_search=types.GoogleSearch())]
            model = self._grounded_model
        return model, config

    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        mode: GenerationMode = GenerationMode.TEXT,
    ) -> str:
        model, config = self._config(system, temperature, max_tokens, mode)
        try:
            response = await self._client.aio.models.generate_content(
                model=model,
                contents=prompt,
                config=config,
            )
            return response.text or ""
        except Exception as e:
            raise GenerationError(f"Gemini generation failed: {e}") from e

    async def generate_stream(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        mode: GenerationMode = GenerationMode.TEXT,
    ) -> AsyncIterator[str]:
        model, config = self._config(system, temperature, None, mode)
        try:
            stream = await self._client.aio.models.generate_content_stream(
                model=model,
                contents=prompt,
                config=config,
            )
            async for chunk in stream:
                if chunk.text:
                    yield chunk.text
        except Exception as e:
            raise GenerationError(f"Gemini streaming failed: {e}") from e
