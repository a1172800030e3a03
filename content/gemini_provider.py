"""Gemini provider implementation for characters and images."""

from __future__ import annotations

import logging
import os
import time
from typing import TYPE_CHECKING, Any

import httpx

from content.base import (
    ContentListError,
    ContentProvider,
    ImageGenError,
    ProviderConfig,
    build_character_prompt,
    build_image_prompt,
    parse_characters,
)

if TYPE_CHECKING:
    from match_engine.cards import Character

logger = logging.getLogger(__name__)

# Response schema for the character list (Generative Language API schema types)
CHARACTER_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "name": {"type": "STRING", "description": "Name of the character"},
            "source": {"type": "STRING", "description": "Show or Game they are from"},
            "description": {
                "type": "STRING",
                "description": "Visual description for a cute 3D toy style image",
            },
        },
        "required": ["name", "source", "description"],
    },
}


class GeminiProvider(ContentProvider):
    """Content provider for Google's Gemini models over the REST API."""

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
    DEFAULT_MODEL = "gemini-3-flash-preview"
    DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"

    def __init__(self, config: ProviderConfig | None = None, client: httpx.AsyncClient | None = None):
        """Initialize the Gemini provider.

        Args:
            config: Optional provider configuration.
            client: Optional pre-built HTTP client (used by tests).
        """
        self._config = config or ProviderConfig()
        self._client = client

    @property
    def name(self) -> str:
        return "gemini"

    @property
    def model(self) -> str:
        return self._config.model or self.DEFAULT_MODEL

    @property
    def image_model(self) -> str:
        return self._config.image_model or self.DEFAULT_IMAGE_MODEL

    def _api_key(self) -> str | None:
        return (
            self._config.api_key
            or os.environ.get("GEMINI_API_KEY")
            or os.environ.get("API_KEY")
        )

    def _get_client(self) -> httpx.AsyncClient:
        """Lazy-load the HTTP client."""
        if self._client is None:
            api_key = self._api_key()
            if not api_key:
                raise RuntimeError(
                    "GEMINI_API_KEY environment variable not set. "
                    "Set it in your environment or pass it in ProviderConfig."
                )

            self._client = httpx.AsyncClient(
                base_url=self._config.base_url or self.BASE_URL,
                headers={"x-goog-api-key": api_key},
                timeout=self._config.timeout,
            )
        return self._client

    async def _generate(self, model: str, body: dict[str, Any]) -> dict[str, Any]:
        client = self._get_client()
        start_time = time.perf_counter()
        response = await client.post(f"/models/{model}:generateContent", json=body)
        response.raise_for_status()
        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(f"Gemini {model} responded in {latency_ms:.0f}ms")
        return response.json()

    async def list_characters(self, count: int) -> list[Character]:
        """Ask Gemini for a JSON list of characters."""
        body = {
            "contents": [{"parts": [{"text": build_character_prompt(count)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": CHARACTER_SCHEMA,
            },
        }

        try:
            data = await self._generate(self.model, body)
        except (httpx.HTTPError, RuntimeError, ValueError) as e:
            raise ContentListError(f"Character request failed: {e}") from e

        text = "".join(part.get("text", "") for part in _first_candidate_parts(data))
        if not text.strip():
            raise ContentListError("Gemini returned empty text")

        return parse_characters(text)

    async def render_image(self, character: Character) -> str:
        """Generate an image and return it as a data URI."""
        body = {"contents": [{"parts": [{"text": build_image_prompt(character)}]}]}

        try:
            data = await self._generate(self.image_model, body)
        except (httpx.HTTPError, RuntimeError, ValueError) as e:
            raise ImageGenError(f"Image request for {character.name} failed: {e}") from e

        for part in _first_candidate_parts(data):
            inline = part.get("inlineData") or part.get("inline_data")
            if inline and inline.get("data"):
                mime_type = inline.get("mimeType") or inline.get("mime_type") or "image/png"
                return f"data:{mime_type};base64,{inline['data']}"

        raise ImageGenError(f"No image data found for {character.name}")

    def is_available(self) -> bool:
        """Check if a Gemini API key is available."""
        return self._api_key() is not None

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _first_candidate_parts(data: dict[str, Any]) -> list[dict[str, Any]]:
    """Content parts of the first candidate, or an empty list."""
    candidates = data.get("candidates") or []
    if not candidates:
        return []
    content = candidates[0].get("content") or {}
    return content.get("parts") or []
