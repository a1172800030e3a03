"""Anthropic provider implementation (character lists only)."""

from __future__ import annotations

import logging
import os
import time
from typing import TYPE_CHECKING

from content.base import (
    ContentListError,
    ContentProvider,
    ImageGenError,
    ProviderConfig,
    build_character_prompt,
    parse_characters,
)

if TYPE_CHECKING:
    from match_engine.cards import Character

logger = logging.getLogger(__name__)


class AnthropicProvider(ContentProvider):
    """Content provider for Anthropic's Claude models.

    Claude produces text only, so every image request fails over to the
    placeholder image.
    """

    AVAILABLE_MODELS = {
        "haiku": "claude-3-5-haiku-latest",
        "sonnet": "claude-sonnet-4-20250514",
    }
    DEFAULT_MODEL = "haiku"

    def __init__(self, config: ProviderConfig | None = None):
        """Initialize the Anthropic provider.

        Args:
            config: Optional provider configuration.
        """
        self._config = config or ProviderConfig()
        self._client = None

    def _get_client(self):
        """Lazy-load the Anthropic client."""
        if self._client is None:
            api_key = self._config.api_key or os.environ.get("ANTHROPIC_API_KEY")
            if not api_key:
                raise RuntimeError(
                    "ANTHROPIC_API_KEY environment variable not set. "
                    "Set it in your environment or pass it in ProviderConfig."
                )

            import anthropic

            self._client = anthropic.AsyncAnthropic(
                api_key=api_key,
                timeout=self._config.timeout,
            )
        return self._client

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def model(self) -> str:
        model = self._config.model or self.DEFAULT_MODEL
        return self.AVAILABLE_MODELS.get(model.lower(), model)

    async def list_characters(self, count: int) -> list[Character]:
        """Ask Claude for a JSON array of characters."""
        import anthropic

        prompt = (
            build_character_prompt(count)
            + "\nReply with only a JSON array of objects with keys "
            '"name", "source" and "description".'
        )

        try:
            client = self._get_client()
            start_time = time.perf_counter()
            response = await client.messages.create(
                model=self.model,
                max_tokens=2048,
                temperature=0.7,
                messages=[{"role": "user", "content": prompt}],
            )
            latency_ms = (time.perf_counter() - start_time) * 1000
            logger.debug(f"Claude {self.model} responded in {latency_ms:.0f}ms")
        except (anthropic.APIError, RuntimeError) as e:
            raise ContentListError(f"Character request failed: {e}") from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            raise ContentListError("Claude returned empty text")

        return parse_characters(text)

    async def render_image(self, character: Character) -> str:
        raise ImageGenError(f"{self.name} cannot render images ({character.name})")

    def is_available(self) -> bool:
        """Check if Anthropic API key is available."""
        api_key = self._config.api_key or os.environ.get("ANTHROPIC_API_KEY")
        return api_key is not None

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
