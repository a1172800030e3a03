"""Offline provider serving the fixed character list."""

from __future__ import annotations

from typing import TYPE_CHECKING

from content.base import ContentListError, ContentProvider
from content.fallback import FALLBACK_CHARACTERS, placeholder_image_url

if TYPE_CHECKING:
    from match_engine.cards import Character


class PlaceholderProvider(ContentProvider):
    """Provider that needs no network: fallback characters, placeholder images."""

    @property
    def name(self) -> str:
        return "placeholder"

    async def list_characters(self, count: int) -> list[Character]:
        if count > len(FALLBACK_CHARACTERS):
            raise ContentListError(
                f"Only {len(FALLBACK_CHARACTERS)} offline characters, {count} requested"
            )
        return list(FALLBACK_CHARACTERS[:count])

    async def render_image(self, character: Character) -> str:
        return placeholder_image_url(character.name)
