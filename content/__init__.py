"""Character and image providers for the memory match game.

Supports:
- Gemini (character list and generated images)
- Anthropic (character list only)
- Placeholder (offline fixed list)
"""

from content.base import (
    ContentError,
    ContentListError,
    ContentProvider,
    ImageGenError,
    ProviderConfig,
    SessionInitFatalError,
)
from content.fallback import FALLBACK_CHARACTERS, placeholder_image_url
from content.factory import ProviderFactory
from content.loader import build_deck, fetch_characters, render_images

__all__ = [
    # Base classes
    "ContentProvider",
    "ProviderConfig",
    # Errors
    "ContentError",
    "ContentListError",
    "ImageGenError",
    "SessionInitFatalError",
    # Fallbacks
    "FALLBACK_CHARACTERS",
    "placeholder_image_url",
    # Initializer
    "ProviderFactory",
    "build_deck",
    "fetch_characters",
    "render_images",
]
