"""Session initializer: characters, images, and a shuffled deck."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from content.base import ContentError, ContentListError, ContentProvider, SessionInitFatalError
from content.fallback import FALLBACK_CHARACTERS, placeholder_image_url
from match_engine.cards import (
    PAIR_COUNT,
    Card,
    Character,
    InvalidDeckError,
    create_deck,
    shuffle_deck,
    validate_deck,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


def _check_characters(characters: list[Character], count: int) -> None:
    if len(characters) != count:
        raise ContentListError(f"Expected {count} characters, got {len(characters)}")
    names = {c.name for c in characters}
    if len(names) != count:
        raise ContentListError("Character names are not distinct")


async def fetch_characters(
    provider: ContentProvider,
    count: int = PAIR_COUNT,
    fallback: tuple[Character, ...] = FALLBACK_CHARACTERS,
) -> list[Character]:
    """Get ``count`` distinct characters, falling back to the fixed list.

    Never raises for provider failures: any error or unusable reply is
    logged and replaced by ``fallback``.
    """
    try:
        characters = await provider.list_characters(count)
        _check_characters(characters, count)
        return characters
    except ContentError as e:
        logger.warning(f"Error fetching characters from {provider.name}, using fallback: {e}")
    except Exception:
        logger.exception(f"Unexpected failure in {provider.name}.list_characters, using fallback")
    return list(fallback)


async def render_image_or_placeholder(provider: ContentProvider, character: Character) -> str:
    """Render one image; a failure becomes the character's placeholder."""
    try:
        return await provider.render_image(character)
    except ContentError as e:
        logger.warning(f"Failed to generate image for {character.name}: {e}")
    except Exception:
        logger.exception(f"Unexpected failure generating image for {character.name}")
    return placeholder_image_url(character.name)


async def render_images(provider: ContentProvider, characters: list[Character]) -> list[str]:
    """Render all images concurrently.

    Each task resolves its own failure, so the join never fails. Results
    are in the same order as ``characters``.
    """
    return list(
        await asyncio.gather(
            *(render_image_or_placeholder(provider, c) for c in characters)
        )
    )


async def build_deck(
    provider: ContentProvider,
    *,
    seed: int | None = None,
    pair_count: int = PAIR_COUNT,
    fallback: tuple[Character, ...] = FALLBACK_CHARACTERS,
    on_progress: ProgressCallback | None = None,
) -> list[Card]:
    """Build a fresh shuffled deck of ``pair_count`` pairs.

    Args:
        provider: Source of characters and images.
        seed: Shuffle seed, for reproducible decks.
        pair_count: Number of pairs to deal.
        fallback: Characters used when the provider's list is unusable.
        on_progress: Called with a human-readable label at each step.

    Returns:
        Shuffled cards, all face-down.

    Raises:
        SessionInitFatalError: If no usable deck can be produced.
    """
    def progress(label: str) -> None:
        logger.info(label)
        if on_progress is not None:
            on_progress(label)

    progress("Choosing characters...")
    characters = await fetch_characters(provider, pair_count, fallback)

    try:
        _check_characters(characters, pair_count)
    except ContentListError as e:
        raise SessionInitFatalError(f"Fallback characters unusable: {e}") from e

    progress("Creating cards...")
    images = await render_images(provider, characters)

    deck = create_deck(zip(characters, images))
    try:
        validate_deck(deck, pair_count)
    except InvalidDeckError as e:
        raise SessionInitFatalError(str(e)) from e

    progress("Ready!")
    return shuffle_deck(deck, seed)
