"""Fixed character list and placeholder images used when generation fails."""

from __future__ import annotations

from urllib.parse import quote

from match_engine.cards import Character

PLACEHOLDER_URL = "https://via.placeholder.com/400x400/FFB6C1/000000?text={text}"

FALLBACK_CHARACTERS: tuple[Character, ...] = (
    Character(
        "Captain Underpants",
        "Captain Underpants",
        "3D render of Captain Underpants, bald, wearing white underwear and red cape, smiling widely",
    ),
    Character(
        "Little Bheem",
        "Mighty Little Bheem",
        "Cute 3D baby warrior Little Bheem, wearing an orange dhoti, eating a laddu",
    ),
    Character(
        "Sonic",
        "Sonic the Hedgehog",
        "Cute 3D Sonic the Hedgehog, blue fur, red shoes, giving a thumbs up",
    ),
    Character(
        "Super Mario",
        "Super Mario Bros",
        "Cute 3D Super Mario, red cap, blue overalls, mustache, jumping",
    ),
    Character(
        "Luigi",
        "Super Mario Bros",
        "Cute 3D Luigi, green cap, blue overalls, taller and nervous smile",
    ),
    Character(
        "JJ",
        "Cocomelon",
        "Cute 3D baby JJ from Cocomelon, blonde curl, pajamas, smiling",
    ),
    Character(
        "Pikachu",
        "Pokemon",
        "Cute 3D Pikachu, yellow fur, red cheeks, lightning tail, happy",
    ),
    Character(
        "SpongeBob",
        "SpongeBob SquarePants",
        "Cute 3D SpongeBob, yellow sponge, square pants, big blue eyes, laughing",
    ),
    Character(
        "Elsa",
        "Frozen",
        "Cute 3D Queen Elsa, blue ice dress, platinum blonde braid, magical snowflake",
    ),
    Character(
        "Chase",
        "Paw Patrol",
        "Cute 3D Chase the police dog German Shepherd, blue police uniform and hat",
    ),
)


def placeholder_image_url(name: str) -> str:
    """Deterministic image URL that renders the character's name."""
    return PLACEHOLDER_URL.format(text=quote(name, safe=""))
