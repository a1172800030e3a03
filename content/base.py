"""Base classes for content provider abstraction."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

if TYPE_CHECKING:
    from match_engine.cards import Character


class ContentError(Exception):
    """Base class for content generation errors."""

    pass


class ContentListError(ContentError):
    """Character list could not be retrieved or was unusable."""

    pass


class ImageGenError(ContentError):
    """Image for a single character could not be generated."""

    pass


class SessionInitFatalError(ContentError):
    """Even the fallback path could not produce a playable deck."""

    pass


CHARACTER_PROMPT = """List exactly {count} iconic children's characters.
MUST INCLUDE: Captain Underpants, Little Bheem, Sonic, Super Mario, Luigi, JJ (Cocomelon).
Add other very popular kids characters to reach {count}.
For each give its name, the show or game it is from, and a visual description for a cute 3D toy style image.
Return JSON."""

IMAGE_PROMPT = (
    "A cute, high-quality, glossy 3D toy-style render of {name} from {source}. "
    "{description}. Bright vibrant colors, soft lighting, solid simple pastel "
    "background. Pixar style."
)


def build_character_prompt(count: int) -> str:
    return CHARACTER_PROMPT.format(count=count)


def build_image_prompt(character: Character) -> str:
    return IMAGE_PROMPT.format(
        name=character.name,
        source=character.source,
        description=character.description.rstrip("."),
    )


class ContentProvider(ABC):
    """Abstract base class for character and image providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (e.g., 'gemini', 'placeholder')."""
        ...

    @abstractmethod
    async def list_characters(self, count: int) -> list[Character]:
        """Produce ``count`` character records.

        Raises:
            ContentListError: If the list cannot be produced.
        """
        ...

    @abstractmethod
    async def render_image(self, character: Character) -> str:
        """Produce an image reference (URL or data URI) for a character.

        Raises:
            ImageGenError: If no image can be produced.
        """
        ...

    def is_available(self) -> bool:
        """Check if the provider is available (has API key, etc.)."""
        return True

    async def aclose(self) -> None:
        """Release network resources, if any."""
        return None


@dataclass
class ProviderConfig:
    """Configuration for a content provider."""
    api_key: str | None = None
    base_url: str | None = None
    timeout: float = 60.0
    model: str | None = None
    image_model: str | None = None


class CharacterRecord(BaseModel):
    """Wire shape of one generated character."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, description="Name of the character")
    source: str = Field(..., description="Show or game they are from")
    description: str = Field(..., description="Visual description for a cute 3D toy style image")

    def to_character(self) -> Character:
        from match_engine.cards import Character

        return Character(
            name=self.name,
            source=self.source,
            description=self.description,
        )


_character_list = TypeAdapter(list[CharacterRecord])


def parse_characters(text: str) -> list[Character]:
    """Parse a JSON array of character records.

    Tolerates a Markdown code fence around the array.

    Raises:
        ContentListError: If the text is not a valid character array.
    """
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
    try:
        records = _character_list.validate_json(cleaned.strip())
    except ValidationError as e:
        raise ContentListError(f"Malformed character list: {e.error_count()} error(s)") from e
    return [record.to_character() for record in records]
