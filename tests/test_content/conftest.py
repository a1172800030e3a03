import pytest

from content.base import ContentListError, ContentProvider, ImageGenError
from match_engine.cards import Character


class FakeProvider(ContentProvider):
    """Scriptable provider for initializer tests."""

    def __init__(self, characters=None, list_error=None, failing_images=(), image_delays=None):
        self.characters = characters
        self.list_error = list_error
        self.failing_images = set(failing_images)
        self.image_delays = image_delays or {}
        self.image_requests = []

    @property
    def name(self) -> str:
        return "fake"

    async def list_characters(self, count):
        if self.list_error is not None:
            raise self.list_error
        return list(self.characters)

    async def render_image(self, character):
        import asyncio

        self.image_requests.append(character.name)
        delay = self.image_delays.get(character.name)
        if delay:
            await asyncio.sleep(delay)
        if character.name in self.failing_images:
            raise ImageGenError(f"no image for {character.name}")
        return f"img://{character.name}"


@pytest.fixture
def generated_characters():
    return [Character(f"Hero {i}", "Show", f"Hero {i} in 3D") for i in range(10)]


@pytest.fixture
def fake_provider(generated_characters):
    return FakeProvider(characters=generated_characters)


@pytest.fixture
def broken_list_provider():
    return FakeProvider(list_error=ContentListError("service down"))
