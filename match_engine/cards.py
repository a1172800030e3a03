"""Character and Card models for the memory match game."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, replace
from typing import Iterable, Sequence

PAIR_COUNT = 10  # 10 pairs = 20 cards
DECK_SIZE = PAIR_COUNT * 2


class InvalidDeckError(ValueError):
    """Raised when a deck does not form exactly one pair per character."""

    pass


@dataclass(frozen=True, slots=True)
class Character:
    """Identity shared by both cards of a pair.

    Attributes:
        name: Unique display label, also used as the pair id
        source: Show or game the character comes from
        description: Visual prompt used only when generating the image
    """

    name: str
    source: str
    description: str

    def __str__(self) -> str:
        return f"{self.name} ({self.source})"


@dataclass(frozen=True, slots=True)
class Card:
    """One physical card on the table.

    Cards are immutable; transitions return new instances.

    Attributes:
        id: Unique per physical card
        pair_id: Matching key, equal to the character's name
        image: Image reference (URL or data URI), fixed for the session
        character: Owning character (shared by both cards in a pair)
        is_flipped: Whether the face is showing
        is_matched: Whether the card has been permanently matched
    """

    id: str
    pair_id: str
    image: str
    character: Character
    is_flipped: bool = False
    is_matched: bool = False

    def flipped(self) -> Card:
        """Return a face-up copy."""
        return replace(self, is_flipped=True)

    def face_down(self) -> Card:
        """Return a face-down copy."""
        return replace(self, is_flipped=False)

    def matched(self) -> Card:
        """Return a matched copy (matched cards always stay face-up)."""
        return replace(self, is_flipped=True, is_matched=True)

    def __str__(self) -> str:
        if self.is_matched:
            return f"[{self.pair_id}*]"
        if self.is_flipped:
            return f"[{self.pair_id}]"
        return "[??]"


def create_deck(pairs: Iterable[tuple[Character, str]]) -> list[Card]:
    """Create two cards per (character, image) pair, in generation order."""
    deck = []
    for index, (character, image) in enumerate(pairs):
        for side in ("a", "b"):
            deck.append(
                Card(
                    id=f"card-{index}-{side}",
                    pair_id=character.name,
                    image=image,
                    character=character,
                )
            )
    return deck


def shuffle_deck(deck: Sequence[Card], seed: int | None = None) -> list[Card]:
    """Return a shuffled copy of the deck."""
    import random

    rng = random.Random(seed)
    shuffled = list(deck)
    rng.shuffle(shuffled)
    return shuffled


def validate_deck(deck: Sequence[Card], pair_count: int = PAIR_COUNT) -> None:
    """Check deck composition.

    Raises:
        InvalidDeckError: If the deck is not exactly ``pair_count`` pairs
            with unique card ids.
    """
    if len(deck) != pair_count * 2:
        raise InvalidDeckError(f"Expected {pair_count * 2} cards, got {len(deck)}")

    ids = [card.id for card in deck]
    if len(set(ids)) != len(ids):
        raise InvalidDeckError("Card ids are not unique")

    pair_sizes = Counter(card.pair_id for card in deck)
    bad_pairs = sorted(pair_id for pair_id, size in pair_sizes.items() if size != 2)
    if bad_pairs:
        raise InvalidDeckError(f"Pairs without exactly two cards: {', '.join(bad_pairs)}")
