import pytest

from match_engine.cards import Character, create_deck
from match_engine.state import create_initial_state


def make_pairs_deck(names: str):
    """Unshuffled deck with cards A1, A2, B1, B2, ... for each letter."""
    characters = [Character(name, "Test", f"{name} card") for name in names]
    return create_deck((c, f"img://{c.name}") for c in characters)


@pytest.fixture
def two_pair_state():
    """State with table order [A1, A2, B1, B2], player 0 to move."""
    return create_initial_state(make_pairs_deck("AB"))


@pytest.fixture
def full_state():
    """State with ten unshuffled pairs."""
    return create_initial_state(make_pairs_deck("ABCDEFGHIJ"))
