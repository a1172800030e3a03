"""Memory match game engine."""

from match_engine.cards import Card, Character, DECK_SIZE, PAIR_COUNT, InvalidDeckError
from match_engine.state import GameState, GameOutcome, NUM_PLAYERS
from match_engine.executor import (
    MatchEngineError,
    Resolution,
    UnknownCardError,
    activate_card,
    resolve_selection,
)
from match_engine.controller import MatchController

__all__ = [
    "Card",
    "Character",
    "DECK_SIZE",
    "PAIR_COUNT",
    "InvalidDeckError",
    "GameState",
    "GameOutcome",
    "NUM_PLAYERS",
    "MatchEngineError",
    "Resolution",
    "UnknownCardError",
    "activate_card",
    "resolve_selection",
    "MatchController",
]
