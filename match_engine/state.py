"""Immutable game state for a memory match session."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from match_engine.cards import Card

NUM_PLAYERS = 2


class GameOutcome(IntEnum):
    """How the session stands."""

    IN_PROGRESS = auto()  # At least one unmatched card
    PLAYER_WINS = auto()  # All matched, one player has more pairs
    DRAW = auto()  # All matched, scores equal


@dataclass(frozen=True, slots=True)
class GameState:
    """Complete immutable session state.

    Attributes:
        cards: Cards in table order
        scores: Pairs found per player
        current_player: Index of the player whose turn it is
        pending: Ids of face-up, unmatched cards awaiting resolution (0-2)
        is_resolving: Whether two cards are pending and input is locked
        is_game_won: Whether every card is matched
    """

    cards: tuple[Card, ...]
    scores: tuple[int, ...] = (0,) * NUM_PLAYERS
    current_player: int = 0
    pending: tuple[str, ...] = ()
    is_resolving: bool = False
    is_game_won: bool = False

    @property
    def next_player(self) -> int:
        """The player who moves after a miss."""
        return (self.current_player + 1) % NUM_PLAYERS

    @property
    def pending_cards(self) -> tuple[Card, ...]:
        """Cards in the pending selection, in activation order."""
        return tuple(self.card_by_id(card_id) for card_id in self.pending)

    @property
    def face_up_unmatched(self) -> tuple[Card, ...]:
        """Cards currently showing their face but not yet matched."""
        return tuple(c for c in self.cards if c.is_flipped and not c.is_matched)

    @property
    def matched_pairs(self) -> int:
        """Number of pairs resolved so far."""
        return sum(1 for c in self.cards if c.is_matched) // 2

    @property
    def remaining_pairs(self) -> int:
        return len(self.cards) // 2 - self.matched_pairs

    @property
    def outcome(self) -> GameOutcome:
        if not self.is_game_won:
            return GameOutcome.IN_PROGRESS
        if len(set(self.scores)) == 1:
            return GameOutcome.DRAW
        return GameOutcome.PLAYER_WINS

    @property
    def winner(self) -> int | None:
        """Index of the higher-scoring player, or None while playing or on a draw."""
        if self.outcome != GameOutcome.PLAYER_WINS:
            return None
        return max(range(NUM_PLAYERS), key=lambda p: self.scores[p])

    @property
    def is_draw(self) -> bool:
        return self.outcome == GameOutcome.DRAW

    def card_by_id(self, card_id: str) -> Card | None:
        """Find a card by id."""
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def all_matched(self) -> bool:
        """Whether every card on the table is matched."""
        return bool(self.cards) and all(c.is_matched for c in self.cards)

    def with_cards(self, cards: tuple[Card, ...]) -> GameState:
        """Return new state with updated cards."""
        return GameState(
            cards=cards,
            scores=self.scores,
            current_player=self.current_player,
            pending=self.pending,
            is_resolving=self.is_resolving,
            is_game_won=self.is_game_won,
        )

    def with_scores(self, scores: tuple[int, ...]) -> GameState:
        """Return new state with updated scores."""
        return GameState(
            cards=self.cards,
            scores=scores,
            current_player=self.current_player,
            pending=self.pending,
            is_resolving=self.is_resolving,
            is_game_won=self.is_game_won,
        )

    def with_current_player(self, current_player: int) -> GameState:
        """Return new state with updated current player."""
        return GameState(
            cards=self.cards,
            scores=self.scores,
            current_player=current_player,
            pending=self.pending,
            is_resolving=self.is_resolving,
            is_game_won=self.is_game_won,
        )

    def with_pending(self, pending: tuple[str, ...]) -> GameState:
        """Return new state with updated pending selection.

        The resolving lock follows the selection: two pending cards lock input.
        """
        return GameState(
            cards=self.cards,
            scores=self.scores,
            current_player=self.current_player,
            pending=pending,
            is_resolving=len(pending) == 2,
            is_game_won=self.is_game_won,
        )

    def with_game_won(self, is_game_won: bool) -> GameState:
        """Return new state with updated win flag."""
        return GameState(
            cards=self.cards,
            scores=self.scores,
            current_player=self.current_player,
            pending=self.pending,
            is_resolving=self.is_resolving,
            is_game_won=is_game_won,
        )


def create_initial_state(cards: list[Card] | tuple[Card, ...]) -> GameState:
    """Create the opening state for an already-shuffled deck.

    Args:
        cards: Cards in table order.

    Returns:
        State with zero scores and player 0 to move.
    """
    return GameState(
        cards=tuple(cards),
        scores=(0,) * NUM_PLAYERS,
        current_player=0,
    )
