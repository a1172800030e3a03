"""Card activation and pair resolution for the memory match game."""

from __future__ import annotations

from enum import IntEnum, auto

from match_engine.state import GameState

MATCH_DELAY_SECONDS = 0.5
MISMATCH_DELAY_SECONDS = 1.5  # Long enough to memorize both faces


class MatchEngineError(Exception):
    """Base class for engine errors."""

    pass


class UnknownCardError(MatchEngineError):
    """Raised when an activation names a card that is not on the table."""

    pass


class Resolution(IntEnum):
    """Result of comparing a completed pending selection."""

    MATCH = auto()
    MISMATCH = auto()

    @property
    def default_delay(self) -> float:
        if self == Resolution.MATCH:
            return MATCH_DELAY_SECONDS
        return MISMATCH_DELAY_SECONDS


def activate_card(state: GameState, card_id: str) -> GameState:
    """Flip a card face-up and add it to the pending selection.

    Activations that cannot apply (input locked while resolving, game won,
    card already matched or already face-up) return ``state`` itself.

    Args:
        state: Current game state.
        card_id: Id of the card to flip.

    Returns:
        New game state, or the same object for a no-op.

    Raises:
        UnknownCardError: If no card has this id.
    """
    card = state.card_by_id(card_id)
    if card is None:
        raise UnknownCardError(f"No card with id {card_id!r}")

    if state.is_resolving or state.is_game_won:
        return state
    if card.is_matched or card.is_flipped:
        return state

    cards = tuple(c.flipped() if c.id == card_id else c for c in state.cards)
    return state.with_cards(cards).with_pending(state.pending + (card_id,))


def pending_resolution(state: GameState) -> Resolution | None:
    """Compare the pending selection, if it is complete."""
    if len(state.pending) != 2:
        return None
    first, second = state.pending_cards
    if first.pair_id == second.pair_id:
        return Resolution.MATCH
    return Resolution.MISMATCH


def resolve_selection(state: GameState) -> GameState:
    """Apply the effects of a completed pending selection.

    A match marks the pair matched, scores a point and keeps the turn.
    A miss turns both cards back over and passes the turn.

    Args:
        state: State with two pending cards.

    Returns:
        New state with the selection cleared and input unlocked, or
        ``state`` itself when nothing is pending.
    """
    resolution = pending_resolution(state)
    if resolution is None:
        return state

    match resolution:
        case Resolution.MATCH:
            return _resolve_match(state)
        case Resolution.MISMATCH:
            return _resolve_mismatch(state)


def _resolve_match(state: GameState) -> GameState:
    """Mark the pair matched and score it for the current player."""
    pair_id = state.pending_cards[0].pair_id
    cards = tuple(c.matched() if c.pair_id == pair_id else c for c in state.cards)

    scores = list(state.scores)
    scores[state.current_player] += 1

    # Player keeps the turn on a match
    new_state = state.with_cards(cards).with_scores(tuple(scores)).with_pending(())
    return new_state.with_game_won(new_state.all_matched())


def _resolve_mismatch(state: GameState) -> GameState:
    """Turn both pending cards back over and pass the turn."""
    pending = set(state.pending)
    cards = tuple(c.face_down() if c.id in pending else c for c in state.cards)
    return (
        state.with_cards(cards)
        .with_current_player(state.next_player)
        .with_pending(())
    )
