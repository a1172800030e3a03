"""Timer-driven controller that owns the live game state."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from match_engine.cards import Card
from match_engine.executor import (
    Resolution,
    activate_card,
    pending_resolution,
    resolve_selection,
)
from match_engine.scheduler import Scheduler, TimerHandle
from match_engine.state import GameState, create_initial_state

logger = logging.getLogger(__name__)


class MatchController:
    """Serializes activations and settles pending selections after a delay.

    Every ``start`` bumps ``generation``. Resolution callbacks carry the
    generation they were scheduled under and do nothing once it is stale,
    so a restart mid-delay cannot touch the new session.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        match_delay: float = Resolution.MATCH.default_delay,
        mismatch_delay: float = Resolution.MISMATCH.default_delay,
    ):
        self._scheduler = scheduler
        self.match_delay = match_delay
        self.mismatch_delay = mismatch_delay
        self._state: GameState | None = None
        self._generation = 0
        self._timer: TimerHandle | None = None
        self._listeners: list[Callable[[dict], None]] = []

    @property
    def state(self) -> GameState | None:
        """Live state, or None before the first deck is dealt."""
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def add_listener(self, callback: Callable[[dict], None]) -> None:
        """Add a state change listener."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[dict], None]) -> None:
        """Remove a state change listener."""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_listeners(self, event: dict) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"State listener failed on {event.get('type')}")

    def start(self, cards: Sequence[Card]) -> GameState:
        """Replace the session with a fresh state for ``cards``."""
        self.discard()
        self._state = create_initial_state(list(cards))
        logger.info(f"Session generation {self._generation} started with {len(cards)} cards")
        self._notify_listeners({"type": "session_started", "generation": self._generation})
        return self._state

    def discard(self) -> None:
        """Drop the current state and invalidate any outstanding resolution."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._generation += 1
        self._state = None

    def delay_for(self, resolution: Resolution) -> float:
        if resolution == Resolution.MATCH:
            return self.match_delay
        return self.mismatch_delay

    def activate(self, card_id: str) -> GameState:
        """Flip a card; schedule resolution once two cards are pending.

        Raises:
            UnknownCardError: If no card has this id.
            RuntimeError: If no session has been started.
        """
        if self._state is None:
            raise RuntimeError("No active session")

        old_state = self._state
        new_state = activate_card(old_state, card_id)
        if new_state is old_state:
            logger.debug(f"Ignored activation of {card_id}")
            return old_state

        self._state = new_state
        self._notify_listeners({"type": "card_flipped", "card_id": card_id})

        resolution = pending_resolution(new_state)
        if resolution is not None:
            generation = self._generation
            delay = self.delay_for(resolution)
            logger.debug(f"{resolution.name} pending, settling in {delay:.2f}s")
            self._timer = self._scheduler.call_later(
                delay, lambda: self._on_resolution_timer(generation)
            )

        return new_state

    def _on_resolution_timer(self, generation: int) -> None:
        if generation != self._generation or self._state is None:
            logger.debug(f"Stale resolution for generation {generation} ignored")
            return

        self._timer = None
        old_state = self._state
        resolution = pending_resolution(old_state)
        if resolution is None:
            return

        pair = [c.pair_id for c in old_state.pending_cards]
        self._state = resolve_selection(old_state)

        if resolution == Resolution.MATCH:
            logger.info(
                f"Player {old_state.current_player} matched {pair[0]} "
                f"(scores {list(self._state.scores)})"
            )
            self._notify_listeners({
                "type": "pair_matched",
                "pair_id": pair[0],
                "player": old_state.current_player,
            })
        else:
            logger.info(
                f"Player {old_state.current_player} missed {pair[0]} / {pair[1]}, "
                f"turn passes to player {self._state.current_player}"
            )
            self._notify_listeners({
                "type": "pair_missed",
                "pair_ids": pair,
                "player": old_state.current_player,
            })

        if self._state.is_game_won:
            logger.info(f"Game won: scores {list(self._state.scores)}, winner={self._state.winner}")
            self._notify_listeners({
                "type": "game_won",
                "winner": self._state.winner,
                "is_draw": self._state.is_draw,
            })
