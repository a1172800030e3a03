"""Game session management for the web API."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Callable

from content.base import SessionInitFatalError
from content.factory import ProviderFactory
from content.loader import build_deck
from core.settings import Settings
from match_engine.controller import MatchController
from match_engine.scheduler import AsyncioScheduler, Scheduler

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from content.base import ContentProvider
    from match_engine.cards import Card


class SessionStatus(str, Enum):
    """Lifecycle of a session's deck."""
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class SessionNotReadyError(RuntimeError):
    """Raised when a card is activated before the deck is dealt."""

    pass


INIT_ERROR_MESSAGE = "Something went wrong while building the cards. Try again."


@dataclass
class GameSession:
    """An active game session."""

    id: str
    provider: ContentProvider
    controller: MatchController
    created_at: datetime
    seed: int | None = None
    status: SessionStatus = SessionStatus.LOADING
    progress_label: str = "Loading..."
    error: str | None = None
    restarts: int = 0

    # Callbacks for WebSocket notifications
    _state_listeners: list[Callable[[dict], None]] = field(default_factory=list)
    _init_task: asyncio.Task | None = None

    def __post_init__(self) -> None:
        self.controller.add_listener(self._on_engine_event)

    @property
    def is_ready(self) -> bool:
        return self.status == SessionStatus.READY and self.controller.state is not None

    def add_listener(self, callback: Callable[[dict], None]) -> None:
        """Add a state change listener."""
        self._state_listeners.append(callback)

    def remove_listener(self, callback: Callable[[dict], None]) -> None:
        """Remove a state change listener."""
        if callback in self._state_listeners:
            self._state_listeners.remove(callback)

    def _notify_listeners(self, event: dict) -> None:
        """Notify all listeners of a state change."""
        for listener in list(self._state_listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Listener failed for session {self.id}")

    def _on_engine_event(self, event: dict) -> None:
        self._notify_listeners({
            "type": "game_state",
            "event": event,
            "state": self.to_client_state(),
        })

    def _set_progress(self, generation: int, label: str) -> None:
        if generation != self.controller.generation:
            return
        self.progress_label = label
        self._notify_listeners({"type": "game_state", "state": self.to_client_state()})

    async def initialize(self) -> None:
        """Build a deck and deal it, replacing whatever state existed.

        Results of a superseded initialization (restart while loading) are
        dropped.
        """
        self.controller.discard()
        generation = self.controller.generation
        self.status = SessionStatus.LOADING
        self.error = None
        self.progress_label = "Loading..."
        self._notify_listeners({"type": "game_state", "state": self.to_client_state()})

        try:
            cards = await build_deck(
                self.provider,
                seed=self.seed,
                on_progress=lambda label: self._set_progress(generation, label),
            )
        except SessionInitFatalError as e:
            self._fail(generation, str(e))
            return
        except Exception as e:
            logger.exception(f"Session {self.id} initialization crashed")
            self._fail(generation, f"{type(e).__name__}: {e}")
            return

        if generation != self.controller.generation:
            logger.info(f"Session {self.id}: discarding superseded deck")
            return

        self._deal(cards)

    def _deal(self, cards: list[Card]) -> None:
        self.status = SessionStatus.READY
        self.controller.start(cards)
        logger.info(f"Session {self.id} ready ({len(cards)} cards, provider={self.provider.name})")

    def _fail(self, generation: int, reason: str) -> None:
        if generation != self.controller.generation:
            return
        logger.error(f"Session {self.id} initialization failed: {reason}")
        self.status = SessionStatus.ERROR
        self.error = INIT_ERROR_MESSAGE
        self._notify_listeners({"type": "game_state", "state": self.to_client_state()})

    def start_initialization(self) -> asyncio.Task:
        """Run ``initialize`` in the background."""
        if self._init_task is not None and not self._init_task.done():
            self._init_task.cancel()
        self._init_task = asyncio.create_task(self.initialize())
        return self._init_task

    async def restart(self, wait: bool = True) -> None:
        """Discard the session state and deal a fresh deck.

        Also the retry action after an initialization error.
        """
        self.restarts += 1
        if self.seed is not None:
            self.seed += 1  # New layout on every restart
        logger.info(f"Session {self.id} restart #{self.restarts}")
        self.start_initialization()
        if wait:
            await self.wait_until_settled()

    async def wait_until_settled(self) -> None:
        """Wait for the latest initialization to finish.

        Follows any restart that supersedes the task being waited on, so an
        overlapping restart never surfaces as a cancelled request.
        """
        while self._init_task is not None and not self._init_task.done():
            await asyncio.wait({self._init_task})

    def activate(self, card_id: str) -> None:
        """Forward a card activation to the engine.

        Raises:
            SessionNotReadyError: If the deck is still loading or failed.
            UnknownCardError: If no card has this id.
        """
        if not self.is_ready:
            raise SessionNotReadyError(f"Session is {self.status.value}")
        self.controller.activate(card_id)

    def to_client_state(self) -> dict:
        """Convert session state to client-friendly format.

        Faces of cards that are not flipped are hidden.
        """
        state = self.controller.state
        base = {
            "game_id": self.id,
            "provider": self.provider.name,
            "status": self.status.value,
            "loading": self.status == SessionStatus.LOADING,
            "error": self.error,
            "progress_label": self.progress_label,
        }

        if state is None or self.status != SessionStatus.READY:
            base.update({
                "cards": [],
                "scores": [0, 0],
                "current_player": 0,
                "is_resolving": False,
                "is_game_won": False,
                "outcome": None,
                "winner": None,
                "is_draw": False,
            })
            return base

        base.update({
            "cards": [_card_to_dict(c) for c in state.cards],
            "scores": list(state.scores),
            "current_player": state.current_player,
            "is_resolving": state.is_resolving,
            "is_game_won": state.is_game_won,
            "outcome": state.outcome.name,
            "winner": state.winner,
            "is_draw": state.is_draw,
            "matched_pairs": state.matched_pairs,
            "remaining_pairs": state.remaining_pairs,
        })
        return base


def _card_to_dict(card: Card) -> dict:
    """Convert a Card to a dictionary."""
    face_up = card.is_flipped or card.is_matched
    return {
        "id": card.id,
        "is_flipped": card.is_flipped,
        "is_matched": card.is_matched,
        "face": (
            {
                "pair_id": card.pair_id,
                "image": card.image,
                "name": card.character.name,
                "source": card.character.source,
            }
            if face_up
            else None
        ),
    }


class GameSessionManager:
    """Manages all active game sessions."""

    def __init__(
        self,
        settings: Settings | None = None,
        scheduler_factory: Callable[[], Scheduler] = AsyncioScheduler,
    ):
        self._settings = settings or Settings()
        self._sessions: dict[str, GameSession] = {}
        self._provider_factory = ProviderFactory()
        self._scheduler_factory = scheduler_factory

    @property
    def settings(self) -> Settings:
        return self._settings

    def configure(self, settings: Settings) -> None:
        """Swap settings for sessions created from now on."""
        self._settings = settings

    def create_session(self, provider_name: str | None = None, seed: int | None = None) -> GameSession:
        """Create a new game session in the loading state.

        Raises:
            ValueError: If the provider name is unknown.
        """
        name = provider_name or self._settings.provider
        provider = self._provider_factory.create(name, self._settings.provider_config(name))

        controller = MatchController(
            self._scheduler_factory(),
            match_delay=self._settings.match_delay,
            mismatch_delay=self._settings.mismatch_delay,
        )
        session = GameSession(
            id=str(uuid.uuid4()),
            provider=provider,
            controller=controller,
            created_at=datetime.now(),
            seed=seed,
        )
        self._sessions[session.id] = session
        logger.info(f"Created session {session.id} with provider {provider.name}")
        return session

    def get_session(self, session_id: str) -> GameSession | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    async def delete_session(self, session_id: str) -> bool:
        """Delete a session, dropping any pending resolution."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.controller.discard()
        if session._init_task is not None and not session._init_task.done():
            session._init_task.cancel()
        await session.provider.aclose()
        return True

    def list_sessions(self) -> list[dict]:
        """List all active sessions."""
        return [
            {
                "id": s.id,
                "created_at": s.created_at.isoformat(),
                "provider": s.provider.name,
                "status": s.status.value,
                "scores": list(s.controller.state.scores) if s.controller.state else [0, 0],
                "is_game_won": bool(s.controller.state and s.controller.state.is_game_won),
            }
            for s in self._sessions.values()
        ]


# Global session manager instance
session_manager = GameSessionManager()
