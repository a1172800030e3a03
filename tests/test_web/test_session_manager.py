"""Tests for web game sessions."""

import asyncio
import sys

import pytest

from content.base import ContentProvider, ImageGenError
from content.fallback import FALLBACK_CHARACTERS
from core.settings import Settings
from match_engine.executor import UnknownCardError
from match_engine.scheduler import ManualScheduler
from web.api.session_manager import (
    GameSessionManager,
    SessionNotReadyError,
    SessionStatus,
)


class SlowProvider(ContentProvider):
    """Offline provider whose character list waits on an event."""

    def __init__(self):
        self.release = asyncio.Event()
        self.calls = 0

    @property
    def name(self) -> str:
        return "slow"

    async def list_characters(self, count):
        self.calls += 1
        if self.calls == 1:
            await self.release.wait()
        return list(FALLBACK_CHARACTERS)

    async def render_image(self, character):
        raise ImageGenError("offline")


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def manager(scheduler):
    settings = Settings(provider="placeholder", match_delay_ms=500, mismatch_delay_ms=1500)
    return GameSessionManager(settings, scheduler_factory=lambda: scheduler)


def find_pair(session, matching=True):
    """Ids of two face-down cards that do (or do not) match."""
    cards = [c for c in session.controller.state.cards if not c.is_flipped]
    first = cards[0]
    for other in cards[1:]:
        if (other.pair_id == first.pair_id) == matching:
            return first.id, other.id
    raise AssertionError("no such pair")


class TestSessionLifecycle:
    @pytest.mark.asyncio
    async def test_initialize_deals_deck(self, manager):
        session = manager.create_session(seed=1)
        assert session.status == SessionStatus.LOADING
        assert session.to_client_state()["loading"] is True

        await session.initialize()

        assert session.status == SessionStatus.READY
        assert session.is_ready
        state = session.to_client_state()
        assert state["loading"] is False
        assert state["error"] is None
        assert len(state["cards"]) == 20
        assert state["scores"] == [0, 0]
        assert state["progress_label"] == "Ready!"

    @pytest.mark.asyncio
    async def test_activate_before_ready(self, manager):
        session = manager.create_session()
        with pytest.raises(SessionNotReadyError):
            session.activate("card-0-a")

    @pytest.mark.asyncio
    async def test_unknown_card(self, manager):
        session = manager.create_session()
        await session.initialize()
        with pytest.raises(UnknownCardError):
            session.activate("card-99-a")

    @pytest.mark.asyncio
    async def test_fatal_init_shows_error(self, manager, monkeypatch):
        session = manager.create_session()
        monkeypatch.setattr(sys.modules["web.api.session_manager"], "build_deck", _raise_fatal)

        await session.initialize()

        assert session.status == SessionStatus.ERROR
        state = session.to_client_state()
        assert state["error"]
        assert state["cards"] == []
        assert state["loading"] is False

    @pytest.mark.asyncio
    async def test_retry_after_error(self, manager, monkeypatch):
        session = manager.create_session()
        monkeypatch.setattr(sys.modules["web.api.session_manager"], "build_deck", _raise_fatal)
        await session.initialize()
        assert session.status == SessionStatus.ERROR

        monkeypatch.undo()
        await session.restart()
        assert session.status == SessionStatus.READY
        assert session.error is None


class TestSessionPlay:
    @pytest.mark.asyncio
    async def test_faces_hidden_until_flipped(self, manager):
        session = manager.create_session(seed=2)
        await session.initialize()

        first, _ = find_pair(session)
        session.activate(first)
        cards = {c["id"]: c for c in session.to_client_state()["cards"]}

        assert cards[first]["face"]["pair_id"]
        hidden = [c for c in cards.values() if c["id"] != first]
        assert all(c["face"] is None for c in hidden)

    @pytest.mark.asyncio
    async def test_match_and_mismatch(self, manager, scheduler):
        session = manager.create_session(seed=3)
        await session.initialize()

        for card_id in find_pair(session, matching=True):
            session.activate(card_id)
        scheduler.run_all()
        assert session.controller.state.scores == (1, 0)
        assert session.controller.state.current_player == 0

        for card_id in find_pair(session, matching=False):
            session.activate(card_id)
        scheduler.run_all()
        assert session.controller.state.current_player == 1
        assert session.controller.state.scores == (1, 0)

    @pytest.mark.asyncio
    async def test_restart_mid_delay(self, manager, scheduler):
        session = manager.create_session(seed=4)
        await session.initialize()
        for card_id in find_pair(session, matching=False):
            session.activate(card_id)

        await session.restart()
        scheduler.run_all()

        state = session.controller.state
        assert state.current_player == 0
        assert not any(c.is_flipped for c in state.cards)
        assert session.restarts == 1

    @pytest.mark.asyncio
    async def test_full_game_reports_winner(self, manager, scheduler):
        session = manager.create_session(seed=5)
        await session.initialize()

        while not session.controller.state.is_game_won:
            for card_id in find_pair(session, matching=True):
                session.activate(card_id)
            scheduler.run_all()

        state = session.to_client_state()
        assert state["is_game_won"] is True
        assert state["scores"] == [10, 0]
        assert state["winner"] == 0
        assert state["outcome"] == "PLAYER_WINS"

    @pytest.mark.asyncio
    async def test_listeners_receive_snapshots(self, manager, scheduler):
        session = manager.create_session(seed=6)
        events = []
        session.add_listener(events.append)

        await session.initialize()
        first, second = find_pair(session)
        session.activate(first)

        assert all(e["type"] == "game_state" for e in events)
        assert events[0]["state"]["loading"] is True
        assert events[-1]["event"] == {"type": "card_flipped", "card_id": first}


class TestRestartDuringLoading:
    @pytest.mark.asyncio
    async def test_superseded_initialization_discarded(self, manager):
        session = manager.create_session()
        provider = SlowProvider()
        session.provider = provider

        first = session.start_initialization()
        await asyncio.sleep(0)
        await session.restart()
        provider.release.set()
        await asyncio.gather(first, return_exceptions=True)

        assert session.status == SessionStatus.READY
        assert provider.calls == 2
        assert len(session.controller.state.cards) == 20

    @pytest.mark.asyncio
    async def test_overlapping_restarts_both_complete(self, manager):
        session = manager.create_session()
        provider = SlowProvider()
        session.provider = provider

        first = asyncio.create_task(session.restart())
        await asyncio.sleep(0)
        second = asyncio.create_task(session.restart())
        await asyncio.sleep(0)
        provider.release.set()

        results = await asyncio.gather(first, second, return_exceptions=True)

        assert results == [None, None]
        assert session.status == SessionStatus.READY
        assert session.restarts == 2
        assert len(session.controller.state.cards) == 20

    @pytest.mark.asyncio
    async def test_wait_until_settled_follows_restart(self, manager):
        session = manager.create_session()
        provider = SlowProvider()
        session.provider = provider

        session.start_initialization()
        waiter = asyncio.create_task(session.wait_until_settled())
        await asyncio.sleep(0)
        await session.restart(wait=False)
        provider.release.set()

        await waiter
        assert session.is_ready


class TestGameSessionManager:
    @pytest.mark.asyncio
    async def test_create_get_delete(self, manager):
        session = manager.create_session()
        assert manager.get_session(session.id) is session
        assert [s["id"] for s in manager.list_sessions()] == [session.id]

        assert await manager.delete_session(session.id)
        assert manager.get_session(session.id) is None
        assert not await manager.delete_session(session.id)

    def test_unknown_provider(self, manager):
        with pytest.raises(ValueError):
            manager.create_session(provider_name="dalle")


async def _raise_fatal(*args, **kwargs):
    from content.base import SessionInitFatalError

    raise SessionInitFatalError("nothing usable")
