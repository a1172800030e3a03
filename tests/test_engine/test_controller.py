"""Tests for the timer-driven match controller."""

import pytest

from match_engine.controller import MatchController
from match_engine.executor import MATCH_DELAY_SECONDS, MISMATCH_DELAY_SECONDS, UnknownCardError
from match_engine.scheduler import ManualScheduler
from match_engine.state import GameOutcome


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def controller(scheduler):
    return MatchController(scheduler)


@pytest.fixture
def events(controller):
    received = []
    controller.add_listener(received.append)
    return received


class TestStart:
    def test_start_sets_fresh_state(self, controller, two_pair_state):
        state = controller.start(two_pair_state.cards)
        assert controller.state is state
        assert state.scores == (0, 0)
        assert state.current_player == 0

    def test_activate_before_start(self, controller):
        with pytest.raises(RuntimeError):
            controller.activate("card-0-a")

    def test_unknown_card(self, controller, two_pair_state):
        controller.start(two_pair_state.cards)
        with pytest.raises(UnknownCardError):
            controller.activate("missing")


class TestResolutionTimers:
    def test_match_resolves_after_short_delay(self, controller, scheduler, two_pair_state):
        controller.start(two_pair_state.cards)
        controller.activate("card-0-a")
        assert scheduler.next_delay is None
        controller.activate("card-0-b")

        assert controller.state.is_resolving
        assert scheduler.next_delay == pytest.approx(MATCH_DELAY_SECONDS)

        scheduler.advance(MATCH_DELAY_SECONDS - 0.01)
        assert controller.state.is_resolving

        scheduler.advance(0.02)
        assert not controller.state.is_resolving
        assert controller.state.card_by_id("card-0-a").is_matched
        assert controller.state.scores == (1, 0)

    def test_mismatch_waits_longer(self, controller, scheduler, two_pair_state):
        controller.start(two_pair_state.cards)
        controller.activate("card-0-a")
        controller.activate("card-1-a")
        assert scheduler.next_delay == pytest.approx(MISMATCH_DELAY_SECONDS)

        scheduler.advance(MATCH_DELAY_SECONDS)
        assert controller.state.card_by_id("card-0-a").is_flipped

        scheduler.advance(MISMATCH_DELAY_SECONDS)
        assert not controller.state.card_by_id("card-0-a").is_flipped
        assert controller.state.current_player == 1

    def test_activation_ignored_during_delay(self, controller, scheduler, two_pair_state):
        controller.start(two_pair_state.cards)
        controller.activate("card-0-a")
        controller.activate("card-1-a")
        before = controller.state

        assert controller.activate("card-0-b") is before
        assert controller.state == before
        assert len(scheduler.pending) == 1

    def test_custom_delays(self, scheduler, two_pair_state):
        controller = MatchController(scheduler, match_delay=0.1, mismatch_delay=2.0)
        controller.start(two_pair_state.cards)
        controller.activate("card-0-a")
        controller.activate("card-1-a")
        assert scheduler.next_delay == pytest.approx(2.0)


class TestRestart:
    def test_restart_mid_delay_discards_stale_resolution(self, controller, scheduler, two_pair_state):
        controller.start(two_pair_state.cards)
        controller.activate("card-0-a")
        controller.activate("card-1-a")

        fresh = controller.start(two_pair_state.cards)
        controller.activate("card-1-b")

        assert scheduler.run_all() == 0
        assert controller.state.current_player == 0
        assert controller.state.pending == ("card-1-b",)
        assert controller.state.card_by_id("card-1-b").is_flipped
        assert fresh.scores == (0, 0)

    def test_stale_callback_is_noop_even_if_fired(self, controller, scheduler, two_pair_state):
        controller.start(two_pair_state.cards)
        controller.activate("card-0-a")
        controller.activate("card-0-b")
        timer = scheduler.pending[0]

        controller.start(two_pair_state.cards)
        timer.callback()  # Scheduler ignored the cancellation

        assert controller.state.scores == (0, 0)
        assert not any(c.is_flipped for c in controller.state.cards)

    def test_generation_increments(self, controller, two_pair_state):
        controller.start(two_pair_state.cards)
        first = controller.generation
        controller.start(two_pair_state.cards)
        assert controller.generation > first


class TestListeners:
    def test_events_for_match_and_win(self, controller, scheduler, events, two_pair_state):
        controller.start(two_pair_state.cards)
        for card_id in ("card-0-a", "card-0-b"):
            controller.activate(card_id)
        scheduler.run_all()
        for card_id in ("card-1-a", "card-1-b"):
            controller.activate(card_id)
        scheduler.run_all()

        types = [e["type"] for e in events]
        assert types[0] == "session_started"
        assert types.count("card_flipped") == 4
        assert types.count("pair_matched") == 2
        assert types[-1] == "game_won"
        assert events[-1]["winner"] == 0

    def test_no_event_for_ignored_activation(self, controller, events, two_pair_state):
        controller.start(two_pair_state.cards)
        controller.activate("card-0-a")
        count = len(events)
        controller.activate("card-0-a")
        assert len(events) == count

    def test_failing_listener_does_not_block_others(self, controller, two_pair_state):
        received = []

        def broken(event):
            raise ValueError("boom")

        controller.add_listener(broken)
        controller.add_listener(received.append)
        controller.start(two_pair_state.cards)
        assert received[0]["type"] == "session_started"

    def test_remove_listener(self, controller, events, two_pair_state):
        controller.remove_listener(events.append)
        controller.start(two_pair_state.cards)
        assert events == []


class TestEndToEnd:
    def test_two_pair_game(self, controller, scheduler, two_pair_state):
        # Table order [A1, A2, B1, B2], not shuffled
        controller.start(two_pair_state.cards)

        controller.activate("card-0-a")
        assert controller.state.card_by_id("card-0-a").is_flipped
        assert not controller.state.is_resolving

        controller.activate("card-0-b")
        scheduler.run_all()
        state = controller.state
        assert state.card_by_id("card-0-a").is_matched
        assert state.card_by_id("card-0-b").is_matched
        assert state.scores == (1, 0)
        assert state.current_player == 0

        controller.activate("card-1-a")
        controller.activate("card-1-b")
        scheduler.run_all()
        state = controller.state
        assert all(c.is_matched for c in state.cards)
        assert state.scores == (2, 0)
        assert state.is_game_won
        assert state.outcome == GameOutcome.PLAYER_WINS
        assert state.winner == 0
