"""Command-line interface for the memory match game."""

from __future__ import annotations

import argparse
import asyncio
import logging
import time
from typing import TYPE_CHECKING

from match_engine.controller import MatchController
from match_engine.scheduler import ManualScheduler
from match_engine.state import NUM_PLAYERS

if TYPE_CHECKING:
    from match_engine.cards import Card
    from match_engine.state import GameState

COLUMNS = 5


def format_state(state: GameState) -> str:
    """Format the table, scores and turn for display."""
    lines = []

    lines.append("=" * 60)
    score_line = "  ".join(
        f"{'→ ' if i == state.current_player else '  '}Player {i + 1}: {state.scores[i]}"
        for i in range(NUM_PLAYERS)
    )
    lines.append(score_line)
    lines.append("=" * 60)

    for row_start in range(0, len(state.cards), COLUMNS):
        row = state.cards[row_start:row_start + COLUMNS]
        cells = []
        for offset, card in enumerate(row):
            label = card.pair_id if card.is_flipped else "??"
            if card.is_matched:
                label += " *"
            cells.append(f"{row_start + offset + 1:>2}. {label:<20}")
        lines.append("".join(cells).rstrip())

    lines.append(f"\nPairs left: {state.remaining_pairs}")

    if state.is_game_won:
        lines.append("\n" + "=" * 60)
        if state.is_draw:
            lines.append("GAME OVER - It's a draw!")
        else:
            lines.append(f"GAME OVER - Player {state.winner + 1} wins!")
        lines.append("=" * 60)

    return "\n".join(lines)


def format_deck(cards: list[Card]) -> str:
    """List every card with its pair and image reference."""
    lines = []
    for i, card in enumerate(cards):
        image = card.image if len(card.image) <= 70 else card.image[:67] + "..."
        lines.append(f"{i + 1:>2}. {card.id:<10} {card.pair_id:<20} {image}")
    return "\n".join(lines)


def deal(provider_name: str, seed: int | None = None) -> list[Card]:
    """Build a deck with the named provider."""
    from content.factory import ProviderFactory
    from content.loader import build_deck
    from core.settings import Settings

    settings = Settings()
    provider = ProviderFactory().create(provider_name, settings.provider_config(provider_name))

    async def _build() -> list[Card]:
        try:
            return await build_deck(provider, seed=seed)
        finally:
            await provider.aclose()

    return asyncio.run(_build())


def play_interactive(provider_name: str, seed: int | None = None) -> None:
    """Play a two-player hot-seat game in the terminal."""
    from core.settings import Settings

    settings = Settings()
    scheduler = ManualScheduler()
    controller = MatchController(
        scheduler,
        match_delay=settings.match_delay,
        mismatch_delay=settings.mismatch_delay,
    )

    print("\nDealing cards...")
    controller.start(deal(provider_name, seed))

    print("\nWelcome to Memory Match!")
    print("Take turns flipping two cards. Find a pair to score and go again.")
    print("Type 'q' to quit.\n")

    while not controller.state.is_game_won:
        state = controller.state
        print(format_state(state))

        try:
            choice = input(f"\nPlayer {state.current_player + 1}, flip a card: ").strip()
        except EOFError:
            print("\nGoodbye!")
            return

        if choice.lower() == "q":
            print("Goodbye!")
            return

        try:
            index = int(choice) - 1
        except ValueError:
            print("Please enter a valid number or 'q' to quit")
            continue
        if not 0 <= index < len(state.cards):
            print(f"Please enter a number 1-{len(state.cards)}")
            continue

        card = state.cards[index]
        new_state = controller.activate(card.id)
        if new_state is state:
            print("That card is already face-up.")
            continue

        delay = scheduler.next_delay
        if delay is not None:
            # Both faces stay visible until the resolution settles
            print(format_state(controller.state))
            time.sleep(delay)
            scheduler.advance(delay)
        print()

    print(format_state(controller.state))


def main() -> None:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Two-player memory match game")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a hot-seat game")
    play_parser.add_argument("--provider", default="placeholder", help="Content provider")
    play_parser.add_argument("--seed", type=int, help="Shuffle seed")

    # Deck command
    deck_parser = subparsers.add_parser("deck", help="Print a generated deck")
    deck_parser.add_argument("--provider", default="placeholder", help="Content provider")
    deck_parser.add_argument("--seed", type=int, help="Shuffle seed")

    parser.add_argument("-v", "--verbose", action="store_true", help="Show log output")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.command == "play":
        play_interactive(args.provider, seed=args.seed)
    elif args.command == "deck":
        print(format_deck(deal(args.provider, seed=args.seed)))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
