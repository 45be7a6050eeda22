#!/usr/bin/env python3
"""
Terminal play script

Usage:
    python scripts/play.py                     # play, resuming the saved game
    python scripts/play.py --new --seed 42     # start a fresh seeded game
    python scripts/play.py --watch greedy      # watch an agent play
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional
import time

# add the project root to the path
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from core.state import GameSession, LogKind, Rejection, Status
from core.actions import cards_needed
from core.storage import DEFAULT_SAVE_PATH, SaveStore, load_session, save_session
from evaluation import create_agent

logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)

KIND_PREFIX = {
    LogKind.TURN: "==",
    LogKind.INFO: "  ",
    LogKind.GOOD: " +",
    LogKind.BAD: " -",
}

REJECTION_TEXT = {
    Rejection.NOT_PLAYING: "The game is over.",
    Rejection.AVOID_TWICE: "You cannot avoid two rooms in a row.",
    Rejection.NO_CARDS: "There are no cards in the room.",
    Rejection.NEED_N: "Select exactly {need} card(s) to face.",
    Rejection.BAD_INDEX: "Pick distinct positions that hold a card.",
}


def parse_args():
    parser = argparse.ArgumentParser(description="Scoundrel")

    parser.add_argument("--seed", type=int, help="Shuffle seed for a new game")
    parser.add_argument("--new", action="store_true", help="Ignore the saved game")
    parser.add_argument(
        "--save",
        type=str,
        default=str(DEFAULT_SAVE_PATH),
        help="Save file path",
    )
    parser.add_argument("--no-save", action="store_true", help="Do not persist the game")
    parser.add_argument(
        "--watch",
        type=str,
        choices=["random", "greedy"],
        help="Watch an agent play instead of playing",
    )
    parser.add_argument("--delay", type=float, default=0.5, help="Delay between agent moves")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    return parser.parse_args()


def print_state(session: GameSession):
    print("\n" + "=" * 60)
    print(
        f"Turn {session.turn} | Health {session.health}/{session.max_health}"
        f" | Deck {session.deck_count} | Discard {session.discard_count}"
    )
    if session.weapon is not None:
        last = session.weapon_last_defeated
        trophies = " ".join(c.label for c in session.weapon.stack) or "-"
        print(
            f"Weapon: {session.weapon.card.label}"
            f" | last defeated: {last if last is not None else '-'}"
            f" | trophies: {trophies}"
        )
    else:
        print("Weapon: bare hands")
    print("-" * 60)
    for i, card in enumerate(session.room_slots()):
        if card is None:
            print(f"  {i + 1}: --")
        else:
            print(f"  {i + 1}: {card.label:<4} {card.card_type.value}")
    print("=" * 60)


def print_new_log(session: GameSession, start: int) -> int:
    """Print log entries from index start, return the new length"""
    for entry in session.log[start:]:
        print(f"{KIND_PREFIX[entry.kind]} {entry.message}")
    return len(session.log)


def print_summary(session: GameSession):
    print("\n" + "=" * 60)
    score = session.compute_score()
    if session.status == Status.WON:
        print("You Win!")
        print(f"You cleared the dungeon with {session.health} health.")
        last = session.last_defeated_card
        if last is not None:
            print(f"Last enemy defeated: {last.label}")
    else:
        print("Game Over")
        killer = session.killer_card
        print(f"You were defeated by {killer.label}." if killer else "You died.")
    print(f"Score: {score}")
    print("=" * 60)


def parse_selection(text: str) -> Optional[List[int]]:
    """
    "1 3 4" or "1,3,4" -> [0, 2, 3], in the order typed

    Returns:
        Zero-based positions, None when the text is not a selection
    """
    parts = text.replace(",", " ").split()
    try:
        return [int(p) - 1 for p in parts]
    except ValueError:
        return None


def new_session(seed: Optional[int]) -> GameSession:
    session = GameSession.new(seed=seed)
    session.log_msg("New game started.", LogKind.INFO)
    session.start_turn()
    return session


def play_game(args, store: Optional[SaveStore]):
    session = None
    if store is not None and not args.new:
        session = load_session(store)
        if session is not None:
            logger.info("Resumed saved game.")
    if session is None:
        session = new_session(args.seed)
        if store is not None:
            save_session(store, session)

    shown = print_new_log(session, max(0, len(session.log) - 5))

    while True:
        if session.is_finished:
            print_summary(session)
            choice = input("\n[n] new game, [q] quit: ").strip().lower()
            if choice == "n":
                session = new_session(None)
                shown = print_new_log(session, 0)
                if store is not None:
                    save_session(store, session)
                continue
            return

        print_state(session)
        need = cards_needed(len(session.room))
        prompt = (
            f"\nFace: type {need} position(s) in resolution order"
            f" | [a] avoid | [n] new game | [q] quit: "
        )
        choice = input(prompt).strip().lower()

        if choice == "q":
            print("Goodbye.")
            return
        if choice == "n":
            session = new_session(None)
            shown = print_new_log(session, 0)
            if store is not None:
                save_session(store, session)
            continue

        if choice == "a":
            result = session.avoid_room()
        else:
            selection = parse_selection(choice)
            if selection is None:
                print("Unknown command.")
                continue
            result = session.face_room(selection)

        if not result.ok:
            print(REJECTION_TEXT[result.reason].format(need=need))
            continue

        session.start_turn()
        if store is not None:
            save_session(store, session)
        shown = print_new_log(session, shown)


def watch_game(args):
    agent = create_agent(args.watch, seed=args.seed)
    session = new_session(args.seed)
    shown = 0

    while not session.is_finished:
        print_state(session)
        action = agent.act({}, session.get_legal_actions(), session)
        if action.is_avoid:
            print(f"\n{agent.name} avoids the room")
        else:
            picks = " ".join(str(i + 1) for i in action.indices)
            print(f"\n{agent.name} faces: {picks}")
        session.apply_action(action)
        session.start_turn()
        shown = print_new_log(session, shown)
        time.sleep(args.delay)

    print_summary(session)


def main():
    args = parse_args()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    print("=" * 60)
    print("Scoundrel")
    print("=" * 60)

    store = None if args.no_save else SaveStore(args.save)

    try:
        if args.watch:
            watch_game(args)
        else:
            play_game(args, store)
    except (KeyboardInterrupt, EOFError):
        print("\nGoodbye.")


if __name__ == "__main__":
    main()
