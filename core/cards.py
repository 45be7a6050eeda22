"""
Card definitions and encoding

Scoundrel plays with 44 cards:
- clubs and spades 2-10, J, Q, K, A are monsters (26 cards)
- diamonds 2-10 are weapons (9 cards)
- hearts 2-10 are potions (9 cards)
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple
import random
import time

import numpy as np


class Suit(Enum):
    """Suits"""
    CLUBS = "clubs"
    SPADES = "spades"
    DIAMONDS = "diamonds"
    HEARTS = "hearts"

    @property
    def symbol(self) -> str:
        return SUIT_TO_SYMBOL[self]

    @property
    def is_red(self) -> bool:
        return self in (Suit.DIAMONDS, Suit.HEARTS)


class CardType(Enum):
    """What a card does when it is resolved"""
    MONSTER = "monster"
    WEAPON = "weapon"
    POTION = "potion"


SUIT_TO_SYMBOL: Dict[Suit, str] = {
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
    Suit.DIAMONDS: "♦",
    Suit.HEARTS: "♥",
}

SYMBOL_TO_SUIT: Dict[str, Suit] = {v: k for k, v in SUIT_TO_SYMBOL.items()}

SUIT_TO_TYPE: Dict[Suit, CardType] = {
    Suit.CLUBS: CardType.MONSTER,
    Suit.SPADES: CardType.MONSTER,
    Suit.DIAMONDS: CardType.WEAPON,
    Suit.HEARTS: CardType.POTION,
}

# Deck construction order
SUITS: Tuple[Suit, ...] = (Suit.CLUBS, Suit.SPADES, Suit.DIAMONDS, Suit.HEARTS)

RANKS: Tuple[str, ...] = (
    "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A",
)

FACE_VALUES: Dict[str, int] = {"J": 11, "Q": 12, "K": 13, "A": 14}

# Removed from the red suits
EXCLUDED_RED_RANKS: Tuple[str, ...] = ("J", "Q", "K", "A")

DECK_SIZE = 44


def rank_to_value(rank) -> int:
    """
    Numeric value of a rank

    Args:
        rank: "2".."10", "J", "Q", "K", "A" (ints are accepted for number ranks)

    Returns:
        2-14, or 0 for an unknown rank
    """
    if isinstance(rank, int):
        return rank
    if rank in FACE_VALUES:
        return FACE_VALUES[rank]
    try:
        return int(rank)
    except (TypeError, ValueError):
        return 0


def parse_suit(raw: str) -> Suit:
    """Suit from its name ("hearts") or symbol ("♥")"""
    if raw in SYMBOL_TO_SUIT:
        return SYMBOL_TO_SUIT[raw]
    return Suit(raw)


@dataclass(frozen=True)
class Card:
    """
    A single card

    Frozen so it can be shared between piles and recorded as the killer
    without aliasing.

    Attributes:
        suit: card suit
        rank: "2".."10", "J", "Q", "K", "A"
        value: numeric rank, face cards 11-14
        id: unique identifier
    """
    suit: Suit
    rank: str
    value: int
    id: str

    @property
    def card_type(self) -> CardType:
        return SUIT_TO_TYPE[self.suit]

    @property
    def is_monster(self) -> bool:
        return self.card_type == CardType.MONSTER

    @property
    def is_weapon(self) -> bool:
        return self.card_type == CardType.WEAPON

    @property
    def is_potion(self) -> bool:
        return self.card_type == CardType.POTION

    @property
    def label(self) -> str:
        """Short display form, e.g. "♠Q" """
        return f"{self.suit.symbol}{self.rank}"

    @classmethod
    def make(cls, suit: Suit, rank, card_id: Optional[str] = None) -> 'Card':
        """Build a card, deriving the value from the rank"""
        rank = str(rank)
        if card_id is None:
            card_id = f"{suit.value}-{rank}"
        return cls(suit=suit, rank=rank, value=rank_to_value(rank), id=card_id)

    def __str__(self) -> str:
        return self.label


def is_excluded(suit: Suit, rank: str) -> bool:
    """Red face cards and red aces are not part of the deck"""
    return suit.is_red and rank in EXCLUDED_RED_RANKS


def build_deck() -> List[Card]:
    """
    Build the unshuffled 44-card deck

    Suit-major, rank-minor. Ids count over the full 52-card cross product,
    so they stay stable regardless of the filter.

    Returns:
        List of 44 cards
    """
    deck = []
    uid = 0
    for suit in SUITS:
        for rank in RANKS:
            if not is_excluded(suit, rank):
                deck.append(Card.make(suit, rank, f"{suit.value}-{rank}-{uid}"))
            uid += 1
    return deck


def make_rng(seed: Optional[int] = None) -> random.Random:
    """
    Seedable random source for shuffling

    Args:
        seed: random seed, wall-clock milliseconds when omitted

    Returns:
        random.Random instance
    """
    if seed is None:
        seed = int(time.time() * 1000)
    return random.Random(seed)


def shuffle(cards: List[Card], rng: random.Random) -> List[Card]:
    """
    Fisher-Yates shuffle, in place

    Args:
        cards: list to shuffle
        rng: injected random source

    Returns:
        The same list
    """
    for i in range(len(cards) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        cards[i], cards[j] = cards[j], cards[i]
    return cards


# Deck position of every card, used for one-hot encoding
CARD_TO_INDEX: Dict[Tuple[Suit, str], int] = {
    (card.suit, card.rank): i for i, card in enumerate(build_deck())
}


def cards_to_array(cards: Sequence[Card]) -> np.ndarray:
    """
    Encode a set of cards as a 44-dim one-hot vector

    Positions follow build_deck() order. Restored cards that are not part of
    the standard deck are ignored.

    Args:
        cards: cards to encode

    Returns:
        (44,) float32 numpy array
    """
    arr = np.zeros(DECK_SIZE, dtype=np.float32)
    for card in cards:
        idx = CARD_TO_INDEX.get((card.suit, card.rank))
        if idx is not None:
            arr[idx] = 1
    return arr


def array_to_cards(array: np.ndarray) -> List[Card]:
    """
    Decode a 44-dim vector back into cards (in deck order)

    Args:
        array: (44,) numpy array

    Returns:
        Card list
    """
    deck = build_deck()
    return [deck[i] for i in np.flatnonzero(array[:DECK_SIZE] > 0)]


def cards_to_str(cards: Sequence[Card]) -> str:
    """Readable form, e.g. "♣2 ♦5 ♠K" """
    return " ".join(card.label for card in cards)


def monster_total(cards: Sequence[Card]) -> int:
    """Sum of the values of the monsters among cards"""
    return sum(card.value for card in cards if card.is_monster)
