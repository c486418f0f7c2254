from __future__ import annotations

import random
from typing import List, Optional

from .errors import DeckExhaustedError

Card = str  # Format: <rank><suit>, e.g. "2C", "TH", "AS"

SUITS = ["S", "H", "D", "C"]
RANKS = ["2", "3", "4", "5", "6", "7", "8", "9", "T", "J", "Q", "K", "A"]
RANK_VALUE = {rank: i + 2 for i, rank in enumerate(RANKS)}

SUIT_SYMBOLS = {"S": "♠", "H": "♥", "D": "♦", "C": "♣"}


def make_deck() -> List[Card]:
    return [rank + suit for suit in SUITS for rank in RANKS]


def shuffled_deck(rng: Optional[random.Random] = None) -> List[Card]:
    deck = make_deck()
    (rng or random).shuffle(deck)
    return deck


def deal(deck: List[Card], n: int) -> List[Card]:
    """Pop ``n`` cards off the end of ``deck``."""
    if n > len(deck):
        raise DeckExhaustedError(f"cannot deal {n} cards, {len(deck)} left")
    return [deck.pop() for _ in range(n)]


def card_suit(card: Card) -> str:
    return card[1]


def card_rank(card: Card) -> str:
    return card[0]


def rank_value(card: Card) -> int:
    return RANK_VALUE[card_rank(card)]


def is_valid_card(card: object) -> bool:
    return (
        isinstance(card, str)
        and len(card) == 2
        and card[0] in RANK_VALUE
        and card[1] in SUITS
    )


def pretty(card: Card) -> str:
    rank = "10" if card_rank(card) == "T" else card_rank(card)
    return rank + SUIT_SYMBOLS[card_suit(card)]


def sort_hand(hand: List[Card]) -> List[Card]:
    return sorted(hand, key=lambda c: (SUITS.index(card_suit(c)), rank_value(c)))
