from __future__ import annotations

from fractions import Fraction
from typing import Dict, List, Optional, Sequence, Tuple

from .cards import SUITS, Card, card_suit, rank_value

Play = Tuple[str, Card]  # (seat id, card)


def trump_suit(community: Sequence[Card]) -> Optional[str]:
    """Suit with the most community cards; ties go to the suit holding the highest rank."""
    if not community:
        return None
    counts: Dict[str, int] = {s: 0 for s in SUITS}
    for card in community:
        counts[card_suit(card)] += 1
    top = max(counts.values())
    tied = [s for s in SUITS if counts[s] == top]
    if len(tied) == 1:
        return tied[0]

    def best_rank(suit: str) -> int:
        return max(rank_value(c) for c in community if card_suit(c) == suit)

    return max(tied, key=best_rank)


def swap_cost(pot: int, ratio: float = 0.5) -> int:
    # ceil(pot * ratio), with the ratio read as the decimal it was written as
    exact = Fraction(str(ratio))
    return -(-pot * exact.numerator // exact.denominator)


def legal_cards(hand: List[Card], lead_suit: Optional[str]) -> List[Card]:
    if lead_suit is None:
        return list(hand)
    suited = [c for c in hand if card_suit(c) == lead_suit]
    return suited if suited else list(hand)


def beats(challenger: Card, best: Card, lead_suit: Optional[str], trump: Optional[str]) -> bool:
    c_suit, b_suit = card_suit(challenger), card_suit(best)
    c_trump = trump is not None and c_suit == trump
    b_trump = trump is not None and b_suit == trump

    if c_trump != b_trump:
        return c_trump
    if c_trump:
        return rank_value(challenger) > rank_value(best)

    c_lead = c_suit == lead_suit
    b_lead = b_suit == lead_suit
    if c_lead != b_lead:
        return c_lead
    if c_lead:
        return rank_value(challenger) > rank_value(best)
    # two off-suit cards: the standing card keeps the trick
    return False


def trick_winner(plays: Sequence[Play], lead_suit: Optional[str], trump: Optional[str]) -> Play:
    winning = plays[0]
    for play in plays[1:]:
        if beats(play[1], winning[1], lead_suit, trump):
            winning = play
    return winning
