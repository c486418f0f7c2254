from __future__ import annotations

import logging
import random
from typing import List, Optional

from .cards import Card, card_suit, rank_value
from .game import BETTING_PHASES, Action, ActionKind, ActionResult, Phase, TableView, TrumpSwapGame
from .rules import legal_cards

logger = logging.getLogger(__name__)

SWAP_GAIN_THRESHOLD = 4
TRUMP_BONUS = 5
SWAP_PROBABILITY = 0.5

DANGER_RATIO = 0.3
FOLD_PROBABILITY = 0.6
RAISE_PROBABILITY = 0.15
RAISE_SIZE = 20
BET_PROBABILITY = 0.2
BET_SIZE = 20


def card_value(card: Card, trump: Optional[str]) -> int:
    bonus = TRUMP_BONUS if trump is not None and card_suit(card) == trump else 0
    return rank_value(card) + bonus


def choose_swap(view: TableView, rng: random.Random) -> Optional[Action]:
    if view.phase not in BETTING_PHASES or view.has_swapped:
        return None
    if not view.community or not view.hand or view.stack < view.swap_cost:
        return None

    best = max(range(len(view.community)), key=lambda i: card_value(view.community[i], view.trump))
    weakest = min(range(len(view.hand)), key=lambda i: card_value(view.hand[i], view.trump))
    gain = card_value(view.community[best], view.trump) - card_value(view.hand[weakest], view.trump)
    if gain < SWAP_GAIN_THRESHOLD:
        return None
    if rng.random() >= SWAP_PROBABILITY:
        return None
    return Action.swap(weakest, best)


def choose_bet(view: TableView, rng: random.Random) -> Action:
    need = view.to_call
    if need > 0:
        if view.stack < need:
            return Action.fold()
        # Big calls relative to the stack are scary.
        if need > view.stack * DANGER_RATIO and rng.random() < FOLD_PROBABILITY:
            return Action.fold()
        if view.stack >= 3 * (need + RAISE_SIZE) and rng.random() < RAISE_PROBABILITY:
            return Action.raise_by(RAISE_SIZE)
        return Action.call()

    if view.current_bet == 0 and view.stack >= 1 and rng.random() < BET_PROBABILITY:
        return Action.bet(min(BET_SIZE, view.stack))
    return Action.check()


def choose_play(view: TableView) -> Action:
    hand: List[Card] = list(view.hand)
    if view.leading:
        return Action.play(max(hand, key=rank_value))

    following = [c for c in hand if card_suit(c) == view.lead_suit]
    if following:
        return Action.play(max(following, key=rank_value))

    # Can't follow: sluff the smallest trump, otherwise the smallest card.
    trumps = [c for c in hand if card_suit(c) == view.trump]
    if trumps:
        return Action.play(min(trumps, key=rank_value))
    return Action.play(min(legal_cards(hand, view.lead_suit), key=rank_value))


def choose_action(view: TableView, rng: random.Random) -> Action:
    if view.phase in BETTING_PHASES:
        swap = choose_swap(view, rng)
        if swap is not None:
            return swap
        return choose_bet(view, rng)
    if view.phase == Phase.TRICK:
        return choose_play(view)
    raise ValueError(f"bots do not act during {view.phase.value}")


def take_turn(game: TrumpSwapGame, seat_id: str, rng: random.Random) -> List[ActionResult]:
    """Play one bot turn through the same action path humans use.

    A swap does not end the turn, so the bot is asked again afterwards.
    """
    results: List[ActionResult] = []
    for _ in range(2):
        if game.phase == Phase.WAITING or not game.is_turn(seat_id):
            break
        action = choose_action(game.bot_view(seat_id), rng)
        result = game.apply_action(seat_id, action)
        results.append(result)
        if not result.ok:
            logger.warning("Bot %s chose illegal %s: %s", seat_id, action.kind.value, result.reason)
            if game.phase in BETTING_PHASES:
                results.append(game.apply_action(seat_id, Action.fold()))
            break
        if action.kind != ActionKind.SWAP:
            break
    return results
