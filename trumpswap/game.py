from __future__ import annotations

import logging
import random
import secrets
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from .cards import Card, deal, is_valid_card, pretty, shuffled_deck, sort_hand, card_suit
from .config import TableConfig
from .errors import IllegalActionError, Reason, RosterError, TrumpSwapError
from .rules import Play, legal_cards, swap_cost, trick_winner, trump_suit

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 20


class Phase(str, Enum):
    WAITING = "waiting"
    PREFLOP_BET = "preflop_bet"
    FLOP_BET = "flop_bet"
    TURN_BET = "turn_bet"
    RIVER_BET = "river_bet"
    TRICK = "trick"


BETTING_PHASES = (Phase.PREFLOP_BET, Phase.FLOP_BET, Phase.TURN_BET, Phase.RIVER_BET)

# betting phase -> (next phase, community cards revealed on entering it)
NEXT_STAGE: Dict[Phase, Tuple[Phase, int]] = {
    Phase.PREFLOP_BET: (Phase.FLOP_BET, 3),
    Phase.FLOP_BET: (Phase.TURN_BET, 2),
    Phase.TURN_BET: (Phase.RIVER_BET, 2),
    Phase.RIVER_BET: (Phase.TRICK, 0),
}

STAGE_NAMES = {Phase.FLOP_BET: "Flop", Phase.TURN_BET: "Turn", Phase.RIVER_BET: "River"}


class ActionKind(str, Enum):
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    BET = "bet"
    RAISE = "raise"
    SWAP = "swap"
    PLAY_CARD = "play_card"


@dataclass(frozen=True)
class Action:
    kind: ActionKind
    amount: int = 0
    hand_index: Optional[int] = None
    community_index: Optional[int] = None
    card: Optional[Card] = None

    @classmethod
    def fold(cls) -> "Action":
        return cls(ActionKind.FOLD)

    @classmethod
    def check(cls) -> "Action":
        return cls(ActionKind.CHECK)

    @classmethod
    def call(cls) -> "Action":
        return cls(ActionKind.CALL)

    @classmethod
    def bet(cls, amount: int) -> "Action":
        return cls(ActionKind.BET, amount=amount)

    @classmethod
    def raise_by(cls, amount: int) -> "Action":
        return cls(ActionKind.RAISE, amount=amount)

    @classmethod
    def swap(cls, hand_index: int, community_index: int) -> "Action":
        return cls(ActionKind.SWAP, hand_index=hand_index, community_index=community_index)

    @classmethod
    def play(cls, card: Card) -> "Action":
        return cls(ActionKind.PLAY_CARD, card=card)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Action":
        if not isinstance(data, dict):
            raise IllegalActionError(Reason.UNKNOWN_ACTION, f"Unknown action: {data!r}")
        try:
            kind = ActionKind(data.get("type"))
        except ValueError:
            raise IllegalActionError(
                Reason.UNKNOWN_ACTION, f"Unknown action: {data.get('type')!r}"
            ) from None

        if kind in (ActionKind.BET, ActionKind.RAISE):
            amount = data.get("amount")
            if isinstance(amount, bool) or not isinstance(amount, int):
                raise IllegalActionError(Reason.INVALID_AMOUNT, "Amount must be a whole number.")
            return cls(kind, amount=amount)
        if kind == ActionKind.SWAP:
            hand_index = data.get("hand_index")
            community_index = data.get("community_index")
            for value in (hand_index, community_index):
                if isinstance(value, bool) or not isinstance(value, int):
                    raise IllegalActionError(Reason.INVALID_INDEX, "Swap needs two card positions.")
            return cls.swap(hand_index, community_index)
        if kind == ActionKind.PLAY_CARD:
            card = data.get("card")
            if not is_valid_card(card):
                raise IllegalActionError(Reason.CARD_NOT_IN_HAND, f"Not a card: {card!r}")
            return cls.play(card)
        return cls(kind)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.kind.value}
        if self.kind in (ActionKind.BET, ActionKind.RAISE):
            out["amount"] = self.amount
        elif self.kind == ActionKind.SWAP:
            out["hand_index"] = self.hand_index
            out["community_index"] = self.community_index
        elif self.kind == ActionKind.PLAY_CARD:
            out["card"] = self.card
        return out


@dataclass
class ActionResult:
    ok: bool
    reason: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"ok": True}
        return {"ok": False, "reason": self.reason, "message": self.message}


@dataclass
class GameEvent:
    kind: str
    message: str
    seat_id: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "seat_id": self.seat_id, **self.data}


@dataclass
class SeatState:
    id: str
    name: str
    is_bot: bool = False
    connected: bool = True
    stack: int = 0
    hand: List[Card] = field(default_factory=list)
    folded: bool = False
    in_hand: bool = False
    has_swapped: bool = False
    round_bet: int = 0
    tricks_won: int = 0
    acted: bool = False
    committed: int = 0

    @property
    def contesting(self) -> bool:
        return self.in_hand and not self.folded

    def reset_for_hand(self, dealt: bool) -> None:
        self.hand = []
        self.in_hand = dealt
        self.folded = False
        self.has_swapped = False
        self.round_bet = 0
        self.tricks_won = 0
        self.acted = False
        self.committed = 0

    def public_view(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "is_bot": self.is_bot,
            "connected": self.connected,
            "stack": self.stack,
            "in_hand": self.in_hand,
            "folded": self.folded,
            "hand_count": len(self.hand),
            "has_swapped": self.has_swapped,
            "round_bet": self.round_bet,
            "tricks_won": self.tricks_won,
            "acted": self.acted,
        }


@dataclass
class Trick:
    number: int = 0
    lead_suit: Optional[str] = None
    plays: List[Play] = field(default_factory=list)
    leader_id: Optional[str] = None


@dataclass(frozen=True)
class TableView:
    """What a single seat is allowed to know, as handed to the bot policy."""

    seat_id: str
    phase: Phase
    hand: Tuple[Card, ...]
    community: Tuple[Card, ...]
    trump: Optional[str]
    pot: int
    current_bet: int
    round_bet: int
    stack: int
    has_swapped: bool
    swap_cost: int
    lead_suit: Optional[str]
    trick_plays: Tuple[Play, ...]
    contesters: int

    @property
    def to_call(self) -> int:
        return self.current_bet - self.round_bet

    @property
    def leading(self) -> bool:
        return not self.trick_plays


@dataclass
class GameState:
    seats: List[SeatState] = field(default_factory=list)
    phase: Phase = Phase.WAITING
    hand_number: int = 0
    dealer_index: int = 0
    turn_index: int = 0
    deck: List[Card] = field(default_factory=list)
    community: List[Card] = field(default_factory=list)
    pot: int = 0
    current_bet: int = 0
    trick: Trick = field(default_factory=Trick)
    last_trick: List[Play] = field(default_factory=list)
    last_trick_winner: Optional[str] = None
    last_payouts: Dict[str, int] = field(default_factory=dict)
    events: Deque[GameEvent] = field(default_factory=deque)

    def contesters(self) -> List[SeatState]:
        return [s for s in self.seats if s.contesting]


class TrumpSwapGame:
    def __init__(self, config: Optional[TableConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or TableConfig()
        self.rng = rng or random.Random(self.config.random_seed)
        self.state = GameState(events=deque(maxlen=self.config.log_size))
        self._next_bot_number = 1
        self._handlers: Dict[ActionKind, Callable[[SeatState, Action], None]] = {
            ActionKind.FOLD: self._fold,
            ActionKind.CHECK: self._check,
            ActionKind.CALL: self._call,
            ActionKind.BET: self._bet,
            ActionKind.RAISE: self._raise,
            ActionKind.SWAP: self._swap,
            ActionKind.PLAY_CARD: self._play_card,
        }

    # ------------------------------------------------------------------
    # Queries

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def trump(self) -> Optional[str]:
        return trump_suit(self.state.community)

    @property
    def current_seat(self) -> Optional[SeatState]:
        if self.state.phase == Phase.WAITING or not self.state.seats:
            return None
        return self.state.seats[self.state.turn_index]

    @property
    def current_swap_cost(self) -> int:
        return swap_cost(self.state.pot, self.config.swap_cost_ratio)

    def seat(self, seat_id: str) -> Optional[SeatState]:
        for s in self.state.seats:
            if s.id == seat_id:
                return s
        return None

    def seat_index(self, seat_id: str) -> int:
        for idx, s in enumerate(self.state.seats):
            if s.id == seat_id:
                return idx
        raise KeyError(seat_id)

    def is_turn(self, seat_id: str) -> bool:
        current = self.current_seat
        return current is not None and current.id == seat_id

    def playable_cards(self, seat_id: str) -> List[Card]:
        seat = self.seat(seat_id)
        if seat is None or self.state.phase != Phase.TRICK or not self.is_turn(seat_id):
            return []
        return legal_cards(seat.hand, self.state.trick.lead_suit)

    def next_active_index(self, start: int) -> int:
        seats = self.state.seats
        size = len(seats)
        for i in range(size):
            idx = (start + i) % size
            s = seats[idx]
            if not s.contesting:
                continue
            if self.state.phase == Phase.TRICK and not s.hand:
                continue
            return idx
        return start % size

    # ------------------------------------------------------------------
    # Roster

    def add_human(self, name: str) -> SeatState:
        name = (name or "").strip()[:MAX_NAME_LENGTH]
        if not name:
            raise RosterError(Reason.INVALID_NAME, "Name required.")
        for s in self.state.seats:
            if s.is_bot or s.name.lower() != name.lower():
                continue
            if s.connected:
                raise RosterError(Reason.NAME_TAKEN, "Name already taken.")
            s.connected = True
            self._emit("seat_joined", f"{s.name} reconnected.", s.id)
            return s
        return self._add_seat(name, is_bot=False)

    def add_bot(self) -> SeatState:
        seat = self._add_seat(f"Bot {self._next_bot_number}", is_bot=True)
        self._next_bot_number += 1
        return seat

    def _add_seat(self, name: str, is_bot: bool) -> SeatState:
        if len(self.state.seats) >= self.config.max_seats:
            raise RosterError(
                Reason.TABLE_FULL, f"Table full ({self.config.max_seats} max players)."
            )
        prefix = "b" if is_bot else "p"
        seat_id = f"{prefix}_{secrets.token_hex(4)}"
        while self.seat(seat_id) is not None:
            seat_id = f"{prefix}_{secrets.token_hex(4)}"
        seat = SeatState(id=seat_id, name=name, is_bot=is_bot, stack=self.config.starting_stack)
        self.state.seats.append(seat)
        self._emit("seat_joined", f"{name} joined.", seat_id)
        return seat

    def disconnect(self, seat_id: str) -> None:
        seat = self.seat(seat_id)
        if seat is None:
            return
        seat.connected = False
        self._emit("seat_left", f"{seat.name} disconnected.", seat.id)
        if seat.contesting and self.state.phase != Phase.WAITING:
            self._force_end_hand(seat)

    def remove_seat(self, seat_id: str) -> SeatState:
        seat = self.seat(seat_id)
        if seat is None:
            raise RosterError(Reason.NO_SUCH_SEAT, "No such player.")
        state = self.state
        folding = seat.contesting and state.phase != Phase.WAITING
        held_turn = folding and self.is_turn(seat_id)
        if folding:
            seat.folded = True
            self._drop_play(seat)

        idx = self.seat_index(seat_id)
        del state.seats[idx]
        if state.seats:
            if idx <= state.dealer_index:
                state.dealer_index = (state.dealer_index - 1) % len(state.seats)
            if idx < state.turn_index:
                state.turn_index -= 1
            state.turn_index %= len(state.seats)
        else:
            state.dealer_index = 0
            state.turn_index = 0
        self._emit("seat_left", f"{seat.name} left.", seat.id)

        if folding:
            self._continue_without(held_turn)
        return seat

    def _drop_play(self, leaver: SeatState) -> None:
        trick = self.state.trick
        if self.state.phase != Phase.TRICK:
            return
        trick.plays = [p for p in trick.plays if p[0] != leaver.id]
        if not trick.plays:
            trick.lead_suit = None

    def _continue_without(self, held_turn: bool) -> None:
        state = self.state
        contesters = state.contesters()
        if len(contesters) <= 1:
            self._settle_by_fold(contesters[0] if contesters else None)
            return

        if state.phase in BETTING_PHASES:
            if self._round_complete():
                self._advance_stage()
            elif held_turn:
                state.turn_index = self.next_active_index(state.turn_index)
            return

        trick = state.trick
        if trick.plays and len(trick.plays) >= len(contesters):
            self._resolve_trick()
            return
        if held_turn:
            state.turn_index = self.next_active_index(state.turn_index)
        if not trick.plays:
            trick.leader_id = state.seats[state.turn_index].id

    def _force_end_hand(self, leaver: SeatState) -> None:
        leaver.folded = True
        remaining = self.state.contesters()
        logger.info("Hand %d ended early, %s left", self.state.hand_number, leaver.name)
        if len(remaining) == 1:
            self._settle_by_fold(remaining[0])
        else:
            self._finish_hand(split_pot(self.state.pot, remaining), "aborted")

    def reset_table(self) -> None:
        state = self.state
        for s in state.seats:
            s.stack += s.committed
            state.pot -= s.committed
            s.reset_for_hand(dealt=False)
        if state.pot:
            logger.warning("Pot held %d unattributed chips at reset", state.pot)
        state.phase = Phase.WAITING
        state.turn_index = 0
        state.deck = []
        state.community = []
        state.pot = 0
        state.current_bet = 0
        state.trick = Trick()
        state.last_trick = []
        state.last_trick_winner = None
        state.last_payouts = {}
        self._emit("table_reset", "Table reset.")

    # ------------------------------------------------------------------
    # Hand lifecycle

    def start_hand(self) -> ActionResult:
        try:
            self._start_hand()
        except IllegalActionError as exc:
            logger.info("Cannot start hand: %s", exc.reason.value)
            return ActionResult(False, exc.reason.value, exc.message)
        return ActionResult(True)

    def _start_hand(self) -> None:
        state = self.state
        if state.phase != Phase.WAITING:
            raise IllegalActionError(Reason.HAND_IN_PROGRESS, "Hand already in progress.")
        seated = [s for s in state.seats if s.connected]
        if len(seated) < self.config.min_seats:
            raise IllegalActionError(
                Reason.NOT_ENOUGH_PLAYERS,
                f"Need at least {self.config.min_seats} connected players.",
            )

        state.deck = shuffled_deck(self.rng)
        state.community = []
        state.pot = 0
        state.current_bet = 0
        state.trick = Trick()
        state.last_trick = []
        state.last_trick_winner = None
        state.last_payouts = {}
        for s in state.seats:
            s.reset_for_hand(dealt=s.connected)

        for _ in range(self.config.hand_size):
            for s in seated:
                s.hand.extend(deal(state.deck, 1))
        for s in seated:
            s.hand = sort_hand(s.hand)

        state.hand_number += 1
        state.dealer_index = (state.dealer_index + 1) % len(state.seats)
        state.phase = Phase.PREFLOP_BET
        state.turn_index = self.next_active_index(state.dealer_index + 1)
        self._emit(
            "hand_started",
            f"Hand {state.hand_number} started. Pre-flop betting begins.",
            data={"hand_number": state.hand_number, "dealer_id": state.seats[state.dealer_index].id},
        )

    # ------------------------------------------------------------------
    # Actions

    def apply_action(self, seat_id: str, action: Action) -> ActionResult:
        seat = self.seat(seat_id)
        try:
            if seat is None:
                raise IllegalActionError(Reason.NO_SUCH_SEAT, "No such player.")
            handler = self._handlers.get(action.kind)
            if handler is None:
                raise IllegalActionError(Reason.UNKNOWN_ACTION, f"Unknown action: {action.kind}")
            handler(seat, action)
        except IllegalActionError as exc:
            logger.info("Rejected %s from %s: %s", action.kind.value, seat_id, exc.reason.value)
            return ActionResult(False, exc.reason.value, exc.message)
        logger.debug("Accepted %s from %s", action.kind.value, seat_id)
        return ActionResult(True)

    def _require_turn(self, seat: SeatState, phases: Tuple[Phase, ...]) -> None:
        if self.state.phase not in phases:
            raise IllegalActionError(
                Reason.WRONG_PHASE, f"Not allowed during {self.state.phase.value}."
            )
        if not seat.contesting:
            raise IllegalActionError(Reason.NOT_IN_HAND, "You are not in this hand.")
        if not self.is_turn(seat.id):
            raise IllegalActionError(Reason.NOT_YOUR_TURN, "It is not your turn.")

    def _require_stack(self, seat: SeatState, chips: int) -> None:
        if seat.stack < chips:
            raise IllegalActionError(
                Reason.INSUFFICIENT_STACK, f"Needs {chips} chips, you have {seat.stack}."
            )

    def _require_amount(self, action: Action) -> None:
        if isinstance(action.amount, bool) or not isinstance(action.amount, int) or action.amount < 1:
            raise IllegalActionError(Reason.INVALID_AMOUNT, "Amount must be at least 1.")

    def _fold(self, seat: SeatState, action: Action) -> None:
        self._require_turn(seat, BETTING_PHASES)
        seat.folded = True
        self._emit("fold", f"{seat.name} folds.", seat.id)
        self._after_betting_action()

    def _check(self, seat: SeatState, action: Action) -> None:
        self._require_turn(seat, BETTING_PHASES)
        if seat.round_bet != self.state.current_bet:
            raise IllegalActionError(
                Reason.CHECK_NOT_ALLOWED, f"{self.state.current_bet - seat.round_bet} to call."
            )
        seat.acted = True
        self._emit("check", f"{seat.name} checks.", seat.id)
        self._after_betting_action()

    def _call(self, seat: SeatState, action: Action) -> None:
        self._require_turn(seat, BETTING_PHASES)
        need = self.state.current_bet - seat.round_bet
        if need <= 0:
            raise IllegalActionError(Reason.NOTHING_TO_CALL, "Nothing to call.")
        self._require_stack(seat, need)
        self._commit(seat, need)
        seat.acted = True
        self._emit("call", f"{seat.name} calls {need}.", seat.id, amount=need)
        self._after_betting_action()

    def _bet(self, seat: SeatState, action: Action) -> None:
        self._require_turn(seat, BETTING_PHASES)
        if self.state.current_bet != 0:
            raise IllegalActionError(Reason.BET_NOT_ALLOWED, "There is already a bet, raise instead.")
        self._require_amount(action)
        self._require_stack(seat, action.amount)
        self._commit(seat, action.amount)
        self.state.current_bet = action.amount
        self._reopen_action(seat)
        self._emit("bet", f"{seat.name} bets {action.amount}.", seat.id, amount=action.amount)
        self._after_betting_action()

    def _raise(self, seat: SeatState, action: Action) -> None:
        self._require_turn(seat, BETTING_PHASES)
        if self.state.current_bet == 0:
            raise IllegalActionError(Reason.RAISE_NOT_ALLOWED, "Nothing to raise, bet instead.")
        self._require_amount(action)
        need = self.state.current_bet - seat.round_bet
        self._require_stack(seat, need + action.amount)
        self._commit(seat, need + action.amount)
        self.state.current_bet += action.amount
        self._reopen_action(seat)
        self._emit(
            "raise",
            f"{seat.name} raises by {action.amount} to {self.state.current_bet}.",
            seat.id,
            amount=action.amount,
            current_bet=self.state.current_bet,
        )
        self._after_betting_action()

    def _commit(self, seat: SeatState, chips: int) -> None:
        seat.stack -= chips
        seat.round_bet += chips
        seat.committed += chips
        self.state.pot += chips

    def _reopen_action(self, actor: SeatState) -> None:
        for s in self.state.contesters():
            s.acted = s is actor

    def _round_complete(self) -> bool:
        contesters = self.state.contesters()
        if len(contesters) <= 1:
            return True
        return all(s.acted and s.round_bet == self.state.current_bet for s in contesters)

    def _after_betting_action(self) -> None:
        contesters = self.state.contesters()
        if len(contesters) <= 1:
            self._settle_by_fold(contesters[0] if contesters else None)
        elif self._round_complete():
            self._advance_stage()
        else:
            self.state.turn_index = self.next_active_index(self.state.turn_index + 1)

    def _advance_stage(self) -> None:
        state = self.state
        if state.phase not in NEXT_STAGE:
            raise TrumpSwapError(f"no stage follows {state.phase}")
        next_phase, reveal = NEXT_STAGE[state.phase]

        state.current_bet = 0
        for s in state.seats:
            s.round_bet = 0
            s.acted = False

        if next_phase == Phase.TRICK:
            self._start_tricks()
            return

        deal(state.deck, 1)  # burn
        state.community.extend(deal(state.deck, reveal))
        state.phase = next_phase
        state.turn_index = self.next_active_index(state.dealer_index + 1)
        self._emit(
            "reveal",
            f"{STAGE_NAMES[next_phase]} revealed. Trump: {self.trump}.",
            data={"community": list(state.community), "trump": self.trump},
        )

    def _swap(self, seat: SeatState, action: Action) -> None:
        self._require_turn(seat, BETTING_PHASES)
        state = self.state
        if seat.has_swapped:
            raise IllegalActionError(Reason.ALREADY_SWAPPED, "You already swapped this hand.")
        if not state.community:
            raise IllegalActionError(Reason.EMPTY_COMMUNITY, "No community cards to swap with.")
        hi, ci = action.hand_index, action.community_index
        if hi is None or ci is None or not 0 <= hi < len(seat.hand) or not 0 <= ci < len(state.community):
            raise IllegalActionError(Reason.INVALID_INDEX, "Pick one hand card and one community card.")
        cost = swap_cost(state.pot, self.config.swap_cost_ratio)
        self._require_stack(seat, cost)

        seat.stack -= cost
        seat.committed += cost
        state.pot += cost
        hand_card, table_card = seat.hand[hi], state.community[ci]
        seat.hand[hi] = table_card
        state.community[ci] = hand_card
        seat.has_swapped = True
        self._emit(
            "swap",
            f"{seat.name} swaps {pretty(hand_card)} with {pretty(table_card)} (cost {cost}). "
            f"Trump: {self.trump}.",
            seat.id,
            hand_card=hand_card,
            community_card=table_card,
            cost=cost,
            trump=self.trump,
        )

    # ------------------------------------------------------------------
    # Tricks

    def _start_tricks(self) -> None:
        state = self.state
        state.phase = Phase.TRICK
        state.turn_index = self.next_active_index(state.dealer_index + 1)
        leader = state.seats[state.turn_index]
        state.trick = Trick(number=1, leader_id=leader.id)
        self._emit(
            "trick_started",
            f"Trick-taking begins. Trump: {self.trump}.",
            leader.id,
            trick_number=1,
            trump=self.trump,
        )

    def _play_card(self, seat: SeatState, action: Action) -> None:
        self._require_turn(seat, (Phase.TRICK,))
        trick = self.state.trick
        card = action.card
        if card not in seat.hand:
            raise IllegalActionError(Reason.CARD_NOT_IN_HAND, "You do not hold that card.")
        if card not in legal_cards(seat.hand, trick.lead_suit):
            raise IllegalActionError(Reason.MUST_FOLLOW_SUIT, f"You must follow {trick.lead_suit}.")

        seat.hand.remove(card)
        if trick.lead_suit is None:
            trick.lead_suit = card_suit(card)
        trick.plays.append((seat.id, card))
        self._emit("card_played", f"{seat.name} plays {pretty(card)}.", seat.id, card=card)

        if len(trick.plays) < len(self.state.contesters()):
            self.state.turn_index = self.next_active_index(self.state.turn_index + 1)
            return
        self._resolve_trick()

    def _resolve_trick(self) -> None:
        state = self.state
        trick = state.trick
        winner_id, card = trick_winner(trick.plays, trick.lead_suit, self.trump)
        winner = self.seat(winner_id)
        winner.tricks_won += 1
        state.last_trick = list(trick.plays)
        state.last_trick_winner = winner_id
        self._emit(
            "trick_won",
            f"{winner.name} wins trick {trick.number} with {pretty(card)}.",
            winner_id,
            trick_number=trick.number,
            card=card,
        )

        if all(not s.hand for s in state.contesters()):
            self._settle_by_tricks()
            return
        state.trick = Trick(number=trick.number + 1, leader_id=winner_id)
        state.turn_index = self.next_active_index(self.seat_index(winner_id))

    # ------------------------------------------------------------------
    # Settlement

    def _settle_by_fold(self, winner: Optional[SeatState]) -> None:
        if winner is None:
            logger.warning("Hand %d ended with no contesters", self.state.hand_number)
            self._finish_hand({}, "fold")
            return
        self._finish_hand({winner.id: self.state.pot}, "fold")

    def _settle_by_tricks(self) -> None:
        contesters = self.state.contesters()
        top = max(s.tricks_won for s in contesters)
        winners = [s for s in contesters if s.tricks_won == top]
        self._finish_hand(split_pot(self.state.pot, winners), "tricks")

    def _finish_hand(self, payouts: Dict[str, int], how: str) -> None:
        state = self.state
        for seat_id, chips in payouts.items():
            self.seat(seat_id).stack += chips
        state.pot = 0
        state.current_bet = 0
        state.phase = Phase.WAITING
        state.last_payouts = dict(payouts)
        for s in state.seats:
            s.committed = 0

        names = ", ".join(f"{self.seat(pid).name} (+{chips})" for pid, chips in payouts.items())
        if how == "fold":
            message = f"{names} wins, all others folded."
        elif how == "tricks":
            message = f"Hand over. Winner(s): {names}."
        else:
            message = f"Hand ended early. Pot split: {names}."
        self._emit(
            "hand_won",
            message,
            data={"hand_number": state.hand_number, "how": how, "payouts": dict(payouts)},
        )

    # ------------------------------------------------------------------
    # Views

    def _emit(self, kind: str, message: str, seat_id: Optional[str] = None,
              data: Optional[Dict[str, Any]] = None, **extra: Any) -> None:
        payload = dict(data or {})
        payload.update(extra)
        self.state.events.append(GameEvent(kind, message, seat_id, payload))
        logger.info("%s", message)

    def bot_view(self, seat_id: str) -> TableView:
        seat = self.seat(seat_id)
        if seat is None:
            raise KeyError(seat_id)
        state = self.state
        return TableView(
            seat_id=seat.id,
            phase=state.phase,
            hand=tuple(seat.hand),
            community=tuple(state.community),
            trump=self.trump,
            pot=state.pot,
            current_bet=state.current_bet,
            round_bet=seat.round_bet,
            stack=seat.stack,
            has_swapped=seat.has_swapped,
            swap_cost=self.current_swap_cost,
            lead_suit=state.trick.lead_suit,
            trick_plays=tuple(state.trick.plays),
            contesters=len(state.contesters()),
        )

    def snapshot(self, viewer_id: Optional[str] = None) -> Dict[str, Any]:
        state = self.state
        current = self.current_seat
        seats = []
        for s in state.seats:
            view = s.public_view()
            if s.id == viewer_id:
                view["hand"] = list(s.hand)
            seats.append(view)

        snap: Dict[str, Any] = {
            "phase": state.phase.value,
            "hand_number": state.hand_number,
            "dealer_index": state.dealer_index,
            "turn_seat_id": current.id if current else None,
            "community": list(state.community),
            "trump": self.trump,
            "pot": state.pot,
            "current_bet": state.current_bet,
            "swap_cost": self.current_swap_cost,
            "trick": {
                "number": state.trick.number,
                "lead_suit": state.trick.lead_suit,
                "plays": [{"seat_id": pid, "card": c} for pid, c in state.trick.plays],
                "leader_id": state.trick.leader_id,
            },
            "last_trick": {
                "plays": [{"seat_id": pid, "card": c} for pid, c in state.last_trick],
                "winner_id": state.last_trick_winner,
            },
            "last_payouts": dict(state.last_payouts),
            "seats": seats,
            "events": [e.to_dict() for e in state.events],
            "your_id": viewer_id,
        }

        viewer = self.seat(viewer_id) if viewer_id else None
        if viewer is not None:
            my_turn = self.is_turn(viewer.id) and viewer.contesting
            betting = state.phase in BETTING_PHASES
            snap["you"] = {
                "my_turn": my_turn,
                "to_call": max(0, state.current_bet - viewer.round_bet) if betting else 0,
                "can_swap": bool(
                    my_turn
                    and betting
                    and state.community
                    and not viewer.has_swapped
                    and viewer.stack >= self.current_swap_cost
                ),
                "legal_cards": self.playable_cards(viewer.id),
            }
        return snap


def split_pot(pot: int, winners: List[SeatState]) -> Dict[str, int]:
    """Even split; the odd chips go one at a time to winners in seat order."""
    if not winners:
        return {}
    share, remainder = divmod(pot, len(winners))
    return {w.id: share + (1 if i < remainder else 0) for i, w in enumerate(winners)}
