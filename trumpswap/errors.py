from __future__ import annotations

from enum import Enum


class Reason(str, Enum):
    NO_SUCH_SEAT = "no_such_seat"
    WRONG_PHASE = "wrong_phase"
    NOT_YOUR_TURN = "not_your_turn"
    NOT_IN_HAND = "not_in_hand"
    CHECK_NOT_ALLOWED = "check_not_allowed"
    NOTHING_TO_CALL = "nothing_to_call"
    INSUFFICIENT_STACK = "insufficient_stack"
    BET_NOT_ALLOWED = "bet_not_allowed"
    RAISE_NOT_ALLOWED = "raise_not_allowed"
    INVALID_AMOUNT = "invalid_amount"
    ALREADY_SWAPPED = "already_swapped"
    EMPTY_COMMUNITY = "empty_community"
    INVALID_INDEX = "invalid_index"
    CARD_NOT_IN_HAND = "card_not_in_hand"
    MUST_FOLLOW_SUIT = "must_follow_suit"
    HAND_IN_PROGRESS = "hand_in_progress"
    NOT_ENOUGH_PLAYERS = "not_enough_players"
    TABLE_FULL = "table_full"
    NAME_TAKEN = "name_taken"
    INVALID_NAME = "invalid_name"
    UNKNOWN_ACTION = "unknown_action"
    NOT_HOST = "not_host"


class TrumpSwapError(Exception):
    pass


class IllegalActionError(TrumpSwapError):
    """A player asked for something the rules do not allow right now."""

    def __init__(self, reason: Reason, message: str = ""):
        super().__init__(message or reason.value)
        self.reason = reason
        self.message = message or reason.value


class RosterError(IllegalActionError):
    pass


class GameConfigError(TrumpSwapError, ValueError):
    pass


class DeckExhaustedError(TrumpSwapError, RuntimeError):
    pass
