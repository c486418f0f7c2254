from trumpswap.game import Action, Phase
from trumpswap.rules import trump_suit

from conftest import act, check_around, chips_in_play, to_trick_phase


def to_flop_with_pot(game, bet=10):
    act(game, Action.bet(bet))
    act(game, Action.call())
    act(game, Action.call())
    assert game.phase == Phase.FLOP_BET


def test_no_swap_before_the_flop(started):
    cat = started.current_seat
    result = started.apply_action(cat.id, Action.swap(0, 0))
    assert result.reason == "empty_community"


def test_swap_exchanges_cards_in_place(started):
    to_flop_with_pot(started)
    total = chips_in_play(started)
    cat = started.current_seat
    hand_before = list(cat.hand)
    community_before = list(started.state.community)

    result = started.apply_action(cat.id, Action.swap(2, 1))

    assert result.ok
    assert cat.hand[2] == community_before[1]
    assert started.state.community[1] == hand_before[2]
    assert cat.hand[:2] + cat.hand[3:] == hand_before[:2] + hand_before[3:]
    assert started.state.community[0] == community_before[0]
    assert started.state.community[2] == community_before[2]
    assert cat.stack == 990 - 15
    assert started.state.pot == 45
    assert cat.has_swapped
    assert chips_in_play(started) == total
    assert started.trump == trump_suit(started.state.community)


def test_swap_does_not_end_the_turn(started):
    check_around(started)
    cat = started.current_seat
    assert started.apply_action(cat.id, Action.swap(0, 0)).ok
    assert started.current_seat is cat
    assert not cat.acted
    act(started, Action.check())
    assert started.current_seat is not cat


def test_only_one_swap_per_hand(started):
    check_around(started)
    cat = started.current_seat
    assert started.apply_action(cat.id, Action.swap(0, 0)).ok
    assert started.apply_action(cat.id, Action.swap(1, 1)).reason == "already_swapped"
    check_around(started)
    assert started.apply_action(cat.id, Action.swap(1, 1)).reason == "already_swapped"


def test_swap_cost_uses_the_pot_at_that_moment(started):
    check_around(started)
    cat = started.current_seat
    started.state.pot = 100
    cat.stack = 40
    result = started.apply_action(cat.id, Action.swap(0, 0))
    assert result.reason == "insufficient_stack"
    assert not cat.has_swapped
    assert started.state.pot == 100
    cat.stack = 50
    assert started.apply_action(cat.id, Action.swap(0, 0)).ok
    assert cat.stack == 0
    assert started.state.pot == 150


def test_swap_needs_valid_positions(started):
    check_around(started)
    cat = started.current_seat
    assert started.apply_action(cat.id, Action.swap(7, 0)).reason == "invalid_index"
    assert started.apply_action(cat.id, Action.swap(0, 3)).reason == "invalid_index"
    assert started.apply_action(cat.id, Action.swap(-1, 0)).reason == "invalid_index"


def test_swap_out_of_turn(started):
    check_around(started)
    ann = started.state.seats[0]
    assert started.apply_action(ann.id, Action.swap(0, 0)).reason == "not_your_turn"


def test_no_swap_while_playing_tricks(game):
    to_trick_phase(game)
    seat = game.current_seat
    assert game.apply_action(seat.id, Action.swap(0, 0)).reason == "wrong_phase"


def test_swap_can_change_trump(started):
    check_around(started)
    cat = started.current_seat
    started.state.community[:] = ["2S", "5S", "9H"]
    cat.hand[0] = "AH"
    assert started.trump == "S"
    assert started.apply_action(cat.id, Action.swap(0, 0)).ok
    assert started.state.community == ["AH", "5S", "9H"]
    assert started.trump == "H"
