import pytest

from trumpswap.errors import Reason, RosterError
from trumpswap.game import Action, Phase, split_pot, SeatState

from conftest import act, chips_in_play, make_game, to_trick_phase


def test_human_names_are_unique_ignoring_case(game):
    with pytest.raises(RosterError) as err:
        game.add_human("  ann ")
    assert err.value.reason == Reason.NAME_TAKEN


def test_empty_name_is_rejected(game):
    with pytest.raises(RosterError) as err:
        game.add_human("   ")
    assert err.value.reason == Reason.INVALID_NAME


def test_long_names_are_cut(game):
    seat = game.add_human("x" * 40)
    assert seat.name == "x" * 20


def test_table_is_capped():
    game = make_game(players=5)
    game.add_bot()
    with pytest.raises(RosterError) as err:
        game.add_bot()
    assert err.value.reason == Reason.TABLE_FULL
    assert len(game.state.seats) == 6


def test_bots_are_numbered(game):
    assert game.add_bot().name == "Bot 1"
    assert game.add_bot().name == "Bot 2"
    assert all(s.stack == 1000 for s in game.state.seats)


def test_late_joiner_sits_out_the_current_hand(started):
    dan = started.add_human("Dan")
    assert not dan.in_hand
    assert dan.hand == []
    assert started.phase == Phase.PREFLOP_BET


def test_disconnect_with_two_players_hands_the_pot_over():
    game = make_game(players=2)
    game.start_hand()
    total = chips_in_play(game)
    ann, ben = game.state.seats
    act(game, Action.bet(30))  # Ann acts first heads-up
    game.disconnect(ann.id)
    assert game.phase == Phase.WAITING
    assert ben.stack == 1030
    assert ann.stack == 970
    assert not ann.connected
    assert chips_in_play(game) == total


def test_disconnect_with_several_players_splits_the_pot(started):
    act(started, Action.bet(10))  # Cat
    act(started, Action.call())  # Ann
    act(started, Action.raise_by(1))  # Ben puts in 11, pot 31
    ann, ben, cat = started.state.seats
    started.disconnect(ben.id)
    assert started.phase == Phase.WAITING
    assert started.state.last_payouts == {ann.id: 16, cat.id: 15}
    assert ann.stack == 1006
    assert cat.stack == 1005
    assert ben.stack == 1000 - 11


def test_disconnect_during_tricks_ends_the_hand(game):
    to_trick_phase(game)
    seat = game.current_seat
    game.disconnect(seat.id)
    assert game.phase == Phase.WAITING


def test_disconnected_player_can_reclaim_the_seat(game):
    ann = game.state.seats[0]
    ann.stack = 1234
    game.disconnect(ann.id)
    again = game.add_human("Ann")
    assert again is ann
    assert ann.connected
    assert ann.stack == 1234


def test_disconnected_seats_are_not_dealt_in():
    game = make_game(players=3)
    ann = game.state.seats[0]
    game.disconnect(ann.id)
    assert game.start_hand().ok
    assert not ann.in_hand
    assert ann.hand == []


def test_removed_seat_is_folded_out_and_the_hand_goes_on(started):
    ann, ben, cat = started.state.seats
    act(started, Action.bet(10))  # Cat
    started.remove_seat(ben.id)
    assert ben not in started.state.seats
    assert started.phase == Phase.PREFLOP_BET
    assert started.state.pot == 10
    assert started.current_seat is ann
    act(started, Action.call())
    assert started.phase == Phase.FLOP_BET


def test_removing_the_seat_on_turn_passes_the_turn(started):
    ann, ben, cat = started.state.seats
    act(started, Action.bet(10))  # Cat
    started.remove_seat(ann.id)
    assert started.phase == Phase.PREFLOP_BET
    assert started.current_seat is ben


def test_removing_the_last_seat_to_act_closes_the_round(started):
    ann, ben, cat = started.state.seats
    act(started, Action.bet(10))  # Cat
    act(started, Action.call())  # Ann
    started.remove_seat(ben.id)
    assert started.phase == Phase.FLOP_BET
    assert len(started.state.community) == 3
    assert started.state.pot == 20


def test_removal_leaving_one_contester_is_a_fold_win():
    game = make_game(players=2)
    game.start_hand()
    ann, ben = game.state.seats
    act(game, Action.bet(30))  # Ann
    game.remove_seat(ann.id)
    assert game.phase == Phase.WAITING
    assert game.state.last_payouts == {ben.id: 30}
    assert ben.stack == 1030


def test_removing_a_sitting_out_seat_keeps_the_hand_going(started):
    dan = started.add_human("Dan")
    cat = started.current_seat
    started.remove_seat(dan.id)
    assert started.phase == Phase.PREFLOP_BET
    assert started.current_seat is cat


def test_removing_an_earlier_seat_keeps_the_turn():
    game = make_game(players=3)
    ann = game.state.seats[0]
    game.disconnect(ann.id)
    game.start_hand()
    turn = game.current_seat
    game.remove_seat(ann.id)
    assert game.current_seat is turn


def test_remove_unknown_seat(game):
    with pytest.raises(RosterError):
        game.remove_seat("ghost")


def test_reset_refunds_what_each_seat_put_in(started):
    act(started, Action.bet(10))
    act(started, Action.raise_by(20))
    started.reset_table()
    assert started.phase == Phase.WAITING
    assert started.state.pot == 0
    assert all(s.stack == 1000 for s in started.state.seats)
    assert started.state.events[-1].kind == "table_reset"


def test_reset_clears_the_last_payouts(started):
    act(started, Action.fold())  # Cat
    act(started, Action.fold())  # Ann
    assert started.state.last_payouts
    started.reset_table()
    assert started.state.last_payouts == {}
    assert started.snapshot()["last_payouts"] == {}


def test_split_pot_remainder_goes_in_seat_order():
    seats = [SeatState(id=x, name=x) for x in "abc"]
    assert split_pot(100, seats[:2]) == {"a": 50, "b": 50}
    assert split_pot(101, seats[:2]) == {"a": 51, "b": 50}
    assert split_pot(100, seats) == {"a": 34, "b": 33, "c": 33}
    assert sum(split_pot(7, seats).values()) == 7
