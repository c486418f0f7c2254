import random

import pytest

from trumpswap.config import TableConfig
from trumpswap.game import Action, Phase, TrumpSwapGame


def make_game(players=3, seed=7, **config):
    game = TrumpSwapGame(TableConfig(random_seed=seed, **config))
    for name in ["Ann", "Ben", "Cat", "Dan", "Eve", "Fay"][:players]:
        game.add_human(name)
    return game


def act(game, action):
    """Apply ``action`` for whoever holds the turn and insist it is accepted."""
    seat = game.current_seat
    result = game.apply_action(seat.id, action)
    assert result.ok, (seat.name, action, result)
    return seat


def check_around(game):
    """Everyone checks until the betting phase changes."""
    phase = game.phase
    while game.phase == phase:
        act(game, Action.check())


def to_trick_phase(game):
    game.start_hand()
    while game.phase != Phase.TRICK:
        check_around(game)


def chips_in_play(game):
    return sum(s.stack for s in game.state.seats) + game.state.pot


class FixedRandom(random.Random):
    """A Random whose ``random()`` always returns the same value."""

    def __init__(self, value):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


@pytest.fixture
def game():
    return make_game()


@pytest.fixture
def started(game):
    assert game.start_hand().ok
    return game
