import pytest

from trumpswap.config import TableConfig
from trumpswap.errors import GameConfigError


def test_defaults():
    config = TableConfig()
    assert config.max_seats == 6
    assert config.starting_stack == 1000
    assert config.hand_size == 7
    assert config.swap_cost_ratio == 0.5
    assert config.log_size == 40


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_seats": 7},
        {"min_seats": 1},
        {"max_seats": 2, "min_seats": 3},
        {"starting_stack": 0},
        {"swap_cost_ratio": 0},
        {"swap_cost_ratio": 1.5},
        {"hand_size": 0},
        {"log_size": 0},
        {"bot_delay": -1},
    ],
)
def test_invalid_settings_are_rejected(kwargs):
    with pytest.raises(GameConfigError):
        TableConfig(**kwargs)


def test_deck_budget_allows_bigger_hands_at_smaller_tables():
    config = TableConfig(max_seats=4, hand_size=10)
    assert config.hand_size == 10


def test_from_env():
    config = TableConfig.from_env(
        {
            "TRUMPSWAP_STARTING_STACK": "500",
            "TRUMPSWAP_SWAP_COST_RATIO": "0.25",
            "TRUMPSWAP_RANDOM_SEED": "9",
            "TRUMPSWAP_LOG_LEVEL": "debug",
            "UNRELATED": "x",
        }
    )
    assert config.starting_stack == 500
    assert config.swap_cost_ratio == 0.25
    assert config.random_seed == 9
    assert config.log_level == "DEBUG"


def test_from_env_rejects_garbage():
    with pytest.raises(GameConfigError):
        TableConfig.from_env({"TRUMPSWAP_PORT": "eighty"})
