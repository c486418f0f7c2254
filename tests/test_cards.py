import random

import pytest

from trumpswap.cards import (
    deal,
    is_valid_card,
    make_deck,
    pretty,
    rank_value,
    shuffled_deck,
    sort_hand,
)
from trumpswap.errors import DeckExhaustedError


def test_deck_has_52_unique_cards():
    deck = make_deck()
    assert len(deck) == 52
    assert len(set(deck)) == 52
    assert all(is_valid_card(c) for c in deck)


def test_shuffle_is_a_reproducible_permutation():
    a = shuffled_deck(random.Random(3))
    b = shuffled_deck(random.Random(3))
    assert a == b
    assert sorted(a) == sorted(make_deck())
    assert a != make_deck()


def test_deal_pops_from_the_end():
    deck = make_deck()
    last_two = deck[-2:]
    dealt = deal(deck, 2)
    assert dealt == [last_two[1], last_two[0]]
    assert len(deck) == 50


def test_deal_past_the_end_is_a_programming_error():
    deck = make_deck()[:3]
    with pytest.raises(DeckExhaustedError):
        deal(deck, 4)


def test_rank_order():
    assert rank_value("2S") == 2
    assert rank_value("TD") == 10
    assert rank_value("AH") == 14
    assert rank_value("KC") > rank_value("QC") > rank_value("JC")


def test_card_validation_and_display():
    assert not is_valid_card("1S")
    assert not is_valid_card("AX")
    assert not is_valid_card(12)
    assert pretty("TH") == "10♥"
    assert pretty("AS") == "A♠"


def test_sort_hand_groups_by_suit_then_rank():
    assert sort_hand(["AH", "2S", "3H", "KS"]) == ["2S", "KS", "3H", "AH"]
