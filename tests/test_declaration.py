"""Tests for declaration validation."""
from rummy.declaration import validate_declaration
from rummy.deck import parse_hand
from rummy.meld import Meld, MeldType, create_meld


def _melds(*groups):
    return [create_meld(parse_hand(g)) for g in groups]


def test_valid_declaration():
    melds = _melds("AS 2S 3S", "5H 6H JK", "9C 9D 9H", "KS KH KD KC")
    result = validate_declaration(melds)
    assert result.is_valid
    assert result.has_pure_sequence
    assert result.has_minimum_sequences
    assert result.all_cards_melded
    assert result.has_correct_card_count
    assert result.errors == ()
    assert result.deadwood_points == 0


def test_claimed_type_is_rederived():
    pure, impure, set_a, set_b = _melds("AS 2S 3S", "5H 6H JK", "9C 9D 9H", "KS KH KD KC")
    lying = Meld(MeldType.PURE_SEQUENCE, impure.cards)
    result = validate_declaration([pure, lying, set_a, set_b])
    assert not result.is_valid
    assert result.has_pure_sequence
    assert not result.has_minimum_sequences
    assert not result.all_cards_melded
    assert result.has_correct_card_count
    assert len(result.deadwood) == 3
    assert result.errors


def test_not_a_meld_goes_to_deadwood():
    pure, impure, set_a = _melds("AS 2S 3S", "5H 6H JK", "9C 9D 9H")
    junk = Meld(MeldType.SET, tuple(parse_hand("2C 7D KH 4C")))
    result = validate_declaration([pure, impure, set_a, junk])
    assert not result.is_valid
    assert not result.all_cards_melded
    assert result.deadwood_points == 2 + 7 + 10 + 4


def test_no_pure_sequence():
    melds = _melds("AS 2S JK", "5H 6H JK", "9C 9D 9H", "KS KH KD KC")
    result = validate_declaration(melds)
    assert not result.is_valid
    assert not result.has_pure_sequence
    assert result.has_minimum_sequences


def test_wrong_card_count_and_leftovers():
    melds = _melds("AS 2S 3S", "5H 6H JK", "9C 9D 9H", "KS KH KD")
    result = validate_declaration(melds)
    assert not result.is_valid
    assert not result.has_correct_card_count
    assert result.all_cards_melded

    leftover = validate_declaration(melds, parse_hand("8D"))
    assert leftover.has_correct_card_count
    assert not leftover.all_cards_melded
    assert leftover.deadwood_points == 8
