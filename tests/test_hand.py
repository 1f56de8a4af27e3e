"""Tests for hand helpers: sorting, grouping, runs and hand evaluation."""
import random

from rummy.deal import deal_round
from rummy.deck import parse_hand
from rummy.hand import (
    consecutive_runs,
    contains_card,
    deadwood_points,
    evaluate_hand,
    find_card,
    find_potential_sets,
    group_by_suit,
    remove_card,
    smart_sort,
    smart_sort_with_groups,
    sort_by_rank,
    sort_by_suit,
)


def _labels(cards):
    return [str(c) for c in cards]


def test_sorting_puts_jokers_last():
    cards = parse_hand("JK 5H* 3S 2H")
    assert _labels(sort_by_suit(cards)) == ["3♠", "2♥", "5♥*", "JK"]
    assert _labels(sort_by_rank(cards)) == ["2♥", "3♠", "5♥*", "JK"]


def test_group_by_suit_skips_printed_jokers():
    groups = group_by_suit(parse_hand("3S JK 2S 9D"))
    assert _labels(groups[list(groups)[0]]) == ["2♠", "3♠"]
    assert sum(len(g) for g in groups.values()) == 3


def test_runs_skip_second_copy():
    runs = consecutive_runs(parse_hand("3S 4S 4S 5S"))
    assert len(runs) == 1
    assert [c.rank for c in runs[0]] == [3, 4, 5]


def test_runs_with_high_ace():
    cards = parse_hand("QS KS AS")
    assert consecutive_runs(cards) == []
    high = consecutive_runs(cards, ace_high=True)
    assert [c.rank for c in high[0]] == [12, 13, 1]


def test_potential_sets():
    sets = find_potential_sets(parse_hand("7S 7H 7D 2C"))
    assert len(sets) == 1 and len(sets[0]) == 3


def test_deadwood_and_card_lookup():
    hand = parse_hand("KS 5H* 9D JK")
    assert deadwood_points(hand) == 19
    assert contains_card(hand, "spades-K-0")
    assert find_card(hand, "diamonds-9-0").rank == 9
    assert find_card(hand, "nope") is None
    assert len(remove_card(hand, "spades-K-0")) == 3


def test_evaluate_hand_rewards_melds():
    connected = parse_hand("10S JS QS 4H 9D")
    loose = parse_hand("10S JH 2C 4H 9D")
    assert evaluate_hand(connected) == 43 - 15
    assert evaluate_hand(connected) < evaluate_hand(loose)


def test_smart_sort_groups():
    grouped = smart_sort_with_groups(parse_hand("9C KS 5H JK 7H 9D 6H"))
    assert _labels(g.card for g in grouped) == ["5♥", "6♥", "7♥", "9♣", "9♦", "K♠", "JK"]
    assert [g.group for g in grouped] == [0, 0, 0, 1, 1, 2, 3]


def test_smart_sort_is_a_permutation():
    dealt = deal_round(["A", "B"], rng=random.Random(5))
    hand = dealt.hands["A"]
    assert sorted(c.id for c in smart_sort(hand)) == sorted(c.id for c in hand)
