"""Tests for the bot tiers."""
import random

import pytest

from rummy.agents import (
    THINKING_TIME_MS,
    BotAction,
    BotContext,
    Difficulty,
    bot_avatar,
    bot_name,
    get_bot_decision,
    thinking_time,
)
from rummy.deal import DrawSource, TurnPhase
from rummy.deck import parse_hand
from rummy.strategies import easy_decide, hard_decide, helps_form_meld, medium_decide

READY = "AS 2S 3S 5H 6H JK 9C 9D 9H KS KH KD KC"
BAD = "KS QH JD 10C 9S 8H 7D KC QD JH 10S 9D 8C"


def _context(hand, phase=TurnPhase.DRAW, top=None, seed=0, **kwargs):
    return BotContext(
        hand=parse_hand(hand),
        top_discard=parse_hand(top)[0] if top else None,
        turn_phase=phase,
        rng=random.Random(seed),
        **kwargs,
    )


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_thinking_time_within_tier_bounds(difficulty):
    low, high = THINKING_TIME_MS[difficulty]
    rng = random.Random(11)
    for _ in range(50):
        assert low <= thinking_time(difficulty, rng) <= high


def test_timing_source_does_not_change_decision():
    hand = BAD + " 2C"
    first = get_bot_decision(
        Difficulty.HARD, _context(hand, TurnPhase.DISCARD, seed=3), random.Random(1)
    )
    second = get_bot_decision(
        Difficulty.HARD, _context(hand, TurnPhase.DISCARD, seed=3), random.Random(99)
    )
    assert first.action == second.action == BotAction.DISCARD
    assert first.card == second.card


def test_names_and_avatars():
    assert bot_name(Difficulty.EASY, 0) == "Beginner Bot"
    assert bot_name("hard", 4) == bot_name(Difficulty.HARD, 0)
    assert bot_avatar(Difficulty.HARD, 2) == "bot-hard-2"


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_every_tier_declares_a_finished_hand(difficulty):
    ctx = _context(READY + " 8D", TurnPhase.DISCARD)
    decision = get_bot_decision(difficulty, ctx, random.Random(0))
    assert decision.action == BotAction.DECLARE
    assert decision.card.id == "diamonds-8-0"
    assert sum(len(m) for m in decision.melds) == 13


@pytest.mark.parametrize("decide", [medium_decide, hard_decide])
def test_smarter_tiers_pick_up_jokers(decide):
    decision = decide(_context(READY, top="JK"))
    assert decision.action == BotAction.DRAW
    assert decision.source == DrawSource.DISCARD


def test_medium_takes_card_that_builds_a_set():
    hand = "7S 7H 2C 4D 9S JH KC 3H 5C QD 10S 6D AH"
    assert helps_form_meld(parse_hand(hand), parse_hand("7D")[0])
    ctx = _context(hand, top="7D", pool_limit=101, current_score=40)
    decision = medium_decide(ctx)
    assert decision.source == DrawSource.DISCARD


def test_easy_never_throws_a_joker():
    hand = "JK 5H 6H 9C 9D 9H KS KH KD KC 2S 3S 4C JK"
    for seed in range(30):
        decision = easy_decide(_context(hand, TurnPhase.DISCARD, seed=seed))
        assert decision.action == BotAction.DISCARD
        assert not decision.card.is_joker()


def test_easy_only_drops_on_first_turn():
    for seed in range(50):
        decision = easy_decide(_context(BAD, seed=seed, is_first_turn=False))
        assert decision.action == BotAction.DRAW


def test_hard_keeps_hands_with_two_melds():
    hand = "AS 2S 3S 9C 9D 9H KS QH 7D 4C JD 8H 10C"
    for seed in range(30):
        decision = hard_decide(_context(hand, seed=seed, is_first_turn=True))
        assert decision.action == BotAction.DRAW


def test_hard_never_drops_into_elimination():
    ctx = _context(BAD, is_first_turn=True, pool_limit=101, current_score=90)
    assert hard_decide(ctx).action == BotAction.DRAW


def test_hard_drops_hopeless_hand_with_room_to_spare():
    ctx = _context(BAD, is_first_turn=True, pool_limit=201, current_score=0)
    assert hard_decide(ctx).action == BotAction.DROP
