"""
The three bot tiers as pure functions of a ``BotContext``.

- Easy: mostly draws blind, throws its highest cards, almost never drops.
- Medium: picks up jokers and cards that build melds, throws the unmelded
  card it values least, drops bad hands when it can afford to.
- Hard: also weighs the pickup by how much it improves the hand and reads the
  discard history to throw what opponents are not collecting.

All randomness comes from ``context.rng``. In the discard phase every tier
first checks whether some discard leaves a declarable 13-card hand.
"""
from __future__ import annotations

from typing import Collection, Sequence

from .agents import BotAction, BotContext, BotDecision
from .arrangement import auto_arrange_hand, find_declaration
from .deal import DrawSource, TurnPhase
from .deck import Card, rank_index
from .hand import evaluate_hand

EASY_DECK_PROBABILITY = 0.8
EASY_DROP_PROBABILITY = 0.05

MEDIUM_FIRST_DROP_PROBABILITY = 0.3
MEDIUM_MIDDLE_DROP_PROBABILITY = 0.15
MEDIUM_FIRST_DROP_HEADROOM = 50
MEDIUM_MIDDLE_DROP_HEADROOM = 80

HARD_FIRST_DROP_PROBABILITY = 0.4
HARD_MIDDLE_DROP_PROBABILITY = 0.25
HARD_PICKUP_GAIN = 10


def _draw(source: DrawSource) -> BotDecision:
    return BotDecision(action=BotAction.DRAW, source=source)


def _discard(card: Card) -> BotDecision:
    return BotDecision(action=BotAction.DISCARD, card=card)


def _drop() -> BotDecision:
    return BotDecision(action=BotAction.DROP)


def _try_declare(context: BotContext) -> BotDecision | None:
    if context.turn_phase != TurnPhase.DISCARD:
        return None
    found = find_declaration(context.hand)
    if found is None:
        return None
    card, analysis = found
    return BotDecision(action=BotAction.DECLARE, card=card, melds=analysis.melds)


def _headroom(context: BotContext) -> int | None:
    if context.pool_limit is None:
        return None
    return context.pool_limit - context.current_score


def helps_form_meld(hand: Sequence[Card], card: Card) -> bool:
    """
    The card would complete (or nearly complete) a set, or lands among at
    least two same-suit cards within two ranks of it.
    """
    same_rank = [c for c in hand if c.rank == card.rank and not c.is_joker()]
    if len(same_rank) >= 2 and len({c.suit for c in same_rank} | {card.suit}) >= 3:
        return True
    idx = rank_index(card.rank)
    near = [
        c
        for c in hand
        if c.suit == card.suit and not c.is_joker() and abs(rank_index(c.rank) - idx) <= 2
    ]
    return len(near) >= 2


def would_complete_meld(hand: Sequence[Card], card: Card) -> bool:
    """The card closes a set or a 3-card run outright."""
    same_rank = [c for c in hand if c.rank == card.rank and not c.is_joker()]
    if len(same_rank) >= 2 and len({c.suit for c in same_rank} | {card.suit}) >= 3:
        return True
    idx = rank_index(card.rank)
    ranks = {rank_index(c.rank) for c in hand if c.suit == card.suit and not c.is_joker()}
    return (
        {idx - 1, idx + 1} <= ranks
        or {idx - 2, idx - 1} <= ranks
        or {idx + 1, idx + 2} <= ranks
    )


def keep_score(card: Card, hand: Sequence[Card], melded_ids: Collection[str]) -> float:
    """How much a card is worth keeping; the lowest-scoring card is thrown."""
    if card.is_joker():
        return 1000.0
    others = [c for c in hand if c.id != card.id and c.id not in melded_ids]
    idx = rank_index(card.rank)
    same_rank = sum(1 for c in others if c.rank == card.rank)
    adjacent = sum(1 for c in others if c.suit == card.suit and abs(rank_index(c.rank) - idx) <= 1)
    return -card.value + 10 * same_rank + 15 * adjacent


def _lowest_value(hand: Sequence[Card]) -> Card:
    naturals = [c for c in hand if not c.is_joker()] or list(hand)
    return min(naturals, key=lambda c: c.value)


# Easy

def _easy_should_drop(context: BotContext) -> bool:
    if not context.is_first_turn:
        return False
    if context.rng.random() > EASY_DROP_PROBABILITY:
        return False
    analysis = auto_arrange_hand(context.hand)
    return analysis.deadwood_points > 70 and not analysis.melds


def _easy_draw_source(context: BotContext) -> DrawSource:
    top = context.top_discard
    if top is None or context.rng.random() < EASY_DECK_PROBABILITY:
        return DrawSource.DECK
    if top.is_joker() or top.value >= 10:
        return DrawSource.DISCARD
    return DrawSource.DECK


def _easy_discard(context: BotContext) -> Card:
    ordered = sorted(context.hand, key=lambda c: (c.is_joker(), -c.value))
    top_n = min(3, len(ordered))
    return ordered[context.rng.randrange(top_n)]


def easy_decide(context: BotContext) -> BotDecision:
    if context.turn_phase == TurnPhase.DRAW:
        if _easy_should_drop(context):
            return _drop()
        return _draw(_easy_draw_source(context))
    return _try_declare(context) or _discard(_easy_discard(context))


# Medium

def _medium_should_drop(context: BotContext) -> bool:
    analysis = auto_arrange_hand(context.hand)
    deadwood = analysis.deadwood_points
    if deadwood < 50:
        return False
    headroom = _headroom(context)
    if context.is_first_turn:
        if deadwood > 60 and not analysis.melds:
            if headroom is not None and headroom < MEDIUM_FIRST_DROP_HEADROOM:
                return False
            return context.rng.random() < MEDIUM_FIRST_DROP_PROBABILITY
        return False
    if deadwood > 70 and len(analysis.melds) <= 1:
        if headroom is not None and headroom < MEDIUM_MIDDLE_DROP_HEADROOM:
            return False
        return context.rng.random() < MEDIUM_MIDDLE_DROP_PROBABILITY
    return False


def _medium_draw_source(context: BotContext) -> DrawSource:
    top = context.top_discard
    if top is None:
        return DrawSource.DECK
    if top.is_joker() or helps_form_meld(context.hand, top):
        return DrawSource.DISCARD
    return DrawSource.DECK


def _medium_discard(context: BotContext) -> Card:
    analysis = auto_arrange_hand(context.hand)
    melded = analysis.melded_ids()
    candidates = [c for c in context.hand if c.id not in melded]
    if not candidates:
        return _lowest_value(context.hand)
    return min(candidates, key=lambda c: keep_score(c, context.hand, melded))


def medium_decide(context: BotContext) -> BotDecision:
    if context.turn_phase == TurnPhase.DRAW:
        if _medium_should_drop(context):
            return _drop()
        return _draw(_medium_draw_source(context))
    return _try_declare(context) or _discard(_medium_discard(context))


# Hard

def _hard_should_drop(context: BotContext) -> bool:
    analysis = auto_arrange_hand(context.hand)
    if len(analysis.melds) >= 2:
        return False
    penalty = context.first_drop_penalty if context.is_first_turn else context.middle_drop_penalty
    headroom = _headroom(context)
    if headroom is not None and penalty > headroom:
        return False
    deadwood = analysis.deadwood_points

    if context.is_first_turn:
        if headroom is not None:
            if headroom < 30:
                return False
            if headroom > 100 and deadwood > 65 and not analysis.melds:
                return True
        if deadwood > 70 and not analysis.melds:
            return context.rng.random() < HARD_FIRST_DROP_PROBABILITY
        return False

    if headroom is not None and headroom > 80 and deadwood > 75 and len(analysis.melds) <= 1:
        return context.rng.random() < HARD_MIDDLE_DROP_PROBABILITY
    return False


def _hard_draw_source(context: BotContext) -> DrawSource:
    top = context.top_discard
    if top is None:
        return DrawSource.DECK
    if top.is_joker():
        return DrawSource.DISCARD

    hand = list(context.hand)
    if evaluate_hand([*hand, top]) < evaluate_hand(hand) - HARD_PICKUP_GAIN:
        return DrawSource.DISCARD
    if would_complete_meld(hand, top):
        return DrawSource.DISCARD

    history = list(context.discard_history)
    if sum(1 for c in history if c.rank == top.rank) >= 2:
        return DrawSource.DECK
    if helps_form_meld(hand, top):
        idx = rank_index(top.rank)
        recently_thrown = any(
            c.suit == top.suit and abs(rank_index(c.rank) - idx) <= 2 for c in history[-5:]
        )
        if not recently_thrown:
            return DrawSource.DISCARD
    return DrawSource.DECK


def _hard_keep_score(
    card: Card,
    hand: Sequence[Card],
    history: Sequence[Card],
    melded_ids: Collection[str],
) -> float:
    score = keep_score(card, hand, melded_ids)
    idx = rank_index(card.rank)
    score -= 5 * sum(1 for c in history if c.rank == card.rank)
    score -= 3 * sum(1 for c in history if c.suit == card.suit and abs(rank_index(c.rank) - idx) <= 2)
    if sum(1 for c in history if c.suit == card.suit) >= 5:
        score -= 10
    score -= card.value * 0.5
    return score


def _hard_discard(context: BotContext) -> Card:
    analysis = auto_arrange_hand(context.hand)
    melded = analysis.melded_ids()
    candidates = [c for c in context.hand if c.id not in melded and not c.is_joker()]
    if not candidates:
        return _lowest_value(context.hand)
    history = list(context.discard_history)
    return min(candidates, key=lambda c: _hard_keep_score(c, context.hand, history, melded))


def hard_decide(context: BotContext) -> BotDecision:
    if context.turn_phase == TurnPhase.DRAW:
        if _hard_should_drop(context):
            return _drop()
        return _draw(_hard_draw_source(context))
    return _try_declare(context) or _discard(_hard_discard(context))


__all__ = [
    "easy_decide",
    "hard_decide",
    "helps_form_meld",
    "keep_score",
    "medium_decide",
    "would_complete_meld",
]
