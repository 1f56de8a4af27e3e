"""
Computer opponents: decision types and difficulty dispatch.

A strategy is a plain function ``BotContext -> BotDecision``; the three tiers
live in ``rummy.strategies`` and are looked up by difficulty here. Every
decision carries a thinking time so a caller can pace bot turns, drawn from a
separate random source so it never changes what the bot does.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Sequence

from .deal import DrawSource, TurnPhase
from .deck import Card
from .meld import Meld


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class BotAction(str, Enum):
    DRAW = "draw"
    DISCARD = "discard"
    DECLARE = "declare"
    DROP = "drop"


@dataclass
class BotContext:
    """Everything a bot may look at when it is its turn."""

    hand: Sequence[Card]
    top_discard: Card | None
    discard_history: Sequence[Card] = ()
    is_first_turn: bool = False
    current_score: int = 0
    pool_limit: int | None = None
    turn_phase: TurnPhase = TurnPhase.DRAW
    rng: random.Random = field(default_factory=random.Random)
    first_drop_penalty: int = 25
    middle_drop_penalty: int = 50


@dataclass(frozen=True)
class BotDecision:
    """
    One bot action. ``source`` is set for draws, ``card`` for discards (and
    for a declaration: the card put down before showing), ``melds`` for
    declarations.
    """

    action: BotAction
    source: DrawSource | None = None
    card: Card | None = None
    melds: tuple[Meld, ...] = ()
    thinking_time_ms: int = 0


Strategy = Callable[[BotContext], BotDecision]

THINKING_TIME_MS: dict[Difficulty, tuple[int, int]] = {
    Difficulty.EASY: (500, 1000),
    Difficulty.MEDIUM: (500, 1500),
    Difficulty.HARD: (500, 2000),
}

BOT_NAMES: dict[Difficulty, tuple[str, ...]] = {
    Difficulty.EASY: ("Beginner Bot", "Novice Bot", "Learner Bot", "Starter Bot"),
    Difficulty.MEDIUM: ("Regular Bot", "Average Bot", "Standard Bot", "Normal Bot"),
    Difficulty.HARD: ("Expert Bot", "Master Bot", "Pro Bot", "Champion Bot"),
}


def thinking_time(difficulty: Difficulty, timing_rng: random.Random | None = None) -> int:
    """Milliseconds a bot of this tier pretends to think."""
    if timing_rng is None:
        timing_rng = random.Random()
    low, high = THINKING_TIME_MS[Difficulty(difficulty)]
    return timing_rng.randint(low, high)


def bot_name(difficulty: Difficulty, index: int) -> str:
    names = BOT_NAMES[Difficulty(difficulty)]
    return names[index % len(names)]


def bot_avatar(difficulty: Difficulty, index: int) -> str:
    return f"bot-{Difficulty(difficulty).value}-{index}"


def _strategies() -> dict[Difficulty, Strategy]:
    from .strategies import easy_decide, hard_decide, medium_decide

    return {
        Difficulty.EASY: easy_decide,
        Difficulty.MEDIUM: medium_decide,
        Difficulty.HARD: hard_decide,
    }


def get_bot_decision(
    difficulty: Difficulty,
    context: BotContext,
    timing_rng: random.Random | None = None,
) -> BotDecision:
    """Run the strategy for ``difficulty`` and stamp its thinking time."""
    difficulty = Difficulty(difficulty)
    decision = _strategies()[difficulty](context)
    return BotDecision(
        action=decision.action,
        source=decision.source,
        card=decision.card,
        melds=decision.melds,
        thinking_time_ms=thinking_time(difficulty, timing_rng),
    )


__all__ = [
    "BotAction",
    "BotContext",
    "BotDecision",
    "Difficulty",
    "Strategy",
    "bot_avatar",
    "bot_name",
    "get_bot_decision",
    "thinking_time",
]
