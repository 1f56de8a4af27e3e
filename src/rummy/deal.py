"""
Shuffle, deal and pile handling for one round.

13 cards each, dealt one at a time round-robin. The card after the hands is
the wild indicator (never a printed joker), the next one opens the discard
pile and the rest is the closed draw pile. The indicator sits face-up under
the draw pile, so it is the last card that can be drawn.
"""
from __future__ import annotations

import random
from enum import Enum
from typing import NamedTuple, Sequence, TypeVar

from .deck import CARDS_PER_PLAYER, Card, make_shoe

T = TypeVar("T")

MIN_PLAYERS = 2
MAX_PLAYERS = 6


class TurnPhase(str, Enum):
    """A turn is a draw followed by a discard (or a declaration)."""
    DRAW = "draw"
    DISCARD = "discard"


class DrawSource(str, Enum):
    DECK = "deck"
    DISCARD = "discard"


def shuffle(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Fisher-Yates over a copy; ``items`` is left untouched."""
    if rng is None:
        rng = random.Random()
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


class DealResult(NamedTuple):
    """Hands by player id, closed draw pile (index 0 = next card), discard pile (last = top)."""
    hands: dict[str, list[Card]]
    draw_pile: list[Card]
    discard_pile: list[Card]
    wild_indicator: Card | None


def mark_wild_jokers(cards: list[Card], indicator: Card | None) -> list[Card]:
    """Promote every card sharing the indicator's rank (except the indicator itself)."""
    if indicator is None:
        return list(cards)
    return [
        c.promote_to_wild()
        if not c.is_printed_joker() and c.rank == indicator.rank and c.id != indicator.id
        else c
        for c in cards
    ]


def deal_round(
    player_ids: Sequence[str],
    shoe: list[Card] | None = None,
    rng: random.Random | None = None,
    cards_per_player: int = CARDS_PER_PLAYER,
) -> DealResult:
    """
    Shuffle ``shoe`` (a fresh 108-card shoe by default) and deal a round.

    If the card drawn for the indicator is a printed joker, the first natural
    card further down the pack is swapped into the indicator slot; the joker
    takes its place and otherwise keeps its position.

    Raises ValueError when the shoe cannot cover every hand plus the
    indicator and the open card.
    """
    if shoe is None:
        shoe = make_shoe()
    if len(player_ids) * cards_per_player + 2 > len(shoe):
        raise ValueError(
            f"{len(player_ids)} hands of {cards_per_player} do not fit in a {len(shoe)}-card shoe"
        )
    pack = shuffle(shoe, rng)
    hands: dict[str, list[Card]] = {pid: [] for pid in player_ids}

    idx = 0
    for _ in range(cards_per_player):
        for pid in player_ids:
            if idx < len(pack):
                hands[pid].append(pack[idx])
                idx += 1

    indicator: Card | None = None
    for i in range(idx, len(pack)):
        if not pack[i].is_printed_joker():
            pack[idx], pack[i] = pack[i], pack[idx]
            indicator = pack[idx]
            idx += 1
            break

    discard_pile: list[Card] = []
    if idx < len(pack):
        discard_pile.append(pack[idx])
        idx += 1

    draw_pile = pack[idx:]
    if indicator is not None:
        draw_pile.append(indicator)

    return DealResult(
        hands={pid: mark_wild_jokers(h, indicator) for pid, h in hands.items()},
        draw_pile=mark_wild_jokers(draw_pile, indicator),
        discard_pile=mark_wild_jokers(discard_pile, indicator),
        wild_indicator=indicator,
    )


def draw_from_pile(draw_pile: list[Card]) -> tuple[Card | None, list[Card]]:
    """Take the next closed card. ``None`` means the pile is empty: refill first."""
    if not draw_pile:
        return None, []
    return draw_pile[0], list(draw_pile[1:])


def draw_from_discard(discard_pile: list[Card]) -> tuple[Card | None, list[Card]]:
    """Pick up the open card on top of the discard pile."""
    if not discard_pile:
        return None, []
    return discard_pile[-1], list(discard_pile[:-1])


def discard(discard_pile: list[Card], card: Card) -> list[Card]:
    return [*discard_pile, card]


def top_discard(discard_pile: list[Card]) -> Card | None:
    return discard_pile[-1] if discard_pile else None


def refill_draw_pile(
    draw_pile: list[Card],
    discard_pile: list[Card],
    rng: random.Random | None = None,
) -> tuple[list[Card], list[Card]]:
    """
    When the draw pile is exhausted, keep the top discard and reshuffle the
    rest into a new draw pile. With one discard or fewer nothing can be done:
    the piles come back unchanged and the caller has a stalemate to handle.
    """
    if draw_pile or len(discard_pile) <= 1:
        return draw_pile, discard_pile
    return shuffle(discard_pile[:-1], rng), [discard_pile[-1]]


def next_dealer(dealer: int, player_count: int) -> int:
    """Dealer rotates in play direction (0 -> 1 -> ... -> n-1 -> 0)."""
    return (dealer + 1) % player_count


def first_to_play(dealer: int, player_count: int) -> int:
    """The player after the dealer takes the first turn."""
    return (dealer + 1) % player_count
