"""
Meld legality: sets, sequences and pure sequences, with joker substitution.

Set: 3-4 cards, one rank, all suits distinct. Sequence: 3+ consecutive cards
of one suit. A-2-3 and Q-K-A are sequences, K-A-2 is not. A sequence is pure
when no joker stands in for a missing card.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from .deck import Card, rank_index

MIN_MELD_SIZE = 3
MAX_SET_SIZE = 4


class MeldType(str, Enum):
    SET = "set"
    SEQUENCE = "sequence"
    PURE_SEQUENCE = "pure-sequence"

    def is_sequence(self) -> bool:
        return self in (MeldType.SEQUENCE, MeldType.PURE_SEQUENCE)


@dataclass(frozen=True)
class Meld:
    """A group of cards claimed (or found) to be a meld of ``type``."""

    type: MeldType
    cards: tuple[Card, ...] = field(default_factory=tuple)

    @property
    def is_pure(self) -> bool:
        return self.type == MeldType.PURE_SEQUENCE

    def __len__(self) -> int:
        return len(self.cards)


def _split_jokers(cards: Sequence[Card]) -> tuple[list[Card], int]:
    naturals = [c for c in cards if not c.is_joker()]
    return naturals, len(cards) - len(naturals)


def _prefers_ace_high(cards: Sequence[Card]) -> bool:
    """Ace plays high only next to 10-K and away from 2-4."""
    ranks = {c.rank for c in cards}
    has_ace = 1 in ranks
    has_low = any(2 <= r <= 4 for r in ranks)
    has_high = any(10 <= r <= 13 for r in ranks)
    return has_ace and has_high and not has_low


def _gaps_fit(naturals: Sequence[Card], jokers: int, ace_high: bool) -> bool:
    """Sorted under one ace reading, the holes between cards must fit in ``jokers``."""
    ordered = sorted(rank_index(c.rank, ace_high) for c in naturals)
    needed = 0
    for prev, curr in zip(ordered, ordered[1:]):
        gap = curr - prev - 1
        if gap < 0:
            return False
        needed += gap
        if needed > jokers:
            return False
    return True


def is_valid_set(cards: Sequence[Card]) -> bool:
    if not MIN_MELD_SIZE <= len(cards) <= MAX_SET_SIZE:
        return False
    naturals, jokers = _split_jokers(cards)
    if not naturals:
        return False
    if any(c.rank != naturals[0].rank for c in naturals):
        return False
    if len({c.suit for c in naturals}) != len(naturals):
        return False
    return len(naturals) + jokers >= MIN_MELD_SIZE


def is_valid_sequence(cards: Sequence[Card]) -> bool:
    """
    Order of ``cards`` does not matter. The preferred ace reading is tried
    first and, when the hand holds an ace, the opposite reading second.
    """
    if len(cards) < MIN_MELD_SIZE:
        return False
    naturals, jokers = _split_jokers(cards)
    if not naturals:
        return False
    if any(c.suit != naturals[0].suit for c in naturals):
        return False
    preferred = _prefers_ace_high(naturals)
    if _gaps_fit(naturals, jokers, preferred):
        return True
    has_ace = any(c.rank == 1 for c in naturals)
    return has_ace and _gaps_fit(naturals, jokers, not preferred)


def _is_natural_block(cards: Sequence[Card], ace_high: bool) -> bool:
    ordered = sorted(rank_index(c.rank, ace_high) for c in cards)
    return all(curr - prev == 1 for prev, curr in zip(ordered, ordered[1:]))


def is_pure_sequence(cards: Sequence[Card]) -> bool:
    """
    A wild joker keeps a sequence pure only when it sits in its own slot,
    i.e. all cards (wilds included) are one suit and one unbroken run.
    """
    if not is_valid_sequence(cards):
        return False
    if any(c.is_printed_joker() for c in cards):
        return False
    if not any(c.is_wild() for c in cards):
        return True
    if len({c.suit for c in cards}) != 1:
        return False
    preferred = _prefers_ace_high(cards)
    return _is_natural_block(cards, preferred) or _is_natural_block(cards, not preferred)


def get_meld_type(cards: Sequence[Card]) -> MeldType | None:
    if is_pure_sequence(cards):
        return MeldType.PURE_SEQUENCE
    if is_valid_sequence(cards):
        return MeldType.SEQUENCE
    if is_valid_set(cards):
        return MeldType.SET
    return None


def create_meld(cards: Sequence[Card]) -> Meld | None:
    meld_type = get_meld_type(cards)
    if meld_type is None:
        return None
    return Meld(type=meld_type, cards=tuple(cards))


def validate_meld(meld: Meld) -> bool:
    """True if the cards really form the claimed kind of meld."""
    actual = get_meld_type(meld.cards)
    return actual is not None and actual == meld.type


def can_add_to_meld(meld: Meld, card: Card) -> bool:
    cards = [*meld.cards, card]
    if meld.type == MeldType.SET:
        return is_valid_set(cards)
    return is_valid_sequence(cards)


def find_meld_extensions(meld: Meld, available: Sequence[Card]) -> list[Card]:
    return [c for c in available if can_add_to_meld(meld, c)]


def split_sequence(cards: Sequence[Card]) -> list[Meld]:
    """
    Break a long run into smaller melds: up to 5 cards stay together, longer
    runs are cut into chunks of 3 (the last chunk takes whatever is left).
    """
    if not is_valid_sequence(cards):
        return []
    if len(cards) <= 5:
        meld = create_meld(cards)
        return [meld] if meld else []

    melds: list[Meld] = []
    remaining = list(cards)
    while len(remaining) >= MIN_MELD_SIZE:
        size = 3 if len(remaining) >= 6 else len(remaining)
        meld = create_meld(remaining[:size])
        if meld:
            melds.append(meld)
        remaining = remaining[size:]
    return melds


def meld_cards(melds: Sequence[Meld]) -> list[Card]:
    return [c for m in melds for c in m.cards]
