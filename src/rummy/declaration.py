"""
Declaration check: a player shows 13 cards split into melds (and, for an
invalid show, leftover cards). The claimed meld types are never trusted; each
meld is re-derived from its cards.

A declaration is valid when all of these hold:
- at least one pure sequence,
- at least two sequences in total (pure or not),
- no unmelded cards,
- exactly 13 cards shown.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .deck import CARDS_PER_PLAYER, Card, cards_point_total
from .meld import Meld, MeldType, get_meld_type

MIN_SEQUENCES = 2


@dataclass(frozen=True)
class DeclarationResult:
    is_valid: bool
    has_pure_sequence: bool
    has_minimum_sequences: bool
    all_cards_melded: bool
    has_correct_card_count: bool
    melds: tuple[Meld, ...] = field(default_factory=tuple)
    deadwood: tuple[Card, ...] = field(default_factory=tuple)
    deadwood_points: int = 0
    errors: tuple[str, ...] = field(default_factory=tuple)


def validate_declaration(
    melds: Sequence[Meld],
    deadwood: Sequence[Card] = (),
) -> DeclarationResult:
    errors: list[str] = []
    checked: list[Meld] = []
    unmelded = list(deadwood)

    for i, meld in enumerate(melds, start=1):
        actual = get_meld_type(meld.cards)
        if actual is None:
            errors.append(f"Group {i} is not a valid meld")
            unmelded.extend(meld.cards)
            continue
        if actual != meld.type:
            errors.append(f"Group {i} is a {actual.value}, not a {meld.type.value}")
            unmelded.extend(meld.cards)
            continue
        checked.append(meld)

    pure = sum(1 for m in checked if m.type == MeldType.PURE_SEQUENCE)
    sequences = sum(1 for m in checked if m.type.is_sequence())
    total = sum(len(m.cards) for m in melds) + len(deadwood)

    has_pure = pure >= 1
    has_min = sequences >= MIN_SEQUENCES
    all_melded = not unmelded
    correct_count = total == CARDS_PER_PLAYER

    if not has_pure:
        errors.append("At least one pure sequence is required")
    if not has_min:
        errors.append(f"At least {MIN_SEQUENCES} sequences are required (found {sequences})")
    if not all_melded:
        errors.append(f"{len(unmelded)} card(s) are not part of any meld")
    if not correct_count:
        errors.append(f"Expected {CARDS_PER_PLAYER} cards, got {total}")

    return DeclarationResult(
        is_valid=has_pure and has_min and all_melded and correct_count,
        has_pure_sequence=has_pure,
        has_minimum_sequences=has_min,
        all_cards_melded=all_melded,
        has_correct_card_count=correct_count,
        melds=tuple(checked),
        deadwood=tuple(unmelded),
        deadwood_points=cards_point_total(unmelded),
        errors=tuple(errors),
    )


__all__ = ["DeclarationResult", "MIN_SEQUENCES", "validate_declaration"]
