"""
Hand helpers: sorting, grouping, deadwood and a quick hand-quality estimate.
"""
from __future__ import annotations

from typing import Iterable, NamedTuple, Sequence

from .deck import Card, Suit, cards_point_total, rank_index


def _joker_last_key(card: Card) -> int:
    if card.is_printed_joker():
        return 2
    if card.is_wild():
        return 1
    return 0


def sort_by_suit(cards: Iterable[Card]) -> list[Card]:
    """Naturals by suit then rank; wild jokers, then printed jokers, at the end."""
    return sorted(cards, key=lambda c: (_joker_last_key(c), c.suit, c.rank, c.id))


def sort_by_rank(cards: Iterable[Card]) -> list[Card]:
    return sorted(cards, key=lambda c: (_joker_last_key(c), c.rank, c.suit, c.id))


def group_by_suit(cards: Iterable[Card]) -> dict[Suit, list[Card]]:
    """Naturals and wilds per suit (printed jokers have no suit), each sorted by rank."""
    groups: dict[Suit, list[Card]] = {s: [] for s in Suit}
    for c in cards:
        if not c.is_printed_joker():
            groups[c.suit].append(c)
    for s in groups:
        groups[s].sort(key=lambda c: (c.rank, c.id))
    return groups


def group_by_rank(cards: Iterable[Card]) -> dict[int, list[Card]]:
    groups: dict[int, list[Card]] = {}
    for c in cards:
        if not c.is_printed_joker():
            groups.setdefault(c.rank, []).append(c)
    return groups


def jokers(cards: Iterable[Card]) -> list[Card]:
    return [c for c in cards if c.is_joker()]


def non_jokers(cards: Iterable[Card]) -> list[Card]:
    return [c for c in cards if not c.is_joker()]


def deadwood_points(cards: Iterable[Card]) -> int:
    return cards_point_total(list(cards))


def distinct_suits(cards: Iterable[Card]) -> list[Card]:
    """First card of each suit, in input order."""
    seen: set[Suit] = set()
    result: list[Card] = []
    for c in cards:
        if c.suit not in seen:
            seen.add(c.suit)
            result.append(c)
    return result


def consecutive_runs(
    cards: Sequence[Card],
    min_length: int = 3,
    ace_high: bool = False,
) -> list[list[Card]]:
    """
    Maximal runs of consecutive ranks among same-suit ``cards``.
    A second copy of a rank is skipped rather than breaking the run.
    """
    ordered = sorted(cards, key=lambda c: (rank_index(c.rank, ace_high), c.id))
    runs: list[list[Card]] = []
    current: list[Card] = []
    for c in ordered:
        idx = rank_index(c.rank, ace_high)
        if current and idx == rank_index(current[-1].rank, ace_high):
            continue
        if current and idx == rank_index(current[-1].rank, ace_high) + 1:
            current.append(c)
            continue
        if len(current) >= min_length:
            runs.append(current)
        current = [c]
    if len(current) >= min_length:
        runs.append(current)
    return runs


def find_potential_sequences(cards: Sequence[Card]) -> list[list[Card]]:
    """Runs of 3+ in one suit's cards, plus A-2-3 when all three are there."""
    runs = consecutive_runs(cards)
    by_rank = {c.rank: c for c in sorted(cards, key=lambda c: c.id, reverse=True)}
    if all(r in by_rank for r in (1, 2, 3)):
        runs.append([by_rank[1], by_rank[2], by_rank[3]])
    return runs


def find_potential_sets(cards: Iterable[Card]) -> list[list[Card]]:
    """Groups of 3-4 same-rank cards in distinct suits."""
    sets: list[list[Card]] = []
    for rank_cards in group_by_rank(cards).values():
        unique = distinct_suits(rank_cards)
        if len(unique) >= 3:
            sets.append(unique[:4])
    return sets


def add_card(hand: Sequence[Card], card: Card) -> list[Card]:
    return [*hand, card]


def remove_card(hand: Sequence[Card], card_id: str) -> list[Card]:
    return [c for c in hand if c.id != card_id]


def contains_card(hand: Iterable[Card], card_id: str) -> bool:
    return any(c.id == card_id for c in hand)


def find_card(hand: Iterable[Card], card_id: str) -> Card | None:
    for c in hand:
        if c.id == card_id:
            return c
    return None


def evaluate_hand(hand: Sequence[Card]) -> int:
    """
    Rough quality score, lower is better: total points minus 5 per card that
    sits in a potential run or set, with each joker counting as two such cards.
    """
    naturals = non_jokers(hand)
    meld_cards = 0
    for suit_cards in group_by_suit(naturals).values():
        for run in find_potential_sequences(suit_cards):
            meld_cards += len(run)
    for group in find_potential_sets(naturals):
        meld_cards += len(group)
    meld_cards += 2 * len(jokers(hand))
    return deadwood_points(hand) - 5 * meld_cards


class GroupedCard(NamedTuple):
    card: Card
    group: int


def smart_sort_with_groups(cards: Sequence[Card]) -> list[GroupedCard]:
    """
    Order a hand for display: same-suit neighbour chains (2+) longest first,
    then same-rank groups, then the rest by suit, printed jokers last. Each
    card is tagged with its group index so a UI can leave gaps between groups.
    """
    result: list[GroupedCard] = []
    used: set[str] = set()
    group = 0

    chains: list[list[Card]] = []
    for suit_cards in group_by_suit(cards).values():
        ordered = sorted(suit_cards, key=lambda c: (rank_index(c.rank), c.id))
        current: list[Card] = []
        for c in ordered:
            if current and c.rank == current[-1].rank + 1:
                current.append(c)
                continue
            if len(current) >= 2:
                chains.append(current)
            current = [c]
        if len(current) >= 2:
            chains.append(current)
    chains.sort(key=len, reverse=True)

    remaining = [c for c in cards if c.id not in {x.id for chain in chains for x in chain}]
    pairs = [g for g in group_by_rank(remaining).values() if len(g) >= 2]
    pairs.sort(key=len, reverse=True)

    for block in [*chains, *pairs]:
        fresh = [c for c in block if c.id not in used]
        if not fresh:
            continue
        for c in fresh:
            result.append(GroupedCard(c, group))
            used.add(c.id)
        group += 1

    rest = sort_by_suit(c for c in cards if c.id not in used and not c.is_printed_joker())
    if rest:
        result.extend(GroupedCard(c, group) for c in rest)
        used.update(c.id for c in rest)
        group += 1

    result.extend(GroupedCard(c, group) for c in cards if c.is_printed_joker() and c.id not in used)
    return result


def smart_sort(cards: Sequence[Card]) -> list[Card]:
    return [g.card for g in smart_sort_with_groups(cards)]
