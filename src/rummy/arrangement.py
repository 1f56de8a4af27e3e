"""
Hand arrangement: split a hand into melds so that as few points as possible
are left as deadwood.

Trying every partition is exponential, so the search is a bounded greedy one:

1. set jokers (printed and wild) aside;
2. list every same-suit run of 3+ naturals, with its 3+ windows, as a
   candidate pure sequence (ace-low runs, Q-K-A style ace-high runs and the
   A-2-3 run);
3. for each candidate, longest first, seed the arrangement with it, then
   greedily take further runs and same-rank groups (sets) from what is left,
   then spend jokers on near-melds: a pair of one rank becomes a set, a
   same-suit pair one rank apart or with one missing rank between becomes a
   sequence, two jokers carry a lone card, and any joker still spare joins an
   existing meld;
4. whatever is left is deadwood.

The first arrangement that can be declared is returned as is; otherwise the
one with the fewest deadwood points (then fewest deadwood cards) wins, the
earliest seed winning ties. This is not guaranteed optimal for every joker
distribution, but it is deterministic for a given card order.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .deck import CARDS_PER_PLAYER, Card, Suit, rank_index
from .hand import consecutive_runs, deadwood_points, distinct_suits, group_by_rank
from .meld import Meld, MeldType, create_meld, is_valid_sequence, is_valid_set


@dataclass(frozen=True)
class HandAnalysis:
    """Best arrangement found for a hand, with the declaration requirements checked."""

    melds: tuple[Meld, ...]
    deadwood: tuple[Card, ...]
    deadwood_points: int
    has_pure_sequence: bool
    sequence_count: int
    can_declare: bool

    def melded_ids(self) -> set[str]:
        return {c.id for m in self.melds for c in m.cards}


def _analysis(melds: list[Meld], deadwood: list[Card]) -> HandAnalysis:
    sequences = [m for m in melds if m.type.is_sequence()]
    pure = [m for m in melds if m.type == MeldType.PURE_SEQUENCE]
    return HandAnalysis(
        melds=tuple(melds),
        deadwood=tuple(deadwood),
        deadwood_points=deadwood_points(deadwood),
        has_pure_sequence=bool(pure),
        sequence_count=len(sequences),
        can_declare=bool(pure) and len(sequences) >= 2 and not deadwood,
    )


def _without(cards: list[Card], used: Sequence[Card]) -> list[Card]:
    used_ids = {c.id for c in used}
    return [c for c in cards if c.id not in used_ids]


def _windows(run: list[Card]) -> list[list[Card]]:
    """The run itself, then every shorter window of 3+ cards."""
    out = [list(run)]
    for start in range(len(run) - 2):
        for end in range(start + 3, len(run) + 1):
            if end - start != len(run):
                out.append(run[start:end])
    return out


def pure_run_candidates(naturals: Sequence[Card]) -> list[list[Card]]:
    """Candidate pure sequences among natural cards, longest first (stable)."""
    found: list[list[Card]] = []
    seen: set[tuple[str, ...]] = set()

    def _add(cards: list[Card]) -> None:
        key = tuple(sorted(c.id for c in cards))
        if key not in seen:
            seen.add(key)
            found.append(cards)

    for suit in Suit:
        suit_cards = [c for c in naturals if c.suit == suit]
        if len(suit_cards) < 3:
            continue
        for run in consecutive_runs(suit_cards):
            for window in _windows(run):
                _add(window)
        for run in consecutive_runs(suit_cards, ace_high=True):
            if run[-1].rank == 1:
                for window in _windows(run):
                    if window[-1].rank == 1:
                        _add(window)
        low = {c.rank: c for c in reversed(sorted(suit_cards, key=lambda c: c.id))}
        if all(r in low for r in (1, 2, 3)):
            _add([low[1], low[2], low[3]])

    found.sort(key=len, reverse=True)
    return found


def _take_runs(remaining: list[Card], melds: list[Meld]) -> list[Card]:
    for run in pure_run_candidates(remaining):
        ids = {c.id for c in remaining}
        if all(c.id in ids for c in run):
            meld = create_meld(run)
            if meld is not None:
                melds.append(meld)
                remaining = _without(remaining, run)
    return remaining


def _take_sets(remaining: list[Card], melds: list[Meld]) -> list[Card]:
    for _, rank_cards in sorted(group_by_rank(remaining).items()):
        unique = distinct_suits(rank_cards)
        if len(unique) >= 3:
            meld = create_meld(unique[:4])
            if meld is not None:
                melds.append(meld)
                remaining = _without(remaining, unique[:4])
    return remaining


def _pair_sets(remaining: list[Card], spare: list[Card], melds: list[Meld]) -> list[Card]:
    for _, rank_cards in sorted(group_by_rank(remaining).items()):
        if not spare:
            break
        unique = distinct_suits(rank_cards)
        if len(unique) == 2:
            meld = create_meld([*unique, spare[0]])
            if meld is not None:
                melds.append(meld)
                remaining = _without(remaining, unique)
                spare.pop(0)
    return remaining


def _pair_sequences(
    remaining: list[Card],
    spare: list[Card],
    melds: list[Meld],
    rank_gap: int,
) -> list[Card]:
    """Same-suit neighbours ``rank_gap`` apart plus one joker (gap 2 = one hole)."""
    for suit in Suit:
        suit_cards = sorted((c for c in remaining if c.suit == suit), key=lambda c: (c.rank, c.id))
        i = 0
        while i < len(suit_cards) - 1 and spare:
            low, high = suit_cards[i], suit_cards[i + 1]
            if rank_index(high.rank) - rank_index(low.rank) == rank_gap:
                trio = [low, spare[0], high]
                meld = create_meld(trio) if is_valid_sequence(trio) else None
                if meld is not None:
                    melds.append(meld)
                    remaining = _without(remaining, [low, high])
                    spare.pop(0)
                    i += 2
                    continue
            i += 1
    return remaining


def _carry_singles(remaining: list[Card], spare: list[Card], melds: list[Meld]) -> list[Card]:
    """Two jokers make a meld out of any single card; spend them on the costliest cards."""
    for card in sorted(remaining, key=lambda c: (-c.value, c.id)):
        if len(spare) < 2:
            break
        meld = create_meld([card, spare[0], spare[1]])
        if meld is not None:
            melds.append(meld)
            remaining = _without(remaining, [card])
            del spare[:2]
    return remaining


def _attach_spare_jokers(spare: list[Card], melds: list[Meld]) -> None:
    """Put leftover jokers on melds that stay valid, never spoiling the last pure sequence."""
    while spare:
        pure_count = sum(1 for m in melds if m.type == MeldType.PURE_SEQUENCE)
        order = sorted(
            range(len(melds)),
            key=lambda i: (melds[i].type == MeldType.PURE_SEQUENCE, melds[i].type == MeldType.SET),
        )
        placed = False
        for i in order:
            meld = melds[i]
            if meld.type == MeldType.PURE_SEQUENCE and pure_count < 2:
                continue
            cards = [*meld.cards, spare[0]]
            ok = is_valid_set(cards) if meld.type == MeldType.SET else is_valid_sequence(cards)
            new = create_meld(cards) if ok else None
            if new is not None:
                melds[i] = new
                spare.pop(0)
                placed = True
                break
        if not placed:
            return


def _arrange_from(
    seed: list[Card] | None,
    naturals: list[Card],
    joker_cards: list[Card],
) -> HandAnalysis:
    melds: list[Meld] = []
    remaining = list(naturals)
    if seed:
        seed_meld = create_meld(seed)
        if seed_meld is not None:
            melds.append(seed_meld)
            remaining = _without(remaining, seed)

    remaining = _take_runs(remaining, melds)
    remaining = _take_sets(remaining, melds)

    spare = list(joker_cards)
    remaining = _pair_sets(remaining, spare, melds)
    remaining = _pair_sequences(remaining, spare, melds, rank_gap=2)
    remaining = _pair_sequences(remaining, spare, melds, rank_gap=1)
    remaining = _carry_singles(remaining, spare, melds)
    _attach_spare_jokers(spare, melds)

    return _analysis(melds, [*remaining, *spare])


def _rank_key(analysis: HandAnalysis) -> tuple[int, int]:
    return analysis.deadwood_points, len(analysis.deadwood)


def auto_arrange_hand(cards: Sequence[Card]) -> HandAnalysis:
    """Best arrangement the heuristic finds for ``cards`` (any size)."""
    joker_cards = [c for c in cards if c.is_joker()]
    naturals = [c for c in cards if not c.is_joker()]

    best = _analysis([], list(cards))
    candidates = pure_run_candidates(naturals)
    for seed in candidates:
        result = _arrange_from(seed, naturals, joker_cards)
        if result.can_declare:
            return result
        if _rank_key(result) < _rank_key(best):
            best = result

    if not candidates:
        best = _arrange_from(None, naturals, joker_cards)
    return best


def can_declare(cards: Sequence[Card]) -> bool:
    """True if these 13 cards can be laid down as a valid declaration."""
    if len(cards) != CARDS_PER_PLAYER:
        return False
    return auto_arrange_hand(cards).can_declare


def find_declaration(hand: Sequence[Card]) -> tuple[Card, HandAnalysis] | None:
    """
    For a 14-card hand (after drawing), find a card to put down so the other
    13 declare. Costly naturals are tried first, jokers last.
    """
    if len(hand) != CARDS_PER_PLAYER + 1:
        return None
    tried: set[tuple[int, int, str]] = set()
    for card in sorted(hand, key=lambda c: (c.is_joker(), -c.value, c.id)):
        shape = (int(card.suit), card.rank, card.joker_type.value)
        if shape in tried:
            continue
        tried.add(shape)
        rest = [c for c in hand if c.id != card.id]
        analysis = auto_arrange_hand(rest)
        if analysis.can_declare:
            return card, analysis
    return None


def declaration_hints(cards: Sequence[Card]) -> list[str]:
    """Human-readable reasons why the best arrangement cannot be declared yet."""
    analysis = auto_arrange_hand(cards)
    hints: list[str] = []
    if not analysis.has_pure_sequence:
        hints.append("You need at least one pure sequence (no jokers)")
    if analysis.sequence_count < 2:
        hints.append(f"You need at least 2 sequences (you have {analysis.sequence_count})")
    if analysis.deadwood:
        hints.append(
            f"You have {len(analysis.deadwood)} unmelded cards worth {analysis.deadwood_points} points"
        )
    return hints
