"""
Round scoring, running totals, eliminations and game end.

Round outcomes per player:
- declared validly: 0;
- declared invalidly: pool pays the configured penalty (80), the other
  variants pay the full value of the shown cards, uncapped;
- dropped on the first turn / later: first / middle drop penalty (25 / 50);
- still in when someone else ends the round: deadwood of the best
  arrangement of the hand, capped at 80 (0 if the hand itself declares).

Pool elimination is read from the running totals only, so a player who goes
past the limit in this round is out from the next computation on.

When a round ends, `rummy.game` records the points-rummy winnings on the
round result and the final ranks on a finished game.
"""
from __future__ import annotations

from enum import Enum
from typing import Mapping, Sequence

from .arrangement import auto_arrange_hand
from .config import GameConfig, Variant
from .deck import Card, cards_point_total


class DeclarationType(str, Enum):
    """How a round ended (for the round winner / declarer)."""

    VALID = "valid"
    INVALID = "invalid"
    DROP_FIRST = "drop-first"
    DROP_MIDDLE = "drop-middle"


class DropKind(str, Enum):
    FIRST = "first"
    MIDDLE = "middle"

    @property
    def declaration_type(self) -> DeclarationType:
        return DeclarationType.DROP_FIRST if self == DropKind.FIRST else DeclarationType.DROP_MIDDLE


def drop_penalty(kind: DropKind, config: GameConfig) -> int:
    return config.first_drop_penalty if kind == DropKind.FIRST else config.middle_drop_penalty


def calculate_hand_points(hand: Sequence[Card], max_points: int = 80) -> int:
    """Points for a player still in at round end (0 if the hand could declare)."""
    analysis = auto_arrange_hand(hand)
    if analysis.can_declare:
        return 0
    return min(analysis.deadwood_points, max_points)


def invalid_declaration_points(cards: Sequence[Card], config: GameConfig) -> int:
    if config.variant == Variant.POOL:
        return config.invalid_declaration_penalty
    return cards_point_total(list(cards))


def calculate_round_scores(
    hands: Mapping[str, Sequence[Card]],
    winner_id: str,
    declaration_type: DeclarationType,
    config: GameConfig,
    dropped: Mapping[str, DropKind] | None = None,
) -> dict[str, int]:
    """
    Score every player listed in ``hands``.

    ``winner_id`` is the declarer (valid or not) or, when everybody else
    dropped, the last player left; that player scores 0 unless the
    declaration was invalid. Players in ``dropped`` pay their drop penalty.
    """
    dropped = dropped or {}
    scores: dict[str, int] = {}
    for pid, hand in hands.items():
        if pid == winner_id:
            if declaration_type == DeclarationType.INVALID:
                scores[pid] = invalid_declaration_points(hand, config)
            else:
                scores[pid] = 0
        elif pid in dropped:
            scores[pid] = drop_penalty(dropped[pid], config)
        else:
            scores[pid] = calculate_hand_points(hand, config.max_round_points)
    return scores


def update_cumulative_scores(
    current: Mapping[str, int],
    round_scores: Mapping[str, int],
) -> dict[str, int]:
    updated = dict(current)
    for pid, pts in round_scores.items():
        updated[pid] = updated.get(pid, 0) + pts
    return updated


def is_player_eliminated(score: int, config: GameConfig) -> bool:
    """Pool only: out once the total is strictly above the limit."""
    if config.variant != Variant.POOL:
        return False
    return score > config.pool_limit


def active_players(
    player_ids: Sequence[str],
    scores: Mapping[str, int],
    config: GameConfig,
) -> list[str]:
    return [pid for pid in player_ids if not is_player_eliminated(scores.get(pid, 0), config)]


def should_game_end(
    player_ids: Sequence[str],
    scores: Mapping[str, int],
    rounds_played: int,
    config: GameConfig,
) -> bool:
    if config.variant == Variant.POOL:
        return len(active_players(player_ids, scores, config)) <= 1
    if config.variant == Variant.DEALS:
        return rounds_played >= config.number_of_deals
    return rounds_played >= 1


def determine_game_winner(
    player_ids: Sequence[str],
    scores: Mapping[str, int],
    config: GameConfig,
) -> str | None:
    """
    Pool: the only player left (``None`` while several remain); if the last
    round knocked everybody out, the lowest total wins.
    Deals / points: lowest total, the first one in seat order on a tie.
    """
    if config.variant == Variant.POOL:
        remaining = active_players(player_ids, scores, config)
        if len(remaining) > 1:
            return None
        if remaining:
            return remaining[0]
    winner: str | None = None
    lowest: int | None = None
    for pid in player_ids:
        score = scores.get(pid, 0)
        if lowest is None or score < lowest:
            winner, lowest = pid, score
    return winner


def points_rummy_winnings(
    winner_id: str,
    round_scores: Mapping[str, int],
    point_value: float,
) -> float:
    """What the losers pay the winner in points rummy."""
    return sum(pts for pid, pts in round_scores.items() if pid != winner_id) * point_value


def player_ranks(
    player_ids: Sequence[str],
    scores: Mapping[str, int],
    config: GameConfig,
) -> list[tuple[str, int, int]]:
    """(player id, rank, score) best first; eliminated pool players rank after everyone else."""
    ordered = sorted(
        player_ids,
        key=lambda pid: (is_player_eliminated(scores.get(pid, 0), config), scores.get(pid, 0)),
    )
    return [(pid, i + 1, scores.get(pid, 0)) for i, pid in enumerate(ordered)]


def in_compulsory_play(score: int, config: GameConfig) -> bool:
    """Too close to the pool limit to afford even a first drop."""
    return config.pool_limit - score < config.first_drop_penalty


def can_rejoin(
    player_id: str,
    player_ids: Sequence[str],
    scores: Mapping[str, int],
    config: GameConfig,
) -> bool:
    if config.variant != Variant.POOL or player_id not in player_ids:
        return False
    if not is_player_eliminated(scores.get(player_id, 0), config):
        return False
    remaining = active_players(player_ids, scores, config)
    return not any(in_compulsory_play(scores.get(pid, 0), config) for pid in remaining)


def rejoin_score(
    player_ids: Sequence[str],
    scores: Mapping[str, int],
    config: GameConfig,
) -> int:
    """A rejoining player restarts one point above the highest active total."""
    remaining = active_players(player_ids, scores, config)
    if not remaining:
        return 0
    return max(scores.get(pid, 0) for pid in remaining) + 1
