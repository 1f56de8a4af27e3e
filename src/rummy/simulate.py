"""
Bot-only games for testing strategies against each other.

``play_bot_game`` runs one full game with every seat taken by a bot;
``simulate_games`` repeats it and aggregates scores, wins and round counts
with numpy.
"""
from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Sequence

import numpy as np

from .agents import BotAction, BotDecision, Difficulty, bot_avatar, get_bot_decision
from .config import GameConfig
from .deal import DrawSource
from .game import (
    GamePhase,
    GameState,
    Player,
    RoundPhase,
    apply_bot_decision,
    bot_context_for,
    current_player_id,
    new_game,
    start_round,
)

logger = logging.getLogger(__name__)

MAX_TURNS_PER_ROUND = 600


class BotGameResult(NamedTuple):
    state: GameState
    actions: int
    completed: bool


@dataclass
class SimulationSummary:
    games: int
    completed: int
    player_ids: List[str]
    difficulties: List[str]
    win_rates: Dict[str, float] = field(default_factory=dict)
    mean_scores: Dict[str, float] = field(default_factory=dict)
    std_scores: Dict[str, float] = field(default_factory=dict)
    mean_rounds: float = 0.0
    declaration_counts: Dict[str, int] = field(default_factory=dict)


def make_bot_players(difficulties: Sequence[Difficulty]) -> tuple[Player, ...]:
    players = []
    for i, difficulty in enumerate(difficulties):
        difficulty = Difficulty(difficulty)
        players.append(
            Player(
                id=f"bot-{i + 1}",
                name=f"{difficulty.value.title()} {i + 1}",
                is_bot=True,
                difficulty=difficulty,
                avatar=bot_avatar(difficulty, i),
            )
        )
    return tuple(players)


def _fallback(decision: BotDecision) -> BotDecision | None:
    """A deck draw with nothing to draw becomes a pickup from the discard pile."""
    if decision.action == BotAction.DRAW and decision.source == DrawSource.DECK:
        return BotDecision(action=BotAction.DRAW, source=DrawSource.DISCARD)
    return None


def play_bot_game(
    difficulties: Sequence[Difficulty],
    config: GameConfig | None = None,
    rng: random.Random | None = None,
    max_turns_per_round: int = MAX_TURNS_PER_ROUND,
) -> BotGameResult:
    """
    Play a whole game between bots. A round that runs past
    ``max_turns_per_round`` actions (piles exhausted, nobody declaring)
    stops the game and the result is flagged as not completed.
    """
    if rng is None:
        rng = random.Random()
    state = new_game(make_bot_players(difficulties), config, rng=rng)
    actions = 0
    round_actions = 0

    while state.phase == GamePhase.PLAYING:
        rnd = state.current_round
        if rnd is None or rnd.phase == RoundPhase.ENDED:
            next_state = start_round(state, rng)
            if next_state is None:
                break
            state = next_state
            round_actions = 0
            continue
        if round_actions >= max_turns_per_round:
            logger.warning("Round %d of game %s stalled; stopping", rnd.round_number, state.id)
            return BotGameResult(state, actions, False)

        pid = current_player_id(state)
        player = state.player(pid)
        context = bot_context_for(state, pid, rng)
        decision = get_bot_decision(player.difficulty or Difficulty.MEDIUM, context, rng)
        next_state = apply_bot_decision(state, pid, decision, rng)
        if next_state is None:
            alt = _fallback(decision)
            next_state = apply_bot_decision(state, pid, alt, rng) if alt else None
        if next_state is None:
            logger.warning("No legal move for %s in game %s; stopping", pid, state.id)
            return BotGameResult(state, actions, False)
        state = next_state
        actions += 1
        round_actions += 1

    return BotGameResult(state, actions, True)


def simulate_games(
    num_games: int,
    difficulties: Sequence[Difficulty],
    config: GameConfig | None = None,
    seed: int | None = None,
) -> SimulationSummary:
    """Play ``num_games`` bot games and aggregate per-seat results."""
    rng = random.Random(seed)
    players = make_bot_players(difficulties)
    ids = [p.id for p in players]
    scores = np.zeros((num_games, len(ids)), dtype=float)
    wins = np.zeros(len(ids), dtype=int)
    rounds = np.zeros(num_games, dtype=int)
    done = np.zeros(num_games, dtype=bool)
    declarations: Counter[str] = Counter()

    for g in range(num_games):
        result = play_bot_game(difficulties, config, rng=rng)
        state = result.state
        scores[g] = [state.scores.get(pid, 0) for pid in ids]
        rounds[g] = len(state.round_results)
        done[g] = result.completed
        if result.completed and state.winner_id in ids:
            wins[ids.index(state.winner_id)] += 1
        declarations.update(r.declaration_type.value for r in state.round_results)
        if (g + 1) % 10 == 0 or g + 1 == num_games:
            logger.info("Simulated %d/%d games", g + 1, num_games)

    completed = int(done.sum())
    finished = scores[done] if completed else np.zeros((0, len(ids)))
    return SimulationSummary(
        games=num_games,
        completed=completed,
        player_ids=ids,
        difficulties=[Difficulty(d).value for d in difficulties],
        win_rates={pid: float(wins[i] / completed) if completed else 0.0 for i, pid in enumerate(ids)},
        mean_scores={
            pid: float(finished[:, i].mean()) if completed else 0.0 for i, pid in enumerate(ids)
        },
        std_scores={
            pid: float(finished[:, i].std()) if completed else 0.0 for i, pid in enumerate(ids)
        },
        mean_rounds=float(rounds.mean()) if num_games else 0.0,
        declaration_counts=dict(declarations),
    )


__all__ = [
    "BotGameResult",
    "SimulationSummary",
    "make_bot_players",
    "play_bot_game",
    "simulate_games",
]
