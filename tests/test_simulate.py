"""Tests for bot-only games and their aggregation."""
import random

from rummy.agents import Difficulty
from rummy.config import GameConfig
from rummy.game import GamePhase
from rummy.simulate import make_bot_players, play_bot_game, simulate_games


def test_bot_players_take_every_seat():
    players = make_bot_players(["easy", Difficulty.HARD])
    assert [p.id for p in players] == ["bot-1", "bot-2"]
    assert all(p.is_bot for p in players)
    assert players[1].difficulty == Difficulty.HARD


def test_points_game_is_one_round():
    result = play_bot_game(
        [Difficulty.MEDIUM, Difficulty.HARD], GameConfig.points(), rng=random.Random(12)
    )
    state = result.state
    assert result.actions > 0
    if result.completed:
        assert state.phase == GamePhase.ENDED
        assert len(state.round_results) == 1
        assert state.winner_id in ("bot-1", "bot-2")
        assert state.scores[state.winner_id] == min(state.scores.values())


def test_stall_limit_stops_the_game():
    result = play_bot_game(
        [Difficulty.EASY, Difficulty.EASY],
        GameConfig.points(),
        rng=random.Random(1),
        max_turns_per_round=1,
    )
    if not result.completed:
        assert result.actions <= 1
        assert result.state.phase == GamePhase.PLAYING


def test_summary_fields():
    summary = simulate_games(3, ["easy", "hard"], GameConfig.points(), seed=4)
    assert summary.games == 3
    assert 0 <= summary.completed <= 3
    assert summary.player_ids == ["bot-1", "bot-2"]
    assert summary.difficulties == ["easy", "hard"]
    assert set(summary.win_rates) == {"bot-1", "bot-2"}
    assert all(0.0 <= r <= 1.0 for r in summary.win_rates.values())
    if summary.completed:
        assert abs(sum(summary.win_rates.values()) - 1.0) < 1e-9
    assert all(s >= 0 for s in summary.std_scores.values())
    assert 0.0 <= summary.mean_rounds <= 1.0
    assert sum(summary.declaration_counts.values()) <= 3


def test_simulation_is_reproducible():
    a = simulate_games(2, ["medium", "medium"], GameConfig.points(), seed=9)
    b = simulate_games(2, ["medium", "medium"], GameConfig.points(), seed=9)
    assert a.mean_scores == b.mean_scores
    assert a.declaration_counts == b.declaration_counts
