"""Tests for round scoring, eliminations, game end and rejoin."""
import pytest

from rummy.config import GameConfig, Variant
from rummy.deck import parse_hand
from rummy.scoring import (
    DeclarationType,
    DropKind,
    active_players,
    calculate_hand_points,
    calculate_round_scores,
    can_rejoin,
    determine_game_winner,
    is_player_eliminated,
    player_ranks,
    points_rummy_winnings,
    rejoin_score,
    should_game_end,
    update_cumulative_scores,
)

READY = parse_hand("AS 2S 3S 5H 6H JK 9C 9D 9H KS KH KD KC")
BAD = parse_hand("KS QH JD 10C 9S 8H 7D KC QD JH 10S 9D 8C")


def test_config_validation():
    assert GameConfig().variant == Variant.POOL
    assert GameConfig(variant="deals").variant == Variant.DEALS
    with pytest.raises(ValueError):
        GameConfig(pool_limit=0)
    with pytest.raises(ValueError):
        GameConfig.deals(0)


def test_hand_points_capped_and_zero_for_ready_hand():
    assert calculate_hand_points(READY) == 0
    assert calculate_hand_points(BAD) == 80
    assert calculate_hand_points(BAD, max_points=200) == 121


def test_valid_declaration_scores():
    cfg = GameConfig.pool(101)
    scores = calculate_round_scores(
        {"a": READY, "b": BAD}, "a", DeclarationType.VALID, cfg
    )
    assert scores == {"a": 0, "b": 80}


def test_invalid_declaration_pool_vs_points():
    hands = {"a": BAD, "b": READY}
    pool = calculate_round_scores(hands, "a", DeclarationType.INVALID, GameConfig.pool())
    assert pool == {"a": 80, "b": 0}
    points = calculate_round_scores(hands, "a", DeclarationType.INVALID, GameConfig.points())
    assert points["a"] == 121


def test_drop_penalties_and_last_player_standing():
    cfg = GameConfig.pool(101)
    scores = calculate_round_scores(
        {"p1": BAD, "p2": BAD, "p3": BAD},
        "p3",
        DeclarationType.DROP_MIDDLE,
        cfg,
        dropped={"p1": DropKind.FIRST, "p2": DropKind.MIDDLE},
    )
    assert scores == {"p1": 25, "p2": 50, "p3": 0}


def test_two_player_pool_elimination():
    cfg = GameConfig.pool(101)
    ids = ["A", "B"]
    totals = update_cumulative_scores({"A": 0, "B": 45}, {"A": 30, "B": 60})
    assert totals == {"A": 30, "B": 105}
    assert is_player_eliminated(totals["B"], cfg)
    assert not is_player_eliminated(101, cfg)
    assert active_players(ids, totals, cfg) == ["A"]
    assert should_game_end(ids, totals, 2, cfg)
    assert determine_game_winner(ids, totals, cfg) == "A"


def test_pool_still_running_has_no_winner():
    cfg = GameConfig.pool(101)
    assert not should_game_end(["A", "B"], {"A": 30, "B": 60}, 3, cfg)
    assert determine_game_winner(["A", "B"], {"A": 30, "B": 60}, cfg) is None


def test_everyone_knocked_out_falls_back_to_lowest():
    cfg = GameConfig.pool(101)
    assert determine_game_winner(["A", "B"], {"A": 120, "B": 110}, cfg) == "B"


def test_deals_and_points_end_and_ties():
    deals = GameConfig.deals(2)
    assert not should_game_end(["a", "b"], {}, 1, deals)
    assert should_game_end(["a", "b"], {}, 2, deals)
    assert should_game_end(["a", "b"], {}, 1, GameConfig.points())
    scores = {"a": 10, "b": 10, "c": 20}
    assert determine_game_winner(["a", "b", "c"], scores, deals) == "a"
    assert not is_player_eliminated(500, deals)


def test_points_winnings():
    assert points_rummy_winnings("w", {"w": 0, "a": 20, "b": 30}, 2.0) == 100.0


def test_ranks_put_eliminated_last():
    cfg = GameConfig.pool(101)
    ranks = player_ranks(["a", "b", "c"], {"a": 110, "b": 60, "c": 20}, cfg)
    assert [(pid, rank) for pid, rank, _ in ranks] == [("c", 1), ("b", 2), ("a", 3)]


def test_rejoin_rules():
    cfg = GameConfig.pool(101)
    ids = ["a", "b", "c"]
    scores = {"a": 30, "b": 105, "c": 50}
    assert can_rejoin("b", ids, scores, cfg)
    assert not can_rejoin("a", ids, scores, cfg)
    assert rejoin_score(ids, scores, cfg) == 51

    compulsory = {"a": 30, "b": 105, "c": 80}
    assert not can_rejoin("b", ids, compulsory, cfg)
    assert not can_rejoin("b", ids, scores, GameConfig.points())
