"""Tests for game snapshots and stores."""
import asyncio
import json
import logging
import random
from dataclasses import replace

import pytest

from rummy.config import GameConfig
from rummy.deal import DrawSource
from rummy.game import draw_card, drop, make_players, new_game
from rummy.persistence import (
    SCHEMA_VERSION,
    FileGameStore,
    MemoryGameStore,
    clear_game,
    game_state_from_dict,
    game_state_from_json,
    game_state_to_dict,
    game_state_to_json,
    load_game,
    save_game,
)


def _game_in_progress():
    state = new_game(make_players(2), GameConfig.pool(201), rng=random.Random(8), game_id="g-1")
    state = drop(state, "bot-1")
    return draw_card(state, "bot-2", DrawSource.DECK)


def _finished_round():
    state = new_game(make_players(1), GameConfig.deals(2), rng=random.Random(3), game_id="g-2")
    return drop(state, "bot-1")


def test_round_trip_dict():
    state = _game_in_progress()
    d = game_state_to_dict(state)
    assert d["schema_version"] == SCHEMA_VERSION
    assert "exported_at" in d
    restored = game_state_from_dict(d)
    assert restored == state
    assert restored.current_round.dropped == state.current_round.dropped
    assert restored.current_round.last_action.source == DrawSource.DECK


def test_round_trip_json_with_results():
    state = _finished_round()
    text = game_state_to_json(state)
    assert json.loads(text)["round_results"][0]["declaration_type"] == "drop-first"
    restored = game_state_from_json(text)
    assert restored == state
    assert restored.round_results[0].winner_id == "human"


def test_wild_jokers_survive_serialization():
    state = _game_in_progress()
    restored = game_state_from_json(game_state_to_json(state))
    wilds = [c for h in state.current_round.hands.values() for c in h if c.is_wild()]
    restored_wilds = [c for h in restored.current_round.hands.values() for c in h if c.is_wild()]
    assert restored_wilds == wilds


def test_newer_schema_is_rejected():
    d = game_state_to_dict(_game_in_progress())
    d["schema_version"] = SCHEMA_VERSION + 1
    with pytest.raises(ValueError):
        game_state_from_dict(d)


def test_memory_store_save_load_clear():
    store = MemoryGameStore()
    state = _game_in_progress()

    async def scenario():
        assert await save_game(store, state)
        loaded = await load_game(store)
        assert await clear_game(store)
        gone = await load_game(store)
        return loaded, gone

    loaded, gone = asyncio.run(scenario())
    assert loaded == state
    assert gone is None


def test_file_store(tmp_path):
    store = FileGameStore(tmp_path / "saves")
    state = _finished_round()
    assert asyncio.run(save_game(store, state, "slot"))
    assert (tmp_path / "saves" / "slot.json").exists()
    assert asyncio.run(load_game(store, "slot")) == state
    assert asyncio.run(clear_game(store, "slot"))
    assert not (tmp_path / "saves" / "slot.json").exists()


class _BrokenStore:
    async def get(self, key):
        raise OSError("disk gone")

    async def set(self, key, value):
        raise OSError("disk gone")

    async def remove(self, key):
        raise OSError("disk gone")


def test_store_failures_are_logged_not_raised(caplog):
    store = _BrokenStore()
    state = _game_in_progress()
    with caplog.at_level(logging.ERROR, logger="rummy.persistence"):
        assert asyncio.run(save_game(store, state)) is False
        assert asyncio.run(load_game(store)) is None
        assert asyncio.run(clear_game(store)) is False
    assert "Failed to save game g-1" in caplog.text


def test_unreadable_snapshot_loads_as_none():
    store = MemoryGameStore()
    asyncio.run(store.set("practice-game", "{not json"))
    assert asyncio.run(load_game(store)) is None


def test_old_snapshot_without_optional_fields():
    d = game_state_to_dict(replace(_game_in_progress(), rejoins=0))
    for key in ("rejoins", "winner_id", "round_results", "exported_at"):
        d.pop(key)
    restored = game_state_from_dict(d)
    assert restored.rejoins == 0
    assert restored.round_results == ()


def test_finished_points_game_keeps_winnings_and_ranks():
    state = new_game(make_players(1), GameConfig.points(), rng=random.Random(3), game_id="g-3")
    state = drop(state, "bot-1")
    assert state.final_ranks == (("human", 1, 0), ("bot-1", 2, 25))
    restored = game_state_from_json(game_state_to_json(state))
    assert restored == state
    assert restored.round_results[0].winnings == 25.0
    assert restored.final_ranks == state.final_ranks
