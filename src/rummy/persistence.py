"""
Game snapshots: (de)serialization and the stores that keep them.

A game is saved as a JSON document with a schema version and an export
timestamp. Stores are async key/value collaborators; saving is best effort
and a failure is logged, never raised, because the in-memory game stays the
source of truth.
"""
from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Protocol

from .agents import Difficulty
from .config import GameConfig, Variant
from .deal import DrawSource, TurnPhase
from .deck import Card, JokerType, Suit
from .game import GamePhase, GameState, LastAction, Player, RoundPhase, RoundResult, RoundState
from .meld import Meld, MeldType
from .scoring import DeclarationType, DropKind

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
STORAGE_KEY = "practice-game"


def _card_to_dict(card: Card) -> Dict[str, Any]:
    return {
        "id": card.id,
        "suit": card.suit.name.lower(),
        "rank": card.rank,
        "joker_type": card.joker_type.value,
        "value": card.value,
    }


def _card_from_dict(d: Dict[str, Any]) -> Card:
    return Card(
        id=d["id"],
        suit=Suit[d["suit"].upper()],
        rank=int(d["rank"]),
        joker_type=JokerType(d.get("joker_type", JokerType.NONE.value)),
        value=int(d.get("value", 0)),
    )


def _cards_to_list(cards) -> list[Dict[str, Any]]:
    return [_card_to_dict(c) for c in cards]


def _cards_from_list(items) -> list[Card]:
    return [_card_from_dict(d) for d in items]


def _meld_to_dict(meld: Meld) -> Dict[str, Any]:
    return {"type": meld.type.value, "cards": _cards_to_list(meld.cards)}


def _meld_from_dict(d: Dict[str, Any]) -> Meld:
    return Meld(type=MeldType(d["type"]), cards=tuple(_cards_from_list(d["cards"])))


def _player_to_dict(p: Player) -> Dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "is_bot": p.is_bot,
        "difficulty": p.difficulty.value if p.difficulty else None,
        "avatar": p.avatar,
    }


def _player_from_dict(d: Dict[str, Any]) -> Player:
    difficulty = d.get("difficulty")
    return Player(
        id=d["id"],
        name=d["name"],
        is_bot=bool(d.get("is_bot", False)),
        difficulty=Difficulty(difficulty) if difficulty else None,
        avatar=d.get("avatar", ""),
    )


def _config_to_dict(cfg: GameConfig) -> Dict[str, Any]:
    return {
        "variant": cfg.variant.value,
        "pool_limit": cfg.pool_limit,
        "number_of_deals": cfg.number_of_deals,
        "point_value": cfg.point_value,
        "first_drop_penalty": cfg.first_drop_penalty,
        "middle_drop_penalty": cfg.middle_drop_penalty,
        "invalid_declaration_penalty": cfg.invalid_declaration_penalty,
        "max_round_points": cfg.max_round_points,
    }


def _config_from_dict(d: Dict[str, Any]) -> GameConfig:
    return GameConfig(
        variant=Variant(d.get("variant", Variant.POOL.value)),
        pool_limit=int(d.get("pool_limit", 101)),
        number_of_deals=int(d.get("number_of_deals", 2)),
        point_value=float(d.get("point_value", 1.0)),
        first_drop_penalty=int(d.get("first_drop_penalty", 25)),
        middle_drop_penalty=int(d.get("middle_drop_penalty", 50)),
        invalid_declaration_penalty=int(d.get("invalid_declaration_penalty", 80)),
        max_round_points=int(d.get("max_round_points", 80)),
    )


def _last_action_to_dict(a: LastAction | None) -> Dict[str, Any] | None:
    if a is None:
        return None
    return {
        "player_id": a.player_id,
        "action": a.action,
        "card": _card_to_dict(a.card) if a.card else None,
        "source": a.source.value if a.source else None,
    }


def _last_action_from_dict(d: Dict[str, Any] | None) -> LastAction | None:
    if not d:
        return None
    return LastAction(
        player_id=d["player_id"],
        action=d["action"],
        card=_card_from_dict(d["card"]) if d.get("card") else None,
        source=DrawSource(d["source"]) if d.get("source") else None,
    )


def _round_to_dict(r: RoundState) -> Dict[str, Any]:
    return {
        "round_number": r.round_number,
        "seats": list(r.seats),
        "hands": {pid: _cards_to_list(h) for pid, h in r.hands.items()},
        "draw_pile": _cards_to_list(r.draw_pile),
        "discard_pile": _cards_to_list(r.discard_pile),
        "wild_indicator": _card_to_dict(r.wild_indicator) if r.wild_indicator else None,
        "dealer_index": r.dealer_index,
        "current_player_index": r.current_player_index,
        "turn_phase": r.turn_phase.value,
        "phase": r.phase.value,
        "dropped": {pid: kind.value for pid, kind in r.dropped.items()},
        "draws": dict(r.draws),
        "discard_history": _cards_to_list(r.discard_history),
        "last_action": _last_action_to_dict(r.last_action),
    }


def _round_from_dict(d: Dict[str, Any]) -> RoundState:
    indicator = d.get("wild_indicator")
    return RoundState(
        round_number=int(d["round_number"]),
        seats=tuple(d["seats"]),
        hands={pid: _cards_from_list(h) for pid, h in d["hands"].items()},
        draw_pile=_cards_from_list(d["draw_pile"]),
        discard_pile=_cards_from_list(d["discard_pile"]),
        wild_indicator=_card_from_dict(indicator) if indicator else None,
        dealer_index=int(d["dealer_index"]),
        current_player_index=int(d["current_player_index"]),
        turn_phase=TurnPhase(d.get("turn_phase", TurnPhase.DRAW.value)),
        phase=RoundPhase(d.get("phase", RoundPhase.PLAYING.value)),
        dropped={pid: DropKind(kind) for pid, kind in d.get("dropped", {}).items()},
        draws={pid: int(n) for pid, n in d.get("draws", {}).items()},
        discard_history=_cards_from_list(d.get("discard_history", [])),
        last_action=_last_action_from_dict(d.get("last_action")),
    )


def _result_to_dict(r: RoundResult) -> Dict[str, Any]:
    return {
        "round_number": r.round_number,
        "winner_id": r.winner_id,
        "declaration_type": r.declaration_type.value,
        "scores": dict(r.scores),
        "declared_melds": [_meld_to_dict(m) for m in r.declared_melds],
        "final_hands": {pid: _cards_to_list(h) for pid, h in r.final_hands.items()},
        "errors": list(r.errors),
        "winnings": r.winnings,
    }


def _result_from_dict(d: Dict[str, Any]) -> RoundResult:
    return RoundResult(
        round_number=int(d["round_number"]),
        winner_id=d["winner_id"],
        declaration_type=DeclarationType(d["declaration_type"]),
        scores={pid: int(s) for pid, s in d["scores"].items()},
        declared_melds=tuple(_meld_from_dict(m) for m in d.get("declared_melds", [])),
        final_hands={pid: _cards_from_list(h) for pid, h in d.get("final_hands", {}).items()},
        errors=tuple(d.get("errors", [])),
        winnings=float(d.get("winnings", 0.0)),
    )


def game_state_to_dict(state: GameState) -> Dict[str, Any]:
    """Serialize a game to a JSON-compatible dict."""
    return {
        "schema_version": SCHEMA_VERSION,
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "id": state.id,
        "config": _config_to_dict(state.config),
        "players": [_player_to_dict(p) for p in state.players],
        "scores": dict(state.scores),
        "active_player_ids": list(state.active_player_ids),
        "current_round": _round_to_dict(state.current_round) if state.current_round else None,
        "round_results": [_result_to_dict(r) for r in state.round_results],
        "phase": state.phase.value,
        "winner_id": state.winner_id,
        "rejoins": state.rejoins,
        "final_ranks": [list(r) for r in state.final_ranks],
        "created_at": state.created_at,
        "updated_at": state.updated_at,
    }


def game_state_from_dict(d: Dict[str, Any]) -> GameState:
    """
    Deserialize a game from a dict produced by ``game_state_to_dict``.

    Raises ValueError for a snapshot written by a newer schema.
    """
    version = int(d.get("schema_version", SCHEMA_VERSION))
    if version > SCHEMA_VERSION:
        raise ValueError(f"Unsupported snapshot schema version {version}")
    current = d.get("current_round")
    return GameState(
        id=d["id"],
        config=_config_from_dict(d.get("config", {})),
        players=tuple(_player_from_dict(p) for p in d["players"]),
        scores={pid: int(s) for pid, s in d["scores"].items()},
        active_player_ids=tuple(d["active_player_ids"]),
        current_round=_round_from_dict(current) if current else None,
        round_results=tuple(_result_from_dict(r) for r in d.get("round_results", [])),
        phase=GamePhase(d.get("phase", GamePhase.PLAYING.value)),
        winner_id=d.get("winner_id"),
        rejoins=int(d.get("rejoins", 0)),
        final_ranks=tuple(
            (str(pid), int(rank), int(score)) for pid, rank, score in d.get("final_ranks", [])
        ),
        created_at=float(d.get("created_at", 0.0)),
        updated_at=float(d.get("updated_at", 0.0)),
    )


def game_state_to_json(state: GameState) -> str:
    return json.dumps(game_state_to_dict(state), indent=2)


def game_state_from_json(s: str) -> GameState:
    return game_state_from_dict(json.loads(s))


class GameStore(Protocol):
    """Async key/value storage for serialized snapshots."""

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def remove(self, key: str) -> None:
        ...


class MemoryGameStore:
    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)


class FileGameStore:
    """One ``<key>.json`` file per key under ``directory``."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def _read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp = self._path(key).with_suffix(".json.tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(self._path(key))

    def _delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)


async def save_game(store: GameStore, state: GameState, key: str = STORAGE_KEY) -> bool:
    """Write a snapshot; returns False (and logs) on failure."""
    try:
        await store.set(key, game_state_to_json(state))
    except Exception:
        logger.error("Failed to save game %s", state.id, exc_info=True)
        return False
    return True


async def load_game(store: GameStore, key: str = STORAGE_KEY) -> GameState | None:
    """Read a snapshot; a missing or unreadable one gives ``None``."""
    try:
        raw = await store.get(key)
        if raw is None:
            return None
        return game_state_from_json(raw)
    except Exception:
        logger.error("Failed to load saved game %r", key, exc_info=True)
        return None


async def clear_game(store: GameStore, key: str = STORAGE_KEY) -> bool:
    try:
        await store.remove(key)
    except Exception:
        logger.error("Failed to clear saved game %r", key, exc_info=True)
        return False
    return True


__all__ = [
    "FileGameStore",
    "GameStore",
    "MemoryGameStore",
    "SCHEMA_VERSION",
    "STORAGE_KEY",
    "clear_game",
    "game_state_from_dict",
    "game_state_from_json",
    "game_state_to_dict",
    "game_state_to_json",
    "load_game",
    "save_game",
]
