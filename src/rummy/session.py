"""
Practice session: one human against bots.

``PracticeSession`` owns the current ``GameState``, applies the transitions
from ``rummy.game`` on behalf of the presentation layer, paces bot turns
through a ``BotTurnScheduler`` and saves a snapshot after every change.
Illegal actions return ``None`` and leave the state untouched.
"""
from __future__ import annotations

import asyncio
import logging
import random
import threading
from typing import Callable, Coroutine, Sequence

from .agents import Difficulty, get_bot_decision
from .config import GameConfig
from .deal import DrawSource
from .game import (
    GameState,
    apply_bot_decision,
    bot_context_for,
    current_player_id,
    declare,
    discard_card,
    draw_card,
    drop,
    is_bot_turn,
    make_players,
    new_game,
    rejoin,
    start_round,
)
from .meld import Meld
from .persistence import STORAGE_KEY, GameStore, clear_game, load_game, save_game
from .scheduler import BotTurnScheduler

logger = logging.getLogger(__name__)

HUMAN_ID = "human"

Listener = Callable[[GameState | None], None]


class PracticeSession:
    def __init__(
        self,
        store: GameStore | None = None,
        scheduler: BotTurnScheduler | None = None,
        rng: random.Random | None = None,
        timing_rng: random.Random | None = None,
        storage_key: str = STORAGE_KEY,
        auto_play_bots: bool = True,
        listener: Listener | None = None,
    ):
        self.store = store
        self.scheduler = scheduler or BotTurnScheduler()
        self.rng = rng or random.Random()
        self.timing_rng = timing_rng or random.Random()
        self.storage_key = storage_key
        self.auto_play_bots = auto_play_bots
        self.listener = listener
        self.state: GameState | None = None
        self._lock = threading.RLock()
        self._tasks: set[asyncio.Task] = set()

    # Lifecycle

    def create_game(
        self,
        num_bots: int = 1,
        difficulty: Difficulty = Difficulty.MEDIUM,
        config: GameConfig | None = None,
        human_name: str = "You",
    ) -> GameState:
        with self._lock:
            self.scheduler.cancel()
            players = make_players(num_bots, difficulty, human_name)
            state = new_game(players, config, rng=self.rng)
            logger.info(
                "Practice game %s created against %d %s bot(s)",
                state.id,
                num_bots,
                Difficulty(difficulty).value,
            )
            self._commit(state)
            return state

    def start_round(self) -> GameState | None:
        with self._lock:
            if self.state is None:
                return None
            self.scheduler.cancel()
            return self._apply(start_round(self.state, self.rng))

    def reset_game(self) -> None:
        """Forget the current game; a bot action still pending is discarded."""
        with self._lock:
            self.scheduler.cancel()
            self.state = None
            if self.store is not None:
                self._fire_and_forget(clear_game(self.store, self.storage_key))
            self._notify()

    async def load(self) -> GameState | None:
        """Restore the saved game, if any, and resume bot pacing."""
        if self.store is None:
            return None
        state = await load_game(self.store, self.storage_key)
        if state is None:
            return None
        with self._lock:
            self.scheduler.cancel()
            self.state = state
            self._notify()
            self._maybe_schedule()
        return state

    # Player actions

    def draw(self, source: DrawSource, player_id: str = HUMAN_ID) -> GameState | None:
        with self._lock:
            if self.state is None:
                return None
            return self._apply(draw_card(self.state, player_id, source, self.rng))

    def discard(self, card_id: str, player_id: str = HUMAN_ID) -> GameState | None:
        with self._lock:
            if self.state is None:
                return None
            return self._apply(discard_card(self.state, player_id, card_id))

    def declare(
        self,
        melds: Sequence[Meld],
        show_card_id: str,
        player_id: str = HUMAN_ID,
    ) -> GameState | None:
        with self._lock:
            if self.state is None:
                return None
            return self._apply(declare(self.state, player_id, melds, show_card_id))

    def drop(self, player_id: str = HUMAN_ID) -> GameState | None:
        with self._lock:
            if self.state is None:
                return None
            return self._apply(drop(self.state, player_id))

    def rejoin(self, player_id: str = HUMAN_ID) -> GameState | None:
        with self._lock:
            if self.state is None:
                return None
            return self._apply(rejoin(self.state, player_id))

    # Bots

    def bot_step(self) -> GameState | None:
        """Let the bot whose turn it is act once, immediately."""
        with self._lock:
            state = self.state
            if state is None or not is_bot_turn(state):
                return None
            pid = current_player_id(state)
            decision = self._decide(state, pid)
            if decision is None:
                return None
            return self._apply(apply_bot_decision(state, pid, decision, self.rng))

    def schedule_bot_turn(self) -> bool:
        """
        Decide the current bot's move now and apply it after its thinking
        time. Returns False when it is not a bot's turn.
        """
        with self._lock:
            state = self.state
            if state is None or not is_bot_turn(state):
                return False
            pid = current_player_id(state)
            decision = self._decide(state, pid)
            if decision is None:
                return False

            def _act() -> None:
                with self._lock:
                    if self.state is not state:
                        logger.debug("Game moved on; dropping %s's %s", pid, decision.action.value)
                        return
                    self._apply(apply_bot_decision(state, pid, decision, self.rng))

            self.scheduler.schedule(decision.thinking_time_ms, _act)
            return True

    def _decide(self, state: GameState, player_id: str):
        player = state.player(player_id)
        context = bot_context_for(state, player_id, self.rng)
        if player is None or context is None:
            return None
        difficulty = player.difficulty or Difficulty.MEDIUM
        decision = get_bot_decision(difficulty, context, self.timing_rng)
        logger.debug("%s (%s) decides %s", player_id, difficulty.value, decision.action.value)
        return decision

    # Internals

    def _apply(self, new_state: GameState | None) -> GameState | None:
        if new_state is None:
            return None
        self._commit(new_state)
        return new_state

    def _commit(self, state: GameState) -> None:
        self.state = state
        if self.store is not None:
            self._fire_and_forget(save_game(self.store, state, self.storage_key))
        self._notify()
        self._maybe_schedule()

    def _notify(self) -> None:
        if self.listener is not None:
            self.listener(self.state)

    def _maybe_schedule(self) -> None:
        if self.auto_play_bots and self.state is not None and is_bot_turn(self.state):
            self.schedule_bot_turn()

    def _fire_and_forget(self, coro: Coroutine) -> None:
        """Run a persistence coroutine without waiting on it."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(coro)
            return
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
