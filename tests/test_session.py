"""Tests for the practice session: bot pacing, persistence and reset."""
import asyncio
import random

from rummy.agents import Difficulty
from rummy.config import GameConfig
from rummy.deal import DrawSource
from rummy.game import RoundPhase, current_player_id, is_bot_turn
from rummy.persistence import MemoryGameStore, load_game
from rummy.scheduler import BotTurnScheduler
from rummy.session import HUMAN_ID, PracticeSession


class _FakeTimer:
    def __init__(self, interval, function, args=()):
        self.interval = interval
        self.function = function
        self.args = args
        self.cancelled = False

    def start(self):
        pass

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args)


class _Timers:
    def __init__(self):
        self.created = []

    def __call__(self, interval, function, args=()):
        timer = _FakeTimer(interval, function, args)
        self.created.append(timer)
        return timer


def _session(store=None, listener=None, auto_play_bots=True):
    timers = _Timers()
    session = PracticeSession(
        store=store,
        scheduler=BotTurnScheduler(timer_factory=timers),
        rng=random.Random(21),
        timing_rng=random.Random(5),
        auto_play_bots=auto_play_bots,
        listener=listener,
    )
    return session, timers


def _run_bots(session, timers, limit=20):
    for _ in range(limit):
        if session.state is None or not is_bot_turn(session.state):
            return
        timers.created[-1].fire()


def test_bot_opens_after_thinking():
    session, timers = _session()
    state = session.create_game(num_bots=1, difficulty=Difficulty.MEDIUM, config=GameConfig.pool(101))
    assert current_player_id(state) == "bot-1"
    assert len(timers.created) == 1
    assert 0.5 <= timers.created[0].interval <= 1.5
    assert session.state is state

    assert session.draw(DrawSource.DECK) is None
    _run_bots(session, timers)
    rnd = session.state.current_round
    assert rnd.phase == RoundPhase.ENDED or current_player_id(session.state) == HUMAN_ID


def test_human_turn_actions():
    session, timers = _session()
    session.create_game(num_bots=1, difficulty=Difficulty.EASY, config=GameConfig.points())
    _run_bots(session, timers)
    if current_player_id(session.state) != HUMAN_ID:
        return

    assert session.discard("no-such-card") is None
    drawn = session.draw(DrawSource.DECK)
    assert len(drawn.current_round.hands[HUMAN_ID]) == 14
    card = drawn.current_round.hands[HUMAN_ID][0]
    after = session.discard(card.id)
    assert after.current_round.discard_pile[-1].id == card.id
    assert is_bot_turn(after)
    assert not timers.created[-1].cancelled


def test_bot_step_without_pacing():
    session, timers = _session(auto_play_bots=False)
    state = session.create_game(num_bots=2, difficulty=Difficulty.HARD)
    assert timers.created == []
    stepped = session.bot_step()
    assert stepped is not None
    assert stepped is not state
    assert session.state is stepped


def test_reset_discards_pending_bot_move():
    seen = []
    session, timers = _session(listener=seen.append)
    session.create_game(num_bots=1)
    pending = timers.created[-1]

    session.reset_game()
    assert pending.cancelled
    assert session.state is None
    assert seen[-1] is None

    calls_before = len(seen)
    pending.fire()
    assert session.state is None
    assert len(seen) == calls_before


def test_snapshot_saved_and_restored():
    store = MemoryGameStore()
    session, _ = _session(store=store)
    state = session.create_game(num_bots=1, config=GameConfig.deals(2))
    assert asyncio.run(load_game(store)) == state

    resumed, timers = _session(store=store)
    loaded = asyncio.run(resumed.load())
    assert loaded == state
    assert resumed.state == state
    assert len(timers.created) == 1

    session.reset_game()
    assert asyncio.run(load_game(store)) is None


def test_listener_sees_every_change():
    seen = []
    session, timers = _session(listener=seen.append)
    state = session.create_game(num_bots=1)
    assert seen == [state]
    timers.created[-1].fire()
    assert seen[-1] is session.state
    assert len(seen) == 2
