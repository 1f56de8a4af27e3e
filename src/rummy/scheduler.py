"""
Delayed execution of bot turns.

A bot "thinks" for a moment before acting. The action is scheduled on a
timer; resetting the game (or scheduling another action) cancels it. A timer
that fires anyway after a reset finds the epoch changed and does nothing, so
a stale bot move is never applied to a new game or round.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable

logger = logging.getLogger(__name__)

TimerFactory = Callable[..., Any]


class BotTurnScheduler:
    """
    Thread-safe single-slot scheduler. ``timer_factory`` must build an object
    with ``start()`` and ``cancel()`` from ``(interval_seconds, function,
    args=...)``, which ``threading.Timer`` does.
    """

    def __init__(self, timer_factory: TimerFactory | None = None):
        self._timer_factory = timer_factory or threading.Timer
        self._lock = threading.Lock()
        self._epoch = 0
        self._pending: Any = None

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def schedule(self, delay_ms: int, action: Callable[[], None]) -> int:
        """Run ``action`` after ``delay_ms``; replaces anything pending. Returns the epoch."""
        with self._lock:
            self._cancel_locked()
            epoch = self._epoch
            timer = self._timer_factory(max(delay_ms, 0) / 1000.0, self._fire, args=(epoch, action))
            if hasattr(timer, "daemon"):
                timer.daemon = True
            self._pending = timer
        timer.start()
        return epoch

    def cancel(self) -> None:
        """Drop the pending action, if any; a timer already firing becomes a no-op."""
        with self._lock:
            self._cancel_locked()

    def _cancel_locked(self) -> None:
        self._epoch += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _fire(self, epoch: int, action: Callable[[], None]) -> None:
        with self._lock:
            if epoch != self._epoch:
                logger.debug("Discarding stale bot action (epoch %d, now %d)", epoch, self._epoch)
                return
            self._pending = None
        action()
