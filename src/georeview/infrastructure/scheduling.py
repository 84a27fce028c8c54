"""Delayed-callback schedulers usable without a Qt event loop."""

from __future__ import annotations

import logging
import threading
from typing import Callable, List

LOGGER = logging.getLogger(__name__)


class ThreadingScheduler:
    """Runs callbacks on daemon :class:`threading.Timer` threads.

    The callback executes on the timer thread, not the thread that scheduled
    it, so a review session driven through this scheduler must not be touched
    from another thread while a callback may fire. Use it for scripts and
    tests without an event loop; Qt front ends use
    :class:`georeview.gui.qt_scheduler.QtScheduler`, whose callbacks run on
    the GUI thread.
    """

    def __init__(self) -> None:
        self._timers: List[threading.Timer] = []
        self._lock = threading.Lock()

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> None:
        timer = threading.Timer(max(0, delay_ms) / 1000.0, self._run, args=(callback,))
        timer.daemon = True
        with self._lock:
            self._timers = [t for t in self._timers if t.is_alive()]
            self._timers.append(timer)
        timer.start()

    def cancel_all(self) -> None:
        with self._lock:
            timers, self._timers = self._timers, []
        for timer in timers:
            timer.cancel()

    @staticmethod
    def _run(callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception as exc:
            LOGGER.error("Scheduled callback %r failed: %s", callback, exc)


__all__ = ["ThreadingScheduler"]
