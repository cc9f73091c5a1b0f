#!/usr/bin/env python3
"""
Debouncing of raw editor events.
Collapses bursts of selection/focus/save notifications into one evaluation.
"""

import threading
from enum import Enum
from typing import Callable, Optional


class EventKind(str, Enum):
    SELECTION = "selection"
    FOCUS_CHANGE = "focus_change"
    SAVE = "save"
    DEBUG = "debug"
    TASK = "task"


def _start_timer(delay: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class EventCoalescer:
    """Restarts a single timer on every notification.

    Only the final firing invokes ``on_settled``, carrying the ``is_write``
    flag of the notification that last restarted the timer.
    """

    def __init__(
        self,
        on_settled: Callable[[bool], None],
        debounce_ms: int = 50,
        timer_factory: Optional[Callable[[float, Callable[[], None]], object]] = None,
    ):
        self.on_settled = on_settled
        self.delay = debounce_ms / 1000.0
        self.timer_factory = timer_factory or _start_timer
        self._lock = threading.Lock()
        self._timer = None
        self._generation = 0

    def notify(self, kind: EventKind, is_write: bool = False) -> None:
        """Cancel the pending evaluation and schedule a new one."""
        with self._lock:
            self._cancel_locked()
            self._generation += 1
            generation = self._generation
            self._timer = self.timer_factory(
                self.delay, lambda: self._fire(generation, is_write)
            )

    def _fire(self, generation: int, is_write: bool) -> None:
        with self._lock:
            # a timer that lost the race to cancel() must not evaluate
            if generation != self._generation:
                return
            self._timer = None
        self.on_settled(is_write)

    def cancel(self) -> None:
        with self._lock:
            self._cancel_locked()
            self._generation += 1

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            cancel = getattr(self._timer, "cancel", None)
            if cancel:
                cancel()
            self._timer = None

    @property
    def pending(self) -> bool:
        return self._timer is not None
