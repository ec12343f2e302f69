#!/usr/bin/env python3
"""Cooperative one-shot and repeating timers driven by frame deltas."""

from __future__ import annotations

from dataclasses import dataclass, field
import itertools
import logging
from typing import Callable


logger = logging.getLogger(__name__)


@dataclass
class TimerHandle:
    """Bookkeeping for one scheduled callback."""

    timer_id: int
    due_ms: int
    callback: Callable[[], object] = field(repr=False)
    interval_ms: int | None = None
    cancelled: bool = False

    @property
    def repeating(self) -> bool:
        return self.interval_ms is not None


class Scheduler:
    """
    Owns the session clock and every pending timer.

    The clock only moves when `advance` is called, so the game loop feeds it
    the frame delta and tests feed it whatever elapsed time they need.
    """

    def __init__(self, now_ms: int = 0) -> None:
        self._now_ms = max(0, int(now_ms))
        self._timers: dict[int, TimerHandle] = {}
        self._ids = itertools.count(1)

    def now(self) -> int:
        return self._now_ms

    @property
    def pending(self) -> int:
        return sum(1 for t in self._timers.values() if not t.cancelled)

    def call_later(self, delay_ms: int, callback: Callable[[], object]) -> TimerHandle:
        handle = TimerHandle(
            timer_id=next(self._ids),
            due_ms=self._now_ms + max(0, int(delay_ms)),
            callback=callback,
        )
        self._timers[handle.timer_id] = handle
        return handle

    def call_every(self, interval_ms: int, callback: Callable[[], object]) -> TimerHandle:
        interval = max(1, int(interval_ms))
        handle = TimerHandle(
            timer_id=next(self._ids),
            due_ms=self._now_ms + interval,
            callback=callback,
            interval_ms=interval,
        )
        self._timers[handle.timer_id] = handle
        return handle

    def cancel(self, handle: TimerHandle | None) -> None:
        if handle is None:
            return
        handle.cancelled = True
        self._timers.pop(handle.timer_id, None)

    def cancel_all(self) -> None:
        for handle in self._timers.values():
            handle.cancelled = True
        if self._timers:
            logger.debug("Cancelled %d pending timer(s)", len(self._timers))
        self._timers.clear()

    def _next_due(self, deadline_ms: int) -> TimerHandle | None:
        due = [t for t in self._timers.values() if not t.cancelled and t.due_ms <= deadline_ms]
        if not due:
            return None
        return min(due, key=lambda t: (t.due_ms, t.timer_id))

    def advance(self, delta_ms: int) -> int:
        """Move the clock forward and fire everything that came due, in order."""
        deadline = self._now_ms + max(0, int(delta_ms))
        fired = 0
        while True:
            handle = self._next_due(deadline)
            if handle is None:
                break
            # Callbacks observe the clock at their own due time.
            self._now_ms = max(self._now_ms, handle.due_ms)
            if handle.repeating:
                handle.due_ms += handle.interval_ms or 1
            else:
                self._timers.pop(handle.timer_id, None)
            handle.callback()
            fired += 1
        self._now_ms = deadline
        return fired
