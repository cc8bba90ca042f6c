"""
lottery.clock
=============

Time sources for the round engine.

The engine never reads the wall clock directly: every operation that depends
on time receives `now` from a `Clock`. Production wiring uses `SystemClock`;
tests and local simulations use `ManualClock` so interval checks are
deterministic.
"""

from __future__ import annotations

import threading
import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    def now(self) -> int: ...


class SystemClock:
    """Integer UNIX seconds from the host clock."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """A clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000) -> None:
        if start < 0:
            raise ValueError("start must be non-negative")
        self._now = int(start)
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            return self._now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("cannot move a clock backwards")
        with self._lock:
            self._now += int(seconds)
            return self._now

    def set(self, ts: int) -> None:
        with self._lock:
            if ts < self._now:
                raise ValueError("cannot move a clock backwards")
            self._now = int(ts)


__all__ = ["Clock", "SystemClock", "ManualClock"]
