"""
lottery.events — append-only observability log.

The round engine emits three notifications for external indexers:

- EntryAccepted(participant)
- ResolutionRequested(request_id)
- WinnerPicked(winner)

Records are ordered by a strictly increasing `seq`. They are never used for
control flow inside the engine. `mark()` opens a rollback scope that ends
with `commit(mark)` or `truncate(mark)`, so a failed transition drops the
events it emitted and the log only ever shows transitions that actually
happened. Subscribers hear about an event once no scope is open, which means
they never see a rolled-back one.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Iterator, List, Optional

from .types.core import Event

logger = logging.getLogger(__name__)

EV_ENTRY_ACCEPTED = "EntryAccepted"
EV_RESOLUTION_REQUESTED = "ResolutionRequested"
EV_WINNER_PICKED = "WinnerPicked"

Subscriber = Callable[[Event], None]


class EventLog:
    """
    In-memory, ordered event sink.

    While any `mark()` is open, subscriber notifications are queued. They are
    delivered when the outermost mark is committed and discarded together
    with the events a `truncate` removes. `seq` never repeats, even after a
    truncate.
    """

    def __init__(self) -> None:
        self._events: List[Event] = []
        self._subscribers: List[Subscriber] = []
        self._pending: List[Event] = []
        self._next_seq = 0
        self._open_marks = 0
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        with self._lock:
            return iter(list(self._events))

    def emit(self, name: str, **args: Any) -> Event:
        with self._lock:
            ev = Event(seq=self._next_seq, name=name, args=dict(args))
            self._next_seq += 1
            self._events.append(ev)
            if self._open_marks:
                self._pending.append(ev)
                return ev
        self._notify([ev])
        return ev

    def _notify(self, events: List[Event]) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for ev in events:
            for fn in subscribers:
                try:
                    fn(ev)
                except Exception:
                    # Subscriber failures are logged, never propagated.
                    logger.exception("event subscriber failed for %s", ev.name)

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(fn)

        def _unsubscribe() -> None:
            with self._lock:
                if fn in self._subscribers:
                    self._subscribers.remove(fn)

        return _unsubscribe

    def filter(self, name: Optional[str] = None, *, since: int = 0) -> List[Event]:
        with self._lock:
            return [
                e for e in self._events
                if e.seq >= since and (name is None or e.name == name)
            ]

    def last(self, name: Optional[str] = None) -> Optional[Event]:
        matches = self.filter(name)
        return matches[-1] if matches else None

    # ---- rollback ----

    def mark(self) -> int:
        """Open a rollback scope; close it with `commit(mark)` or `truncate(mark)`."""
        with self._lock:
            self._open_marks += 1
            return len(self._events)

    def _check(self, mark: int) -> None:
        if self._open_marks == 0:
            raise ValueError("no open event mark")
        if mark < 0 or mark > len(self._events):
            raise ValueError(f"invalid event mark {mark}")

    def commit(self, mark: int) -> None:
        """Keep the events emitted since `mark`; notify once no scope is open."""
        with self._lock:
            self._check(mark)
            self._open_marks -= 1
            if self._open_marks:
                return
            ready, self._pending = self._pending, []
        self._notify(ready)

    def truncate(self, mark: int) -> None:
        """Drop the events emitted since `mark`; their notifications never go out."""
        with self._lock:
            self._check(mark)
            self._open_marks -= 1
            dropped = self._events[mark:]
            del self._events[mark:]
            if dropped:
                cutoff = dropped[0].seq
                self._pending = [e for e in self._pending if e.seq < cutoff]
            if self._open_marks:
                return
            ready, self._pending = self._pending, []
        self._notify(ready)


__all__ = [
    "EventLog",
    "Subscriber",
    "EV_ENTRY_ACCEPTED",
    "EV_RESOLUTION_REQUESTED",
    "EV_WINNER_PICKED",
]
