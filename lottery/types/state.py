from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .core import Address, RequestId, RoundState


@dataclass(frozen=True, slots=True)
class RoundSnapshot:
    """Immutable copy of a `Round`, used to roll back a failed transition."""

    state: RoundState
    participants: tuple
    last_timestamp: int
    pending_request_id: Optional[RequestId]
    recent_winner: Optional[Address]


@dataclass(slots=True)
class Round:
    """
    The lottery's single mutable aggregate.

    Tracks:
      • state              — OPEN while entries are accepted, RESOLVING while a
                             randomness request is outstanding
      • participants       — entries in order; repeats are separate weights
      • last_timestamp     — when the current round opened or last resolved
      • pending_request_id — outstanding randomness request (None otherwise)
      • recent_winner      — winner of the last resolved round

    The held balance is not stored here; it is whatever the funds ledger
    holds for the lottery account.
    """

    state: RoundState = RoundState.OPEN
    participants: List[Address] = field(default_factory=list)
    last_timestamp: int = 0
    pending_request_id: Optional[RequestId] = None
    recent_winner: Optional[Address] = None

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    @property
    def is_open(self) -> bool:
        return self.state is RoundState.OPEN

    # ---------- Rollback -------------------------------------------------------

    def snapshot(self) -> RoundSnapshot:
        return RoundSnapshot(
            state=self.state,
            participants=tuple(self.participants),
            last_timestamp=self.last_timestamp,
            pending_request_id=self.pending_request_id,
            recent_winner=self.recent_winner,
        )

    def restore(self, snap: RoundSnapshot) -> None:
        self.state = snap.state
        self.participants = list(snap.participants)
        self.last_timestamp = snap.last_timestamp
        self.pending_request_id = snap.pending_request_id
        self.recent_winner = snap.recent_winner

    # ---------- Transitions ----------------------------------------------------

    def begin_resolution(self, request_id: Optional[RequestId] = None) -> None:
        """OPEN → RESOLVING. The request id is attached once the oracle returns it."""
        if self.state is not RoundState.OPEN:
            raise ValueError("round is already resolving")
        self.state = RoundState.RESOLVING
        self.pending_request_id = request_id

    def reopen(self, winner: Address, now_ts: int) -> None:
        """RESOLVING → OPEN: record the winner and start a fresh, empty round."""
        if self.state is not RoundState.RESOLVING:
            raise ValueError("round is not resolving")
        self.recent_winner = winner
        self.state = RoundState.OPEN
        self.participants = []
        self.pending_request_id = None
        self.last_timestamp = int(now_ts)

    # ---------- Convenience ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "participants": list(self.participants),
            "participant_count": self.participant_count,
            "last_timestamp": self.last_timestamp,
            "pending_request_id": self.pending_request_id,
            "recent_winner": self.recent_winner,
        }


__all__ = ["Round", "RoundSnapshot"]
