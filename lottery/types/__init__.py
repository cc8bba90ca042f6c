"""
Lottery — types package

Typed primitives and dataclasses shared across the round engine, the
randomness coordinator, the RPC surface and tests:

  • core   — Address, RequestId, RoundState, UpkeepCheck, RandomnessRequest, Event
  • state  — Round (the single mutable aggregate)

Re-exported here for convenience:
    from lottery.types import Round, RoundState, UpkeepCheck
"""

from __future__ import annotations

from .core import Address, Event, RandomnessRequest, RequestId, RoundState, UpkeepCheck
from .state import Round

__all__ = [
    "Address",
    "RequestId",
    "RoundState",
    "UpkeepCheck",
    "RandomnessRequest",
    "Event",
    "Round",
]
