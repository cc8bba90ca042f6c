from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, NewType

"""
Core typed primitives for the lottery.

Kept minimal and free of heavy dependencies so they can be shared by the
engine, the coordinator, the RPC surface and tests.

Types provided:
  • Address           — opaque payable identity (string form)
  • RequestId         — coordinator-issued randomness request identifier
  • RoundState        — OPEN / RESOLVING
  • UpkeepCheck       — eligibility verdict plus pass-through payload
  • RandomnessRequest — parameters of one outbound randomness request
  • Event             — one observability notification
"""

# ---- Simple newtypes ---------------------------------------------------------

Address = NewType("Address", str)
RequestId = NewType("RequestId", int)


class RoundState(str, Enum):
    """Lifecycle states of a lottery round."""

    OPEN = "open"
    RESOLVING = "resolving"


# ---- Records -----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class UpkeepCheck:
    """
    Result of the eligibility predicate.

    Fields:
      upkeep_needed — True iff the round may be closed now
      perform_data  — opaque payload passed through to the close action
    """

    upkeep_needed: bool
    perform_data: bytes = b""

    def __bool__(self) -> bool:
        return self.upkeep_needed


@dataclass(frozen=True, slots=True)
class RandomnessRequest:
    """
    One randomness request as recorded by the coordinator.

    Fields:
      request_id        — identifier returned to the requester
      consumer          — address whose fulfilment entry point receives the words
      key_hash          — gas lane (32 bytes)
      subscription_id   — billing handle
      confirmations     — confirmation depth requested
      callback_gas_limit — resource ceiling for the callback
      num_words         — number of random words to deliver
    """

    request_id: RequestId
    consumer: Address
    key_hash: bytes
    subscription_id: int
    confirmations: int
    callback_gas_limit: int
    num_words: int

    def __post_init__(self) -> None:  # type: ignore[override]
        if not isinstance(self.key_hash, (bytes, bytearray)) or len(self.key_hash) != 32:
            raise ValueError("key_hash must be exactly 32 bytes")
        if self.num_words < 1:
            raise ValueError("num_words must be >= 1")


@dataclass(frozen=True, slots=True)
class Event:
    """
    An observability notification.

    Fields:
      seq  — position in the log (0-based, strictly increasing)
      name — EntryAccepted / ResolutionRequested / WinnerPicked
      args — small JSON-friendly payload
    """

    seq: int
    name: str
    args: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"seq": self.seq, "name": self.name, "args": dict(self.args)}


__all__ = [
    "Address",
    "RequestId",
    "RoundState",
    "UpkeepCheck",
    "RandomnessRequest",
    "Event",
]
