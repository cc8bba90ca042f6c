"""
lottery.engine
--------------

The round lifecycle state machine and its two-phase randomness protocol.

- ledger      : RoundLedger (the owned aggregate) and the entry path
- eligibility : pure "may this round close now?" predicate
- closer      : OPEN → RESOLVING, issues exactly one randomness request
- resolver    : consumes the delivered randomness, pays out, reopens
- lottery     : Lottery facade wiring the above to an oracle, clock, metrics

Every engine operation takes the ledger explicitly; there is no module-level
round state.
"""

from __future__ import annotations

from .closer import close
from .eligibility import check_eligible
from .ledger import RoundLedger, enter
from .lottery import Lottery
from .resolver import Resolution, on_randomness_delivered, select_winner_index

__all__ = [
    "RoundLedger",
    "enter",
    "check_eligible",
    "close",
    "on_randomness_delivered",
    "select_winner_index",
    "Resolution",
    "Lottery",
]
