"""
lottery.engine.eligibility — is this round ready to close?

A pure, read-only predicate. It is safe to call at any time by anyone
(typically the upkeep trigger, repeatedly) and never mutates the ledger.
"""

from __future__ import annotations

from ..types.core import RoundState, UpkeepCheck
from .ledger import RoundLedger


def check_eligible(ledger: RoundLedger, now: int, aux: bytes = b"") -> UpkeepCheck:
    """
    True iff all of:
      - at least `interval_s` seconds have passed since the round opened,
      - the round is OPEN,
      - the lottery holds a positive balance,
      - there is at least one entry.

    `aux` is passed through untouched as `perform_data`.
    """
    rnd = ledger.round
    time_passed = (int(now) - rnd.last_timestamp) >= ledger.config.interval_s
    is_open = rnd.state is RoundState.OPEN
    has_balance = ledger.balance > 0
    has_players = rnd.participant_count > 0
    return UpkeepCheck(
        upkeep_needed=time_passed and is_open and has_balance and has_players,
        perform_data=bytes(aux),
    )


__all__ = ["check_eligible"]
