"""
lottery.engine.resolver — consume delivered randomness and pay the winner.

Ordering inside `on_randomness_delivered` is fixed:

  1. validate the delivery against the pending request (no mutation on failure)
  2. select the winner: random_words[0] mod participant_count
  3. reset the round (OPEN, no participants, no pending id, new timestamp)
  4. transfer the whole held balance to the winner
  5. emit WinnerPicked

Steps 2–5 run in one ledger transaction. The reset in step 3 happens before
the transfer, so a recipient that calls back into the lottery during the
payout sees a fresh, empty OPEN round. If the transfer fails, the
transaction restores the round to RESOLVING with its participants and the
balance untouched, and `PayoutTransferFailed` propagates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ..errors import (
    InvalidRandomness,
    NoResolutionPending,
    PayoutTransferFailed,
    UnknownRequest,
)
from ..events import EV_WINNER_PICKED
from ..types.core import Address, RequestId, RoundState
from .ledger import RoundLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of a successful resolution."""

    request_id: RequestId
    winner: Address
    winner_index: int
    participant_count: int
    prize: int


def select_winner_index(random_word: int, participant_count: int) -> int:
    """Uniform pick over the entry list: random_word mod participant_count."""
    if participant_count <= 0:
        raise ValueError("participant_count must be positive")
    if random_word < 0:
        raise ValueError("random_word must be non-negative")
    return int(random_word) % int(participant_count)


def on_randomness_delivered(
    ledger: RoundLedger,
    request_id: int,
    random_words: Sequence[int],
    now: int,
) -> Resolution:
    """
    Resolve the pending round with the delivered randomness.

    Raises (all without mutating anything):
        NoResolutionPending: the round is not resolving.
        UnknownRequest: request_id is not the pending request.
        InvalidRandomness: no usable random word was delivered.
    Raises (after rolling back the whole resolution):
        PayoutTransferFailed: the winner rejected the prize.
    """
    rnd = ledger.round
    if rnd.state is not RoundState.RESOLVING or rnd.pending_request_id is None:
        raise NoResolutionPending(rnd.state.value)
    if int(request_id) != int(rnd.pending_request_id):
        raise UnknownRequest(int(request_id), int(rnd.pending_request_id))
    if not random_words:
        raise InvalidRandomness("no random words delivered")
    word = int(random_words[0])
    if word < 0:
        raise InvalidRandomness("random word must be non-negative")
    count = rnd.participant_count
    if count == 0:
        raise InvalidRandomness("resolving round has no participants")

    rid = rnd.pending_request_id
    with ledger.transaction():
        idx = select_winner_index(word, count)
        winner = rnd.participants[idx]
        prize = ledger.balance

        rnd.reopen(winner, now)

        if not ledger.bank.transfer(ledger.account, winner, prize):
            logger.warning(
                "payout failed winner=%s amount=%d request_id=%d; round stays resolving",
                winner, prize, rid,
            )
            raise PayoutTransferFailed(winner, prize, "recipient rejected transfer")

        ledger.events.emit(EV_WINNER_PICKED, winner=winner)

    logger.info(
        "winner picked request_id=%d winner=%s index=%d/%d prize=%d",
        rid, winner, idx, count, prize,
    )
    return Resolution(
        request_id=rid,
        winner=winner,
        winner_index=idx,
        participant_count=count,
        prize=prize,
    )


__all__ = ["Resolution", "select_winner_index", "on_randomness_delivered"]
