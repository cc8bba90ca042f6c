"""
lottery.engine.closer — close the round and ask for randomness.

Anyone may call `close`. The eligibility re-check plus the OPEN→RESOLVING
transition (made before the oracle is contacted) mean a second or concurrent
call fails with `UpkeepNotNeeded` instead of issuing another request.
"""

from __future__ import annotations

import logging

from ..errors import UpkeepNotNeeded
from ..events import EV_RESOLUTION_REQUESTED
from ..oracle.base import RandomnessRequester
from ..types.core import RequestId
from .eligibility import check_eligible
from .ledger import RoundLedger

logger = logging.getLogger(__name__)


def close(
    ledger: RoundLedger,
    requester: RandomnessRequester,
    now: int,
    aux: bytes = b"",
) -> RequestId:
    """
    Transition OPEN → RESOLVING and issue exactly one randomness request.

    Returns the coordinator's request id, which is stored as the pending id.

    Raises:
        UpkeepNotNeeded: the round is not eligible; carries balance,
            participant count and state.
        Any error raised by the requester; the transition is rolled back.
    """
    if not check_eligible(ledger, now, aux).upkeep_needed:
        raise UpkeepNotNeeded(
            ledger.balance, ledger.round.participant_count, ledger.round.state.value
        )

    cfg = ledger.config
    with ledger.transaction():
        ledger.round.begin_resolution()
        rid = RequestId(
            int(
                requester.request_random_words(
                    cfg.key_hash,
                    cfg.subscription_id,
                    cfg.request_confirmations,
                    cfg.callback_gas_limit,
                    cfg.num_words,
                )
            )
        )
        ledger.round.pending_request_id = rid
        ledger.events.emit(EV_RESOLUTION_REQUESTED, request_id=rid)

    logger.info(
        "round closed request_id=%d participants=%d balance=%d",
        rid, ledger.round.participant_count, ledger.balance,
    )
    return rid


__all__ = ["close"]
