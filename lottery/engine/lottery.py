"""
lottery.engine.lottery
======================

`Lottery` wires the round engine to its collaborators and exposes the
operations external actors use:

- participants:      enter(caller, amount)
- upkeep trigger:    check_upkeep(aux) / perform_upkeep(aux)
- the coordinator:   raw_fulfill_random_words(caller, request_id, words)
- observers:         read accessors, status(), events

Operations are serialized by a re-entrant lock, so each one runs to
completion before the next starts, while a payout recipient on the same
thread can still call back in (and observes the already-reset round).

Only `raw_fulfill_random_words` reaches the resolver, and only when called
with the configured coordinator address.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional, Sequence

from ..clock import Clock, SystemClock
from ..config import LotteryConfig
from ..errors import (
    InsufficientPayment,
    InvalidRandomness,
    LotteryError,
    NoResolutionPending,
    OnlyCoordinatorCanFulfill,
    OracleError,
    PayoutTransferFailed,
    RoundNotOpen,
    UnknownRequest,
    UpkeepNotNeeded,
)
from ..events import EventLog
from ..funds import Bank
from ..metrics import METRICS, Metrics
from ..oracle.base import RandomnessRequester
from ..types.core import Address, RequestId, RoundState, UpkeepCheck
from .closer import close
from .eligibility import check_eligible
from .ledger import RoundLedger, enter
from .resolver import Resolution, on_randomness_delivered

logger = logging.getLogger(__name__)

DEFAULT_LOTTERY_ADDRESS = "lottery"


class Lottery:
    """
    A recurring lottery bound to one randomness coordinator.

    Args:
        config:              Immutable configuration.
        requester:           Outbound randomness capability.
        coordinator_address: The only caller allowed to deliver randomness.
        bank:                Funds ledger (the lottery's balance lives here).
        clock:               Time source (SystemClock if omitted).
        address:             Account under which the lottery holds funds.
        events:              Event sink (a fresh EventLog if omitted).
        metrics:             Prometheus instruments (module default if omitted).
    """

    def __init__(
        self,
        config: LotteryConfig,
        requester: RandomnessRequester,
        *,
        coordinator_address: str,
        bank: Bank,
        clock: Optional[Clock] = None,
        address: str = DEFAULT_LOTTERY_ADDRESS,
        events: Optional[EventLog] = None,
        metrics: Optional[Metrics] = None,
    ) -> None:
        self.clock = clock if clock is not None else SystemClock()
        self.requester = requester
        self.coordinator_address = coordinator_address
        self.address = address
        self.metrics = metrics if metrics is not None else METRICS
        self.ledger = RoundLedger(
            config, bank, address, now=self.clock.now(), events=events
        )
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Participants
    # ------------------------------------------------------------------

    def enter(self, caller: str, amount: int) -> None:
        with self._lock:
            try:
                enter(self.ledger, caller, amount)
            except InsufficientPayment:
                self.metrics.record_entry("insufficient_payment")
                raise
            except RoundNotOpen:
                self.metrics.record_entry("round_not_open")
                raise
            except LotteryError:
                self.metrics.record_entry("invalid")
                raise
            self.metrics.record_entry("accepted")

    # ------------------------------------------------------------------
    # Upkeep trigger
    # ------------------------------------------------------------------

    def check_upkeep(self, aux: bytes = b"") -> UpkeepCheck:
        with self._lock:
            check = check_eligible(self.ledger, self.clock.now(), aux)
        logger.debug("upkeep check needed=%s", check.upkeep_needed)
        return check

    def perform_upkeep(self, aux: bytes = b"") -> RequestId:
        with self._lock:
            count = self.ledger.participant_count
            try:
                rid = close(self.ledger, self.requester, self.clock.now(), aux)
            except UpkeepNotNeeded:
                self.metrics.record_close("not_needed")
                raise
            except OracleError:
                self.metrics.record_close("oracle_error")
                raise
            self.metrics.record_close("requested")
            self.metrics.observe_round_size(count)
            return rid

    # ------------------------------------------------------------------
    # Coordinator callback
    # ------------------------------------------------------------------

    def raw_fulfill_random_words(
        self, caller: str, request_id: int, random_words: Sequence[int]
    ) -> Resolution:
        """The coordinator's entry point; everybody else is refused."""
        if caller != self.coordinator_address:
            self.metrics.record_resolution("rejected")
            logger.warning("fulfilment refused from %s", caller)
            raise OnlyCoordinatorCanFulfill(caller, self.coordinator_address)
        with self._lock:
            try:
                res = on_randomness_delivered(
                    self.ledger, request_id, random_words, self.clock.now()
                )
            except (NoResolutionPending, UnknownRequest) as e:
                self.metrics.record_resolution("rejected")
                logger.warning("fulfilment rejected: %s", e)
                raise
            except InvalidRandomness:
                self.metrics.record_resolution("invalid")
                raise
            except PayoutTransferFailed:
                self.metrics.record_resolution("payout_failed")
                raise
            self.metrics.record_resolution("paid")
            self.metrics.observe_payout(res.prize)
            return res

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> LotteryConfig:
        return self.ledger.config

    @property
    def events(self) -> EventLog:
        return self.ledger.events

    @property
    def entrance_fee(self) -> int:
        return self.ledger.config.entry_fee

    @property
    def interval(self) -> int:
        return self.ledger.config.interval_s

    @property
    def num_words(self) -> int:
        return self.ledger.config.num_words

    @property
    def request_confirmations(self) -> int:
        return self.ledger.config.request_confirmations

    @property
    def state(self) -> RoundState:
        return self.ledger.state

    @property
    def number_of_players(self) -> int:
        return self.ledger.participant_count

    @property
    def recent_winner(self) -> Optional[Address]:
        return self.ledger.round.recent_winner

    @property
    def last_timestamp(self) -> int:
        return self.ledger.round.last_timestamp

    @property
    def pending_request_id(self) -> Optional[RequestId]:
        return self.ledger.pending_request_id

    @property
    def balance(self) -> int:
        return self.ledger.balance

    def get_player(self, index: int) -> Address:
        return self.ledger.participant_at(index)

    def status(self) -> Dict[str, Any]:
        with self._lock:
            now = self.clock.now()
            return {
                "address": self.address,
                "state": self.state.value,
                "entrance_fee": self.entrance_fee,
                "interval": self.interval,
                "number_of_players": self.number_of_players,
                "balance": self.balance,
                "last_timestamp": self.last_timestamp,
                "seconds_until_eligible": max(0, self.last_timestamp + self.interval - now),
                "pending_request_id": self.pending_request_id,
                "recent_winner": self.recent_winner,
                "upkeep_needed": check_eligible(self.ledger, now).upkeep_needed,
            }


__all__ = ["Lottery", "DEFAULT_LOTTERY_ADDRESS"]
