"""
lottery.engine.ledger — the round aggregate and the entry path.

`RoundLedger` owns the current `Round`, the immutable `LotteryConfig`, the
funds ledger handle (the held balance is whatever the lottery account holds)
and the event log. It is passed explicitly to every engine operation.

`transaction()` makes a multi-step transition atomic: the round, the funds
ledger and the event log are checkpointed on entry and restored together if
anything inside raises. Transactions nest, so a call that re-enters the
engine from inside a payout gets its own scope.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import List, Optional, Type

from ..config import LotteryConfig
from ..errors import InsufficientPayment, RoundNotOpen, TransferRejected
from ..events import EV_ENTRY_ACCEPTED, EventLog
from ..funds import Bank
from ..types.core import Address, RequestId, RoundState
from ..types.state import Round

logger = logging.getLogger(__name__)


class RoundLedger:
    """
    Holds the current round's participants, timing anchor and pending request,
    plus handles to the funds and event collaborators.

    Args:
        config:  Immutable lottery configuration (validated here).
        bank:    Funds ledger holding the lottery's balance.
        account: Address under which the lottery holds funds.
        now:     Creation timestamp; the first round opens at this time.
        events:  Event sink (a fresh EventLog if omitted).
    """

    __slots__ = ("config", "bank", "account", "events", "round")

    def __init__(
        self,
        config: LotteryConfig,
        bank: Bank,
        account: str,
        *,
        now: int,
        events: Optional[EventLog] = None,
    ) -> None:
        self.config = config.validate()
        self.bank = bank
        self.account = account
        self.events = events if events is not None else EventLog()
        self.round = Round(state=RoundState.OPEN, last_timestamp=int(now))

    # ---- derived / read accessors ----

    @property
    def balance(self) -> int:
        return self.bank.balance_of(self.account)

    @property
    def state(self) -> RoundState:
        return self.round.state

    @property
    def participants(self) -> List[Address]:
        return list(self.round.participants)

    @property
    def participant_count(self) -> int:
        return self.round.participant_count

    @property
    def pending_request_id(self) -> Optional[RequestId]:
        return self.round.pending_request_id

    def participant_at(self, index: int) -> Address:
        if index < 0 or index >= self.round.participant_count:
            raise IndexError(f"participant index {index} out of range")
        return self.round.participants[index]

    # ---- atomic scope ----

    def transaction(self) -> "LedgerTransaction":
        return LedgerTransaction(self)


class LedgerTransaction:
    """
    Checkpoint of round, funds and events, restored together on any exception.

    Not generator-based: contextlib reassigns `__traceback__` on the way out,
    which the frozen error dataclasses refuse.
    """

    __slots__ = ("_ledger", "_snap", "_cp", "_mark")

    def __init__(self, ledger: RoundLedger) -> None:
        self._ledger = ledger

    def __enter__(self) -> RoundLedger:
        led = self._ledger
        self._snap = led.round.snapshot()
        self._cp = led.bank.checkpoint()
        self._mark = led.events.mark()
        return led

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> bool:
        led = self._ledger
        if exc_type is None:
            led.bank.release(self._cp)
            led.events.commit(self._mark)
            return False
        led.round.restore(self._snap)
        led.bank.revert(self._cp)
        led.events.truncate(self._mark)
        return False


def enter(ledger: RoundLedger, caller: str, paid_amount: int) -> None:
    """
    Record one paid entry for `caller` in the open round.

    The payment moves from the caller's balance to the lottery account; any
    amount above the entry fee is kept. The same caller may enter repeatedly,
    each entry being one more chance to win.

    Raises:
        InsufficientPayment: paid_amount is below the entry fee.
        RoundNotOpen: the round is resolving.
        InsufficientBalance: the caller cannot cover paid_amount.
        TransferRejected: the lottery account refused the payment.
    """
    fee = ledger.config.entry_fee
    if paid_amount < fee:
        raise InsufficientPayment(int(paid_amount), fee)
    if ledger.round.state is not RoundState.OPEN:
        raise RoundNotOpen(ledger.round.state.value)

    with ledger.transaction():
        if not ledger.bank.transfer(caller, ledger.account, int(paid_amount)):
            raise TransferRejected(caller, ledger.account, int(paid_amount))
        ledger.round.participants.append(Address(caller))
        ledger.events.emit(EV_ENTRY_ACCEPTED, participant=caller)
    logger.debug(
        "entry accepted participant=%s paid=%d entries=%d",
        caller, paid_amount, ledger.round.participant_count,
    )


__all__ = ["RoundLedger", "LedgerTransaction", "enter"]
