"""
Lottery errors.

A small, typed hierarchy of exceptions raised by the round engine, the funds
ledger and the randomness coordinator. Callers can catch the base
`LotteryError` to handle every deterministic lottery failure, or catch the
concrete subclasses for granular control.

Wrong-phase and rejected-input errors carry the diagnostic values a caller
needs to decide whether and when to retry (balance, participant count, state).
The errors are lightweight and serialization-friendly: `to_dict()` returns the
payload used by the RPC surface.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, is_dataclass
from typing import Any, Dict, Optional


class LotteryError(Exception):
    """Base class for all lottery errors."""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = asdict(self) if is_dataclass(self) else {}
        data["error"] = type(self).__name__
        data["message"] = str(self)
        return data


# ---- Round engine -----------------------------------------------------------


@dataclass(frozen=True)
class InsufficientPayment(LotteryError):
    """
    Raised when an entry pays less than the configured entry fee.

    Attributes:
        paid: Amount sent with the entry.
        required: Configured entry fee.
    """
    paid: int
    required: int

    def __str__(self) -> str:
        return f"InsufficientPayment: paid={self.paid} < required={self.required}"


@dataclass(frozen=True)
class RoundNotOpen(LotteryError):
    """Raised when entering while the round is resolving."""
    state: str

    def __str__(self) -> str:
        return f"RoundNotOpen: state={self.state}"


@dataclass(frozen=True)
class UpkeepNotNeeded(LotteryError):
    """
    Raised when a close is attempted while the round is not eligible.

    Attributes:
        balance: Funds currently held by the lottery.
        participant_count: Entries in the current round.
        state: Current round state.
    """
    balance: int
    participant_count: int
    state: str

    def __str__(self) -> str:
        return (
            f"UpkeepNotNeeded: balance={self.balance} "
            f"participants={self.participant_count} state={self.state}"
        )


@dataclass(frozen=True)
class PayoutTransferFailed(LotteryError):
    """Raised when the winner rejects the prize transfer; the resolution is rolled back."""
    winner: str
    amount: int
    reason: Optional[str] = None

    def __str__(self) -> str:
        base = f"PayoutTransferFailed: winner={self.winner} amount={self.amount}"
        return f"{base} reason={self.reason}" if self.reason else base


@dataclass(frozen=True)
class NoResolutionPending(LotteryError):
    """Raised when randomness arrives while no request is outstanding."""
    state: str

    def __str__(self) -> str:
        return f"NoResolutionPending: state={self.state}"


@dataclass(frozen=True)
class UnknownRequest(LotteryError):
    """Raised when randomness arrives for a request id other than the pending one."""
    request_id: int
    pending: Optional[int] = None

    def __str__(self) -> str:
        return f"UnknownRequest: request_id={self.request_id} pending={self.pending}"


@dataclass(frozen=True)
class InvalidRandomness(LotteryError):
    """Raised when a delivery carries no usable random word."""
    reason: str

    def __str__(self) -> str:
        return f"InvalidRandomness: {self.reason}"


@dataclass(frozen=True)
class OnlyCoordinatorCanFulfill(LotteryError):
    """Raised when the fulfilment entry point is called by anyone but the coordinator."""
    have: str
    want: str

    def __str__(self) -> str:
        return f"OnlyCoordinatorCanFulfill: have={self.have} want={self.want}"


# ---- Randomness coordinator -------------------------------------------------


class OracleError(LotteryError):
    """Base class for coordinator-side failures."""
    pass


@dataclass(frozen=True)
class InvalidSubscription(OracleError):
    subscription_id: int

    def __str__(self) -> str:
        return f"InvalidSubscription: id={self.subscription_id}"


@dataclass(frozen=True)
class InvalidConsumer(OracleError):
    subscription_id: int
    consumer: str

    def __str__(self) -> str:
        return f"InvalidConsumer: subscription={self.subscription_id} consumer={self.consumer}"


@dataclass(frozen=True)
class InsufficientSubscriptionBalance(OracleError):
    subscription_id: int
    balance: int
    required: int

    def __str__(self) -> str:
        return (
            f"InsufficientSubscriptionBalance: subscription={self.subscription_id} "
            f"balance={self.balance} required={self.required}"
        )


@dataclass(frozen=True)
class InvalidRequestParams(OracleError):
    reason: str

    def __str__(self) -> str:
        return f"InvalidRequestParams: {self.reason}"


@dataclass(frozen=True)
class NonexistentRequest(OracleError):
    request_id: int

    def __str__(self) -> str:
        return f"NonexistentRequest: request_id={self.request_id}"


# ---- Funds ------------------------------------------------------------------


class FundsError(LotteryError):
    """Base class for balance bookkeeping failures."""
    pass


@dataclass(frozen=True)
class InsufficientBalance(FundsError):
    address: str
    balance: int
    amount: int

    def __str__(self) -> str:
        return (
            f"InsufficientBalance: address={self.address} "
            f"balance={self.balance} amount={self.amount}"
        )


@dataclass(frozen=True)
class NegativeAmount(FundsError):
    amount: int

    def __str__(self) -> str:
        return f"NegativeAmount: amount must be >= 0, got {self.amount}"


@dataclass(frozen=True)
class TransferRejected(FundsError):
    """Raised when the receiving account refuses a transfer."""
    sender: str
    recipient: str
    amount: int

    def __str__(self) -> str:
        return (
            f"TransferRejected: {self.recipient} refused {self.amount} "
            f"from {self.sender}"
        )


__all__ = [
    "LotteryError",
    "InsufficientPayment",
    "RoundNotOpen",
    "UpkeepNotNeeded",
    "PayoutTransferFailed",
    "NoResolutionPending",
    "UnknownRequest",
    "InvalidRandomness",
    "OnlyCoordinatorCanFulfill",
    "OracleError",
    "InvalidSubscription",
    "InvalidConsumer",
    "InsufficientSubscriptionBalance",
    "InvalidRequestParams",
    "NonexistentRequest",
    "FundsError",
    "InsufficientBalance",
    "NegativeAmount",
    "TransferRejected",
]
