"""
lottery.funds — balance bookkeeping and value transfers.

An in-memory ledger of integer balances (smallest unit) standing in for the
host chain's native value movement. It provides:

- credit(...) / debit(...): balance updates with non-negativity checks.
- transfer(...): sender→recipient value transfer. After crediting, the
  recipient's receive hook (if registered) runs; the hook may call back into
  other components (reentrancy) or reject the payment by raising or returning
  False, in which case every balance change made by the transfer, including
  those made by the hook, is undone and `transfer` returns False.
- checkpoint() / revert(cp): whole-ledger rollback markers used by callers
  that need several steps to succeed or fail together.

All amounts are ints; addresses are opaque strings.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional

from .errors import InsufficientBalance, NegativeAmount

logger = logging.getLogger(__name__)

# A receive hook gets (sender, amount). Returning False rejects the payment.
ReceiveHook = Callable[[str, int], Optional[bool]]

Checkpoint = int


def _ensure_non_negative(amount: int) -> None:
    if amount < 0:
        raise NegativeAmount(amount)


class Bank:
    """
    Integer balances with receive hooks and rollback checkpoints.

    Checkpoints are markers into a stack of saved balance maps; `revert(cp)`
    restores the map captured by `checkpoint()` and drops newer markers.
    """

    def __init__(self) -> None:
        self._balances: Dict[str, int] = {}
        self._hooks: Dict[str, ReceiveHook] = {}
        self._saved: List[Dict[str, int]] = []
        self._lock = threading.RLock()

    # ---- reads ----

    def balance_of(self, address: str) -> int:
        with self._lock:
            return self._balances.get(address, 0)

    def total_supply(self) -> int:
        with self._lock:
            return sum(self._balances.values())

    # ---- hooks ----

    def register_receiver(self, address: str, hook: ReceiveHook) -> None:
        with self._lock:
            self._hooks[address] = hook

    def unregister_receiver(self, address: str) -> None:
        with self._lock:
            self._hooks.pop(address, None)

    # ---- balance ops ----

    def mint(self, address: str, amount: int) -> int:
        """Create funds out of thin air (faucet for tests and local networks)."""
        return self.credit(address, amount)

    def credit(self, address: str, amount: int) -> int:
        _ensure_non_negative(amount)
        with self._lock:
            new = self._balances.get(address, 0) + amount
            self._balances[address] = new
            return new

    def debit(self, address: str, amount: int) -> int:
        _ensure_non_negative(amount)
        with self._lock:
            cur = self._balances.get(address, 0)
            if cur < amount:
                raise InsufficientBalance(address, cur, amount)
            new = cur - amount
            self._balances[address] = new
            return new

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """
        Move `amount` from sender to recipient and notify the recipient.

        Raises InsufficientBalance if the sender cannot cover the amount.
        Returns False (with all changes undone) if the recipient rejects it.
        """
        _ensure_non_negative(amount)
        with self._lock:
            cp = self.checkpoint()
            try:
                self.debit(sender, amount)
                self.credit(recipient, amount)
            except Exception:
                self.revert(cp)
                raise
            hook = self._hooks.get(recipient)
            if hook is None:
                self.release(cp)
                return True
            try:
                accepted = hook(sender, amount)
            except Exception as e:
                logger.warning(
                    "transfer rejected by %s (hook raised %s: %s)",
                    recipient, type(e).__name__, e,
                )
                self.revert(cp)
                return False
            if accepted is False:
                logger.warning("transfer rejected by %s", recipient)
                self.revert(cp)
                return False
            self.release(cp)
            return True

    # ---- checkpoints ----

    def checkpoint(self) -> Checkpoint:
        with self._lock:
            self._saved.append(dict(self._balances))
            return len(self._saved)

    def revert(self, cp: Checkpoint) -> None:
        with self._lock:
            if cp < 1 or cp > len(self._saved):
                raise ValueError(f"invalid checkpoint {cp}; depth={len(self._saved)}")
            self._balances = self._saved[cp - 1]
            del self._saved[cp - 1:]

    def release(self, cp: Checkpoint) -> None:
        """Keep the changes made since `cp` and drop the marker (and newer ones)."""
        with self._lock:
            if cp < 1 or cp > len(self._saved):
                raise ValueError(f"invalid checkpoint {cp}; depth={len(self._saved)}")
            del self._saved[cp - 1:]


__all__ = ["Bank", "ReceiveHook", "Checkpoint"]
