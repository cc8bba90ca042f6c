"""
lottery.oracle.coordinator
==========================

A local stand-in for the verifiable randomness coordinator.

It reproduces the coordinator behaviour the lottery relies on, without any
cryptography:

- **Subscriptions**: created by an owner, funded with a balance, and holding
  an allow-list of consumer addresses. Requests from consumers that are not on
  the list are refused.
- **Requests**: `request_random_words(...)` validates the parameters and the
  subscription, records the request and returns a monotonically increasing
  request id (starting at 1).
- **Fulfilment**: `fulfill_random_words(request_id, consumer)` delivers the
  words to the consumer's `raw_fulfill_random_words` entry point exactly once.
  The request is consumed whether or not the consumer's callback succeeds; a
  failing callback is reported in the returned `FulfillmentResult` and the
  consumer stays wherever its own rollback left it.

Words default to sha3-256(request_id || index) interpreted as a 256-bit
big-endian integer, so local runs are reproducible.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from ..constants import (
    MAX_CALLBACK_GAS_LIMIT,
    MAX_NUM_WORDS,
    MAX_REQUEST_CONFIRMATIONS,
    MIN_REQUEST_CONFIRMATIONS,
    MOCK_BASE_FEE,
)
from ..errors import (
    InsufficientSubscriptionBalance,
    InvalidConsumer,
    InvalidRequestParams,
    InvalidSubscription,
    LotteryError,
    NonexistentRequest,
)
from ..types.core import Address, RandomnessRequest, RequestId
from .base import RandomnessConsumer

logger = logging.getLogger(__name__)


@dataclass
class Subscription:
    """Billing handle: owner, prepaid balance and allowed consumers."""

    subscription_id: int
    owner: str
    balance: int = 0
    consumers: Set[str] = field(default_factory=set)
    request_count: int = 0

    def to_dict(self) -> dict:
        return {
            "subscription_id": self.subscription_id,
            "owner": self.owner,
            "balance": self.balance,
            "consumers": sorted(self.consumers),
            "request_count": self.request_count,
        }


@dataclass(frozen=True)
class FulfillmentResult:
    """Outcome of one delivery attempt."""

    request_id: int
    random_words: tuple
    payment: int
    success: bool
    error: Optional[str] = None


def derive_words(request_id: int, num_words: int) -> List[int]:
    """Deterministic stand-in words: sha3_256(u256(request_id) || u256(i))."""
    out: List[int] = []
    for i in range(num_words):
        h = hashlib.sha3_256(
            int(request_id).to_bytes(32, "big") + int(i).to_bytes(32, "big")
        ).digest()
        out.append(int.from_bytes(h, "big"))
    return out


class MockCoordinator:
    """
    In-memory coordinator with subscriptions and one-shot fulfilment.

    Args:
        address:  Identity the coordinator presents when calling consumers back.
        base_fee: Flat amount charged to the subscription per fulfilment.
    """

    def __init__(self, *, address: str = "vrf-coordinator", base_fee: int = MOCK_BASE_FEE) -> None:
        if base_fee < 0:
            raise ValueError("base_fee must be >= 0")
        self.address = address
        self.base_fee = int(base_fee)
        self._subs: Dict[int, Subscription] = {}
        self._requests: Dict[int, RandomnessRequest] = {}
        self._next_sub_id = 1
        self._next_request_id = 1
        self._lock = threading.RLock()

    # ---- subscriptions ----

    def create_subscription(self, owner: str) -> int:
        with self._lock:
            sid = self._next_sub_id
            self._next_sub_id += 1
            self._subs[sid] = Subscription(subscription_id=sid, owner=owner)
        logger.info("subscription %d created for %s", sid, owner)
        return sid

    def fund_subscription(self, subscription_id: int, amount: int) -> int:
        if amount < 0:
            raise ValueError("amount must be >= 0")
        with self._lock:
            sub = self._sub(subscription_id)
            sub.balance += int(amount)
            return sub.balance

    def add_consumer(self, subscription_id: int, consumer: str) -> None:
        with self._lock:
            self._sub(subscription_id).consumers.add(consumer)
        logger.info("consumer %s added to subscription %d", consumer, subscription_id)

    def remove_consumer(self, subscription_id: int, consumer: str) -> None:
        with self._lock:
            sub = self._sub(subscription_id)
            if consumer not in sub.consumers:
                raise InvalidConsumer(subscription_id, consumer)
            sub.consumers.discard(consumer)

    def get_subscription(self, subscription_id: int) -> Subscription:
        with self._lock:
            return self._sub(subscription_id)

    def _sub(self, subscription_id: int) -> Subscription:
        sub = self._subs.get(int(subscription_id))
        if sub is None:
            raise InvalidSubscription(int(subscription_id))
        return sub

    # ---- requests ----

    def request_random_words(
        self,
        key_hash: bytes,
        subscription_id: int,
        request_confirmations: int,
        callback_gas_limit: int,
        num_words: int,
        *,
        consumer: str,
    ) -> int:
        if not (MIN_REQUEST_CONFIRMATIONS <= request_confirmations <= MAX_REQUEST_CONFIRMATIONS):
            raise InvalidRequestParams(
                f"request_confirmations={request_confirmations} outside "
                f"[{MIN_REQUEST_CONFIRMATIONS}, {MAX_REQUEST_CONFIRMATIONS}]"
            )
        if not (0 < callback_gas_limit <= MAX_CALLBACK_GAS_LIMIT):
            raise InvalidRequestParams(f"callback_gas_limit={callback_gas_limit} too large")
        if not (0 < num_words <= MAX_NUM_WORDS):
            raise InvalidRequestParams(f"num_words={num_words} outside [1, {MAX_NUM_WORDS}]")

        with self._lock:
            sub = self._sub(subscription_id)
            if consumer not in sub.consumers:
                raise InvalidConsumer(int(subscription_id), consumer)
            rid = self._next_request_id
            self._next_request_id += 1
            self._requests[rid] = RandomnessRequest(
                request_id=RequestId(rid),
                consumer=Address(consumer),
                key_hash=bytes(key_hash),
                subscription_id=int(subscription_id),
                confirmations=int(request_confirmations),
                callback_gas_limit=int(callback_gas_limit),
                num_words=int(num_words),
            )
            sub.request_count += 1
        logger.info(
            "randomness requested id=%d consumer=%s sub=%d words=%d",
            rid, consumer, subscription_id, num_words,
        )
        return rid

    def pending_requests(self) -> List[RandomnessRequest]:
        with self._lock:
            return [self._requests[k] for k in sorted(self._requests)]

    def get_request(self, request_id: int) -> RandomnessRequest:
        with self._lock:
            req = self._requests.get(int(request_id))
            if req is None:
                raise NonexistentRequest(int(request_id))
            return req

    # ---- fulfilment ----

    def fulfill_random_words(
        self,
        request_id: int,
        consumer: RandomnessConsumer,
        words: Optional[Sequence[int]] = None,
    ) -> FulfillmentResult:
        """
        Deliver words for `request_id` to `consumer`, consuming the request.

        Raises NonexistentRequest for unknown or already fulfilled ids,
        InvalidConsumer if `consumer` is not the requester, and
        InsufficientSubscriptionBalance if the fee cannot be paid (the request
        then stays pending).
        """
        with self._lock:
            req = self._requests.get(int(request_id))
            if req is None:
                raise NonexistentRequest(int(request_id))
            if consumer.address != req.consumer:
                raise InvalidConsumer(req.subscription_id, consumer.address)
            sub = self._sub(req.subscription_id)
            if sub.balance < self.base_fee:
                raise InsufficientSubscriptionBalance(
                    req.subscription_id, sub.balance, self.base_fee
                )
            if words is None:
                words = derive_words(req.request_id, req.num_words)
            elif len(words) != req.num_words:
                raise InvalidRequestParams(
                    f"expected {req.num_words} words, got {len(words)}"
                )
            del self._requests[int(request_id)]
            sub.balance -= self.base_fee

        delivered = tuple(int(w) for w in words)
        try:
            consumer.raw_fulfill_random_words(self.address, req.request_id, delivered)
        except LotteryError as e:
            logger.warning(
                "fulfilment callback failed id=%d consumer=%s: %s",
                req.request_id, req.consumer, e,
            )
            return FulfillmentResult(
                request_id=req.request_id,
                random_words=delivered,
                payment=self.base_fee,
                success=False,
                error=str(e),
            )
        logger.info("randomness fulfilled id=%d consumer=%s", req.request_id, req.consumer)
        return FulfillmentResult(
            request_id=req.request_id,
            random_words=delivered,
            payment=self.base_fee,
            success=True,
        )


__all__ = ["MockCoordinator", "Subscription", "FulfillmentResult", "derive_words"]
