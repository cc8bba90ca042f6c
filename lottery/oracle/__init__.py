"""
lottery.oracle
--------------

Randomness oracle collaborators.

- base        : capability interfaces the round engine depends on
                (RandomnessRequester, RandomnessConsumer) and the adapter that
                binds a coordinator to one consumer address.
- coordinator : MockCoordinator, a local stand-in for the verifiable
                randomness coordinator (subscriptions, requests, one-shot
                fulfilment).
"""

from __future__ import annotations

from .base import CoordinatorRequester, RandomnessConsumer, RandomnessRequester
from .coordinator import FulfillmentResult, MockCoordinator, Subscription

__all__ = [
    "RandomnessRequester",
    "RandomnessConsumer",
    "CoordinatorRequester",
    "MockCoordinator",
    "Subscription",
    "FulfillmentResult",
]
