"""
lottery.oracle.base
===================

Capability interfaces between the round engine and a randomness oracle.

The engine only ever *asks* for randomness through `RandomnessRequester` and
only ever *receives* it through the `RandomnessConsumer` entry point. It has
no dependency on any coordinator's internal types; `CoordinatorRequester`
adapts a coordinator that needs to know who is asking (to route the later
callback) to the narrow requester interface.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable


@runtime_checkable
class RandomnessRequester(Protocol):
    """Outbound half: issue one request, get an opaque id back synchronously."""

    def request_random_words(
        self,
        key_hash: bytes,
        subscription_id: int,
        request_confirmations: int,
        callback_gas_limit: int,
        num_words: int,
    ) -> int: ...


@runtime_checkable
class RandomnessConsumer(Protocol):
    """Inbound half: the single entry point the oracle calls back exactly once per id."""

    address: str

    def raw_fulfill_random_words(
        self, caller: str, request_id: int, random_words: Sequence[int]
    ) -> object: ...


class _ConsumerRoutedCoordinator(Protocol):
    def request_random_words(
        self,
        key_hash: bytes,
        subscription_id: int,
        request_confirmations: int,
        callback_gas_limit: int,
        num_words: int,
        *,
        consumer: str,
    ) -> int: ...


class CoordinatorRequester:
    """Bind a coordinator to the consumer address its callbacks must reach."""

    __slots__ = ("coordinator", "consumer")

    def __init__(self, coordinator: _ConsumerRoutedCoordinator, consumer: str) -> None:
        self.coordinator = coordinator
        self.consumer = consumer

    def request_random_words(
        self,
        key_hash: bytes,
        subscription_id: int,
        request_confirmations: int,
        callback_gas_limit: int,
        num_words: int,
    ) -> int:
        return self.coordinator.request_random_words(
            key_hash,
            subscription_id,
            request_confirmations,
            callback_gas_limit,
            num_words,
            consumer=self.consumer,
        )


__all__ = ["RandomnessRequester", "RandomnessConsumer", "CoordinatorRequester"]
