"""
Prometheus metrics for the lottery round engine.

Counters and histograms for the round lifecycle:
  • entries_total       — entry attempts per outcome
  • closes_total        — close (upkeep) attempts per outcome
  • resolutions_total   — randomness deliveries per outcome
  • payout_amount       — prize paid per resolved round (smallest unit)
  • round_participants  — entries in a round at close time

Label cardinality is intentionally low: only an `outcome` label with a small,
finite vocabulary. Unknown outcomes are folded into "invalid".

Usage
-----
    from lottery.metrics import METRICS

    METRICS.record_entry("accepted")
    METRICS.record_close("not_needed")
    METRICS.observe_payout(3 * 10**16)

Construct your own `Metrics` instance for a custom registry (tests do).
"""

from __future__ import annotations

from typing import Iterable

from prometheus_client import REGISTRY, Counter, Histogram


# --------- Vocabularies (kept small for bounded cardinality) ---------

_ENTRY_OUTCOMES = (
    "accepted",
    "insufficient_payment",
    "round_not_open",
    "invalid",
)

_CLOSE_OUTCOMES = (
    "requested",
    "not_needed",
    "oracle_error",
    "invalid",
)

_RESOLUTION_OUTCOMES = (
    "paid",
    "payout_failed",
    "rejected",       # stale/foreign id, no pending request, bad caller
    "invalid",
)

# Payout buckets in whole units (1e18 smallest units).
_UNIT = 10**18
_PAYOUT_BUCKETS = tuple(
    float(x * _UNIT) for x in (0.01, 0.05, 0.1, 0.5, 1, 5, 10, 50, 100)
)

_PARTICIPANT_BUCKETS = (1.0, 2.0, 5.0, 10.0, 20.0, 50.0, 100.0, 500.0, 1000.0)


def _fold(outcome: str, vocab: Iterable[str]) -> str:
    return outcome if outcome in vocab else "invalid"


class Metrics:
    """
    Container for all lottery Prometheus instruments.

    Args:
        namespace: Prometheus metric namespace (prefix).
        subsystem: Prometheus metric subsystem.
        registry:  Prometheus registry to register the metrics with.
    """

    def __init__(
        self,
        *,
        namespace: str = "animica",
        subsystem: str = "lottery",
        registry = REGISTRY,
        payout_buckets: Iterable[float] = _PAYOUT_BUCKETS,
        participant_buckets: Iterable[float] = _PARTICIPANT_BUCKETS,
    ) -> None:
        self.entries_total = Counter(
            "entries_total",
            "Number of entry attempts processed, labeled by outcome.",
            labelnames=("outcome",),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.closes_total = Counter(
            "closes_total",
            "Number of round close attempts, labeled by outcome.",
            labelnames=("outcome",),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.resolutions_total = Counter(
            "resolutions_total",
            "Number of randomness deliveries processed, labeled by outcome.",
            labelnames=("outcome",),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.payout_amount = Histogram(
            "payout_amount",
            "Prize paid to the winner of each resolved round (smallest unit).",
            buckets=tuple(payout_buckets),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.round_participants = Histogram(
            "round_participants",
            "Entries in a round at the moment it closed.",
            buckets=tuple(participant_buckets),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )

        # Pre-create label children so series exist at zero.
        for o in _ENTRY_OUTCOMES:
            self.entries_total.labels(outcome=o)
        for o in _CLOSE_OUTCOMES:
            self.closes_total.labels(outcome=o)
        for o in _RESOLUTION_OUTCOMES:
            self.resolutions_total.labels(outcome=o)

    # --------- Recording helpers ---------

    def record_entry(self, outcome: str) -> None:
        self.entries_total.labels(outcome=_fold(outcome, _ENTRY_OUTCOMES)).inc()

    def record_close(self, outcome: str) -> None:
        self.closes_total.labels(outcome=_fold(outcome, _CLOSE_OUTCOMES)).inc()

    def record_resolution(self, outcome: str) -> None:
        self.resolutions_total.labels(outcome=_fold(outcome, _RESOLUTION_OUTCOMES)).inc()

    def observe_payout(self, amount: int) -> None:
        self.payout_amount.observe(float(max(0, amount)))

    def observe_round_size(self, participants: int) -> None:
        self.round_participants.observe(float(max(0, participants)))


# Default singleton using the global registry
METRICS = Metrics()

__all__ = ["Metrics", "METRICS"]
