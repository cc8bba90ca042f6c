"""
lottery.devnet
==============

A self-contained local network: funds ledger, manual clock, mock coordinator
with a funded subscription, and a lottery registered as its consumer.

Used by the CLI `simulate` command, the HTTP mount's default wiring and
tests. `simulate_round` drives one full round the way the off-chain actors
would: players enter, time passes, the keeper performs upkeep, the
coordinator fulfils.

    net = LocalNetwork.deploy()
    outcome = net.simulate_round(["alice", "bob", "carol"])
    print(outcome.winner, outcome.prize)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .clock import ManualClock
from .config import LotteryConfig, preset
from .constants import MOCK_SUBSCRIPTION_FUND, UNIT
from .engine.lottery import DEFAULT_LOTTERY_ADDRESS, Lottery
from .events import EventLog
from .funds import Bank
from .keeper import UpkeepKeeper
from .metrics import Metrics
from .oracle.base import CoordinatorRequester
from .oracle.coordinator import FulfillmentResult, MockCoordinator

logger = logging.getLogger(__name__)

DEPLOYER = "deployer"
PLAYER_FAUCET = 100 * UNIT


@dataclass
class RoundOutcome:
    request_id: int
    winner: Optional[str]
    prize: int
    players: List[str]
    fulfilled: bool
    balances: Dict[str, int] = field(default_factory=dict)
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "winner": self.winner,
            "prize": self.prize,
            "players": list(self.players),
            "fulfilled": self.fulfilled,
            "balances": dict(self.balances),
            "error": self.error,
        }


@dataclass
class LocalNetwork:
    bank: Bank
    clock: ManualClock
    coordinator: MockCoordinator
    lottery: Lottery
    keeper: UpkeepKeeper
    subscription_id: int

    @classmethod
    def deploy(
        cls,
        config: Optional[LotteryConfig] = None,
        *,
        start_time: int = 1_700_000_000,
        subscription_fund: int = MOCK_SUBSCRIPTION_FUND,
        metrics: Optional[Metrics] = None,
        address: str = DEFAULT_LOTTERY_ADDRESS,
    ) -> "LocalNetwork":
        cfg = config if config is not None else preset("localnet")
        bank = Bank()
        clock = ManualClock(start_time)
        coordinator = MockCoordinator()

        # A fresh coordinator knows no subscriptions; always open one.
        sub_id = coordinator.create_subscription(DEPLOYER)
        coordinator.fund_subscription(sub_id, subscription_fund)
        cfg = cfg.with_subscription(sub_id)

        lottery = Lottery(
            cfg,
            CoordinatorRequester(coordinator, address),
            coordinator_address=coordinator.address,
            bank=bank,
            clock=clock,
            address=address,
            events=EventLog(),
            metrics=metrics,
        )
        coordinator.add_consumer(sub_id, address)
        logger.info("local lottery deployed address=%s subscription=%d", address, sub_id)
        return cls(
            bank=bank,
            clock=clock,
            coordinator=coordinator,
            lottery=lottery,
            keeper=UpkeepKeeper(lottery),
            subscription_id=sub_id,
        )

    def fund(self, player: str, amount: int = PLAYER_FAUCET) -> int:
        return self.bank.mint(player, amount)

    def advance_past_interval(self) -> int:
        return self.clock.advance(self.lottery.interval + 1)

    def fulfill_pending(self, words: Optional[Sequence[int]] = None) -> FulfillmentResult:
        rid = self.lottery.pending_request_id
        if rid is None:
            raise RuntimeError("no randomness request pending")
        return self.coordinator.fulfill_random_words(rid, self.lottery, words)

    def simulate_round(
        self,
        players: Sequence[str],
        *,
        words: Optional[Sequence[int]] = None,
        entry_amount: Optional[int] = None,
    ) -> RoundOutcome:
        if not players:
            raise ValueError("need at least one player")
        amount = entry_amount if entry_amount is not None else self.lottery.entrance_fee
        for p in players:
            if self.bank.balance_of(p) < amount:
                self.fund(p)
            self.lottery.enter(p, amount)

        self.advance_past_interval()
        rid = self.keeper.run_once()
        if rid is None:
            raise RuntimeError("upkeep was not performed")
        prize = self.lottery.balance
        result = self.fulfill_pending(words)
        return RoundOutcome(
            request_id=rid,
            winner=self.lottery.recent_winner if result.success else None,
            prize=prize if result.success else 0,
            players=list(players),
            fulfilled=result.success,
            balances={p: self.bank.balance_of(p) for p in dict.fromkeys(players)},
            error=result.error,
        )


__all__ = ["LocalNetwork", "RoundOutcome", "DEPLOYER", "PLAYER_FAUCET"]
