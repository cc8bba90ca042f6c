import asyncio
import logging

import pytest

from lottery.errors import UpkeepNotNeeded
from lottery.keeper import UpkeepKeeper
from lottery.types.core import RoundState, UpkeepCheck


def mk_ready(net, players=("alice", "bob")):
    for who in players:
        net.fund(who)
        net.lottery.enter(who, net.lottery.entrance_fee)


class RacedTarget:
    """Says upkeep is needed, then loses the race to another trigger."""

    def __init__(self):
        self.performed_with = []

    def check_upkeep(self, aux=b""):
        return UpkeepCheck(True, b"\xaa")

    def perform_upkeep(self, aux=b""):
        self.performed_with.append(aux)
        raise UpkeepNotNeeded(0, 0, "resolving")


class FlakyTarget:
    def __init__(self):
        self.calls = 0

    def check_upkeep(self, aux=b""):
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("rpc timeout")
        return UpkeepCheck(False)

    def perform_upkeep(self, aux=b""):
        raise AssertionError("never eligible")


def test_run_once_waits_for_the_interval(net):
    mk_ready(net)
    assert net.keeper.run_once() is None
    assert net.lottery.state is RoundState.OPEN

    net.advance_past_interval()
    rid = net.keeper.run_once()

    assert rid == 1
    assert net.keeper.performed == 1
    assert net.lottery.pending_request_id == 1
    assert net.keeper.run_once() is None
    assert len(net.coordinator.pending_requests()) == 1


def test_lost_race_is_not_an_error():
    target = RacedTarget()
    keeper = UpkeepKeeper(target)
    assert keeper.run_once() is None
    assert target.performed_with == [b"\xaa"]
    assert keeper.performed == 0


def test_run_forever_performs_upkeep_and_stops(net):
    mk_ready(net)
    net.advance_past_interval()

    async def scenario():
        stop = asyncio.Event()
        task = asyncio.create_task(net.keeper.run_forever(poll_s=0.01, stop=stop))
        for _ in range(200):
            if net.lottery.pending_request_id is not None:
                break
            await asyncio.sleep(0.01)
        stop.set()
        await asyncio.wait_for(task, timeout=2.0)

    asyncio.run(scenario())
    assert net.lottery.state is RoundState.RESOLVING
    assert net.keeper.performed == 1


def test_run_forever_survives_failing_iterations(caplog):
    target = FlakyTarget()
    keeper = UpkeepKeeper(target)

    async def scenario():
        stop = asyncio.Event()
        task = asyncio.create_task(keeper.run_forever(poll_s=0.01, stop=stop))
        while target.calls < 3:
            await asyncio.sleep(0.01)
        stop.set()
        await asyncio.wait_for(task, timeout=2.0)

    with caplog.at_level(logging.ERROR, logger="lottery.keeper"):
        asyncio.run(scenario())
    assert target.calls >= 3
    assert "keeper iteration failed" in caplog.text


def test_run_forever_rejects_bad_poll_interval(net):
    with pytest.raises(ValueError):
        asyncio.run(net.keeper.run_forever(poll_s=0))
