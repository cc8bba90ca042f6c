import logging

import pytest

from lottery.clock import ManualClock, SystemClock
from lottery.errors import InsufficientBalance, NegativeAmount
from lottery.events import EV_ENTRY_ACCEPTED, EV_WINNER_PICKED, EventLog
from lottery.funds import Bank


# ---- Bank ---------------------------------------------------------------------


def test_credit_debit_and_supply():
    bank = Bank()
    assert bank.credit("a", 10) == 10
    assert bank.debit("a", 4) == 6
    assert bank.balance_of("a") == 6
    assert bank.balance_of("nobody") == 0
    assert bank.total_supply() == 6


def test_overdraft_and_negative_amounts_are_refused():
    bank = Bank()
    bank.mint("a", 5)
    with pytest.raises(InsufficientBalance) as ei:
        bank.debit("a", 6)
    assert (ei.value.balance, ei.value.amount) == (5, 6)
    with pytest.raises(NegativeAmount):
        bank.credit("a", -1)
    with pytest.raises(InsufficientBalance):
        bank.transfer("a", "b", 6)
    assert bank.balance_of("a") == 5
    assert bank.balance_of("b") == 0


def test_transfer_notifies_recipient():
    bank = Bank()
    bank.mint("a", 10)
    got = []
    bank.register_receiver("b", lambda sender, amount: got.append((sender, amount)))
    assert bank.transfer("a", "b", 3) is True
    assert got == [("a", 3)]
    assert (bank.balance_of("a"), bank.balance_of("b")) == (7, 3)


@pytest.mark.parametrize("verdict", ["false", "raise"])
def test_rejecting_recipient_undoes_everything(verdict, caplog):
    bank = Bank()
    bank.mint("a", 10)

    def hook(sender, amount):
        bank.credit("side-effect", 99)
        if verdict == "raise":
            raise RuntimeError("no thanks")
        return False

    bank.register_receiver("b", hook)
    with caplog.at_level(logging.WARNING, logger="lottery.funds"):
        assert bank.transfer("a", "b", 3) is False
    assert bank.balance_of("a") == 10
    assert bank.balance_of("b") == 0
    assert bank.balance_of("side-effect") == 0
    assert "transfer rejected by b" in caplog.text

    bank.unregister_receiver("b")
    assert bank.transfer("a", "b", 3) is True


def test_failed_transfers_leave_no_open_checkpoint():
    bank = Bank()
    bank.mint("a", 5)
    for _ in range(3):
        with pytest.raises(InsufficientBalance):
            bank.transfer("a", "b", 6)
    # A fresh checkpoint sits at depth one only if nothing leaked.
    cp = bank.checkpoint()
    assert cp == 1
    bank.mint("a", 1)
    bank.revert(cp)
    assert bank.balance_of("a") == 5


def test_checkpoints_nest():
    bank = Bank()
    bank.mint("a", 1)
    outer = bank.checkpoint()
    bank.mint("a", 1)
    inner = bank.checkpoint()
    bank.mint("a", 1)
    bank.release(inner)
    assert bank.balance_of("a") == 3
    bank.revert(outer)
    assert bank.balance_of("a") == 1
    with pytest.raises(ValueError):
        bank.revert(outer)


# ---- EventLog -----------------------------------------------------------------


def test_events_are_ordered_and_filterable():
    log = EventLog()
    log.emit(EV_ENTRY_ACCEPTED, participant="a")
    log.emit(EV_ENTRY_ACCEPTED, participant="b")
    log.emit(EV_WINNER_PICKED, winner="b")

    assert [e.seq for e in log] == [0, 1, 2]
    assert [e.args["participant"] for e in log.filter(EV_ENTRY_ACCEPTED)] == ["a", "b"]
    assert [e.seq for e in log.filter(since=1)] == [1, 2]
    assert log.last(EV_WINNER_PICKED).to_dict() == {
        "seq": 2, "name": EV_WINNER_PICKED, "args": {"winner": "b"}
    }
    assert log.last("Nope") is None


def test_truncate_drops_events_after_mark():
    log = EventLog()
    log.emit(EV_ENTRY_ACCEPTED, participant="a")
    mark = log.mark()
    log.emit(EV_ENTRY_ACCEPTED, participant="b")
    log.truncate(mark)
    assert len(log) == 1
    assert log.emit(EV_WINNER_PICKED, winner="a").seq == 2
    with pytest.raises(ValueError):
        log.truncate(5)


def test_notifications_wait_for_outermost_commit():
    log = EventLog()
    seen = []
    log.subscribe(lambda ev: seen.append(ev.seq))

    outer = log.mark()
    log.emit(EV_ENTRY_ACCEPTED, participant="a")
    inner = log.mark()
    log.emit(EV_ENTRY_ACCEPTED, participant="b")
    log.commit(inner)
    assert seen == []

    inner = log.mark()
    log.emit(EV_ENTRY_ACCEPTED, participant="c")
    log.truncate(inner)
    assert seen == []

    log.commit(outer)
    assert seen == [0, 1]
    assert [e.seq for e in log] == [0, 1]

    log.emit(EV_WINNER_PICKED, winner="a")
    assert seen == [0, 1, 3]


def test_truncated_events_are_never_delivered():
    log = EventLog()
    seen = []
    log.subscribe(seen.append)
    mark = log.mark()
    log.emit(EV_ENTRY_ACCEPTED, participant="a")
    log.truncate(mark)
    assert seen == []
    assert len(log) == 0
    with pytest.raises(ValueError):
        log.commit(0)


def test_subscribers_are_notified_and_isolated(caplog):
    log = EventLog()
    seen = []

    def boom(ev):
        raise RuntimeError("indexer down")

    unsubscribe = log.subscribe(seen.append)
    log.subscribe(boom)
    with caplog.at_level(logging.ERROR, logger="lottery.events"):
        log.emit(EV_ENTRY_ACCEPTED, participant="a")
    assert [e.name for e in seen] == [EV_ENTRY_ACCEPTED]
    assert "event subscriber failed" in caplog.text

    unsubscribe()
    log.emit(EV_ENTRY_ACCEPTED, participant="b")
    assert len(seen) == 1


# ---- Clocks -------------------------------------------------------------------


def test_manual_clock_only_moves_forward():
    clock = ManualClock(100)
    assert clock.advance(5) == 105
    clock.set(200)
    assert clock.now() == 200
    with pytest.raises(ValueError):
        clock.advance(-1)
    with pytest.raises(ValueError):
        clock.set(199)


def test_system_clock_returns_int_seconds():
    assert isinstance(SystemClock().now(), int)
