import pytest

from lottery.config import LotteryConfig
from lottery.constants import UNIT
from lottery.engine.ledger import RoundLedger, enter
from lottery.errors import (
    InsufficientBalance,
    InsufficientPayment,
    RoundNotOpen,
    TransferRejected,
)
from lottery.events import EV_ENTRY_ACCEPTED
from lottery.funds import Bank
from lottery.types.core import RoundState

FEE = UNIT // 100
T0 = 1_700_000_000


def mk_ledger(fee: int = FEE, interval: int = 30) -> RoundLedger:
    cfg = LotteryConfig(entry_fee=fee, interval_s=interval, subscription_id=1)
    return RoundLedger(cfg, Bank(), "lottery", now=T0)


def mk_player(ledger: RoundLedger, name: str, amount: int = UNIT) -> str:
    ledger.bank.mint(name, amount)
    return name


def test_new_ledger_starts_open_and_empty():
    led = mk_ledger()
    assert led.state is RoundState.OPEN
    assert led.participant_count == 0
    assert led.balance == 0
    assert led.round.last_timestamp == T0
    assert led.pending_request_id is None


def test_enter_records_participant_and_moves_payment():
    led = mk_ledger()
    alice = mk_player(led, "alice")

    enter(led, alice, FEE)

    assert led.participants == ["alice"]
    assert led.balance == FEE
    assert led.bank.balance_of(alice) == UNIT - FEE
    ev = led.events.last(EV_ENTRY_ACCEPTED)
    assert ev is not None and ev.args == {"participant": "alice"}


def test_overpayment_is_kept_by_the_lottery():
    led = mk_ledger()
    bob = mk_player(led, "bob")
    enter(led, bob, 3 * FEE)
    assert led.balance == 3 * FEE
    assert led.participant_count == 1


def test_repeat_entries_count_as_separate_chances():
    led = mk_ledger()
    alice = mk_player(led, "alice")
    bob = mk_player(led, "bob")
    for who in (alice, bob, alice):
        enter(led, who, FEE)
    assert led.participants == ["alice", "bob", "alice"]
    assert led.participant_at(2) == "alice"
    with pytest.raises(IndexError):
        led.participant_at(3)


def test_underpayment_is_rejected_without_side_effects():
    led = mk_ledger()
    alice = mk_player(led, "alice")

    with pytest.raises(InsufficientPayment) as ei:
        enter(led, alice, FEE - 1)

    assert ei.value.paid == FEE - 1
    assert ei.value.required == FEE
    assert led.participant_count == 0
    assert led.balance == 0
    assert led.bank.balance_of(alice) == UNIT
    assert len(led.events) == 0


def test_entering_a_resolving_round_fails():
    led = mk_ledger()
    alice = mk_player(led, "alice")
    enter(led, alice, FEE)
    led.round.begin_resolution()

    with pytest.raises(RoundNotOpen) as ei:
        enter(led, alice, FEE)
    assert ei.value.state == "resolving"
    assert led.participant_count == 1
    assert led.balance == FEE


def test_fee_is_checked_before_phase():
    led = mk_ledger()
    led.round.begin_resolution()
    with pytest.raises(InsufficientPayment):
        enter(led, mk_player(led, "carol"), FEE - 1)


def test_unfunded_caller_leaves_round_untouched():
    led = mk_ledger()
    with pytest.raises(InsufficientBalance):
        enter(led, "pauper", FEE)
    assert led.participant_count == 0
    assert len(led.events) == 0
    assert led.bank.total_supply() == 0


def test_refused_payment_is_not_an_entry():
    led = mk_ledger()
    alice = mk_player(led, "alice")
    led.bank.register_receiver(led.account, lambda sender, amount: False)

    with pytest.raises(TransferRejected) as ei:
        enter(led, alice, FEE)

    assert (ei.value.sender, ei.value.recipient, ei.value.amount) == (alice, "lottery", FEE)
    assert led.participant_count == 0
    assert led.balance == 0
    assert led.bank.balance_of(alice) == UNIT
    assert len(led.events) == 0


def test_error_payload_carries_diagnostics():
    data = InsufficientPayment(5, 10).to_dict()
    assert data["error"] == "InsufficientPayment"
    assert data["paid"] == 5 and data["required"] == 10
    assert "paid=5" in data["message"]
