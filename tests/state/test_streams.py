# [TESTER] v1

from __future__ import annotations

import pytest

from streamswap.state.balances import BalanceTable
from streamswap.state.streams import StreamRecord, StreamRegistry

ALICE = "0x" + "01" * 20
BOB = "0x" + "02" * 20


def test_unknown_account_reads_as_empty_record() -> None:
    reg = StreamRegistry()
    rec = reg.get(ALICE)
    assert rec.is_empty
    assert rec.flow_rate(0) == 0 and rec.flow_rate(1) == 0
    assert ALICE not in reg


def test_put_keeps_registry_sparse() -> None:
    reg = StreamRegistry()
    reg.put(ALICE, StreamRecord(flow_rate0=5))
    reg.put(BOB, StreamRecord(balance1=3))
    assert reg.accounts() == [ALICE, BOB]
    assert len(reg) == 2

    reg.put(ALICE, StreamRecord())
    assert ALICE not in reg
    assert reg.accounts() == [BOB]


def test_record_not_empty_while_owed_output() -> None:
    assert not StreamRecord(balance0=1).is_empty
    assert not StreamRecord(balance0=1).is_streaming
    assert StreamRecord(flow_rate1=1).is_streaming


def test_record_validation() -> None:
    with pytest.raises(ValueError):
        StreamRecord(flow_rate0=-1)
    with pytest.raises(TypeError):
        StreamRecord(balance1=1.0)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        StreamRecord().flow_rate(2)


def test_snapshot_restore() -> None:
    reg = StreamRegistry()
    reg.put(ALICE, StreamRecord(flow_rate0=5))
    snap = reg.snapshot()
    reg.put(BOB, StreamRecord(flow_rate1=1))
    reg.put(ALICE, StreamRecord())
    reg.restore(snap)
    assert reg.accounts() == [ALICE]
    assert reg.get(ALICE).flow_rate0 == 5


class TestBalanceTable:
    def test_move_and_total(self) -> None:
        t = BalanceTable()
        t.add(ALICE, 100)
        t.move(ALICE, BOB, 40)
        assert (t.get(ALICE), t.get(BOB), t.total) == (60, 40, 100)

    def test_zero_balances_are_dropped(self) -> None:
        t = BalanceTable()
        t.set(ALICE, 5)
        t.subtract(ALICE, 5)
        assert t.get_all_balances() == {}
        assert t.total == 0

    def test_overdraw_rejected_without_side_effects(self) -> None:
        t = BalanceTable()
        t.add(ALICE, 10)
        with pytest.raises(ValueError, match="Insufficient"):
            t.move(ALICE, BOB, 11)
        assert (t.get(ALICE), t.get(BOB)) == (10, 0)

    def test_restore_recomputes_total(self) -> None:
        t = BalanceTable()
        t.add(ALICE, 10)
        snap = t.snapshot()
        t.add(BOB, 7)
        t.restore(snap)
        assert t.total == 10
