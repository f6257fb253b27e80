# [TESTER] v1

from __future__ import annotations

import pytest

from streamswap.integration.chain import Chain


class Counter:
    def __init__(self) -> None:
        self.value = 0
        self.restores = 0

    def snapshot(self) -> int:
        return self.value

    def restore(self, snapshot: int) -> None:
        self.value = snapshot
        self.restores += 1


class TestClock:
    def test_advance(self) -> None:
        chain = Chain(timestamp=100)
        assert chain.advance(5) == 105
        assert chain.set_timestamp(105) == 105

    def test_no_time_travel(self) -> None:
        chain = Chain(timestamp=100)
        with pytest.raises(ValueError):
            chain.set_timestamp(99)
        with pytest.raises(ValueError):
            chain.advance(-1)

    def test_clock_frozen_inside_transaction(self) -> None:
        chain = Chain()
        with chain.atomic():
            assert chain.in_transaction
            with pytest.raises(RuntimeError):
                chain.advance(1)
        assert not chain.in_transaction

    def test_invalid_start(self) -> None:
        with pytest.raises(ValueError):
            Chain(timestamp=-1)


class TestAtomic:
    def test_commit(self) -> None:
        chain = Chain()
        c = Counter()
        chain.register(c)
        with chain.atomic():
            c.value = 3
        assert c.value == 3
        assert c.restores == 0

    def test_rollback_on_error(self) -> None:
        chain = Chain()
        c = Counter()
        chain.register(c)
        with pytest.raises(KeyError):
            with chain.atomic():
                c.value = 3
                raise KeyError("boom")
        assert c.value == 0
        assert c.restores == 1

    def test_only_outermost_frame_restores(self) -> None:
        chain = Chain()
        c = Counter()
        chain.register(c)
        with chain.atomic():
            c.value = 1
            with pytest.raises(ValueError):
                with chain.atomic():
                    c.value = 2
                    raise ValueError("inner")
            assert c.value == 2
            assert c.restores == 0
        assert c.value == 2

    def test_register_is_idempotent(self) -> None:
        chain = Chain()
        c = Counter()
        chain.register(c)
        chain.register(c)
        with pytest.raises(RuntimeError):
            with chain.atomic():
                raise RuntimeError
        assert c.restores == 1
