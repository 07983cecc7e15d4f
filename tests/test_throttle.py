from datetime import timedelta

import pytest

from fleetcore.throttle import Throttle, Token

HOUR = 3600.0


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _acquire_all_with_conflict_check(throttle, count):
    held = []
    for i in range(count):
        key = str(i)
        first = throttle.acquire(key, HOUR)
        assert first is not None
        held.append(first)
        assert throttle.acquire(key, HOUR) is None
    return held


def _release_and_reacquire(throttle, held):
    for i, ticket in enumerate(held):
        assert ticket.release() is True
        assert ticket.release() is False
        again = throttle.acquire(str(i), HOUR)
        assert again is not None
        assert again.release() is True


def test_throttle_zero():
    throttle = Throttle(0)
    count = 40

    held = _acquire_all_with_conflict_check(throttle, count)

    for i in range(count):
        assert throttle.acquire(str(i), HOUR) is None

    _release_and_reacquire(throttle, held)


@pytest.mark.parametrize("n", range(1, 11))
def test_throttle_n(n):
    throttle = Throttle(n)

    held = _acquire_all_with_conflict_check(throttle, n)

    for i in range(17):
        assert throttle.acquire(str(n + i), HOUR) is None

    _release_and_reacquire(throttle, held)


def test_throttle_expire_identity():
    clock = FakeClock()
    throttle = Throttle(1, clock=clock)

    original = throttle.acquire("xxx", 1.0)
    assert original is not None
    assert throttle.acquire("xxx", HOUR) is None

    clock.advance(1.5)

    third = throttle.acquire("xxx", HOUR)
    assert third is not None
    assert original.release() is False
    assert third.release() is True


def test_throttle_expire_at_max():
    clock = FakeClock()
    throttle = Throttle(1, clock=clock)

    first = throttle.acquire("xxx", 1.0)
    assert first is not None
    assert throttle.acquire("yyy", HOUR) is None

    clock.advance(1.5)

    second = throttle.acquire("yyy", HOUR)
    assert second is not None
    assert first.release() is False
    assert second.release() is True


def test_not_expired_at_exact_ttl():
    clock = FakeClock()
    throttle = Throttle(0, clock=clock)

    assert throttle.acquire("k", 1.0) is not None
    clock.advance(1.0)
    assert throttle.acquire("k", 1.0) is None


def test_ttl_accepts_timedelta():
    clock = FakeClock()
    throttle = Throttle(0, clock=clock)

    assert throttle.acquire("k", timedelta(seconds=2)) is not None
    clock.advance(1.0)
    assert throttle.acquire("k", HOUR) is None
    clock.advance(1.5)
    assert throttle.acquire("k", HOUR) is not None


def test_ids_increase_and_keys_kept():
    throttle = Throttle(0)
    first = throttle.acquire("a", HOUR)
    second = throttle.acquire("b", HOUR)
    assert isinstance(first, Token) and isinstance(second, Token)
    assert second.id > first.id
    assert (first.key, second.key) == ("a", "b")