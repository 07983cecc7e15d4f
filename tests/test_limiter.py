import pytest

from fleetcore.limiter import Limiter, MaxLimitError, RateLimitError


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _count_admitted(limiter, attempts):
    admitted = 0
    for _ in range(attempts):
        try:
            limiter.acquire()
        except (RateLimitError, MaxLimitError):
            continue
        admitted += 1
    return admitted


def test_no_limits_admits_everything():
    limiter = Limiter()
    assert _count_admitted(limiter, 50) == 50


def test_rate_limit_burst_then_refill():
    clock = FakeClock()
    limiter = Limiter(interval=1.0, burst=2, clock=clock)

    limiter.acquire()
    limiter.acquire()
    with pytest.raises(RateLimitError):
        limiter.acquire()

    clock.now += 1.0
    limiter.acquire()
    with pytest.raises(RateLimitError):
        limiter.acquire()


def test_rate_refill_capped_at_burst():
    clock = FakeClock()
    limiter = Limiter(interval=1.0, burst=2, clock=clock)
    clock.now += 100.0
    assert _count_admitted(limiter, 10) == 2


def test_zero_burst_never_admits():
    limiter = Limiter(interval=1.0, burst=0, clock=FakeClock())
    with pytest.raises(RateLimitError):
        limiter.acquire()


def test_max_limit_and_release():
    limiter = Limiter(max_concurrent=1)
    release = limiter.acquire()
    with pytest.raises(MaxLimitError):
        limiter.acquire()
    release()
    second = limiter.acquire()
    with pytest.raises(MaxLimitError):
        limiter.acquire()
    second()


def test_over_release_raises():
    limiter = Limiter(max_concurrent=1)
    release = limiter.acquire()
    release()
    with pytest.raises(ValueError):
        release()


def test_rate_checked_before_max():
    clock = FakeClock()
    limiter = Limiter(interval=1.0, burst=1, max_concurrent=1, clock=clock)
    limiter.acquire()
    with pytest.raises(RateLimitError):
        limiter.acquire()


def test_negative_max_rejected():
    with pytest.raises(ValueError):
        Limiter(max_concurrent=-1)


def test_error_messages():
    assert str(RateLimitError()) == "rate limit"
    assert str(MaxLimitError()) == "max limit"