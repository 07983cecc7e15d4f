"""Request limiting by rate and by number in flight."""

from __future__ import annotations

import threading
import time
from datetime import timedelta
from typing import Callable


class RateLimitError(Exception):
    """The request rate was exceeded."""

    def __init__(self, message: str = "rate limit") -> None:
        super().__init__(message)


class MaxLimitError(Exception):
    """Too many requests are in flight."""

    def __init__(self, message: str = "max limit") -> None:
        super().__init__(message)


class _TokenBucket:
    def __init__(self, interval: float, burst: int, clock: Callable[[], float]) -> None:
        self._rate = 1.0 / interval
        self._burst = burst
        self._tokens = float(burst)
        self._last: float | None = None
        self._clock = clock
        self._lock = threading.Lock()

    def allow(self) -> bool:
        with self._lock:
            now = self._clock()
            if self._last is not None:
                elapsed = max(0.0, now - self._last)
                self._tokens = min(float(self._burst), self._tokens + elapsed * self._rate)
            self._last = now
            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return True
            return False


class _Release:
    """Ends one admitted request, freeing its concurrency slot if it holds one."""

    def __init__(self, semaphore: threading.BoundedSemaphore | None) -> None:
        self._semaphore = semaphore
        self.released = False

    def __call__(self) -> None:
        if self._semaphore is not None:
            self._semaphore.release()
        self.released = True


class Limiter:
    """Admits one event per ``interval`` with bursts up to ``burst``, and at most
    ``max_concurrent`` at once. A zero interval or zero maximum turns that limit off."""

    def __init__(
        self,
        interval: float | timedelta = 0.0,
        burst: int = 0,
        max_concurrent: int = 0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        seconds = interval.total_seconds() if isinstance(interval, timedelta) else float(interval)
        if max_concurrent < 0:
            raise ValueError("max_concurrent must not be negative")
        self._rate = _TokenBucket(seconds, burst, clock) if seconds > 0 else None
        self._max = threading.BoundedSemaphore(max_concurrent) if max_concurrent else None

    def acquire(self) -> Callable[[], None]:
        """Admit one request and return the function that ends it."""
        if self._rate is not None and not self._rate.allow():
            raise RateLimitError()
        if self._max is not None and not self._max.acquire(blocking=False):
            raise MaxLimitError()
        return _Release(self._max)