"""Per-key tokens with an expiry and an optional cap on unexpired tokens."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable

log = logging.getLogger(__name__)


def _seconds(duration: float | timedelta) -> float:
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return float(duration)


@dataclass(frozen=True)
class _State:
    id: int
    expire: float


@dataclass(frozen=True)
class Token:
    """A claim on one key of a throttle."""

    id: int
    key: str
    throttle: "Throttle" = field(repr=False, compare=False)

    def release(self) -> bool:
        """Give the key back; False if the token had already expired or been released."""
        return self.throttle._release(self.id, self.key)


class Throttle:
    """Allows one token per key at a time, and at most ``max_parallel`` unexpired tokens.

    A token that is not released expires after its ttl. A ``max_parallel`` of
    zero removes the cap on the number of tokens.
    """

    def __init__(
        self, max_parallel: int = 0, *, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.max_parallel = max_parallel
        self._clock = clock
        self._lock = threading.Lock()
        self._token_count = 0
        self._tokens: dict[str, _State] = {}

    def acquire(self, key: str, ttl: float | timedelta) -> Token | None:
        """Take a token for ``key`` valid for ``ttl`` seconds, or None if none is free."""
        with self._lock:
            if self._at_max_pending(key):
                log.debug(
                    "Throttle fail acquire on max pending",
                    extra={"key": key, "max": self.max_parallel, "size": len(self._tokens)},
                )
                return None

            state = self._tokens.get(key)
            now = self._clock()
            if state is not None and not state.expire < now:
                log.debug("Throttle fail acquire on existing token", extra={"key": key})
                return None

            self._token_count += 1
            token = Token(self._token_count, key, self)
            self._tokens[key] = _State(token.id, now + _seconds(ttl))
            log.debug("Throttle acquired", extra={"key": key, "token": token.id})
            return token

    def _at_max_pending(self, key: str) -> bool:
        if self.max_parallel == 0 or len(self._tokens) < self.max_parallel:
            return False

        now = self._clock()

        state = self._tokens.get(key)
        if state is not None and state.expire < now:
            del self._tokens[key]
            log.debug("Ejected target token on expiration", extra={"key": key})
            return False

        for other_key, other in list(self._tokens.items()):
            if other.expire < now:
                del self._tokens[other_key]
                log.debug("Ejected token on expiration", extra={"key": other_key})
                return False

        return True

    def _release(self, token_id: int, key: str) -> bool:
        with self._lock:
            state = self._tokens.get(key)
            if state is None:
                log.debug("Token not found to release", extra={"id": token_id, "key": key})
                return False
            if state.id == token_id:
                log.debug("Token released", extra={"id": token_id, "key": key})
                del self._tokens[key]
                return True
            return False