"""A sufficiently random generator for test data."""

from __future__ import annotations

import random
import time as _time
from datetime import datetime, timedelta
from enum import IntEnum

CHARSET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"


class OffsetDirection(IntEnum):
    """Which way ``Rnd.time`` moves from the base time."""

    BEFORE = 0
    AFTER = 1

    def __str__(self) -> str:
        return "Before" if self is OffsetDirection.BEFORE else "After"


class Rnd:
    """Random values for tests; seeded from the clock unless a seed is given."""

    def __init__(self, seed: int | None = None) -> None:
        self._random = random.Random(int(_time.time()) if seed is None else seed)

    def int(self, min: int, max: int) -> int:
        """A value in ``[min, max)``; raises ValueError when the range is empty."""
        return self._random.randrange(min, max)

    def bool(self) -> bool:
        """True or False with equal chance."""
        return self._random.randrange(2) != 0

    def string(self, sz: int) -> str:
        """``sz`` random letters and digits."""
        return "".join(self._random.choice(CHARSET) for _ in range(sz))

    def time(
        self,
        tm: datetime,
        min: int,
        max: int,
        units: timedelta,
        direction: OffsetDirection,
    ) -> datetime:
        """``tm`` moved by a random count in ``[min, max)`` of ``units``."""
        offset = units * self.int(min, max)
        if direction == OffsetDirection.BEFORE:
            return tm - offset
        return tm + offset