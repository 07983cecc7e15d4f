"""Running work functions periodically, with a random splay on each interval."""

from __future__ import annotations

import asyncio
import inspect
import logging
import random
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Awaitable, Callable, Sequence, Union

log = logging.getLogger(__name__)

DEFAULT_SPLAY_PERCENT = 10
DEFAULT_FIRST_RUN_DELAY = 10.0

WorkFunc = Callable[[], Union[Awaitable[Any], Any]]


def _seconds(duration: float | timedelta) -> float:
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return float(duration)


@dataclass
class Schedule:
    """A named work function run every ``interval`` seconds."""

    name: str
    interval: float | timedelta
    work_fn: WorkFunc


class Scheduler:
    """Runs each schedule in its own task until cancelled.

    The first run of every schedule happens after ``first_run_delay`` seconds;
    both that delay and each interval are varied by up to ``splay_percent``
    percent either way.
    """

    def __init__(
        self,
        schedules: Sequence[Schedule],
        *,
        splay_percent: int = DEFAULT_SPLAY_PERCENT,
        first_run_delay: float | timedelta = DEFAULT_FIRST_RUN_DELAY,
        rng: random.Random | None = None,
    ) -> None:
        if not 0 <= splay_percent < 100:
            raise ValueError("invalid splay value, expected < 100")
        self.schedules = list(schedules)
        self.splay_percent = splay_percent
        self.first_run_delay = _seconds(first_run_delay)
        self._rng = rng if rng is not None else random.Random()

    async def run(self) -> None:
        """Run all schedules until the calling task is cancelled."""
        tasks = [
            asyncio.create_task(self._run_schedule(schedule), name=schedule.name)
            for schedule in self.schedules
        ]
        try:
            await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                task.cancel()

    def interval_with_splay(self, interval: float | timedelta) -> float:
        """``interval`` in seconds, scaled by a random percentage around 100."""
        percent = 100 - self.splay_percent + self._rng.randrange(2 * self.splay_percent + 1)
        return _seconds(interval) / 100 * percent

    async def _run_schedule(self, schedule: Schedule) -> None:
        delay = self.interval_with_splay(self.first_run_delay)
        try:
            while True:
                await asyncio.sleep(delay)
                await self._run_once(schedule)
                delay = self.interval_with_splay(schedule.interval)
        except asyncio.CancelledError:
            log.debug("exiting on cancel", extra={"schedule": schedule.name})
            raise

    @staticmethod
    async def _run_once(schedule: Schedule) -> None:
        log.debug("started", extra={"schedule": schedule.name})
        try:
            result = schedule.work_fn()
            if inspect.isawaitable(result):
                await result
        except Exception:
            log.exception(
                "failed running schedule function", extra={"schedule": schedule.name}
            )
        log.debug("finished", extra={"schedule": schedule.name})