"""Sleeping that can be cut short."""

from __future__ import annotations

import threading
from concurrent.futures import CancelledError
from datetime import timedelta


def wait_with_event(stop: threading.Event, duration: float | timedelta) -> None:
    """Sleep for ``duration`` seconds; raise CancelledError if ``stop`` is set first."""
    seconds = duration.total_seconds() if isinstance(duration, timedelta) else float(duration)
    if stop.wait(max(seconds, 0.0)):
        raise CancelledError("wait cancelled")