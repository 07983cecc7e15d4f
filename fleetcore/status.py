"""Reporting the observed state of the server."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping, Protocol

log = logging.getLogger(__name__)


class Status(Enum):
    """Observed state reported to the supervising agent."""

    STARTING = 0
    CONFIGURING = 1
    HEALTHY = 2
    DEGRADED = 3
    FAILED = 4
    STOPPING = 5

    def __str__(self) -> str:
        return self.name


class Reporter(Protocol):
    def status(
        self, status: Status, message: str, payload: Mapping[str, Any] | None
    ) -> None: ...


class LogReporter:
    """Writes each reported status to the log."""

    def status(
        self, status: Status, message: str, payload: Mapping[str, Any] | None = None
    ) -> None:
        """Log the status and message; the payload is not logged."""
        log.info(message, extra={"status": str(status)})


class ChainedReporter:
    """Reports to each reporter in order, stopping at the first that raises."""

    def __init__(self, *reporters: Reporter) -> None:
        self._reporters = list(reporters)

    def status(
        self, status: Status, message: str, payload: Mapping[str, Any] | None = None
    ) -> None:
        """Pass the status on to every reporter."""
        for reporter in self._reporters:
            reporter.status(status, message, payload)