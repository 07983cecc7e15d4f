"""A listener that closes connections beyond a fixed number in use."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Protocol

log = logging.getLogger(__name__)


class _Listener(Protocol):
    def accept(self) -> tuple[Any, Any]: ...

    def close(self) -> None: ...


def _address(getter: Callable[[], Any]) -> str:
    try:
        return str(getter())
    except OSError:
        return ""


class LimitedConnection:
    """A connection that frees its listener slot when closed."""

    def __init__(self, conn: Any, release: Callable[[], None]) -> None:
        self.connection = conn
        self._release = release
        self._released = False
        self._lock = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        return getattr(self.connection, name)

    def close(self) -> None:
        """Close the connection; the slot is released only on the first call."""
        try:
            self.connection.close()
        finally:
            with self._lock:
                release = not self._released
                self._released = True
            if release:
                self._release()

    def __enter__(self) -> "LimitedConnection":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class LimitListener:
    """Accepts every connection but closes it at once when ``max`` are in use.

    Meant to sit in front of the TLS handshake, so that a flood of connections
    cannot use up the server's CPU. Connections over the limit are closed
    without regard to whether they are valid.
    """

    def __init__(self, listener: _Listener, n: int) -> None:
        self._listener = listener
        self.max = n
        self._slots = threading.BoundedSemaphore(n) if n > 0 else None
        if n < 0:
            raise ValueError("limit must not be negative")
        self._done = threading.Event()

    def _acquire(self) -> bool:
        if self._done.is_set() or self._slots is None:
            return False
        return self._slots.acquire(blocking=False)

    def _release(self) -> None:
        if self._slots is not None:
            self._slots.release()

    def accept(self) -> tuple[Any, Any]:
        """Accept a connection; over the limit it is returned already closed."""
        conn, addr = self._listener.accept()

        if not self._acquire():
            local = _address(conn.getsockname)
            remote = _address(conn.getpeername)
            error: OSError | None = None
            try:
                conn.close()
            except OSError as exc:
                error = exc
            log.warning(
                "Connection closed due to max limit",
                extra={
                    "server_address": local,
                    "client_address": remote,
                    "close_error": error,
                    "max": self.max,
                },
            )
            return conn, addr

        return LimitedConnection(conn, self._release), addr

    def close(self) -> None:
        """Close the underlying listener; later connections are refused."""
        try:
            self._listener.close()
        finally:
            self._done.set()

    def __enter__(self) -> "LimitListener":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()