"""Byte counting for HTTP bodies and helpers for HTTP log fields."""

from __future__ import annotations

import re
import threading
from typing import Protocol

HEADER_REQUEST_ID = "X-Request-ID"
_HTTP_SLASH_PREFIX = "HTTP/"
_STATUS_OK = 200

_TLS_VERSIONS = {
    0x0301: "1.0",
    0x0302: "1.1",
    0x0303: "1.2",
    0x0304: "1.3",
}

_INT = re.compile(r"[+-]?[0-9]+")


class _Readable(Protocol):
    def read(self, size: int = -1) -> bytes: ...


class ResponseWriter(Protocol):
    def write(self, data: bytes) -> int | None: ...

    def write_header(self, status_code: int) -> None: ...


class ReaderCounter:
    """Wraps a readable body and counts the bytes read from it."""

    def __init__(self, reader: _Readable) -> None:
        self._reader = reader
        self._count = 0
        self._lock = threading.Lock()

    def read(self, size: int = -1) -> bytes:
        """Read from the wrapped body, adding the bytes read to the count."""
        data = self._reader.read(size)
        with self._lock:
            self._count += len(data)
        return data

    def close(self) -> None:
        """Close the wrapped body if it can be closed."""
        close = getattr(self._reader, "close", None)
        if close is not None:
            close()

    @property
    def count(self) -> int:
        """Bytes read so far."""
        with self._lock:
            return self._count


class ResponseCounter:
    """Wraps a response writer, counting body bytes and keeping the first status."""

    def __init__(self, writer: ResponseWriter) -> None:
        self._writer = writer
        self._count = 0
        self.status_code = 0
        self._lock = threading.Lock()

    def write(self, data: bytes) -> int:
        """Write body bytes, sending a 200 status first if none was sent."""
        if self.status_code == 0:
            self.write_header(_STATUS_OK)
        written = self._writer.write(data)
        n = len(data) if written is None else written
        with self._lock:
            self._count += n
        return n

    def write_header(self, status_code: int) -> None:
        """Send a status; only the first one sent is remembered."""
        self._writer.write_header(status_code)
        if self.status_code == 0:
            self.status_code = status_code

    @property
    def count(self) -> int:
        """Body bytes written so far."""
        with self._lock:
            return self._count


def _split_host_port(addr: str) -> tuple[str, str] | None:
    i = addr.rfind(":")
    if i < 0:
        return None
    if addr.startswith("["):
        end = addr.find("]")
        if end < 0 or end + 1 != i:
            return None
        host = addr[1:end]
        if "[" in addr[1:] or "]" in addr[end + 1:]:
            return None
    else:
        host = addr[:i]
        if ":" in host or "[" in addr or "]" in addr:
            return None
    return host, addr[i + 1:]


def split_addr(addr: str) -> tuple[str, int]:
    """Split ``host:port``; an invalid address gives an empty host, a bad port 0."""
    parts = _split_host_port(addr)
    if parts is None:
        return "", 0
    host, port_text = parts
    port = int(port_text) if _INT.fullmatch(port_text) else 0
    return host, port


def strip_http(proto: str) -> str:
    """The version from an ``HTTP/x.y`` protocol string."""
    if proto.startswith(_HTTP_SLASH_PREFIX):
        return proto[len(_HTTP_SLASH_PREFIX):]
    return proto


def tls_version_to_string(vers: int) -> str:
    """A TLS protocol number as ``1.0`` to ``1.3``, or ``unknown_0x..``."""
    return _TLS_VERSIONS.get(vers, f"unknown_0x{vers:x}")