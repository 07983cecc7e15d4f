"""Sequence numbers of documents in an index."""

from __future__ import annotations

from typing import Iterable

UNDEFINED_SEQ_NO = -1


class SeqNo(tuple):
    """An immutable list of document sequence numbers."""

    def __new__(cls, values: Iterable[int] = ()) -> "SeqNo":
        return super().__new__(cls, (int(v) for v in values))

    def __str__(self) -> str:
        return ",".join(str(v) for v in self)

    def __repr__(self) -> str:
        return f"SeqNo({list(self)!r})"

    def json_string(self) -> str:
        """The sequence numbers as a JSON array."""
        return f"[{self}]"

    def is_set(self) -> bool:
        """True when the first sequence number is defined."""
        return bool(self) and self[0] >= 0

    def value(self) -> int:
        """The first sequence number, or ``UNDEFINED_SEQ_NO`` when empty."""
        return self[0] if self else UNDEFINED_SEQ_NO

    def clone(self) -> "SeqNo":
        """A copy of these sequence numbers."""
        return SeqNo(self)


DEFAULT_SEQ_NO = SeqNo([UNDEFINED_SEQ_NO])