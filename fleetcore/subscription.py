"""Policy update subscriptions kept in intrusive queues with O(1) unlink."""

from __future__ import annotations

import queue
from dataclasses import dataclass, field
from typing import Any, Iterator


class _Link:
    _prev: "_Link | None" = None
    _next: "_Link | None" = None


@dataclass(eq=False)
class Subscription(_Link):
    """An agent waiting for a newer revision of a policy.

    A subscription sits in at most one queue at a time and can leave it
    without knowing which queue that is.
    """

    policy_id: str
    agent_id: str = ""
    rev_idx: int = 0
    coord_idx: int = 0
    output: "queue.Queue[Any]" = field(
        default_factory=lambda: queue.Queue(maxsize=1), repr=False
    )

    def unlink(self) -> bool:
        """Remove this subscription from its queue; False if it was in none."""
        if self._next is None or self._prev is None:
            return False
        self._prev._next = self._next
        self._next._prev = self._prev
        self._next = None
        self._prev = None
        return True

    def is_update(self, policy: Any) -> bool:
        """True if ``policy`` is a coordinated revision newer than the one held."""
        rev = policy.revision_idx
        coord = policy.coordinator_idx
        return (rev > self.rev_idx and coord > 0) or (
            rev == self.rev_idx and coord > self.coord_idx
        )


class SubscriptionList:
    """A first-in first-out queue of subscriptions."""

    def __init__(self) -> None:
        self._head = _Link()
        self._head._next = self._head
        self._head._prev = self._head

    def push_front(self, sub: Subscription) -> None:
        """Put ``sub`` at the front of the queue."""
        head = self._head
        sub._next = head._next
        sub._prev = head
        head._next._prev = sub
        head._next = sub

    def push_back(self, sub: Subscription) -> None:
        """Put ``sub`` at the back of the queue."""
        head = self._head
        sub._next = head
        sub._prev = head._prev
        head._prev._next = sub
        head._prev = sub

    def pop_front(self) -> Subscription | None:
        """Remove and return the first subscription, or None if the queue is empty."""
        if self._head._next is self._head:
            return None
        sub = self._head._next
        sub.unlink()
        return sub

    def is_empty(self) -> bool:
        """True when no subscription is queued."""
        return self._head._next is self._head

    def iter_unlinkable(self) -> Iterator[Subscription]:
        """Yield the queued subscriptions in order; the one yielded may be unlinked."""
        node = self._head._next
        while node is not self._head:
            following = node._next
            yield node
            if following is None:
                return
            node = following

    def __iter__(self) -> Iterator[Subscription]:
        return self.iter_unlinkable()