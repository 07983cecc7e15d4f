"""Policy revisions as sent to agents in action IDs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

_INT = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class Revision:
    """A policy revision, written as ``policy:<id>:<revision>:<coordinator>``."""

    policy_id: str
    revision_idx: int
    coordinator_idx: int

    def __str__(self) -> str:
        return f"policy:{self.policy_id}:{self.revision_idx}:{self.coordinator_idx}"


def revision_from_policy(policy: Any) -> Revision:
    """The revision a policy document is at."""
    return Revision(policy.policy_id, policy.revision_idx, policy.coordinator_idx)


def _parse_int64(text: str) -> int | None:
    if not _INT.fullmatch(text):
        return None
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        return None
    return value


def revision_from_string(action_id: str) -> Revision | None:
    """Parse an action ID into a revision; None if it is not a policy revision."""
    parts = action_id.split(":")
    if len(parts) != 4 or parts[0] != "policy":
        return None
    rev_idx = _parse_int64(parts[2])
    if rev_idx is None:
        return None
    coord_idx = _parse_int64(parts[3])
    if coord_idx is None:
        return None
    return Revision(parts[1], rev_idx, coord_idx)