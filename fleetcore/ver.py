"""Version parsing and the Fleet Server / Elasticsearch compatibility check."""

from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass
from itertools import zip_longest

log = logging.getLogger(__name__)

_VERSION_RE = re.compile(
    r"v?([0-9]+(?:\.[0-9]+)*?)"
    r"(?:-([0-9]+[0-9A-Za-z\-~]*(?:\.[0-9A-Za-z\-~]+)*)"
    r"|-?([A-Za-z\-~]+[0-9A-Za-z\-~]*(?:\.[0-9A-Za-z\-~]+)*))?"
    r"(?:\+([0-9A-Za-z\-~]+(?:\.[0-9A-Za-z\-~]+)*))?"
)


class MalformedVersionError(ValueError):
    """A version string could not be parsed."""


class UnsupportedVersionError(Exception):
    """Elasticsearch is older than this Fleet Server supports."""


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _compare_part(a: str | None, b: str | None) -> int:
    if a == b:
        return 0
    if a is None:
        return -1
    if b is None:
        return 1
    a_num, b_num = a.isdigit(), b.isdigit()
    if a_num and b_num:
        return _cmp(int(a), int(b))
    if a_num:
        return -1
    if b_num:
        return 1
    return _cmp(a, b)


def _compare_prerelease(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return 1
    if not b:
        return -1
    for left, right in zip_longest(a.split("."), b.split(".")):
        result = _compare_part(left, right)
        if result:
            return result
    return 0


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A dotted numeric version with optional prerelease and build metadata."""

    segments: tuple[int, ...]
    prerelease: str = ""
    metadata: str = ""

    def __str__(self) -> str:
        text = ".".join(str(s) for s in self.segments)
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.metadata:
            text += f"+{self.metadata}"
        return text

    def _significant(self) -> tuple[int, ...]:
        segments = list(self.segments)
        while segments and segments[-1] == 0:
            segments.pop()
        return tuple(segments)

    def _compare(self, other: "Version") -> int:
        for left, right in zip_longest(self.segments, other.segments, fillvalue=0):
            if left != right:
                return _cmp(left, right)
        return _compare_prerelease(self.prerelease, other.prerelease)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) == 0

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) < 0

    def __hash__(self) -> int:
        return hash((self._significant(), self.prerelease))


def parse_version(sver: str) -> Version:
    """Parse a version, ignoring anything from the first ``-`` on."""
    text = sver.split("-")[0]
    match = _VERSION_RE.fullmatch(text)
    if match is None:
        raise MalformedVersionError(f"malformed version: {sver!r}")
    numbers, numeric_pre, word_pre, metadata = match.groups()
    segments = [int(s) for s in numbers.split(".")]
    segments.extend([0] * (3 - len(segments)))
    return Version(tuple(segments), numeric_pre or word_pre or "", metadata or "")


def minimize_patch(ver: Version) -> str:
    """The major and minor of ``ver`` with a zero patch, e.g. ``7.13.0``."""
    return ".".join(str(s) for s in (*ver.segments[:2], 0))


def _satisfies_minimum(version: Version, minimum: Version) -> bool:
    if not minimum.prerelease and version.prerelease:
        return False
    if minimum.prerelease and version.prerelease:
        if version._significant() != minimum._significant():
            return False
    return version >= minimum


def check_compatibility(fleet_version: str, es_version: str) -> None:
    """Raise unless Elasticsearch is at least the major.minor of Fleet Server."""
    try:
        minimum = parse_version(minimize_patch(parse_version(fleet_version)))
    except MalformedVersionError:
        log.error("failed to build constraint for fleet version %s", fleet_version)
        raise

    actual = parse_version(es_version)

    if not _satisfies_minimum(actual, minimum):
        log.error(
            "failed elasticsearch version check: constraint >= %s, reported %s",
            minimum,
            actual,
        )
        raise UnsupportedVersionError(
            f"unsupported version: elasticsearch {actual} does not satisfy >= {minimum}"
        )

    log.info(
        "Elasticsearch compatibility check successful: fleet %s, elasticsearch %s",
        fleet_version,
        es_version,
    )