"""Fleet documents stored in Elasticsearch and their JSON form."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, fields
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, TypeVar

T = TypeVar("T")

_SCALAR = "scalar"
_LIST = "list"
_RAW = "raw"
_NESTED = "nested"
_EMPTY_TEXT = str()


def _json(
    name: str | None = None,
    default: Any = None,
    *,
    omitempty: bool = True,
    kind: str = _SCALAR,
    nested: type | None = None,
) -> Any:
    """Declare a body field; without ``name`` the JSON key is the field name."""
    meta = {"json": name, "omitempty": omitempty, "kind": kind, "nested": nested}
    if kind == _LIST:
        return field(default_factory=list, metadata=meta)
    return field(default=default, metadata=meta)


def _text(name: str | None = None, *, omitempty: bool = True) -> Any:
    """Declare a string body field that defaults to the empty string."""
    return _json(name, _EMPTY_TEXT, omitempty=omitempty)


def _internal(default: Any) -> Any:
    return field(default=default, metadata={"internal": True})


def _json_name(f: Any) -> str | None:
    if f.metadata.get("internal"):
        return None
    return f.metadata.get("json") or f.name


_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})\Z"
)


def _parse_rfc3339(text: str) -> datetime:
    match = _RFC3339.match(text)
    if match is None:
        raise ValueError(f"invalid RFC 3339 timestamp: {text!r}")
    year, month, day, hour, minute, second, frac, zone = match.groups()
    micro = int(frac.ljust(6, "0")[:6]) if frac else 0
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        offset = timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
        tz = timezone(sign * offset)
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tz
    )


def _format_rfc3339(t: datetime) -> str:
    if t.tzinfo is None:
        t = t.replace(tzinfo=timezone.utc)
    text = (
        f"{t.year:04d}-{t.month:02d}-{t.day:02d}"
        f"T{t.hour:02d}:{t.minute:02d}:{t.second:02d}"
    )
    if t.microsecond:
        text += f".{t.microsecond:06d}".rstrip("0")
    offset = t.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass
class ESDocument:
    """Identity of a document in its index; never part of the document body."""

    id: str = _internal("")
    version: int = _internal(0)
    seq_no: int = _internal(0)

    def es_initialize(self, id: str, seq_no: int, version: int) -> None:
        """Set the identity fields from a search hit."""
        self.id = id
        self.seq_no = seq_no
        self.version = version


@dataclass
class Action(ESDocument):
    """An Elastic Agent action."""

    action_id: str = _json("action_id", "")
    agents: list = _json("agents", kind=_LIST)
    data: Any = _json("data", kind=_RAW)
    expiration: str = _json("expiration", "")
    input_type: str = _json("input_type", "")
    timeout: int = _json("timeout", 0)
    timestamp: str = _json("@timestamp", "")
    type: str = _json("type", "")
    user_id: str = _json("user_id", "")


@dataclass
class ActionResult(ESDocument):
    """An Elastic Agent action result."""

    action_data: Any = _json("action_data", kind=_RAW)
    action_id: str = _json("action_id", "")
    action_response: Any = _json("action_response", kind=_RAW)
    agent_id: str = _json("agent_id", "")
    completed_at: str = _json("completed_at", "")
    data: Any = _json("data", kind=_RAW)
    error: str = _json("error", "")
    started_at: str = _json("started_at", "")
    timestamp: str = _json("@timestamp", "")


@dataclass
class AgentMetadata:
    """Identity and version of an Elastic Agent."""

    id: str = _json("id", "", omitempty=False)
    version: str = _json("version", "", omitempty=False)


@dataclass
class Agent(ESDocument):
    """An Elastic Agent that has enrolled into Fleet."""

    access_api_key_id: str = _text()
    action_seq_no: list = _json("action_seq_no", kind=_LIST)
    active: bool = _json("active", False, omitempty=False)
    agent: AgentMetadata | None = _json("agent", kind=_NESTED, nested=AgentMetadata)
    default_api_key: str = _text()
    default_api_key_id: str = _text()
    enrolled_at: str = _json("enrolled_at", "", omitempty=False)
    last_checkin: str = _json("last_checkin", "")
    last_checkin_status: str = _json("last_checkin_status", "")
    last_updated: str = _json("last_updated", "")
    local_metadata: Any = _json("local_metadata", kind=_RAW)
    packages: list = _json("packages", kind=_LIST)
    policy_coordinator_idx: int = _json("policy_coordinator_idx", 0)
    policy_id: str = _json("policy_id", "")
    policy_output_permissions_hash: str = _json("policy_output_permissions_hash", "")
    policy_revision_idx: int = _json("policy_revision_idx", 0)
    shared_id: str = _json("shared_id", "")
    type: str = _json("type", "", omitempty=False)
    unenrolled_at: str = _json("unenrolled_at", "")
    unenrolled_reason: str = _json("unenrolled_reason", "")
    unenrollment_started_at: str = _json("unenrollment_started_at", "")
    updated_at: str = _json("updated_at", "")
    upgrade_started_at: str = _json("upgrade_started_at", "")
    upgraded_at: str = _json("upgraded_at", "")
    user_provided_metadata: Any = _json("user_provided_metadata", kind=_RAW)


@dataclass
class Artifact(ESDocument):
    """An artifact served by Fleet."""

    body: Any = _json("body", kind=_RAW, omitempty=False)
    compression_algorithm: str = _json("compression_algorithm", "")
    created: str = _json("created", "", omitempty=False)
    decoded_sha256: str = _json("decoded_sha256", "")
    decoded_size: int = _json("decoded_size", 0)
    encoded_sha256: str = _json("encoded_sha256", "")
    encoded_size: int = _json("encoded_size", 0)
    encryption_algorithm: str = _json("encryption_algorithm", "")
    identifier: str = _json("identifier", "", omitempty=False)
    package_name: str = _json("package_name", "")


@dataclass
class EnrollmentApiKey(ESDocument):
    """An Elastic Agent enrollment API key."""

    active: bool = _json("active", False)
    api_key: str = _text(omitempty=False)
    api_key_id: str = _text(omitempty=False)
    created_at: str = _json("created_at", "")
    expire_at: str = _json("expire_at", "")
    name: str = _json("name", "")
    policy_id: str = _json("policy_id", "")
    updated_at: str = _json("updated_at", "")


@dataclass
class HostMetadata:
    """The host an Elastic Agent runs on."""

    architecture: str = _json("architecture", "", omitempty=False)
    id: str = _json("id", "", omitempty=False)
    ip: list = _json("ip", kind=_LIST)
    name: str = _json("name", "", omitempty=False)


@dataclass
class Policy(ESDocument):
    """A policy that an Elastic Agent is attached to."""

    coordinator_idx: int = _json("coordinator_idx", 0, omitempty=False)
    data: Any = _json("data", kind=_RAW, omitempty=False)
    default_fleet_server: bool = _json("default_fleet_server", False, omitempty=False)
    policy_id: str = _json("policy_id", "", omitempty=False)
    revision_idx: int = _json("revision_idx", 0, omitempty=False)
    timestamp: str = _json("@timestamp", "")
    unenroll_timeout: int = _json("unenroll_timeout", 0)


@dataclass
class ServerMetadata:
    """Identity and version of a Fleet Server."""

    id: str = _json("id", "", omitempty=False)
    version: str = _json("version", "", omitempty=False)


@dataclass
class PolicyLeader(ESDocument):
    """The Fleet Server currently leading a policy."""

    server: ServerMetadata | None = _json(
        "server", kind=_NESTED, nested=ServerMetadata, omitempty=False
    )
    timestamp: str = _json("@timestamp", "")

    def time(self) -> datetime:
        """Parse the RFC 3339 timestamp of the current leader."""
        return _parse_rfc3339(self.timestamp)

    def set_time(self, t: datetime) -> None:
        """Store a time as an RFC 3339 timestamp."""
        self.timestamp = _format_rfc3339(t)


@dataclass
class Server(ESDocument):
    """A Fleet Server."""

    agent: AgentMetadata | None = _json(
        "agent", kind=_NESTED, nested=AgentMetadata, omitempty=False
    )
    host: HostMetadata | None = _json(
        "host", kind=_NESTED, nested=HostMetadata, omitempty=False
    )
    server: ServerMetadata | None = _json(
        "server", kind=_NESTED, nested=ServerMetadata, omitempty=False
    )
    timestamp: str = _json("@timestamp", "")

    def time(self) -> datetime:
        """Parse the RFC 3339 timestamp of the server."""
        return _parse_rfc3339(self.timestamp)

    def set_time(self, t: datetime) -> None:
        """Store a time as an RFC 3339 timestamp."""
        self.timestamp = _format_rfc3339(t)


def check_different_version(agent: Agent | None, ver: str) -> str:
    """Return ``ver`` if it differs from the agent's version, otherwise ``""``."""
    if agent is None:
        return ""
    if agent.agent is None or ver != agent.agent.version:
        return ver
    return ""


def _is_empty(value: Any, kind: str) -> bool:
    if kind in (_RAW, _NESTED):
        return value is None
    return not value


def to_dict(doc: Any) -> dict[str, Any]:
    """Return the JSON body of a document, leaving out empty optional fields."""
    out: dict[str, Any] = {}
    for f in fields(doc):
        name = _json_name(f)
        if name is None:
            continue
        kind = f.metadata["kind"]
        value = getattr(doc, f.name)
        if f.metadata["omitempty"] and _is_empty(value, kind):
            continue
        if kind == _NESTED:
            out[name] = None if value is None else to_dict(value)
        elif kind == _LIST:
            out[name] = list(value) if value else None
        else:
            out[name] = value
    return out


def from_dict(cls: type[T], data: Mapping[str, Any] | str | bytes) -> T:
    """Build a document of type ``cls`` from its JSON body."""
    if isinstance(data, (str, bytes, bytearray)):
        data = json.loads(data)
    if not isinstance(data, Mapping):
        raise TypeError(f"expected a JSON object for {cls.__name__}")
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        name = _json_name(f)
        if name is None or name not in data:
            continue
        value = data[name]
        kind = f.metadata["kind"]
        if value is None:
            if kind in (_RAW, _NESTED):
                kwargs[f.name] = None
            continue
        if kind == _NESTED:
            kwargs[f.name] = from_dict(f.metadata["nested"], value)
        elif kind == _LIST:
            kwargs[f.name] = list(value)
        else:
            kwargs[f.name] = value
    return cls(**kwargs)