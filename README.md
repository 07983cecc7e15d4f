# fleetcore

Building blocks for a server that manages a fleet of enrolled agents and
hands them policies. The package has no dependencies outside the standard
library.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `fleetcore.model`: the stored documents as dataclasses (`Action`,
  `ActionResult`, `Agent`, `AgentMetadata`, `Artifact`, `EnrollmentApiKey`,
  `HostMetadata`, `Policy`, `PolicyLeader`, `Server`, `ServerMetadata`).
  `to_dict` gives a document's JSON body, leaving out empty optional fields;
  `from_dict` builds a document from a mapping or JSON text.
  `PolicyLeader` and `Server` read and write their RFC 3339 timestamp with
  `time()` and `set_time()`. `check_different_version(agent, ver)` returns
  `ver` when it differs from the agent's version, otherwise `""`.
- `fleetcore.sqn`: `SeqNo`, an immutable tuple of document sequence numbers,
  with `json_string()`, `is_set()`, `value()` and `clone()`.
- `fleetcore.smap`: `Map`, a `dict` with `get_map`, `get_string`, a
  SHA-256 `hash()` of its canonical JSON and `marshal()`. `parse` decodes
  JSON text into a `Map` (empty input or `null` gives `None`).
- `fleetcore.throttle`: `Throttle`, which hands out at most one live `Token`
  per key and, when `max_parallel` is non-zero, at most that many live
  tokens. Tokens expire after their TTL; `Token.release()` returns whether
  the token was still held.
- `fleetcore.limiter`: `Limiter`, a rate limit combined with a cap on
  requests in flight. `acquire()` returns a function that ends the request,
  or raises `RateLimitError` or `MaxLimitError`.
- `fleetcore.listener`: `LimitListener`, which wraps a socket-like listener,
  accepts every connection and closes at once any beyond the limit.
  Admitted connections come back as `LimitedConnection`, which frees its
  slot on `close()`.
- `fleetcore.ver`: `parse_version`, `minimize_patch`, `Version` and
  `check_compatibility(fleet_version, es_version)`, which raises
  `MalformedVersionError` or `UnsupportedVersionError` unless the backend is
  at least the server's major.minor.
- `fleetcore.scheduler`: `Scheduler`, an asyncio runner for `Schedule`
  entries, each run at its interval varied by a random splay.
- `fleetcore.subscription`: `Subscription` and `SubscriptionList`, ordered
  queues of policy subscribers with constant-time unlink.
- `fleetcore.revision`: `Revision`, written as `policy:<id>:<rev>:<coord>`;
  `revision_from_string` returns `None` for anything else.
- `fleetcore.status`: the `Status` enum, `LogReporter` and
  `ChainedReporter`.
- `fleetcore.reload`: `ReloadManager`, which passes a new configuration to
  each registered component in order.
- `fleetcore.httpmeta`: `ReaderCounter` and `ResponseCounter` for counting
  body bytes, and `split_addr`, `strip_http` and `tls_version_to_string` for
  log fields.
- `fleetcore.rnd`: `Rnd`, a random-data helper for tests.
- `fleetcore.waiting`: `wait_with_event`, a sleep that raises
  `CancelledError` when its event is set.

## Examples

```python
from fleetcore.throttle import Throttle

throttle = Throttle(2)
claim = throttle.acquire("agent-1", ttl=60.0)
if claim is not None:
    try:
        ...  # handle the request
    finally:
        claim.release()
```

```python
from fleetcore.revision import revision_from_string

rev = revision_from_string("policy:default:3:1")
print(rev.revision_idx, rev.coordinator_idx)  # 3 1
```

## What this package does not do

It is a library of parts, not a running server. It has no command to start,
no HTTP API, no Elasticsearch client or storage layer, and no index or
policy monitors that feed subscriptions; those have to be supplied by the
application that uses these parts.