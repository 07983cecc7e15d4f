from datetime import datetime, timedelta, timezone

import pytest

from fleetcore.model import (
    Action,
    Agent,
    AgentMetadata,
    HostMetadata,
    Policy,
    PolicyLeader,
    Server,
    ServerMetadata,
    check_different_version,
    from_dict,
    to_dict,
)


@pytest.mark.parametrize(
    "agent, ver, want",
    [
        (None, "", ""),
        (Agent(), "", ""),
        (Agent(), "7.14", "7.14"),
        (Agent(agent=AgentMetadata(version="7.14")), "", ""),
        (Agent(agent=AgentMetadata(version="")), "7.15", "7.15"),
        (Agent(agent=AgentMetadata(version="7.14")), "7.14", ""),
        (Agent(agent=AgentMetadata(version="7.14")), "7.15", "7.15"),
    ],
    ids=[
        "nil",
        "agent no meta empty version",
        "agent no meta nonempty version",
        "agent with meta empty new version",
        "agent with meta empty version",
        "agent with meta non empty version",
        "agent with meta new version",
    ],
)
def test_check_different_version(agent, ver, want):
    assert check_different_version(agent, ver) == want


def test_empty_agent_keeps_required_fields_only():
    assert to_dict(Agent()) == {"active": False, "enrolled_at": "", "type": ""}


def test_identity_fields_are_not_serialised():
    action = Action(action_id="a1")
    action.es_initialize("doc-1", 42, 3)
    assert (action.id, action.seq_no, action.version) == ("doc-1", 42, 3)
    assert to_dict(action) == {"action_id": "a1"}


def test_policy_required_fields_present():
    body = to_dict(Policy(policy_id="p1", revision_idx=2, coordinator_idx=1))
    assert body == {
        "coordinator_idx": 1,
        "data": None,
        "default_fleet_server": False,
        "policy_id": "p1",
        "revision_idx": 2,
    }


def test_server_nested_null_when_missing():
    body = to_dict(Server())
    assert body == {"agent": None, "host": None, "server": None}


def test_action_round_trip():
    action = Action(
        action_id="a1",
        agents=["x", "y"],
        data={"k": [1, 2]},
        expiration="2021-01-01T00:00:00Z",
        timeout=30,
        type="UPGRADE",
    )
    assert from_dict(Action, to_dict(action)) == action


def test_from_json_text_with_nested_metadata():
    agent = from_dict(
        Agent,
        '{"active": true, "agent": {"id": "agent-1", "version": "8.1.0"},'
        ' "policy_id": "p1", "unknown": 5}',
    )
    assert agent.active is True
    assert agent.agent == AgentMetadata(id="agent-1", version="8.1.0")
    assert agent.policy_id == "p1"


def test_from_dict_nulls():
    server = from_dict(Server, {"agent": None, "host": {"ip": ["10.0.0.1"]}, "@timestamp": None})
    assert server.agent is None
    assert server.host == HostMetadata(ip=["10.0.0.1"])
    assert server.timestamp == ""


def test_from_dict_rejects_non_object():
    with pytest.raises(TypeError):
        from_dict(Policy, "[1, 2]")


def test_policy_leader_time_round_trip():
    leader = PolicyLeader(server=ServerMetadata(id="s1", version="8.1.0"))
    moment = datetime(2021, 8, 25, 10, 30, 0, 123000, tzinfo=timezone.utc)
    leader.set_time(moment)
    assert leader.timestamp == "2021-08-25T10:30:00.123Z"
    assert leader.time() == moment


def test_server_time_with_offset_and_nanoseconds():
    server = Server(timestamp="2021-01-02T03:04:05.123456789+02:00")
    parsed = server.time()
    assert parsed == datetime(
        2021, 1, 2, 3, 4, 5, 123456, tzinfo=timezone(timedelta(hours=2))
    )


def test_set_time_keeps_offset():
    server = Server()
    moment = datetime(2022, 5, 6, 7, 8, 9, tzinfo=timezone(timedelta(hours=-5, minutes=-30)))
    server.set_time(moment)
    assert server.timestamp.endswith("-05:30")
    assert server.time() == moment


def test_invalid_timestamp_raises():
    with pytest.raises(ValueError):
        PolicyLeader(timestamp="not a time").time()