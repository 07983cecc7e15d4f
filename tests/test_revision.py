import pytest

from fleetcore.model import Policy
from fleetcore.revision import Revision, revision_from_policy, revision_from_string


def test_string_form():
    assert str(Revision("abc", 1, 2)) == "policy:abc:1:2"


def test_from_policy():
    policy = Policy(policy_id="p1", revision_idx=3, coordinator_idx=1)
    assert revision_from_policy(policy) == Revision("p1", 3, 1)


@pytest.mark.parametrize(
    "revision",
    [Revision("p1", 3, 1), Revision("some-policy", 0, 0), Revision("x", -1, 7)],
)
def test_round_trip(revision):
    assert revision_from_string(str(revision)) == revision


def test_plus_sign_accepted():
    assert revision_from_string("policy:p:+5:1") == Revision("p", 5, 1)


@pytest.mark.parametrize(
    "action_id",
    [
        "",
        "policy:p1:1",
        "policy:p1:1:2:3",
        "agent:p1:1:2",
        "policy:p1:x:2",
        "policy:p1:1:y",
        "policy:p1: 1:2",
        "policy:p1:1_0:2",
        "policy:p1:9223372036854775808:1",
    ],
)
def test_invalid_strings(action_id):
    assert revision_from_string(action_id) is None


def test_int64_bounds_accepted():
    parsed = revision_from_string("policy:p:9223372036854775807:-9223372036854775808")
    assert parsed == Revision("p", 2**63 - 1, -(2**63))