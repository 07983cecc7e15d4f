import pytest

from fleetcore.reload import ReloadManager


class Recorder:
    def __init__(self, name, calls):
        self.name = name
        self.calls = calls

    def reload(self, config):
        self.calls.append((self.name, config))


class Failing:
    def reload(self, config):
        raise RuntimeError("reload failed")


def test_reloads_all_in_order():
    calls = []
    config = {"logging": {"level": "info"}}
    manager = ReloadManager(Recorder("a", calls), Recorder("b", calls))
    manager.reload(config)
    assert calls == [("a", config), ("b", config)]


def test_stops_at_first_error():
    calls = []
    manager = ReloadManager(Recorder("a", calls), Failing(), Recorder("c", calls))
    with pytest.raises(RuntimeError, match="reload failed"):
        manager.reload("cfg")
    assert calls == [("a", "cfg")]


def test_nested_managers():
    calls = []
    inner = ReloadManager(Recorder("inner", calls))
    outer = ReloadManager(inner, Recorder("outer", calls))
    outer.reload(1)
    assert [name for name, _ in calls] == ["inner", "outer"]