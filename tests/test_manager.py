"""End-to-end tests for StateManager."""

import pytest

from snapstate import (
    InvalidName,
    InvalidSubscription,
    StateManager,
    StateRegistry,
    UnknownState,
    WriteNotPermitted,
)


@pytest.fixture
def manager():
    return StateManager()


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, previous, next_, writer):
        self.calls.append((previous, next_, writer))

    @property
    def last(self):
        return self.calls[-1]


class TestScenarios:
    def test_number_field(self, manager):
        state = manager.get_state("test", "w")
        rec = Recorder()
        manager.subscribe("test", rec)
        state.numberField = 10
        assert state.numberField == 10
        assert rec.calls == [({}, {"numberField": 10}, "w")]

    def test_string_and_array_fields(self, manager):
        state = manager.get_state("test", "w")
        rec = Recorder()
        manager.subscribe("test", rec)
        state.stringField = "SomeString1"
        state.arrayField = ["Item1"]
        assert state == {"stringField": "SomeString1", "arrayField": ["Item1"]}
        assert rec.last[0] == {"stringField": "SomeString1"}

    def test_nested_object(self, manager):
        state = manager.get_state("test", "w")
        rec = Recorder()
        manager.subscribe("test", rec)
        state.nestedObject = {}
        state.nestedObject.inner = 5
        assert rec.last == ({"nestedObject": {}}, {"nestedObject": {"inner": 5}}, "w")

    def test_five_subscribers_fire_once_in_order(self, manager):
        state = manager.get_state("s", "w")
        order = []
        for i in range(5):
            manager.subscribe("s", lambda p, n, w, i=i: order.append(i))
        state.numberField = 10
        assert order == [0, 1, 2, 3, 4]

    def test_replace_one(self, manager):
        manager.get_state("s", "w").x = 1
        rec = Recorder()
        manager.subscribe("s", rec)
        manager.replace_one("s", {"a": 1})
        assert rec.calls == [({"x": 1}, {"a": 1}, "replaceOne")]

    def test_replace_with_unknown_name_is_all_or_nothing(self, manager):
        manager.get_state("s", "w").x = 1
        with pytest.raises(UnknownState):
            manager.replace({"s": {"b": 2}, "unknown": {}})
        assert manager.get_state("s") == {"x": 1}


class TestProperties:
    @pytest.mark.parametrize("value", [0, -1, 3.5, "", "text", None, True])
    def test_snapshots_bracket_scalar_assignment(self, manager, value):
        state = manager.get_state("p", "w")
        state.existing = "keep"
        before = state.to_plain()
        rec = Recorder()
        manager.subscribe("p", rec)
        state.field = value
        prev, nxt, writer = rec.last
        assert prev == before
        assert nxt == state.to_plain()
        assert writer == "w"

    def test_read_only_write_never_mutates(self, manager):
        manager.get_state("p", "w").field = 1
        before = manager.get_state("p").to_plain()
        with pytest.raises(WriteNotPermitted):
            manager.get_state("p").field = 2
        assert manager.get_state("p").to_plain() == before

    def test_snapshots_immune_to_later_mutation(self, manager):
        state = manager.get_state("p", "w")
        rec = Recorder()
        manager.subscribe("p", rec)
        state.nested = {"items": [1]}
        first_prev, first_next, _ = rec.last
        state.nested["items"].append(2)
        state.nested.extra = True
        assert first_prev == {}
        assert first_next == {"nested": {"items": [1]}}

    def test_subscriber_cannot_tamper_with_snapshots(self, manager):
        state = manager.get_state("p", "w")
        errors = []

        def tamper(previous, next_, writer):
            try:
                next_["nested"]["items"].append("evil")
            except TypeError as exc:
                errors.append(exc)

        manager.subscribe("p", tamper)
        state.nested = {"items": []}
        assert len(errors) == 1
        assert state.to_plain() == {"nested": {"items": []}}

    def test_unsubscribe_is_immediate(self, manager):
        state = manager.get_state("p", "w")
        rec = Recorder()
        sid = manager.subscribe("p", rec)
        state.n = 10
        manager.unsubscribe("p", sid)
        state.n = 11
        assert len(rec.calls) == 1

    def test_delete_then_recreate_is_fresh(self, manager):
        state = manager.get_state("p", "w")
        rec = Recorder()
        manager.subscribe("p", rec)
        state.n = 10
        manager.delete_state("p")
        assert not manager.has_state("p")
        state = manager.get_state("p", "w")
        assert state == {}
        state.other = 20
        assert len(rec.calls) == 1


class TestManagerApi:
    def test_non_string_name(self, manager):
        with pytest.raises(InvalidName):
            manager.get_state({})
        with pytest.raises(InvalidName):
            manager.subscribe(5, Recorder())

    def test_subscribe_non_function(self, manager):
        with pytest.raises(InvalidSubscription):
            manager.subscribe("test", 10)

    def test_subscribe_creates_state(self, manager):
        manager.subscribe("lazy", Recorder())
        assert manager.get_state_names() == ["lazy"]

    def test_unsubscribe_unknown_state(self, manager):
        with pytest.raises(UnknownState):
            manager.unsubscribe("never", "id")

    def test_get_states(self, manager):
        manager.get_state("a", "w").n = 1
        manager.get_state("b", "w").n = 2
        assert manager.get_states() == {"a": {"n": 1}, "b": {"n": 2}}
        assert manager.get_state_names() == ["a", "b"]

    def test_replace_round_trip(self, manager):
        state = manager.get_state("test", "w")
        count = []
        manager.subscribe("test", lambda p, n, w: count.append(w))
        state.numberField = 10
        state.stringField = "abc"
        states = manager.get_states()
        state.anotherField = 30
        manager.replace(states)
        assert count == ["w", "w", "w", "replace"]

    def test_managers_are_isolated(self):
        first, second = StateManager(), StateManager()
        first.get_state("s", "w").n = 1
        assert not second.has_state("s")

    def test_shared_registry(self):
        registry = StateRegistry()
        manager = StateManager(registry)
        assert manager.registry is registry
        manager.get_state("s")
        assert "s" in registry

    def test_demo_flow(self, manager):
        loader = manager.get_state("loader", "index")
        fired = []
        subs = [
            manager.subscribe("loader", lambda p, n, w, i=i: fired.append(i))
            for i in range(3)
        ]
        loader.loaders = []
        loader.loaders.append(1)
        loader.b = {}
        loader.b.c = {}
        loader.b.c.r = 45
        loader.b.c.arr = [34]
        assert len(fired) == 18
        manager.unsubscribe("loader", subs[0])
        loader.b.c.r = 46
        assert fired[-2:] == [1, 2]
        assert loader == {"loaders": [1], "b": {"c": {"r": 46, "arr": [34]}}}
