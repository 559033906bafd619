import pytest

from circuitlab.circuit import (
    ContinuityEngine,
    DuplicateComponent,
    FixedWire,
    OccupiedTerminal,
    SameComponent,
    TerminalRef,
    UnknownComponent,
    UnknownTerminal,
    UnknownWire,
)
from circuitlab.circuit.components import Source, Switch


def make_engine():
    engine = ContinuityEngine(max_search_paths=1000)
    engine.add_source("battery", installed=True)
    engine.add_switch("switch")
    engine.add_load("bulb")
    return engine


def test_terminals_are_fixed_per_kind():
    engine = make_engine()
    assert [str(t) for t in engine.terminals()] == [
        "battery.neg", "battery.pos", "bulb.t1", "bulb.t2", "switch.front", "switch.rear",
    ]


def test_add_wire_accepts_ref_tuple_and_string():
    engine = make_engine()
    w1 = engine.add_wire(TerminalRef.of("battery", "pos"), ("switch", "front"))
    w2 = engine.add_wire("switch.rear", "bulb.t1")
    assert (w1, w2) == ("wire-1", "wire-2")
    assert engine.is_occupied("battery.pos")
    assert engine.wire_at(("bulb", "t1")) == "wire-2"
    assert not engine.is_occupied("bulb.t2")


def test_wire_ids_are_never_reused():
    engine = make_engine()
    first = engine.add_wire("battery.pos", "bulb.t1")
    engine.remove_wire(first)
    second = engine.add_wire("battery.pos", "bulb.t1")
    assert first == "wire-1"
    assert second == "wire-2"


@pytest.mark.parametrize("terminal", ["ghost.pos", "bulb.pos", "batterypos", "switch.*"])
def test_unknown_terminal_rejected(terminal):
    engine = make_engine()
    with pytest.raises(UnknownTerminal):
        engine.add_wire(terminal, "bulb.t1")
    assert engine.wires() == []


def test_same_component_rejected():
    engine = make_engine()
    with pytest.raises(SameComponent) as info:
        engine.add_wire("battery.pos", "battery.neg")
    assert info.value.component_id == "battery"
    assert engine.wires() == []


def test_occupied_terminal_rejected_atomically():
    engine = make_engine()
    wire_id = engine.add_wire("battery.pos", "bulb.t1")
    before = engine.evaluate()

    with pytest.raises(OccupiedTerminal) as info:
        engine.add_wire("bulb.t2", "battery.pos")

    assert info.value.wire_id == wire_id
    assert str(info.value.terminal) == "battery.pos"
    # Nothing changed: the free end was not claimed and the cache survived.
    assert not engine.is_occupied("bulb.t2")
    assert len(engine.wires()) == 1
    assert engine.evaluate() is before


def test_remove_wire_frees_both_terminals():
    engine = make_engine()
    wire_id = engine.add_wire("battery.pos", "bulb.t1")
    engine.remove_wire(wire_id)
    assert not engine.is_occupied("battery.pos")
    assert not engine.is_occupied("bulb.t1")
    with pytest.raises(UnknownWire):
        engine.remove_wire(wire_id)


def test_fixed_wire_cannot_be_removed():
    engine = make_engine()
    wire_id = engine.add_wire("battery.pos", "switch.front", fixed=True)
    with pytest.raises(FixedWire):
        engine.remove_wire(wire_id)
    assert engine.is_occupied("switch.front")


def test_switch_and_source_setters_check_kind():
    engine = make_engine()
    with pytest.raises(UnknownComponent) as info:
        engine.set_switch_state("bulb", True)
    assert info.value.expected_kind == "switch"
    with pytest.raises(UnknownComponent):
        engine.set_source_installed("switch", True, True)
    with pytest.raises(UnknownComponent):
        engine.toggle_switch("nope")


def test_toggle_switch_flips_state():
    engine = make_engine()
    assert engine.toggle_switch("switch") is True
    assert engine.toggle_switch("switch") is False
    switch = engine.component("switch")
    assert isinstance(switch, Switch) and switch.closed is False


def test_set_source_installed_updates_placement():
    engine = make_engine()
    engine.set_source_installed("battery", True, False)
    source = engine.component("battery")
    assert isinstance(source, Source)
    assert source.installed and not source.orientation_valid and not source.present


def test_duplicate_component_rejected():
    engine = make_engine()
    with pytest.raises(DuplicateComponent):
        engine.add_load("bulb")
    with pytest.raises(DuplicateComponent):
        engine.add_wire("battery.pos", "bulb.t1", wire_id="bulb")


def test_evaluate_is_cached_until_mutation():
    engine = make_engine()
    first = engine.evaluate()
    assert engine.evaluate() is first
    engine.add_wire("battery.pos", "bulb.t1")
    second = engine.evaluate()
    assert second is not first
    assert second == first  # still nothing lit


def test_reset_drops_learner_wires_and_restores_state():
    engine = ContinuityEngine(max_search_paths=1000)
    engine.add_source("battery")
    engine.add_switch("switch", closed=True)
    engine.add_load("bulb")
    fixed = engine.add_wire("battery.pos", "switch.front", fixed=True)
    engine.add_wire("switch.rear", "bulb.t1")
    engine.set_source_installed("battery", True, True)
    engine.set_switch_state("switch", False)

    engine.reset()

    assert [w.id for w in engine.wires()] == [fixed]
    assert engine.component("switch").closed is True
    assert engine.component("battery").installed is False
    assert not engine.is_occupied("bulb.t1")
    # Counter keeps going after reset.
    assert engine.add_wire("switch.rear", "bulb.t2") == "wire-3"


def test_snapshot_round_trips_topology():
    engine = make_engine()
    engine.add_wire("battery.pos", "switch.front")
    engine.add_wire("switch.rear", "bulb.t1")
    engine.add_wire("bulb.t2", "battery.neg")
    engine.set_switch_state("switch", True)

    snapshot = engine.snapshot(kind="custom")
    clone = ContinuityEngine.from_scene(snapshot, max_search_paths=1000)

    assert snapshot.kind == "custom"
    assert [w.id for w in clone.wires()] == ["wire-1", "wire-2", "wire-3"]
    assert clone.evaluate() == engine.evaluate()
    assert clone.evaluate().verdict("bulb").energized
