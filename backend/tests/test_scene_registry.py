from __future__ import annotations

import pytest

from circuitlab.circuit import Banner, FixedWire, IntensityTier, UnknownSceneKind
from circuitlab.circuit.registry import build_scene, build_scene_spec, describe_scenes, list_scene_kinds


def test_registered_lessons():
    assert list_scene_kinds() == [
        "battery_box.v0",
        "battery_bulb.v0",
        "battery_count.v0",
        "bulb_arrangements.v0",
        "switch_bulb.v0",
    ]
    titles = {item["kind"]: item["title"] for item in describe_scenes()}
    assert titles["switch_bulb.v0"]


def test_unknown_kind_lists_available():
    with pytest.raises(UnknownSceneKind) as info:
        build_scene_spec("pulley.single_fixed_v0")
    assert "switch_bulb.v0" in info.value.available
    assert isinstance(info.value, ValueError)


def test_default_kind_from_settings():
    engine = build_scene()
    assert {c.id for c in engine.components()} == {"battery", "switch", "bulb"}


def test_unknown_options_become_warnings():
    spec = build_scene_spec("battery_box.v0", {"cells_installed": 7, "colour": "red"})
    assert spec.meta["warnings"] == ["cells_installed_out_of_range", "unknown_option:colour"]
    # Clamped to the box size.
    assert all(c.installed for c in spec.components if c.kind == "source")


def test_battery_bulb_lesson():
    engine = build_scene("battery_bulb.v0")
    assert engine.wires() == []
    engine.add_wire("battery.pos", "bulb.t1")
    engine.add_wire("battery.neg", "bulb.t2")
    result = engine.evaluate()
    assert result.banner == Banner.LIT


def test_switch_bulb_lesson():
    engine = build_scene("switch_bulb.v0")
    engine.add_wire("battery.pos", "switch.rear")
    engine.add_wire("switch.front", "bulb.t2")
    engine.add_wire("bulb.t1", "battery.neg")
    assert engine.evaluate().banner == Banner.NONE
    engine.toggle_switch("switch")
    assert engine.evaluate().banner == Banner.SWITCH_CONTROLLED


def test_battery_box_lesson_needs_both_cells_facing_right():
    engine = build_scene("battery_box.v0")
    assert len(engine.wires()) == 3
    engine.set_switch_state("switch", True)

    engine.set_source_installed("cell1", True, True)
    assert not engine.evaluate().any_success

    engine.set_source_installed("cell2", True, False)
    assert not engine.evaluate().any_success

    engine.set_source_installed("cell2", True, True)
    verdict = engine.evaluate().verdict("bulb")
    assert verdict.energized
    assert verdict.intensity_tier == IntensityTier.SERIES
    assert verdict.controlled_by_switch


def test_battery_box_reset_keeps_prewiring():
    engine = build_scene("battery_box.v0")
    engine.set_source_installed("cell1", True, True)
    engine.set_source_installed("cell2", True, True)
    engine.set_switch_state("switch", True)
    assert engine.evaluate().any_success

    engine.reset()
    assert len(engine.wires()) == 3
    assert not engine.evaluate().any_success
    assert not engine.component("cell1").installed
    with pytest.raises(FixedWire):
        engine.remove_wire(engine.wires()[0].id)


def test_bulb_arrangements_lesson():
    engine = build_scene("bulb_arrangements.v0", {"installed": True})
    assert not engine.evaluate().any_success

    engine.set_switch_state("s_switch", True)
    engine.set_switch_state("p_switch", True)
    result = engine.evaluate()

    assert all(v.energized for v in result.loads.values())
    assert result.verdict("s_bulb1").series_with == ("s_bulb2",)
    assert result.verdict("p_bulb1").series_with == ()
    assert result.verdict("p_bulb2").switches == ("p_switch",)
    assert result.banner == Banner.SWITCH_CONTROLLED

    # Opening one side only darkens that side.
    engine.set_switch_state("s_switch", False)
    result = engine.evaluate()
    assert not result.verdict("s_bulb1").energized
    assert result.verdict("p_bulb1").energized


def test_battery_count_lesson():
    engine = build_scene("battery_count.v0")
    result = engine.evaluate()
    assert result.verdict("one_bulb").intensity_tier == IntensityTier.SINGLE
    assert not result.verdict("two_bulb").energized

    engine.set_source_installed("two_cell1", True, True)
    engine.set_source_installed("two_cell2", True, True)
    result = engine.evaluate()
    assert result.verdict("two_bulb").intensity_tier == IntensityTier.SERIES
    assert result.verdict("one_bulb").intensity_tier.rank < result.verdict("two_bulb").intensity_tier.rank
