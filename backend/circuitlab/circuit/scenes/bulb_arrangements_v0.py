from __future__ import annotations

from typing import Any, Dict, List

from circuitlab.circuit.schema import (
  JunctionSpec,
  LoadSpec,
  SceneSpec,
  SourceSpec,
  SwitchSpec,
  WireSpec,
)

from . import register

KIND = "bulb_arrangements.v0"


def _fixed(a: str, b: str) -> WireSpec:
  return WireSpec(a=a, b=b, fixed=True)


def _box(prefix: str, installed: bool) -> List[SourceSpec]:
  group = f"{prefix}_box"
  return [
    SourceSpec(id=f"{prefix}_cell1", installed=installed, series_group_id=group, series_position=0),
    SourceSpec(id=f"{prefix}_cell2", installed=installed, series_group_id=group, series_position=1),
  ]


class BulbArrangementsBuilder:
  """Lesson 5: the same two bulbs wired in series (left) and in parallel (right).

  Each side has its own two-slot box and switch. The parallel side splits and
  merges through two junction buses.
  """
  kind = KIND
  title = "Series and parallel bulbs"

  def validate(self, options: Dict[str, Any]) -> List[str]:
    return [f"unknown_option:{key}" for key in options if key != "installed"]

  def build(self, options: Dict[str, Any]) -> SceneSpec:
    installed = bool(options.get("installed", False))
    components = [
      *_box("s", installed),
      SwitchSpec(id="s_switch"),
      LoadSpec(id="s_bulb1"),
      LoadSpec(id="s_bulb2"),
      *_box("p", installed),
      SwitchSpec(id="p_switch"),
      LoadSpec(id="p_bulb1"),
      LoadSpec(id="p_bulb2"),
      JunctionSpec(id="p_split"),
      JunctionSpec(id="p_merge"),
    ]
    wires = [
      # series: + -> switch -> bulb1 -> bulb2 -> -
      _fixed("s_cell1.pos", "s_switch.front"),
      _fixed("s_switch.rear", "s_bulb1.t1"),
      _fixed("s_bulb1.t2", "s_bulb2.t1"),
      _fixed("s_bulb2.t2", "s_cell2.neg"),
      # parallel: + -> switch -> split -> (bulb1 | bulb2) -> merge -> -
      _fixed("p_cell1.pos", "p_switch.front"),
      _fixed("p_switch.rear", "p_split.j1"),
      _fixed("p_split.j2", "p_bulb1.t1"),
      _fixed("p_split.j3", "p_bulb2.t1"),
      _fixed("p_bulb1.t2", "p_merge.j1"),
      _fixed("p_bulb2.t2", "p_merge.j2"),
      _fixed("p_merge.j3", "p_cell2.neg"),
    ]
    return SceneSpec(
      kind=KIND,
      title=self.title,
      components=components,
      wires=wires,
      meta={
        "lesson": 5,
        "boxes": {"s_box": ["s_cell1", "s_cell2"], "p_box": ["p_cell1", "p_cell2"]},
        "arrangements": {"series": ["s_bulb1", "s_bulb2"], "parallel": ["p_bulb1", "p_bulb2"]},
      },
    )


# Register
register(BulbArrangementsBuilder())
