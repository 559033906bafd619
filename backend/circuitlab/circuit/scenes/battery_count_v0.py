from __future__ import annotations

from typing import Any, Dict, List

from circuitlab.circuit.schema import LoadSpec, SceneSpec, SourceSpec, WireSpec

from . import register

KIND = "battery_count.v0"


def _fixed(a: str, b: str) -> WireSpec:
  return WireSpec(a=a, b=b, fixed=True)


class BatteryCountBuilder:
  """Lesson 6: one cell vs two cells in series, each driving its own bulb.

  The single-cell box starts with its cell installed; the double box is empty.
  """
  kind = KIND
  title = "One battery or two?"

  def validate(self, options: Dict[str, Any]) -> List[str]:
    return [f"unknown_option:{key}" for key in options]

  def build(self, options: Dict[str, Any]) -> SceneSpec:
    return SceneSpec(
      kind=KIND,
      title=self.title,
      components=[
        SourceSpec(id="one_cell", installed=True, series_group_id="single_box", series_position=0),
        LoadSpec(id="one_bulb"),
        SourceSpec(id="two_cell1", series_group_id="double_box", series_position=0),
        SourceSpec(id="two_cell2", series_group_id="double_box", series_position=1),
        LoadSpec(id="two_bulb"),
      ],
      wires=[
        _fixed("one_cell.pos", "one_bulb.t1"),
        _fixed("one_bulb.t2", "one_cell.neg"),
        _fixed("two_cell1.pos", "two_bulb.t1"),
        _fixed("two_bulb.t2", "two_cell2.neg"),
      ],
      meta={
        "lesson": 6,
        "boxes": {"single_box": ["one_cell"], "double_box": ["two_cell1", "two_cell2"]},
      },
    )


# Register
register(BatteryCountBuilder())
