from __future__ import annotations

from typing import Any, Dict, List

from circuitlab.circuit.schema import LoadSpec, SceneSpec, SourceSpec, SwitchSpec, WireSpec

from . import register

KIND = "battery_box.v0"

BOX_ID = "box"
SLOTS = ("cell1", "cell2")


def _fixed(a: str, b: str) -> WireSpec:
  return WireSpec(a=a, b=b, fixed=True)


class BatteryBoxBuilder:
  """Lesson 4: two-slot battery box pre-wired to a switch and a bulb.

  The learner drops cells into the slots; the frontend reports each slot's
  occupancy and whether the cell faces the slot's expected direction.
  """
  kind = KIND
  title = "Insert batteries into a battery box"

  def validate(self, options: Dict[str, Any]) -> List[str]:
    warnings: List[str] = []
    for key in options:
      if key != "cells_installed":
        warnings.append(f"unknown_option:{key}")
    count = options.get("cells_installed", 0)
    if not isinstance(count, int) or not 0 <= count <= len(SLOTS):
      warnings.append("cells_installed_out_of_range")
    return warnings

  def build(self, options: Dict[str, Any]) -> SceneSpec:
    count = options.get("cells_installed", 0)
    if not isinstance(count, int):
      count = 0
    count = max(0, min(len(SLOTS), count))

    cells = [
      SourceSpec(id=cell_id, installed=i < count, series_group_id=BOX_ID, series_position=i)
      for i, cell_id in enumerate(SLOTS)
    ]
    return SceneSpec(
      kind=KIND,
      title=self.title,
      components=[
        *cells,
        SwitchSpec(id="switch"),
        LoadSpec(id="bulb"),
      ],
      wires=[
        # box + -> switch -> bulb -> box -
        _fixed(f"{SLOTS[0]}.pos", "switch.front"),
        _fixed("switch.rear", "bulb.t2"),
        _fixed("bulb.t1", f"{SLOTS[-1]}.neg"),
      ],
      meta={"lesson": 4, "boxes": {BOX_ID: list(SLOTS)}},
    )


# Register
register(BatteryBoxBuilder())
