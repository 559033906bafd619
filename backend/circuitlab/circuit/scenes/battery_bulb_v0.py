from __future__ import annotations

from typing import Any, Dict, List

from circuitlab.circuit.schema import LoadSpec, SceneSpec, SourceSpec

from . import register

KIND = "battery_bulb.v0"


class BatteryBulbBuilder:
  """Lesson 2: a loose battery and one bulb; the learner wires both poles."""
  kind = KIND
  title = "Light a bulb with one battery"

  def validate(self, options: Dict[str, Any]) -> List[str]:
    warnings: List[str] = []
    for key in options:
      if key != "installed":
        warnings.append(f"unknown_option:{key}")
    return warnings

  def build(self, options: Dict[str, Any]) -> SceneSpec:
    # The battery lies on the table, so it is present unless told otherwise.
    installed = bool(options.get("installed", True))
    return SceneSpec(
      kind=KIND,
      title=self.title,
      components=[
        SourceSpec(id="battery", installed=installed),
        LoadSpec(id="bulb"),
      ],
      meta={"lesson": 2},
    )


# Register
register(BatteryBulbBuilder())
