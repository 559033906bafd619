from __future__ import annotations

from typing import Any, Dict, List

from circuitlab.circuit.schema import LoadSpec, SceneSpec, SourceSpec, SwitchSpec

from . import register

KIND = "switch_bulb.v0"


class SwitchBulbBuilder:
  """Lesson 3: battery, knife switch and bulb; the learner wires the loop."""
  kind = KIND
  title = "Control a bulb with a switch"

  def validate(self, options: Dict[str, Any]) -> List[str]:
    warnings: List[str] = []
    for key in options:
      if key != "closed":
        warnings.append(f"unknown_option:{key}")
    return warnings

  def build(self, options: Dict[str, Any]) -> SceneSpec:
    return SceneSpec(
      kind=KIND,
      title=self.title,
      components=[
        SourceSpec(id="battery", installed=True),
        SwitchSpec(id="switch", closed=bool(options.get("closed", False))),
        LoadSpec(id="bulb"),
      ],
      meta={"lesson": 3},
    )


# Register
register(SwitchBulbBuilder())
