"""Circuit scene schema for the circuit lessons.

Types shared by the engine, the lesson scene builders and the HTTP adapter:
- TerminalRef: typed (component, terminal key) identity, replaces string-joined pole names
- Component specs (source / load / switch / junction) and wire specs
- SceneSpec: a whole lesson topology, used both for scene setup and snapshots
- LoadVerdict / Evaluation: what evaluate() hands back to the adapter
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

SCENE_SCHEMA_VERSION = "0.1.0"


class ComponentKind(str, Enum):
  SOURCE = "source"
  LOAD = "load"
  SWITCH = "switch"
  JUNCTION = "junction"


class TerminalKey(str, Enum):
  POS = "pos"
  NEG = "neg"
  T1 = "t1"
  T2 = "t2"
  FRONT = "front"
  REAR = "rear"


class TerminalRef(BaseModel):
  """Addressable connection point: (component instance id, terminal key)."""
  model_config = ConfigDict(frozen=True)

  component_id: str = Field(..., min_length=1)
  key: str = Field(..., min_length=1)

  @model_validator(mode="before")
  @classmethod
  def _coerce(cls, value: Any) -> Any:
    # Accept "battery.pos" and ("battery", "pos") besides the mapping form.
    if isinstance(value, str):
      component_id, sep, key = value.rpartition(".")
      if not sep:
        raise ValueError(f"terminal must look like '<component>.<key>', got {value!r}")
      return {"component_id": component_id, "key": key}
    if isinstance(value, (tuple, list)):
      if len(value) != 2:
        raise ValueError("terminal tuple must be (component_id, key)")
      return {"component_id": value[0], "key": value[1]}
    return value

  @classmethod
  def of(cls, component_id: str, key: str | TerminalKey) -> "TerminalRef":
    return cls(component_id=component_id, key=key.value if isinstance(key, TerminalKey) else key)

  @property
  def sort_key(self) -> tuple[str, str]:
    return (self.component_id, self.key)

  def __str__(self) -> str:
    return f"{self.component_id}.{self.key}"


class SourceSpec(BaseModel):
  """Battery (or battery slot). Placement facts are supplied by the adapter."""
  kind: Literal["source"] = "source"
  id: str = Field(..., min_length=1)
  installed: bool = Field(False, description="Cell present in its slot.")
  orientation_valid: bool = Field(True, description="Cell inserted the right way round.")
  series_group_id: str | None = Field(None, description="Battery box the cell is docked in; cells in one box are chained.")
  series_position: int = Field(0, ge=0, description="Slot order inside the box; slot i's neg meets slot i+1's pos.")


class LoadSpec(BaseModel):
  kind: Literal["load"] = "load"
  id: str = Field(..., min_length=1)


class SwitchSpec(BaseModel):
  kind: Literal["switch"] = "switch"
  id: str = Field(..., min_length=1)
  closed: bool = False


class JunctionSpec(BaseModel):
  """Passive splice (wire bus); all of its terminals are connected to each other."""
  kind: Literal["junction"] = "junction"
  id: str = Field(..., min_length=1)
  terminal_count: int = Field(3, ge=2, le=16)


ComponentSpec = Annotated[
  Union[SourceSpec, LoadSpec, SwitchSpec, JunctionSpec],
  Field(discriminator="kind"),
]


class WireSpec(BaseModel):
  id: str | None = Field(None, description="Optional stable id; assigned by the engine when omitted.")
  a: TerminalRef
  b: TerminalRef
  fixed: bool = Field(False, description="Pre-wired by the scene; survives reset and cannot be removed.")


class SceneSpec(BaseModel):
  version: str = SCENE_SCHEMA_VERSION
  kind: str | None = Field(None, description="Lesson scene kind that produced this topology.")
  title: str = ""
  components: list[ComponentSpec] = Field(default_factory=list)
  wires: list[WireSpec] = Field(default_factory=list)
  meta: dict[str, Any] = Field(default_factory=dict)

  @model_validator(mode="after")
  def _unique_ids(self) -> "SceneSpec":
    seen: set[str] = set()
    for comp in self.components:
      if comp.id in seen:
        raise ValueError(f"duplicate component id: {comp.id}")
      seen.add(comp.id)
    return self


class IntensityTier(str, Enum):
  NONE = "none"
  SINGLE = "single-source"
  SERIES = "series-sources"
  PARALLEL = "parallel-sources"

  @property
  def rank(self) -> int:
    return _TIER_RANK[self]


_TIER_RANK = {
  IntensityTier.NONE: 0,
  IntensityTier.SINGLE: 1,
  IntensityTier.SERIES: 2,
  IntensityTier.PARALLEL: 3,
}


class Banner(str, Enum):
  NONE = "none"
  LIT = "lit"
  SWITCH_CONTROLLED = "switch_controlled"
  SWITCH_BYPASSED = "switch_bypassed"
  SHORT_CIRCUIT = "short_circuit"


class LoadVerdict(BaseModel):
  model_config = ConfigDict(frozen=True)

  load_id: str
  energized: bool = False
  intensity_tier: IntensityTier = IntensityTier.NONE
  controlled_by_switch: bool = False
  switches: tuple[str, ...] = Field(default=(), description="Closed switches on the live path(s).")
  sources: tuple[str, ...] = Field(default=(), description="Sources feeding this load.")
  series_with: tuple[str, ...] = Field(default=(), description="Other loads sharing a live path with this one.")


class Evaluation(BaseModel):
  model_config = ConfigDict(frozen=True)

  loads: dict[str, LoadVerdict] = Field(default_factory=dict)
  any_success: bool = False
  short_circuit_detected: bool = False
  shorted_sources: tuple[str, ...] = ()
  truncated: bool = Field(False, description="Path search stopped at CIRCUIT_MAX_SEARCH_PATHS; dark loads may be unresolved.")
  banner: Banner = Banner.NONE

  def verdict(self, load_id: str) -> LoadVerdict:
    return self.loads[load_id]


__all__ = [
  "SCENE_SCHEMA_VERSION",
  "ComponentKind",
  "TerminalKey",
  "TerminalRef",
  "SourceSpec",
  "LoadSpec",
  "SwitchSpec",
  "JunctionSpec",
  "ComponentSpec",
  "WireSpec",
  "SceneSpec",
  "IntensityTier",
  "Banner",
  "LoadVerdict",
  "Evaluation",
]
