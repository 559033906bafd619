"""Component instance records owned by the continuity engine.

Each record knows its fixed terminal set and the intrinsic edges its current
state implies. Intrinsic edges are derived on demand and never stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Union

from .schema import (
    ComponentKind,
    JunctionSpec,
    LoadSpec,
    SourceSpec,
    SwitchSpec,
    TerminalKey,
    TerminalRef,
)

POS = TerminalKey.POS.value
NEG = TerminalKey.NEG.value
T1 = TerminalKey.T1.value
T2 = TerminalKey.T2.value
FRONT = TerminalKey.FRONT.value
REAR = TerminalKey.REAR.value

# Pseudo terminal used as the single search node inside a junction.
HUB_KEY = "*"


class EdgeKind(str, Enum):
    WIRE = "wire"
    LOAD = "load"
    SWITCH = "switch"
    JUNCTION = "junction"
    SERIES_LINK = "series_link"


@dataclass(frozen=True, slots=True)
class Edge:
    a: TerminalRef
    b: TerminalRef
    kind: EdgeKind
    owner: str  # wire id or component id


@dataclass(slots=True)
class Source:
    id: str
    installed: bool = False
    orientation_valid: bool = True
    series_group_id: str | None = None
    series_position: int = 0
    initial_installed: bool = False
    initial_orientation_valid: bool = True

    kind: ClassVar[ComponentKind] = ComponentKind.SOURCE

    @property
    def terminal_keys(self) -> tuple[str, ...]:
        return (POS, NEG)

    @property
    def present(self) -> bool:
        """Installed and the right way round; otherwise absent from the graph."""
        return self.installed and self.orientation_valid

    def intrinsic_edges(self) -> list[Edge]:
        # A source is searched between, never through.
        return []

    def reset(self) -> None:
        self.installed = self.initial_installed
        self.orientation_valid = self.initial_orientation_valid

    def to_spec(self) -> SourceSpec:
        return SourceSpec(
            id=self.id,
            installed=self.installed,
            orientation_valid=self.orientation_valid,
            series_group_id=self.series_group_id,
            series_position=self.series_position,
        )


@dataclass(slots=True)
class Load:
    id: str

    kind: ClassVar[ComponentKind] = ComponentKind.LOAD

    @property
    def terminal_keys(self) -> tuple[str, ...]:
        return (T1, T2)

    def intrinsic_edges(self) -> list[Edge]:
        # The filament is always a path.
        return [Edge(TerminalRef.of(self.id, T1), TerminalRef.of(self.id, T2), EdgeKind.LOAD, self.id)]

    def reset(self) -> None:
        return None

    def to_spec(self) -> LoadSpec:
        return LoadSpec(id=self.id)


@dataclass(slots=True)
class Switch:
    id: str
    closed: bool = False
    initial_closed: bool = False

    kind: ClassVar[ComponentKind] = ComponentKind.SWITCH

    @property
    def terminal_keys(self) -> tuple[str, ...]:
        return (FRONT, REAR)

    def intrinsic_edges(self) -> list[Edge]:
        if not self.closed:
            return []
        return [Edge(TerminalRef.of(self.id, FRONT), TerminalRef.of(self.id, REAR), EdgeKind.SWITCH, self.id)]

    def reset(self) -> None:
        self.closed = self.initial_closed

    def to_spec(self) -> SwitchSpec:
        return SwitchSpec(id=self.id, closed=self.closed)


@dataclass(slots=True)
class Junction:
    id: str
    terminal_count: int = 3

    kind: ClassVar[ComponentKind] = ComponentKind.JUNCTION

    @property
    def terminal_keys(self) -> tuple[str, ...]:
        return tuple(f"j{i}" for i in range(1, self.terminal_count + 1))

    @property
    def hub(self) -> TerminalRef:
        return TerminalRef.of(self.id, HUB_KEY)

    def intrinsic_edges(self) -> list[Edge]:
        # Star through the hub instead of a clique: one route per pair of terminals.
        hub = self.hub
        return [
            Edge(TerminalRef.of(self.id, key), hub, EdgeKind.JUNCTION, self.id)
            for key in self.terminal_keys
        ]

    def reset(self) -> None:
        return None

    def to_spec(self) -> JunctionSpec:
        return JunctionSpec(id=self.id, terminal_count=self.terminal_count)


@dataclass(slots=True)
class Wire:
    id: str
    a: TerminalRef
    b: TerminalRef
    fixed: bool = False
    endpoints: frozenset[TerminalRef] = field(init=False)

    def __post_init__(self) -> None:
        self.endpoints = frozenset((self.a, self.b))

    def edge(self) -> Edge:
        return Edge(self.a, self.b, EdgeKind.WIRE, self.id)


Component = Union[Source, Load, Switch, Junction]


def component_from_spec(spec: SourceSpec | LoadSpec | SwitchSpec | JunctionSpec) -> Component:
    if isinstance(spec, SourceSpec):
        return Source(
            id=spec.id,
            installed=spec.installed,
            orientation_valid=spec.orientation_valid,
            series_group_id=spec.series_group_id,
            series_position=spec.series_position,
            initial_installed=spec.installed,
            initial_orientation_valid=spec.orientation_valid,
        )
    if isinstance(spec, LoadSpec):
        return Load(id=spec.id)
    if isinstance(spec, SwitchSpec):
        return Switch(id=spec.id, closed=spec.closed, initial_closed=spec.closed)
    if isinstance(spec, JunctionSpec):
        return Junction(id=spec.id, terminal_count=spec.terminal_count)
    raise TypeError(f"Unsupported component spec: {type(spec).__name__}")
