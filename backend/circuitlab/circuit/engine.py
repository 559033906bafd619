"""Circuit continuity engine.

Owns the component instances of one lesson scene and the wires the learner
draws between them. Mutations are synchronous and all-or-nothing: they either
apply completely or raise a CircuitError without touching any state.
evaluate() is a separate, explicit call; its result is cached until the next
successful mutation.
"""

from __future__ import annotations

from itertools import count
from typing import Any

from pydantic import ValidationError

from circuitlab.logging_utils import get_logger

from .components import (
    Component,
    Junction,
    Load,
    Source,
    Switch,
    Wire,
    component_from_spec,
)
from .continuity import DEFAULT_MAX_PATHS, evaluate_graph
from .errors import (
    CircuitError,
    DuplicateComponent,
    FixedWire,
    OccupiedTerminal,
    SameComponent,
    UnknownComponent,
    UnknownTerminal,
    UnknownWire,
)
from .graph import CircuitGraph, build_graph
from .schema import (
    ComponentKind,
    Evaluation,
    JunctionSpec,
    SceneSpec,
    SourceSpec,
    SwitchSpec,
    TerminalRef,
    WireSpec,
)

logger = get_logger("circuit.engine")

TerminalLike = TerminalRef | tuple[str, str] | str


class ContinuityEngine:
    """Circuit graph model, mutation API and evaluation for one scene."""

    def __init__(self, *, max_search_paths: int | None = None) -> None:
        if max_search_paths is None:
            from circuitlab.models.settings import settings

            max_search_paths = settings.CIRCUIT_MAX_SEARCH_PATHS
        self._max_search_paths = max_search_paths or DEFAULT_MAX_PATHS
        self._components: dict[str, Component] = {}
        self._terminal_owner: dict[TerminalRef, str] = {}
        self._wires: dict[str, Wire] = {}
        self._occupied: dict[TerminalRef, str] = {}
        self._wire_ids = count(1)
        self._cached: Evaluation | None = None

    @classmethod
    def from_scene(cls, spec: SceneSpec, **kwargs: Any) -> "ContinuityEngine":
        """Create an engine populated with a scene's components and pre-wiring."""
        engine = cls(**kwargs)
        for comp_spec in spec.components:
            engine._register(component_from_spec(comp_spec))
        for wire in spec.wires:
            engine.add_wire(wire.a, wire.b, fixed=wire.fixed, wire_id=wire.id)
        logger.debug(
            f"[engine] scene {spec.kind or '<custom>'} loaded: "
            f"{len(engine._components)} components, {len(engine._wires)} wires"
        )
        return engine

    # ------------------------------------------------------------------
    # Scene setup
    # ------------------------------------------------------------------

    def add_source(
        self,
        source_id: str,
        *,
        installed: bool = False,
        orientation_valid: bool = True,
        series_group_id: str | None = None,
        series_position: int = 0,
    ) -> Source:
        return self._register(component_from_spec(SourceSpec(
            id=source_id,
            installed=installed,
            orientation_valid=orientation_valid,
            series_group_id=series_group_id,
            series_position=series_position,
        )))

    def add_load(self, load_id: str) -> Load:
        return self._register(Load(id=load_id))

    def add_switch(self, switch_id: str, *, closed: bool = False) -> Switch:
        return self._register(component_from_spec(SwitchSpec(id=switch_id, closed=closed)))

    def add_junction(self, junction_id: str, *, terminal_count: int = 3) -> Junction:
        return self._register(component_from_spec(JunctionSpec(id=junction_id, terminal_count=terminal_count)))

    def _register(self, component: Component):
        if component.id in self._components or component.id in self._wires:
            raise self._reject(DuplicateComponent(component.id))
        self._components[component.id] = component
        for key in component.terminal_keys:
            self._terminal_owner[TerminalRef.of(component.id, key)] = component.id
        self._invalidate()
        return component

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def component(self, component_id: str) -> Component:
        try:
            return self._components[component_id]
        except KeyError:
            raise UnknownComponent(component_id) from None

    def components(self, kind: ComponentKind | None = None) -> list[Component]:
        comps = sorted(self._components.values(), key=lambda c: c.id)
        if kind is None:
            return comps
        return [c for c in comps if c.kind == kind]

    def terminals(self) -> list[TerminalRef]:
        return sorted(self._terminal_owner, key=lambda t: t.sort_key)

    def wires(self) -> list[WireSpec]:
        return [WireSpec(id=w.id, a=w.a, b=w.b, fixed=w.fixed) for w in self._wires.values()]

    def wire_at(self, terminal: TerminalLike) -> str | None:
        """Id of the wire attached to a terminal, if any."""
        return self._occupied.get(self._resolve_terminal(terminal))

    def is_occupied(self, terminal: TerminalLike) -> bool:
        return self.wire_at(terminal) is not None

    def graph(self) -> CircuitGraph:
        return build_graph(self._components, self._wires.values())

    def snapshot(self, *, kind: str | None = None, title: str = "") -> SceneSpec:
        """Current topology and state as a scene spec."""
        return SceneSpec(
            kind=kind,
            title=title,
            components=[c.to_spec() for c in self.components()],
            wires=self.wires(),
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_wire(
        self,
        terminal_a: TerminalLike,
        terminal_b: TerminalLike,
        *,
        fixed: bool = False,
        wire_id: str | None = None,
    ) -> str:
        """Connect two free terminals of two different components; return the wire id."""
        a = self._resolve_terminal(terminal_a)
        b = self._resolve_terminal(terminal_b)
        if a.component_id == b.component_id:
            raise self._reject(SameComponent(a.component_id))
        for terminal in (a, b):
            existing = self._occupied.get(terminal)
            if existing is not None:
                raise self._reject(OccupiedTerminal(terminal, existing))
        if wire_id is None:
            wire_id = self._next_wire_id()
        elif wire_id in self._wires or wire_id in self._components:
            raise self._reject(DuplicateComponent(wire_id))

        wire = Wire(id=wire_id, a=a, b=b, fixed=fixed)
        self._wires[wire_id] = wire
        self._occupied[a] = wire_id
        self._occupied[b] = wire_id
        self._invalidate()
        logger.debug(f"[engine] wire {wire_id} added: {a} <-> {b}{' (fixed)' if fixed else ''}")
        return wire_id

    def remove_wire(self, wire_id: str) -> None:
        wire = self._wires.get(wire_id)
        if wire is None:
            raise self._reject(UnknownWire(wire_id))
        if wire.fixed:
            raise self._reject(FixedWire(wire_id))
        self._drop_wire(wire)
        self._invalidate()
        logger.debug(f"[engine] wire {wire_id} removed")

    def set_switch_state(self, switch_id: str, closed: bool) -> None:
        switch = self._typed(switch_id, Switch, ComponentKind.SWITCH)
        switch.closed = bool(closed)
        self._invalidate()
        logger.debug(f"[engine] switch {switch_id} -> {'closed' if closed else 'open'}")

    def toggle_switch(self, switch_id: str) -> bool:
        switch = self._typed(switch_id, Switch, ComponentKind.SWITCH)
        self.set_switch_state(switch_id, not switch.closed)
        return switch.closed

    def set_source_installed(self, source_id: str, installed: bool, orientation_valid: bool) -> None:
        source = self._typed(source_id, Source, ComponentKind.SOURCE)
        source.installed = bool(installed)
        source.orientation_valid = bool(orientation_valid)
        self._invalidate()
        logger.debug(
            f"[engine] source {source_id}: installed={installed}, orientation_valid={orientation_valid}"
        )

    def reset(self) -> None:
        """Drop learner wires and restore every switch and source to its initial state."""
        for wire in [w for w in self._wires.values() if not w.fixed]:
            self._drop_wire(wire)
        for component in self._components.values():
            component.reset()
        self._invalidate()
        logger.debug("[engine] reset")

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self) -> Evaluation:
        """Verdict for every load; served from cache until the next mutation."""
        if self._cached is None:
            self._cached = evaluate_graph(self.graph(), max_paths=self._max_search_paths)
        return self._cached

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_terminal(self, terminal: TerminalLike) -> TerminalRef:
        if not isinstance(terminal, TerminalRef):
            try:
                terminal = TerminalRef.model_validate(terminal)
            except ValidationError:
                raise self._reject(UnknownTerminal(terminal)) from None
        if terminal not in self._terminal_owner:
            raise self._reject(UnknownTerminal(terminal))
        return terminal

    def _typed(self, component_id: str, cls: type, kind: ComponentKind):
        component = self._components.get(component_id)
        if not isinstance(component, cls):
            raise self._reject(UnknownComponent(component_id, kind.value))
        return component

    def _next_wire_id(self) -> str:
        while True:
            candidate = f"wire-{next(self._wire_ids)}"
            if candidate not in self._wires and candidate not in self._components:
                return candidate

    def _drop_wire(self, wire: Wire) -> None:
        del self._wires[wire.id]
        for terminal in wire.endpoints:
            self._occupied.pop(terminal, None)

    def _invalidate(self) -> None:
        self._cached = None

    @staticmethod
    def _reject(exc: CircuitError) -> CircuitError:
        logger.info(f"[engine] rejected: {exc.code}: {exc}")
        return exc


__all__ = ["ContinuityEngine", "TerminalLike"]
