"""Typed errors raised by circuit mutations.

Every error is local and recoverable: the mutation that raised it has not
changed the engine. The adapter is expected to turn them into a no-op visual
(snap the half-drawn wire back, ignore the drop).
"""

from __future__ import annotations

from typing import Iterable


class CircuitError(Exception):
    """Base class for rejected circuit mutations."""

    code = "CircuitError"


class UnknownTerminal(CircuitError):
    code = "UnknownTerminal"

    def __init__(self, terminal: object) -> None:
        self.terminal = terminal
        super().__init__(f"Terminal '{terminal}' does not exist in this scene")


class UnknownComponent(CircuitError):
    code = "UnknownComponent"

    def __init__(self, component_id: str, expected_kind: str | None = None) -> None:
        self.component_id = component_id
        self.expected_kind = expected_kind
        what = expected_kind or "component"
        super().__init__(f"No {what} with id '{component_id}'")


class UnknownWire(CircuitError):
    code = "UnknownWire"

    def __init__(self, wire_id: str) -> None:
        self.wire_id = wire_id
        super().__init__(f"Wire '{wire_id}' not found")


class OccupiedTerminal(CircuitError):
    code = "OccupiedTerminal"

    def __init__(self, terminal: object, wire_id: str) -> None:
        self.terminal = terminal
        self.wire_id = wire_id
        super().__init__(f"Terminal '{terminal}' already carries wire '{wire_id}'")


class SameComponent(CircuitError):
    code = "SameComponent"

    def __init__(self, component_id: str) -> None:
        self.component_id = component_id
        super().__init__(f"Cannot wire component '{component_id}' to itself")


class FixedWire(CircuitError):
    code = "FixedWire"

    def __init__(self, wire_id: str) -> None:
        self.wire_id = wire_id
        super().__init__(f"Wire '{wire_id}' is part of the lesson scene and cannot be removed")


class DuplicateComponent(CircuitError):
    code = "DuplicateComponent"

    def __init__(self, component_id: str) -> None:
        self.component_id = component_id
        super().__init__(f"Id '{component_id}' is already used in this scene")


class UnknownSceneKind(ValueError):
    """Raised when no lesson scene builder is registered for a kind."""

    def __init__(self, kind: str, available: Iterable[str]) -> None:
        self.kind = kind
        self.available = sorted(available)
        super().__init__(
            f"No scene builder registered for kind: {kind}. Available: {self.available}"
        )
