"""Circuit continuity engine for the battery / bulb / switch lessons.

This module provides:
- Scene schema and verdict types (schema.py)
- Component records and the circuit graph snapshot (components.py, graph.py)
- Continuity analysis (continuity.py) and success banners (feedback.py)
- ContinuityEngine, the mutation + evaluate API (engine.py)

Lesson scene builders are resolved through circuitlab.circuit.registry.
"""

from circuitlab.circuit.engine import ContinuityEngine
from circuitlab.circuit.errors import (
    CircuitError,
    DuplicateComponent,
    FixedWire,
    OccupiedTerminal,
    SameComponent,
    UnknownComponent,
    UnknownSceneKind,
    UnknownTerminal,
    UnknownWire,
)
from circuitlab.circuit.feedback import banner_message
from circuitlab.circuit.schema import (
    Banner,
    Evaluation,
    IntensityTier,
    LoadVerdict,
    SceneSpec,
    TerminalRef,
)

__all__ = [
    # Engine
    "ContinuityEngine",
    # Schema
    "Banner",
    "Evaluation",
    "IntensityTier",
    "LoadVerdict",
    "SceneSpec",
    "TerminalRef",
    "banner_message",
    # Errors
    "CircuitError",
    "DuplicateComponent",
    "FixedWire",
    "OccupiedTerminal",
    "SameComponent",
    "UnknownComponent",
    "UnknownSceneKind",
    "UnknownTerminal",
    "UnknownWire",
]
