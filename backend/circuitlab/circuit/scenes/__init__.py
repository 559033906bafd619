from __future__ import annotations

from typing import Any, Dict, List, Protocol

from circuitlab.circuit.schema import SceneSpec

class SceneBuilder(Protocol):
    kind: str
    title: str
    def validate(self, options: Dict[str, Any]) -> List[str]: ...
    def build(self, options: Dict[str, Any]) -> SceneSpec: ...

REGISTRY: dict[str, SceneBuilder] = {}

def register(builder: SceneBuilder) -> None:
    REGISTRY[builder.kind] = builder

def get(kind: str) -> SceneBuilder | None:
    return REGISTRY.get(kind)
