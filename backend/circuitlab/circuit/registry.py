from __future__ import annotations

from typing import Any, Dict, List

from circuitlab.circuit.engine import ContinuityEngine
from circuitlab.circuit.errors import UnknownSceneKind
from circuitlab.circuit.scenes import REGISTRY, get as get_builder  # noqa: F401
# Import known builders to populate registry
from circuitlab.circuit.scenes import battery_bulb_v0  # noqa: F401
from circuitlab.circuit.scenes import battery_box_v0  # noqa: F401
from circuitlab.circuit.scenes import battery_count_v0  # noqa: F401
from circuitlab.circuit.scenes import bulb_arrangements_v0  # noqa: F401
from circuitlab.circuit.scenes import switch_bulb_v0  # noqa: F401
from circuitlab.circuit.schema import SceneSpec
from circuitlab.logging_utils import get_logger

logger = get_logger("circuit.registry")


def list_scene_kinds() -> List[str]:
    return sorted(REGISTRY)


def describe_scenes() -> List[Dict[str, str]]:
    return [{"kind": kind, "title": REGISTRY[kind].title} for kind in list_scene_kinds()]


def build_scene_spec(kind: str, options: Dict[str, Any] | None = None) -> SceneSpec:
    """Run the registered builder for a lesson kind; validation warnings land in meta."""
    builder = get_builder(kind)
    if not builder:
        raise UnknownSceneKind(kind, REGISTRY)
    options = options or {}
    warnings = builder.validate(options)
    spec = builder.build(options)
    if warnings:
        logger.info(f"[registry] {kind} built with warnings: {warnings}")
        w = list(spec.meta.get("warnings") or [])
        spec.meta["warnings"] = sorted({*w, *warnings})
    return spec


def build_scene(
    kind: str | None = None,
    options: Dict[str, Any] | None = None,
    **engine_kwargs: Any,
) -> ContinuityEngine:
    """Engine for a lesson scene; falls back to CIRCUIT_DEFAULT_SCENE."""
    if not kind:
        from circuitlab.models.settings import settings

        kind = settings.CIRCUIT_DEFAULT_SCENE
    return ContinuityEngine.from_scene(build_scene_spec(kind, options), **engine_kwargs)
