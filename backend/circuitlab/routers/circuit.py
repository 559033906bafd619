"""
Router: /circuit - Circuit Lesson Session API

The browser scene is the topology adapter: it turns pick / drag events into
the calls below and renders the returned verdicts (glowing bulbs, banners).

Every mutating request is one mutation followed by one evaluate(), applied
under the session lock. Rejected mutations change nothing and come back as
{"detail": {"error": <ErrorName>, "message": str}} so the frontend can snap a
half-drawn wire back without showing raw text.
"""

import logging
from typing import Any, Callable

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from circuitlab.circuit.engine import ContinuityEngine
from circuitlab.circuit.errors import (
    CircuitError,
    FixedWire,
    OccupiedTerminal,
    SameComponent,
    UnknownSceneKind,
)
from circuitlab.circuit.feedback import banner_message
from circuitlab.circuit.registry import build_scene, describe_scenes
from circuitlab.circuit.schema import Evaluation, SceneSpec
from circuitlab.models.settings import settings
from circuitlab.sessions.audit import get_audit_logger
from circuitlab.sessions.store import CircuitSession, SessionNotFoundError, get_session_store

logger = logging.getLogger("circuit")

router = APIRouter(prefix="/circuit", tags=["circuit"])


# ===========================
# Request / Response Models
# ===========================

class CreateSessionRequest(BaseModel):
    scene_kind: str | None = Field(
        default=None,
        description="Lesson scene kind; defaults to CIRCUIT_DEFAULT_SCENE"
    )
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Builder options, e.g. {'cells_installed': 1}"
    )


class AddWireRequest(BaseModel):
    # Resolved by the engine so malformed terminals come back as UnknownTerminal.
    terminal_a: str | dict[str, str] = Field(..., description="'component.key' or {component_id, key}")
    terminal_b: str | dict[str, str] = Field(..., description="'component.key' or {component_id, key}")


class SwitchStateRequest(BaseModel):
    closed: bool


class SourceStateRequest(BaseModel):
    installed: bool
    orientation_valid: bool = Field(True, description="Cell faces the slot's expected direction")


class CircuitStateResponse(BaseModel):
    session_id: str
    scene_kind: str
    scene: SceneSpec
    evaluation: Evaluation
    banner_message: str
    wire_id: str | None = Field(default=None, description="Id of the wire created by this request")


class SceneInfo(BaseModel):
    kind: str
    title: str


# ===========================
# Helper Functions
# ===========================

_CONFLICT_ERRORS = (OccupiedTerminal, SameComponent, FixedWire)


def _error_detail(error: str, message: str) -> dict[str, str]:
    return {"error": error, "message": message}


def _http_error(exc: CircuitError) -> HTTPException:
    """Map a rejected mutation onto 404 (unknown id) or 409 (conflict)."""
    status_code = 409 if isinstance(exc, _CONFLICT_ERRORS) else 404
    return HTTPException(status_code=status_code, detail=_error_detail(exc.code, str(exc)))


def _get_session(session_id: str) -> CircuitSession:
    try:
        return get_session_store().get_session(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(
            status_code=404,
            detail=_error_detail("SessionNotFound", str(exc))
        ) from exc


def _state(
    session: CircuitSession,
    evaluation: Evaluation,
    wire_id: str | None = None,
) -> CircuitStateResponse:
    return CircuitStateResponse(
        session_id=session.session_id,
        scene_kind=session.scene_kind,
        scene=session.engine.snapshot(kind=session.scene_kind),
        evaluation=evaluation,
        banner_message=banner_message(evaluation.banner),
        wire_id=wire_id,
    )


async def _mutate(
    session_id: str,
    action: str,
    arguments: dict[str, Any],
    mutation: Callable[[ContinuityEngine], Any],
) -> CircuitStateResponse:
    """Apply one mutation then one evaluate() under the session lock."""
    session = _get_session(session_id)
    audit = get_audit_logger()

    async with session.lock:
        try:
            result = mutation(session.engine)
        except CircuitError as exc:
            session.record(action, arguments, error=exc.code)
            logger.info(f"[circuit] {session_id} {action} rejected: {exc.code}")
            await audit.log_event(
                session_id,
                "mutation_rejected",
                {"action": action, "arguments": arguments, "error": exc.code},
            )
            raise _http_error(exc) from exc
        evaluation = session.engine.evaluate()
        session.record(action, arguments)

    lit = [k for k, v in evaluation.loads.items() if v.energized]
    logger.info(f"[circuit] {session_id} {action} ok: lit={lit} banner={evaluation.banner.value}")
    await audit.log_event(session_id, action, arguments, evaluation=evaluation)

    wire_id = result if action == "add_wire" else None
    return _state(session, evaluation, wire_id=wire_id)


# ===========================
# API Endpoints
# ===========================

@router.get("/scenes", response_model=list[SceneInfo])
async def list_scenes() -> list[SceneInfo]:
    """List the lesson scenes a session can be created from."""
    return [SceneInfo(**item) for item in describe_scenes()]


@router.post("/sessions", response_model=CircuitStateResponse)
async def create_session(request: CreateSessionRequest) -> CircuitStateResponse:
    scene_kind = request.scene_kind or settings.CIRCUIT_DEFAULT_SCENE
    try:
        engine = build_scene(scene_kind, request.options)
    except UnknownSceneKind as exc:
        raise HTTPException(
            status_code=400,
            detail=_error_detail("UnknownSceneKind", str(exc))
        ) from exc

    session = get_session_store().create_session(scene_kind, engine)
    evaluation = engine.evaluate()
    logger.info(f"[circuit] session {session.session_id} created ({scene_kind})")
    await get_audit_logger().log_event(
        session.session_id,
        "session_created",
        {"scene_kind": scene_kind, "options": request.options},
        evaluation=evaluation,
    )
    return _state(session, evaluation)


@router.get("/sessions/{session_id}", response_model=CircuitStateResponse)
async def get_session(session_id: str) -> CircuitStateResponse:
    session = _get_session(session_id)
    async with session.lock:
        evaluation = session.engine.evaluate()
    return _state(session, evaluation)


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str) -> dict[str, Any]:
    try:
        get_session_store().delete_session(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(
            status_code=404,
            detail=_error_detail("SessionNotFound", str(exc))
        ) from exc
    logger.info(f"[circuit] session {session_id} deleted")
    await get_audit_logger().log_event(session_id, "session_deleted")
    return {"session_id": session_id, "deleted": True}


@router.post("/sessions/{session_id}/wires", response_model=CircuitStateResponse)
async def add_wire(session_id: str, request: AddWireRequest) -> CircuitStateResponse:
    return await _mutate(
        session_id,
        "add_wire",
        {"terminal_a": request.terminal_a, "terminal_b": request.terminal_b},
        lambda engine: engine.add_wire(request.terminal_a, request.terminal_b),
    )


@router.delete("/sessions/{session_id}/wires/{wire_id}", response_model=CircuitStateResponse)
async def remove_wire(session_id: str, wire_id: str) -> CircuitStateResponse:
    return await _mutate(
        session_id,
        "remove_wire",
        {"wire_id": wire_id},
        lambda engine: engine.remove_wire(wire_id),
    )


@router.put("/sessions/{session_id}/switches/{switch_id}", response_model=CircuitStateResponse)
async def set_switch_state(
    session_id: str,
    switch_id: str,
    request: SwitchStateRequest,
) -> CircuitStateResponse:
    return await _mutate(
        session_id,
        "set_switch_state",
        {"switch_id": switch_id, "closed": request.closed},
        lambda engine: engine.set_switch_state(switch_id, request.closed),
    )


@router.post("/sessions/{session_id}/switches/{switch_id}/toggle", response_model=CircuitStateResponse)
async def toggle_switch(session_id: str, switch_id: str) -> CircuitStateResponse:
    return await _mutate(
        session_id,
        "toggle_switch",
        {"switch_id": switch_id},
        lambda engine: engine.toggle_switch(switch_id),
    )


@router.put("/sessions/{session_id}/sources/{source_id}", response_model=CircuitStateResponse)
async def set_source_installed(
    session_id: str,
    source_id: str,
    request: SourceStateRequest,
) -> CircuitStateResponse:
    return await _mutate(
        session_id,
        "set_source_installed",
        {
            "source_id": source_id,
            "installed": request.installed,
            "orientation_valid": request.orientation_valid,
        },
        lambda engine: engine.set_source_installed(
            source_id, request.installed, request.orientation_valid
        ),
    )


@router.post("/sessions/{session_id}/reset", response_model=CircuitStateResponse)
async def reset_session(session_id: str) -> CircuitStateResponse:
    return await _mutate(session_id, "reset", {}, lambda engine: engine.reset())
