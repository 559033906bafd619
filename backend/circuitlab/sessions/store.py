"""
Circuit Session Management

One session is one learner's lesson scene: a ContinuityEngine plus a short
history of the actions applied to it. Sessions live in process memory only.
"""

import asyncio
import uuid
from collections import OrderedDict
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from circuitlab.circuit.engine import ContinuityEngine
from circuitlab.logging_utils import get_logger

logger = get_logger("circuit.sessions")


class SessionNotFoundError(KeyError):
    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(session_id)

    def __str__(self) -> str:
        return f"Circuit session '{self.session_id}' not found"


class CircuitSession(BaseModel):
    """State container for one learner's circuit scene."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    session_id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique session identifier"
    )

    scene_kind: str = Field(..., description="Lesson scene kind the engine was built from")

    engine: ContinuityEngine = Field(..., exclude=True)

    created_at: datetime = Field(
        default_factory=datetime.now,
        description="Session start time"
    )

    updated_at: datetime = Field(
        default_factory=datetime.now,
        description="Last mutation time"
    )

    history: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Chronological record of mutations [{'action', 'arguments', 'error', 'timestamp'}]"
    )

    _lock: asyncio.Lock = PrivateAttr(default_factory=asyncio.Lock)

    @property
    def lock(self) -> asyncio.Lock:
        """Serializes one mutation and its evaluation per session."""
        return self._lock

    def record(
        self,
        action: str,
        arguments: dict[str, Any],
        error: str | None = None,
    ):
        """Record an applied (or rejected) mutation."""
        self.history.append({
            "action": action,
            "arguments": arguments,
            "error": error,
            "timestamp": datetime.now().isoformat()
        })
        self.updated_at = datetime.now()


class SessionStore:
    """
    In-memory storage for circuit sessions.

    Bounded: once max_sessions is reached the least recently touched session
    is evicted.
    """

    def __init__(self, max_sessions: int = 256):
        self._sessions: "OrderedDict[str, CircuitSession]" = OrderedDict()
        self._max_sessions = max(1, max_sessions)

    def create_session(self, scene_kind: str, engine: ContinuityEngine) -> CircuitSession:
        """Create a session around an already-built engine."""
        session = CircuitSession(scene_kind=scene_kind, engine=engine)
        self._sessions[session.session_id] = session
        while len(self._sessions) > self._max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info(f"[sessions] evicted {evicted_id} (limit {self._max_sessions})")
        return session

    def get_session(self, session_id: str) -> CircuitSession:
        """Retrieve a session by ID; raises SessionNotFoundError."""
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        self._sessions.move_to_end(session_id)
        return session

    def delete_session(self, session_id: str):
        if session_id not in self._sessions:
            raise SessionNotFoundError(session_id)
        del self._sessions[session_id]

    def list_sessions(self) -> list[CircuitSession]:
        return list(self._sessions.values())

    def __len__(self) -> int:
        return len(self._sessions)


# Global session store instance
_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """Get global session store instance."""
    global _store
    if _store is None:
        from circuitlab.models.settings import settings

        _store = SessionStore(max_sessions=settings.CIRCUIT_MAX_SESSIONS)
    return _store
