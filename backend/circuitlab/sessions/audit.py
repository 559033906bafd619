"""Audit logging utilities for circuit sessions."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from circuitlab.circuit.schema import Evaluation


class CircuitAuditLogger:
    """Persist session events (creation, mutations, rejections) as JSON lines."""

    def __init__(self, log_path: Path, enabled: bool = True) -> None:
        self._enabled = enabled
        self._log_path = log_path
        self._lock = asyncio.Lock()
        if self._enabled:
            self._log_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def log_event(
        self,
        session_id: str,
        event: str,
        payload: dict[str, Any] | None = None,
        evaluation: Evaluation | None = None,
    ) -> None:
        """Append one record; evaluation is summarised to lit loads and flags."""
        if not self._enabled:
            return
        record: dict[str, Any] = {
            "type": event,
            "logged_at": datetime.now(tz=timezone.utc).isoformat(),
            "session_id": session_id,
            "payload": payload or {},
        }
        if evaluation is not None:
            record["evaluation"] = _summarise(evaluation)
        await self._write_entry(json.dumps(record, ensure_ascii=False, sort_keys=True))

    async def _write_entry(self, payload: str) -> None:
        async with self._lock:
            await asyncio.to_thread(self._append_entry, payload)

    def _append_entry(self, payload: str) -> None:
        with self._log_path.open("a", encoding="utf-8") as file:
            file.write(payload.rstrip())
            file.write("\n")


def _summarise(evaluation: Evaluation) -> dict[str, Any]:
    return {
        "lit": sorted(k for k, v in evaluation.loads.items() if v.energized),
        "short_circuit": evaluation.short_circuit_detected,
        "truncated": evaluation.truncated,
        "banner": evaluation.banner.value,
    }


_audit_logger: CircuitAuditLogger | None = None


def get_audit_logger() -> CircuitAuditLogger:
    global _audit_logger
    if _audit_logger is None:
        from circuitlab.logging_utils import resolve_backend_path
        from circuitlab.models.settings import settings

        _audit_logger = CircuitAuditLogger(
            resolve_backend_path(settings.CIRCUIT_AUDIT_LOG_PATH),
            enabled=settings.CIRCUIT_AUDIT_LOG_ENABLED,
        )
    return _audit_logger
