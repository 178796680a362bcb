"""
heapguard.logging
AUTHOR: carter-vin

Structured JSON event logging for dump runs

Contract:
- One JSON object per line to stdout
- Stable event vocabulary (allowlist)
- UTC timestamps only
- Events of one run share a run_id (RunLog)
"""

from __future__ import annotations

import json
import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Mapping

# Event types
VALID_EVENT_TYPES = {
    "run_start",
    "usage_error",
    "collector_failed",
    "disk_estimate",
    "check_failed",
    "check_warning",
    "checks_passed",
    "dump_patience",
    "dump_started",
    "dump_failed",
    "dump_completed",
    "compression_scheduled",
    "compression_failed",
    "dump_aborted",
}


def _truncate_message(value: str, *, limit: int = 200) -> str:
    """
    Cap message length to keep events compact
    """
    if len(value) <= limit:
        return value
    return value[:limit] + f"...[truncated {len(value) - limit} chars]"


# Time: current in UTC ISO 8601
def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def emit_event(event_type: str, *, tool_version: str, **fields: Any) -> None:
    """
    Emit structured event line to stdout

    Rules:
    - event_type in VALID_EVENT_TYPES
    - event_type, tool_version, timestamp always present
    - sort_keys + compact separators for format
    """
    if event_type not in VALID_EVENT_TYPES:
        raise ValueError(f"invalid event_type: {event_type}")

    if "message" in fields and isinstance(fields["message"], str):
        # Avoid emitting long strings in event fields
        fields["message"] = _truncate_message(fields["message"])

    payload: dict[str, Any] = {
        "event_type": event_type,
        "utc_now": utc_now_iso(),
        "tool_version": tool_version,
        **fields,
    }

    print(
        json.dumps(
            payload,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        )
    )


@dataclass(frozen=True)
class RunLog:
    """
    Event emitter scoped to one heapguard run

    - run_id ties every line of a run together when several runs share a log
    - bound fields (e.g. pid) are set once and ride on every later event
    - elapsed_ms is measured from the start of the run (monotonic clock)
    """

    tool_version: str
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    started: float = field(default_factory=time.monotonic)
    bound: Mapping[str, Any] = field(default_factory=dict)

    def bind(self, **fields: Any) -> "RunLog":
        """
        Copy of this log with extra fields on every event
        """
        return replace(self, bound={**self.bound, **fields})

    def emit(self, event_type: str, **fields: Any) -> None:
        elapsed_ms = int((time.monotonic() - self.started) * 1000)
        emit_event(
            event_type,
            tool_version=self.tool_version,
            run_id=self.run_id,
            elapsed_ms=elapsed_ms,
            **{**self.bound, **fields},
        )
