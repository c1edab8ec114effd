"""Shared structured JSON logging helpers."""

from __future__ import annotations

import json
import sys
from datetime import UTC, datetime
from typing import Any, TextIO


def render_json_event(event_type: str, **payload: Any) -> str:
    """Render one event as a stable, sorted JSON line."""
    event: dict[str, Any] = {
        "event_type": event_type,
        "timestamp": datetime.now(UTC).isoformat(),
    }
    event.update(payload)
    return json.dumps(event, ensure_ascii=True, sort_keys=True, default=str)


def emit_json_event(
    event_type: str,
    *,
    run_id: str | None,
    level: str = "info",
    stream: TextIO | None = None,
    **payload: Any,
) -> str:
    """Emit one JSON event line and return the rendered line.

    Events go to stderr by default so stdout stays free for fetched bodies.
    """
    line = render_json_event(event_type, level=level, run_id=run_id, **payload)
    print(line, file=stream or sys.stderr)
    return line
