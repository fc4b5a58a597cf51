from __future__ import annotations

"""Explain Mode: one-line JSON milestones for bank loads, sessions and storage.

Off by default; `upscquiz run --explain` turns it on. Each line carries the
milliseconds since tracing was enabled, so timer expiry can be lined up
against answers and saves.
"""

import json
import sys
import time
from typing import Any, Dict, Optional, TextIO

_ENABLED = False
_T0 = 0.0
_STREAM: Optional[TextIO] = None


def enable(flag: bool = True, stream: Optional[TextIO] = None) -> None:
    global _ENABLED, _T0, _STREAM
    _ENABLED = bool(flag)
    _T0 = time.monotonic()
    _STREAM = stream


def trace(event: str, payload: Optional[Dict[str, Any]] = None) -> None:
    if not _ENABLED:
        return
    ms = int((time.monotonic() - _T0) * 1000)
    try:
        body = json.dumps(payload or {}, separators=(",", ":"), sort_keys=True, default=str)
    except (TypeError, ValueError):
        body = "{}"
    print(f"[EXPLAIN +{ms}ms] {event} {body}", file=_STREAM or sys.stderr)
