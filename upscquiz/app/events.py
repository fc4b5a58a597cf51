from __future__ import annotations

"""Tiny pub/sub event bus used for timer ticks and expiry."""

import sys
from typing import Any, Callable, Dict, List

TICK = "tick"
TIME_UP = "time_up"


class EventBus:
    def __init__(self) -> None:
        self._subs: Dict[str, List[Callable[[Any], None]]] = {}

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        self._subs.setdefault(event, []).append(handler)

    def unsubscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        handlers = self._subs.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, payload: Any = None) -> None:
        for h in list(self._subs.get(event, [])):
            try:
                h(payload)
            except Exception as e:
                # One bad subscriber must not starve the others
                print(f"[WARN] handler for '{event}' failed: {e}", file=sys.stderr)
