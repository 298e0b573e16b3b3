"""
Bounded, thread-safe sink of recent error diagnostics.

Used only for troubleshooting through the diagnostics endpoint. The newest
entry comes first and the oldest is evicted once capacity is reached. One
instance lives on ``app.state`` and is handed to routes as a dependency.
"""

import threading
import traceback
from collections import deque
from datetime import datetime
from typing import Any, Optional, Protocol

from fastapi import Request


class DiagnosticSink(Protocol):
    def record(
        self,
        error: BaseException,
        *,
        operation: str,
        user_id: Optional[str] = None,
        error_id: Optional[str] = None,
    ) -> dict[str, Any]: ...

    def recent(self) -> list[dict[str, Any]]: ...


class RingBufferDiagnostics:
    def __init__(self, capacity: int = 20, include_stack: bool = False):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self.include_stack = include_stack
        self._entries: deque[dict[str, Any]] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def record(
        self,
        error: BaseException,
        *,
        operation: str,
        user_id: Optional[str] = None,
        error_id: Optional[str] = None,
    ) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat(),
            "error_id": error_id,
            "user_id": user_id,
            "operation": operation,
            "error_type": type(error).__name__,
            "error_message": str(error),
        }
        if self.include_stack:
            entry["stack"] = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
        with self._lock:
            self._entries.appendleft(entry)
        return entry

    def recent(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def get_diagnostics(request: Request) -> DiagnosticSink:
    return request.app.state.diagnostics
