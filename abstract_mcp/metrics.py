"""In-process counters for the MCP server (single process only)."""

from __future__ import annotations

from collections import Counter, deque
from threading import Lock
from typing import Deque, Dict, Tuple

# Only the latest request timings are kept; older ones fall off the window.
RECENT_DURATIONS_LIMIT = 100


class MetricsRecorder:
    def __init__(self, recent_limit: int = RECENT_DURATIONS_LIMIT) -> None:
        self._lock = Lock()
        self._requests = 0
        self._recent: Deque[Tuple[str, float]] = deque(maxlen=recent_limit)
        self._outcomes: Dict[bool, Counter[str]] = {True: Counter(), False: Counter()}
        self._skipped_tokens = 0

    def incr_request(self) -> None:
        with self._lock:
            self._requests += 1

    def record_duration(self, request_id: str, duration_ms: float) -> None:
        with self._lock:
            self._recent.append((request_id, round(duration_ms, 3)))

    def record_tool(self, tool: str, *, success: bool) -> None:
        with self._lock:
            self._outcomes[success][tool] += 1

    def incr_skipped_token(self) -> None:
        """Count a token left out of a wallet report because it could not be read."""
        with self._lock:
            self._skipped_tokens += 1

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            return {
                "requests": self._requests,
                "tool_success": dict(self._outcomes[True]),
                "tool_error": dict(self._outcomes[False]),
                "skipped_tokens": self._skipped_tokens,
                "recent_request_durations_ms": dict(self._recent),
            }

    def reset(self) -> None:
        with self._lock:
            self._requests = 0
            self._recent.clear()
            for counter in self._outcomes.values():
                counter.clear()
            self._skipped_tokens = 0


default_metrics = MetricsRecorder()
