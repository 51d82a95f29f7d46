from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from fastapi import Request


@dataclass
class Window:
    started_at: float
    count: int


class FixedWindowRateLimiter:
    """Allow at most `limit` hits per key in each `window_seconds` window."""

    def __init__(self, limit: int, window_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._limit = max(1, int(limit))
        self._window = max(0.1, float(window_seconds))
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: Dict[str, Window] = {}

    def allow(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            # Drop finished windows so the map does not grow without bound.
            for k in [k for k, w in self._windows.items() if now - w.started_at >= self._window]:
                del self._windows[k]
            w = self._windows.get(key)
            if w is None:
                self._windows[key] = Window(started_at=now, count=1)
                return True
            if w.count >= self._limit:
                return False
            w.count += 1
            return True


def parse_limit(value: str) -> Tuple[int, float]:
    """Parse "<max requests>/<window seconds>", e.g. "20/900"."""
    try:
        limit, window = (value or "").split("/", 1)
        return int(limit), float(window)
    except ValueError as e:
        raise ValueError(f"invalid_rate_limit: {value!r}") from e


def client_key(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    if forwarded:
        return forwarded
    return request.client.host if request.client else "unknown"
