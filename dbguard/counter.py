"""
Shared query counter.

One counter is owned by a DBPool and handed to every connection it
creates, so the total number of statements issued through the pool can
be read from any of them.
"""

from __future__ import annotations

import threading


class QueryCounter:
    """Thread-safe monotonically increasing counter."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def increment(self, n: int = 1) -> int:
        with self._lock:
            self._value += n
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def reset(self) -> None:
        with self._lock:
            self._value = 0


__all__ = ["QueryCounter"]
