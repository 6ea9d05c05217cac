from __future__ import annotations

import threading


class SynchronizedCounter:
    """Integer counter whose every read and write happens under one lock."""

    def __init__(self, initial: int = 0) -> None:
        self._lock = threading.Lock()
        self._value = initial

    def increment(self, n: int = 1) -> int:
        """Add `n` and return the new value."""
        with self._lock:
            self._value += n
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value
