"""Process-wide delivery counter.

Every delivery takes exactly one value. Two deliveries in the same process
and the same clock tick are told apart by it.
"""

from __future__ import annotations

import threading

COUNTER_WIDTH = 64
_COUNTER_LIMIT = 1 << COUNTER_WIDTH


class DeliveryCounter:
    """Monotonic unsigned counter, safe to share between threads."""

    def __init__(self, start: int = 0) -> None:
        self._lock = threading.Lock()
        self._value = start % _COUNTER_LIMIT

    def next(self) -> int:
        with self._lock:
            value = self._value
            self._value = (value + 1) % _COUNTER_LIMIT
        return value


_counter: DeliveryCounter | None = None
_counter_init = threading.Lock()


def get_counter() -> DeliveryCounter:
    """Return the shared counter, creating it on first use."""
    global _counter
    if _counter is None:
        with _counter_init:
            if _counter is None:
                _counter = DeliveryCounter()
    return _counter


def next_counter() -> int:
    return get_counter().next()
