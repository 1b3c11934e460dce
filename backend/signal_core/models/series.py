"""Bounded rolling price history.

Hot path model: plain dataclasses with float values and integer
millisecond timestamps, backed by a ``deque`` so eviction of the oldest
point is O(1).
"""

import math
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Iterator


def now_ms() -> int:
    """Current wall-clock time as integer milliseconds since the epoch."""
    return int(time.time() * 1000)


def is_valid_price(value: Any) -> bool:
    """Finite and strictly positive. Booleans are not prices."""
    if isinstance(value, bool):
        return False
    try:
        value = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and value > 0


def to_timestamp(value: Any) -> int | None:
    """Integer milliseconds, or None if ``value`` isn't a finite number."""
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


@dataclass(frozen=True, slots=True)
class PricePoint:
    """A single recorded price sample."""

    timestamp: int  # Unix timestamp in milliseconds
    value: float


class RollingSeries:
    """Append-only price history capped at ``max_history`` points.

    Insertion order is chronological order. When the cap is exceeded the
    oldest points are evicted first. Non-finite values are never stored.
    """

    def __init__(self, max_history: int = 1200):
        if max_history <= 0:
            raise ValueError("max_history must be > 0")
        self.max_history = max_history
        self._points: deque[PricePoint] = deque(maxlen=max_history)

    def push(self, value: float, timestamp: int | None = None) -> bool:
        """Append a price sample.

        Args:
            value: Price value; non-finite input is ignored
            timestamp: Sample time in ms (defaults to now)

        Returns:
            True if the value was accepted, False if it was rejected
        """
        try:
            value = float(value)
        except (TypeError, ValueError):
            return False
        if not math.isfinite(value):
            return False

        if timestamp is None:
            timestamp = now_ms()
        self._points.append(PricePoint(timestamp=int(timestamp), value=value))
        return True

    def last(self) -> float | None:
        """Most recent value, or None when empty."""
        if not self._points:
            return None
        return self._points[-1].value

    def first(self) -> float | None:
        """Oldest retained value, or None when empty."""
        if not self._points:
            return None
        return self._points[0].value

    def as_array(self) -> list[float]:
        """Values ordered oldest to newest."""
        return [p.value for p in self._points]

    def tail(self, n: int) -> list[float]:
        """The last ``n`` values (fewer if the series is shorter)."""
        if n <= 0:
            return []
        size = len(self._points)
        start = max(0, size - n)
        return [self._points[i].value for i in range(start, size)]

    @property
    def points(self) -> list[PricePoint]:
        return list(self._points)

    def clear(self) -> None:
        self._points.clear()

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[PricePoint]:
        return iter(self._points)
