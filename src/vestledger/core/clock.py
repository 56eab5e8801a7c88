"""
Time sources for the vesting ledger.

Accrual is computed on demand from the timestamp read at call time, so every
operation asks its Clock for a fresh value. Timestamps are integer unix
seconds.
"""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod

from vestledger.core.exceptions import ValidationError


class Clock(ABC):
    """Source of the current time."""

    @abstractmethod
    def now(self) -> int:
        """Return the current unix timestamp in seconds."""
        ...


class SystemClock(Clock):
    """Wall clock backed by time.time()."""

    def now(self) -> int:
        return int(time.time())


class ManualClock(Clock):
    """
    Clock that only moves when told to.

    Used for simulations and tests where the caller drives time explicitly.
    It never moves backward.
    """

    def __init__(self, start: int = 0) -> None:
        self._now = start

    def now(self) -> int:
        return self._now

    def set(self, timestamp: int) -> None:
        """Jump forward to an absolute timestamp."""
        if timestamp < self._now:
            raise ValidationError(
                "Clock cannot move backward",
                details={"current": self._now, "requested": timestamp},
            )
        self._now = timestamp

    def advance(self, seconds: int) -> int:
        """Move forward by a number of seconds and return the new time."""
        if seconds < 0:
            raise ValidationError("Cannot advance clock by a negative amount")
        self._now += seconds
        return self._now


class MonotonicClock(Clock):
    """
    Wraps another clock so readings never decrease.

    If the wrapped source steps backward (NTP adjustment, skewed node), the
    last observed value is returned until the source catches up.
    """

    def __init__(self, source: Clock | None = None) -> None:
        self._source = source or SystemClock()
        self._last = 0
        self._lock = threading.Lock()

    def now(self) -> int:
        reading = self._source.now()
        with self._lock:
            if reading > self._last:
                self._last = reading
            return self._last
