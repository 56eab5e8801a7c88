"""Tests for time sources."""

import pytest

from vestledger.core.clock import ManualClock, MonotonicClock, SystemClock
from vestledger.core.exceptions import ValidationError


class TestManualClock:
    def test_set_and_advance(self):
        clock = ManualClock(start=100)

        clock.set(150)
        assert clock.now() == 150
        assert clock.advance(10) == 160
        assert clock.now() == 160

    def test_cannot_move_backward(self):
        clock = ManualClock(start=100)

        with pytest.raises(ValidationError):
            clock.set(99)
        with pytest.raises(ValidationError):
            clock.advance(-1)
        assert clock.now() == 100


class StepClock:
    """Source that replays a fixed sequence of readings."""

    def __init__(self, readings):
        self._readings = iter(readings)

    def now(self):
        return next(self._readings)


class TestMonotonicClock:
    def test_never_goes_backward(self):
        clock = MonotonicClock(StepClock([10, 12, 11, 9, 15]))

        assert [clock.now() for _ in range(5)] == [10, 12, 12, 12, 15]

    def test_defaults_to_system_clock(self):
        assert MonotonicClock().now() > 1_600_000_000


def test_system_clock_returns_int():
    assert isinstance(SystemClock().now(), int)
