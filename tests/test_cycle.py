"""Tests for the fixed-period cycle timer."""

import threading

import pytest

from rpi_gpiod.cycle import CycleTimer


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(round(seconds, 6))
        self.now += seconds


class TestCycleTimer:
    def test_keeps_exact_period(self):
        clock = FakeClock()
        timer = CycleTimer(0.1, clock=clock, sleep=clock.sleep)
        clock.now += 0.03  # loop body
        assert timer.wait()
        clock.now += 0.05
        assert timer.wait()
        assert clock.sleeps == [0.07, 0.05]
        assert (timer.cycles, timer.overruns) == (2, 0)

    def test_overrun_restarts_phase(self):
        clock = FakeClock()
        timer = CycleTimer(0.1, clock=clock, sleep=clock.sleep)
        clock.now += 0.25
        assert timer.wait()
        assert timer.overruns == 1
        assert clock.sleeps == []
        clock.now += 0.02
        timer.wait()
        assert clock.sleeps == [0.08]

    def test_stop_event_ends_wait(self):
        timer = CycleTimer(5.0)
        stop = threading.Event()
        stop.set()
        assert timer.wait(stop) is False

    def test_rejects_non_positive_period(self):
        with pytest.raises(ValueError):
            CycleTimer(0)
