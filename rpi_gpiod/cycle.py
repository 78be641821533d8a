"""Fixed-period loop pacing."""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional


class CycleTimer:
    """Delay a loop so its iterations start exactly ``period_s`` apart.

    A late iteration counts as an overrun and restarts the phase from now
    instead of trying to catch up.
    """

    def __init__(
        self,
        period_s: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        if period_s <= 0:
            raise ValueError("Cycle period must be positive")
        self.period_s = float(period_s)
        self._clock = clock
        self._sleep = sleep or time.sleep
        self.cycles = 0
        self.overruns = 0
        self._due = self._clock() + self.period_s

    def restart(self) -> None:
        self._due = self._clock() + self.period_s

    def wait(self, stop: Optional[threading.Event] = None) -> bool:
        """Sleep until the next period starts; False if ``stop`` got set."""
        now = self._clock()
        self.cycles += 1
        if now >= self._due:
            self.overruns += 1
            self._due = now + self.period_s
            return not (stop is not None and stop.is_set())
        delay = self._due - now
        self._due += self.period_s
        if stop is not None:
            return not stop.wait(delay)
        self._sleep(delay)
        return True
