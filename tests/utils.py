from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, List

from synapse_read.scheduling import Scheduler


class ManualScheduler(Scheduler):
    """Scheduler whose timers only fire when the test calls ``tick``."""

    def __init__(self) -> None:
        self._next_id = 0
        self.timers: Dict[int, Callable[[], None]] = {}
        self.intervals: List[float] = []
        self.cancelled: List[int] = []

    @property
    def active(self) -> int:
        return len(self.timers)

    def schedule(self, callback: Callable[[], None], interval_seconds: float) -> int:
        self._next_id += 1
        self.timers[self._next_id] = callback
        self.intervals.append(interval_seconds)
        return self._next_id

    def cancel(self, handle: Any) -> None:
        self.cancelled.append(handle)
        self.timers.pop(handle, None)

    def tick(self, times: int = 1, clock: "FakeClock | None" = None) -> None:
        for _ in range(times):
            if clock is not None:
                clock.advance(self.intervals[-1] if self.intervals else 1.0)
            for callback in list(self.timers.values()):
                callback()


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class BusyScheduler(Scheduler):
    """Fires ticks back to back on a worker thread until cancelled."""

    def schedule(self, callback: Callable[[], None], interval_seconds: float) -> Any:
        stop = threading.Event()

        def run() -> None:
            while not stop.is_set():
                callback()
                time.sleep(0.001)

        threading.Thread(target=run, daemon=True).start()
        return stop

    def cancel(self, handle: Any) -> None:
        handle.set()
