from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class Scheduler(ABC):
    """Abstract source of repeating timer ticks."""

    @abstractmethod
    def schedule(self, callback: TickCallback, interval_seconds: float) -> Any:
        """Call ``callback`` every ``interval_seconds`` until cancelled."""
        raise NotImplementedError

    @abstractmethod
    def cancel(self, handle: Any) -> None:
        """Stop the timer identified by ``handle``."""
        raise NotImplementedError


class RepeatingTimer:
    """Re-arms a ``threading.Timer`` after every tick until cancelled."""

    def __init__(self, callback: TickCallback, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("Timer interval must be positive.")
        self._callback = callback
        self._interval = interval_seconds
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def start(self) -> None:
        self._arm()

    def cancel(self) -> None:
        self._cancelled.set()
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _arm(self) -> None:
        with self._lock:
            if self._cancelled.is_set():
                return
            self._timer = threading.Timer(self._interval, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        if self._cancelled.is_set():
            return
        try:
            self._callback()
        except Exception:
            # Stop ticking once the handler raises.
            logger.exception("Timer callback failed; cancelling timer.")
            self.cancel()
            return
        self._arm()


class ThreadingScheduler(Scheduler):
    """Scheduler backed by daemon ``threading.Timer`` threads."""

    def schedule(self, callback: TickCallback, interval_seconds: float) -> RepeatingTimer:
        timer = RepeatingTimer(callback, interval_seconds)
        timer.start()
        logger.debug("Scheduled repeating timer every %.2fs", interval_seconds)
        return timer

    def cancel(self, handle: Any) -> None:
        if isinstance(handle, RepeatingTimer):
            handle.cancel()
