"""Wall-clock delay backed by ``threading.Timer``."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from capfx.resume import CancelFn, Continuation, Resume, resume_later

logger = logging.getLogger(__name__)


class ThreadedDelay:
    """Implements the ``Delay`` capability with one daemon timer per wait.

    The continuation fires on the timer thread, so the run resumes there.
    Counters record how many timers were started, fired and cancelled.
    """

    def __init__(self, *, timer_factory: Callable[..., threading.Timer] = threading.Timer) -> None:
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._pending: set[threading.Timer] = set()
        self.timers_started = 0
        self.timers_fired = 0
        self.timers_cancelled = 0

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def delay(self, ms: float) -> Resume[None]:
        def register(resume: Continuation[None]) -> CancelFn:
            timer_holder: dict[str, threading.Timer] = {}

            def _fire() -> None:
                with self._lock:
                    if timer_holder["timer"] not in self._pending:
                        return
                    self._pending.discard(timer_holder["timer"])
                    self.timers_fired += 1
                resume(None)

            timer = self._timer_factory(max(0.0, ms) / 1000.0, _fire)
            timer.daemon = True
            timer_holder["timer"] = timer
            with self._lock:
                self._pending.add(timer)
                self.timers_started += 1
            timer.start()
            logger.debug("started %gms timer", ms)

            def cancel() -> None:
                with self._lock:
                    if timer not in self._pending:
                        return
                    self._pending.discard(timer)
                    self.timers_cancelled += 1
                timer.cancel()
                logger.debug("cancelled %gms timer", ms)

            return cancel

        return resume_later(register)

    def shutdown(self) -> None:
        """Cancel every pending timer without resuming its run."""
        with self._lock:
            timers, self._pending = list(self._pending), set()
            self.timers_cancelled += len(timers)
        for timer in timers:
            timer.cancel()


__all__ = ["ThreadedDelay"]
