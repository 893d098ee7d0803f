"""
Deterministic capability implementations for tests.

``ScriptedInput`` and ``ManualDelay`` answer with ``Deferred`` resumptions
that the test completes explicitly, which makes the suspended state of a run
observable. ``RecordingOutput`` and ``FixedRandomInt`` answer immediately.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from capfx.resume import CancelFn, Continuation, Resume, resume_later, resume_now


@dataclass
class PendingWait:
    """One registered deferred wait, as seen by a test double."""

    resume: Continuation[Any]
    arg: Any = None
    cancelled: bool = False
    completed: bool = False
    cancel_calls: int = 0

    def complete(self, value: Any = None) -> None:
        if self.cancelled:
            raise RuntimeError("Cannot complete a cancelled wait")
        self.completed = True
        self.resume(value)

    def cancel(self) -> None:
        self.cancel_calls += 1
        self.cancelled = True


class ScriptedInput:
    """Implements ``Read``.

    Lines queued up front (or with ``feed`` before a read) are answered
    immediately; otherwise the read waits until the test calls ``feed``.
    """

    def __init__(self, lines: Iterable[str] = ()) -> None:
        self._queued: deque[str] = deque(lines)
        self._waiting: deque[PendingWait] = deque()
        self.reads = 0
        self.waits: list[PendingWait] = []

    @property
    def waiting(self) -> bool:
        return any(not w.cancelled for w in self._waiting)

    def read(self) -> Resume[str]:
        self.reads += 1
        if self._queued:
            return resume_now(self._queued.popleft())

        def register(resume: Continuation[str]) -> CancelFn:
            wait = PendingWait(resume)
            self._waiting.append(wait)
            self.waits.append(wait)
            return wait.cancel

        return resume_later(register)

    def feed(self, *lines: str) -> None:
        """Answer pending reads in order, queueing whatever is left over."""
        for line in lines:
            while self._waiting and self._waiting[0].cancelled:
                self._waiting.popleft()
            if self._waiting:
                self._waiting.popleft().complete(line)
            else:
                self._queued.append(line)


class ManualDelay:
    """Implements ``Delay``; every wait stays pending until ``release`` is called."""

    def __init__(self) -> None:
        self.waits: list[PendingWait] = []

    @property
    def requested(self) -> list[float]:
        return [w.arg for w in self.waits]

    @property
    def pending(self) -> list[PendingWait]:
        return [w for w in self.waits if not (w.cancelled or w.completed)]

    def delay(self, ms: float) -> Resume[None]:
        def register(resume: Continuation[None]) -> CancelFn:
            wait = PendingWait(resume, arg=ms)
            self.waits.append(wait)
            return wait.cancel

        return resume_later(register)

    def release(self) -> None:
        """Complete the oldest pending delay."""
        pending = self.pending
        if not pending:
            raise RuntimeError("No pending delay to release")
        pending[0].complete(None)


@dataclass
class RecordingOutput:
    """Implements ``Print`` and ``Println`` by recording what was written.

    ``print`` replaces the current screen, ``println`` appends a line to it;
    ``written`` keeps every call in order.
    """

    written: list[tuple[str, str]] = field(default_factory=list)
    screen: list[str] = field(default_factory=list)

    def print(self, text: str) -> Resume[None]:
        self.written.append(("print", text))
        self.screen = [text]
        return resume_now()

    def println(self, text: str) -> Resume[None]:
        self.written.append(("println", text))
        self.screen.append(text)
        return resume_now()

    @property
    def texts(self) -> list[str]:
        return [text for _, text in self.written]


class FixedRandomInt:
    """Implements ``RandomInt`` by cycling through preset values."""

    def __init__(self, *values: int) -> None:
        if not values:
            raise ValueError("FixedRandomInt needs at least one value")
        self._values = values
        self._index = 0

    def random_int(self, low: int, high: int) -> Resume[int]:
        value = self._values[self._index % len(self._values)]
        self._index += 1
        if not low <= value < high:
            raise ValueError(f"Preset value {value} is outside [{low}, {high})")
        return resume_now(value)


__all__ = [
    "FixedRandomInt",
    "ManualDelay",
    "PendingWait",
    "RecordingOutput",
    "ScriptedInput",
]
