"""Terminal console and system randomness capabilities."""

from __future__ import annotations

import random
import sys
from collections.abc import Callable
from typing import TextIO

from capfx.resume import Resume, resume_now


class StdConsole:
    """Implements ``Print``, ``Println`` and ``Read`` on a text stream.

    ``read`` blocks the driving thread on ``input_fn`` and answers
    immediately; there is nothing to cancel.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        input_fn: Callable[[], str] = input,
    ) -> None:
        self._stream = stream
        self._input_fn = input_fn

    def _out(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def print(self, text: str) -> Resume[None]:
        out = self._out()
        out.write(text)
        out.flush()
        return resume_now()

    def println(self, text: str) -> Resume[None]:
        out = self._out()
        out.write(f"{text}\n")
        out.flush()
        return resume_now()

    def read(self) -> Resume[str]:
        return resume_now(self._input_fn())


class SystemRandomInt:
    """Implements ``RandomInt`` over ``random.Random``; pass a seed for repeatable draws."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def random_int(self, low: int, high: int) -> Resume[int]:
        return resume_now(self._rng.randrange(low, high))


__all__ = ["StdConsole", "SystemRandomInt"]
