"""Random integer capability."""

from __future__ import annotations

from typing import Protocol

from capfx.capability import Capability
from capfx.effects.base import Op, op
from capfx.resume import Resume


class RandomIntOps(Protocol):
    def random_int(self, low: int, high: int) -> Resume[int]: ...


RandomInt = Capability.from_protocol(RandomIntOps, "RandomInt")


def random_int(low: int, high: int) -> Op[int]:
    """Draw an integer from the half-open range ``[low, high)``."""
    if high <= low:
        raise ValueError(f"random_int needs low < high, got [{low}, {high})")
    return op(lambda caps: caps.random_int(low, high), requires=RandomInt, name="random_int")


__all__ = ["RandomInt", "RandomIntOps", "random_int"]
