"""Delay capability."""

from __future__ import annotations

import math
from typing import Protocol

from capfx.capability import Capability
from capfx.effects.base import Op, op
from capfx.resume import Resume


class DelayOps(Protocol):
    def delay(self, ms: float) -> Resume[None]: ...


Delay = Capability.from_protocol(DelayOps, "Delay")


def _coerce_ms(value: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"ms must be a number, got {type(value).__name__}")
    coerced = float(value)
    if math.isnan(coerced) or math.isinf(coerced):
        raise ValueError(f"ms must be finite, got {value!r}")
    if coerced < 0.0:
        raise ValueError("ms must be >= 0")
    return coerced


def delay(ms: float) -> Op[None]:
    """Wait ``ms`` milliseconds."""
    ms = _coerce_ms(ms)
    return op(lambda caps: caps.delay(ms), requires=Delay, name=f"delay({ms:g}ms)")


__all__ = ["Delay", "DelayOps", "delay"]
