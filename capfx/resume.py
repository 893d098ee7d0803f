"""
Resumption values for the capfx engine.

A capability operation answers a descriptor with a ``Resume``: either
``Immediate`` when the value is already known, or ``Deferred`` when it will be
delivered later through a one-shot continuation. ``Deferred.register`` returns
a cancel function the driver calls if the run is cancelled while waiting.

Example::

    def delay(ms: int) -> Resume[None]:
        def register(resume):
            timer = threading.Timer(ms / 1000, resume, args=(None,))
            timer.start()
            return timer.cancel

        return resume_later(register)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")

Continuation = Callable[[T], None]
CancelFn = Callable[[], None]
Register = Callable[[Continuation[T]], Optional[CancelFn]]


class Resume(Generic[T]):
    """Sum type for the result of resolving one effect."""

    __slots__ = ()

    def is_immediate(self) -> bool:
        """Return ``True`` when no suspension is needed."""

        return isinstance(self, Immediate)


@dataclass(frozen=True)
class Immediate(Resume[T]):
    """Effect already has its answer."""

    value: T


@dataclass(frozen=True)
class Deferred(Resume[T]):
    """Effect completes later by invoking the continuation given to ``register``."""

    register: Register[T]

    def __post_init__(self) -> None:
        if not callable(self.register):
            raise TypeError(
                f"Deferred.register must be callable, got {type(self.register).__name__}"
            )


def resume_now(value: Any = None) -> Immediate[Any]:
    """Resume with ``value`` right away."""

    return Immediate(value)


def resume_later(register: Register[T]) -> Deferred[T]:
    """Resume once the continuation passed to ``register`` is called."""

    return Deferred(register)


__all__ = [
    "CancelFn",
    "Continuation",
    "Deferred",
    "Immediate",
    "Register",
    "Resume",
    "resume_later",
    "resume_now",
]
