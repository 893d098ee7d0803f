"""
Kleisli arrow implementation for the capfx engine.

A ``KleisliProgram`` wraps a function producing effectful generators; calling
it captures the arguments into a ``ProgramCall`` without running anything.
"""

from __future__ import annotations

import inspect
import types
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, ParamSpec, TypeVar

from capfx.program import Program, ProgramCall
from capfx.utils import capture_creation_context

P = ParamSpec("P")
T = TypeVar("T")


@dataclass
class KleisliProgram(Generic[P, T]):
    """
    Thin wrapper around a callable representing a Kleisli arrow.

    ``requires`` holds the operations the function declared through
    ``@do(uses=...)``; ``None`` means nothing was declared and the driver will
    check each effect on first use instead.
    """

    func: Callable[P, Any]
    requires: frozenset[str] | None = None

    def __post_init__(self) -> None:
        wrapped = getattr(self.func, "__wrapped__", self.func)
        for attr in ("__name__", "__qualname__", "__doc__", "__module__"):
            value = getattr(wrapped, attr, None)
            if value is not None:
                setattr(self, attr, value)

        signature = _safe_signature(wrapped)
        if signature is not None:
            self.__signature__ = signature  # type: ignore[attr-defined]

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> Program[T]:
        return ProgramCall(
            kleisli_source=self,
            args=tuple(args),
            kwargs=dict(kwargs),
            function_name=getattr(self, "__name__", "<unknown>"),
            created_at=capture_creation_context(skip_frames=2),
        )

    def __repr__(self) -> str:
        return f"KleisliProgram({getattr(self, '__qualname__', self.func)!r})"


def _safe_signature(target: Any) -> inspect.Signature | None:
    try:
        return inspect.signature(target)
    except (TypeError, ValueError):
        return None


__all__ = ["KleisliProgram"]
