"""
The do decorator for the capfx engine.

This module provides the @do decorator that turns generator functions into
KleisliPrograms, so effectful computations read like ordinary Python.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, ParamSpec, TypeVar, overload

from capfx.capability import operations_of
from capfx.kleisli import KleisliProgram
from capfx.types import EffectGenerator

P = ParamSpec("P")
T = TypeVar("T")


@overload
def do(func: Callable[P, EffectGenerator[T]]) -> KleisliProgram[P, T]: ...


@overload
def do(
    *, uses: Iterable[Any]
) -> Callable[[Callable[P, EffectGenerator[T]]], KleisliProgram[P, T]]: ...


def do(func=None, *, uses=None):
    """
    Decorator that converts a generator function into a KleisliProgram.

    Each ``yield`` suspends the computation on one effect descriptor (or on a
    sub-program) and evaluates to that effect's result once the driver has it.
    Calling the decorated function performs nothing: it returns a Program
    that can be bound to capabilities and run, any number of times.

    ``uses`` declares what the computation needs so ``bind`` can reject an
    incomplete capability object before the first step. It takes shapes,
    Protocol classes, operation names, descriptors and other ``@do`` programs;
    programs contribute their own declarations transitively.

    Exceptions raised by an effect's implementation are thrown back into the
    generator at the ``yield`` that requested it, so ``try``/``except`` around
    a ``yield`` works as it does with ``yield from``.

    Usage:
        @do(uses=[Print, Read])
        def ask(prompt: str) -> EffectGenerator[str]:
            yield print_(prompt)
            return (yield read())

        @do(uses=[ask, Delay])
        def greet() -> EffectGenerator[None]:
            name = yield ask("What is your name?")
            yield delay(500)
            yield print_(f"Hello, {name}")

    Args:
        func: A generator function that yields descriptors/Programs and returns T
        uses: Optional static declaration of required capabilities

    Returns:
        KleisliProgram wrapping the generator function.
    """

    requires = operations_of(uses) if uses is not None else None

    def decorate(target: Callable[P, EffectGenerator[T]]) -> KleisliProgram[P, T]:
        if not callable(target):
            raise TypeError(f"@do expects a generator function, got {type(target).__name__}")
        return KleisliProgram(target, requires=requires)

    if func is None:
        return decorate
    return decorate(func)


__all__ = ["do"]
