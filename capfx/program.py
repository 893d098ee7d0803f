"""
Program classes for the capfx engine.

A Program is a lazy, re-runnable description of an effectful computation.
Running it means asking for a fresh generator with ``to_generator()`` and
letting the driver step it: every yielded ``Op`` is resolved against the bound
capabilities, every yielded ``Program`` is run as a sub-computation whose
return value is sent back to the parent.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable, Generator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from capfx.effects.base import Op
    from capfx.types import EffectCreationContext

T = TypeVar("T")
U = TypeVar("U")


class Program(ABC, Generic[T]):
    """Runtime base class for all capfx programs."""

    @abstractmethod
    def to_generator(self) -> Generator[Op[Any] | Program[Any], Any, T]:
        """Return a fresh generator for one run of this program."""

    @property
    def requires(self) -> frozenset[str] | None:
        """Operations this program declared it uses, or ``None`` if undeclared."""

        return None

    @property
    def label(self) -> str:
        return type(self).__name__

    def map(self, f: Callable[[T], U]) -> Program[U]:
        """Map a function over this program's result."""

        if not callable(f):
            raise TypeError("mapper must be callable")

        def factory() -> Generator[Op[Any] | Program[Any], Any, U]:
            value = yield self
            return f(value)

        return GeneratorProgram(factory, declared=self.requires, name=f"{_base_label(self)}.map")

    def and_then(self, f: Callable[[T], Program[U]]) -> Program[U]:
        """Monadic bind: feed this program's result into ``f`` and run what it returns.

        The continuation program is only known at run time, so the composed
        program keeps this program's declaration and checks the rest on first use.
        """

        if not callable(f):
            raise TypeError("binder must be callable returning a Program")

        def factory() -> Generator[Op[Any] | Program[Any], Any, U]:
            value = yield self
            next_prog = f(value)
            if not isinstance(next_prog, Program):
                raise TypeError(
                    f"binder must return a Program; got {type(next_prog).__name__}"
                )
            return (yield next_prog)

        return GeneratorProgram(factory, declared=self.requires, name=f"{_base_label(self)}.and_then")

    def __rshift__(self, f: Callable[[T], Program[U]]) -> Program[U]:
        return self.and_then(f)

    @staticmethod
    def pure(value: T) -> Program[T]:
        """Program that performs no effect and returns ``value``."""

        def factory() -> Generator[Any, Any, T]:
            return value
            yield  # pragma: no cover - marks this function as a generator

        return GeneratorProgram(factory, declared=frozenset(), name="pure")


@dataclass(frozen=True)
class GeneratorProgram(Program[T]):
    """Program backed by a generator factory."""

    factory: Callable[[], Generator[Op[Any] | Program[Any], Any, T]]
    declared: frozenset[str] | None = None
    name: str | None = None

    def to_generator(self) -> Generator[Op[Any] | Program[Any], Any, T]:
        return self.factory()

    @property
    def requires(self) -> frozenset[str] | None:
        return self.declared

    @property
    def label(self) -> str:
        return self.name or getattr(self.factory, "__qualname__", "GeneratorProgram")


@dataclass(frozen=True)
class ProgramCall(Program[T]):
    """Invocation of a ``@do`` function with captured arguments."""

    kleisli_source: Any  # KleisliProgram
    args: tuple[Any, ...]
    kwargs: dict[str, Any] = field(default_factory=dict)
    function_name: str = "<anonymous>"
    created_at: EffectCreationContext | None = field(default=None, compare=False, repr=False)

    def to_generator(self) -> Generator[Op[Any] | Program[Any], Any, T]:
        result = self.kleisli_source.func(*self.args, **self.kwargs)
        if inspect.isgenerator(result):
            return result
        return _returning(result)

    @property
    def requires(self) -> frozenset[str] | None:
        return self.kleisli_source.requires

    @property
    def label(self) -> str:
        return self.function_name

    def __repr__(self) -> str:
        return f"ProgramCall({self.function_name})"


def _base_label(program: Program[Any]) -> str:
    label = program.label
    for suffix in (".map", ".and_then"):
        if label.endswith(suffix):
            return label[: -len(suffix)]
    return label


def _returning(result: Any) -> Generator[Any, Any, Any]:
    if isinstance(result, Program):
        return (yield result)
    return result


__all__ = ["GeneratorProgram", "Program", "ProgramCall"]
