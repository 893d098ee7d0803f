"""
Effect descriptors.

An ``Op`` pairs a resolver ``(capabilities) -> Resume[T]`` with the names of
the operations it needs. Building one has no side effect; the resolver runs
only when the driver dispatches the descriptor against a bound capability
object.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from capfx.capability import operations_of
from capfx.resume import Immediate, Resume
from capfx.utils import capture_creation_context

if TYPE_CHECKING:
    from capfx.bind import Capabilities
    from capfx.types import EffectCreationContext

T = TypeVar("T")

Resolver = Callable[["Capabilities"], Resume[T]]


@dataclass(frozen=True)
class Op(Generic[T]):
    """Inert description of one effect invocation."""

    resolve: Resolver[T]
    requires: frozenset[str] = frozenset()
    name: str | None = None
    created_at: EffectCreationContext | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not callable(self.resolve):
            raise TypeError(f"resolver must be callable, got {type(self.resolve).__name__}")

    @property
    def label(self) -> str:
        if self.name:
            return self.name
        if self.requires:
            return "+".join(sorted(self.requires))
        return getattr(self.resolve, "__name__", "op")

    def __repr__(self) -> str:
        return f"Op({self.label})"


def op(
    resolver: Resolver[T],
    requires: Any = (),
    *,
    name: str | None = None,
) -> Op[T]:
    """Wrap ``resolver`` into a descriptor.

    Args:
        resolver: Called with the bound ``Capabilities`` when the effect runs;
            must return a ``Resume``.
        requires: Operation names, shapes or Protocol classes the resolver
            uses. Checked before the resolver is called.
        name: Optional label for logs and errors.

    Example::

        def read() -> Op[str]:
            return op(lambda caps: caps.read(), requires=Read)
    """

    return Op(
        resolve=resolver,
        requires=operations_of(requires),
        name=name,
        created_at=capture_creation_context(skip_frames=2),
    )


describe = op


def perform(operation: str, *args: Any, **kwargs: Any) -> Op[Any]:
    """Descriptor calling ``capabilities.<operation>(*args, **kwargs)``."""

    def resolver(capabilities: Capabilities) -> Resume[Any]:
        return capabilities[operation](*args, **kwargs)

    return Op(
        resolve=resolver,
        requires=frozenset({operation}),
        name=operation,
        created_at=capture_creation_context(skip_frames=2),
    )


def get(*names: str) -> Op[Any]:
    """Read the capability object, one entry of it, or a tuple of entries.

    ``get()`` resolves to the whole ``Capabilities``; ``get("min")`` to one
    entry; ``get("min", "max")`` to ``(min, max)``. Always immediate.
    """

    def resolver(capabilities: Capabilities) -> Resume[Any]:
        if not names:
            return Immediate(capabilities)
        values = tuple(capabilities[entry] for entry in names)
        return Immediate(values[0] if len(values) == 1 else values)

    return Op(
        resolve=resolver,
        requires=frozenset(names),
        name=f"get({', '.join(names)})",
        created_at=capture_creation_context(skip_frames=2),
    )


__all__ = ["Op", "Resolver", "describe", "get", "op", "perform"]
