"""
Capability shapes.

A shape is a named set of operation names. Shapes are what descriptors and
``@do(uses=...)`` declarations refer to, and what binding checks a capability
object against. They can be spelled out directly or derived from a
``typing.Protocol`` class::

    class Read(Protocol):
        def read(self) -> Resume[str]: ...

    ReadShape = Capability.from_protocol(Read)
    Print = capability("Print", "print")
"""

from __future__ import annotations

import inspect
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Generic, Protocol


@dataclass(frozen=True)
class Capability:
    """Named structural contract: the operations an implementation must provide."""

    name: str
    operations: frozenset[str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "operations", frozenset(self.operations))
        if not self.operations:
            raise ValueError(f"Capability {self.name!r} must declare at least one operation")

    @classmethod
    def from_protocol(cls, protocol: type, name: str | None = None) -> Capability:
        """Build a shape from the public methods of a Protocol class."""

        operations = _protocol_operations(protocol)
        if not operations:
            raise ValueError(f"{protocol.__name__} declares no public operations")
        return cls(name or protocol.__name__, operations)

    def __or__(self, other: Capability) -> Capability:
        return Capability(f"{self.name}|{other.name}", self.operations | other.operations)

    def __repr__(self) -> str:
        return f"Capability({self.name}: {', '.join(sorted(self.operations))})"


def capability(name: str, *operations: str) -> Capability:
    """Declare a shape named ``name``; a lone name doubles as its operation."""

    return Capability(name, frozenset(operations or (name,)))


def _protocol_operations(protocol: type) -> frozenset[str]:
    names: set[str] = set()
    for klass in protocol.__mro__:
        if klass in (object, Protocol, Generic):
            continue
        for attr, value in vars(klass).items():
            if attr.startswith("_"):
                continue
            if callable(value) or isinstance(value, (staticmethod, classmethod)):
                names.add(attr)
    return frozenset(names)


def _is_protocol_class(value: Any) -> bool:
    return inspect.isclass(value) and bool(getattr(value, "_is_protocol", False))


def operations_of(*requirements: Any) -> frozenset[str]:
    """Normalise requirement declarations into a set of operation names.

    Accepts operation names, ``Capability`` shapes, Protocol classes,
    descriptors and programs (anything with a ``requires`` attribute), and
    iterables of those. Programs without a declaration contribute nothing.
    """

    names: set[str] = set()
    for requirement in requirements:
        if isinstance(requirement, str):
            names.add(requirement)
        elif isinstance(requirement, Capability):
            names |= requirement.operations
        elif _is_protocol_class(requirement):
            names |= _protocol_operations(requirement)
        elif hasattr(requirement, "requires"):
            declared = requirement.requires
            if declared is not None:
                names |= declared
        elif isinstance(requirement, Iterable):
            names |= operations_of(*requirement)
        else:
            raise TypeError(
                f"Cannot derive capability requirements from {type(requirement).__name__}"
            )
    return frozenset(names)


__all__ = ["Capability", "capability", "operations_of"]
