"""
Capability binding.

``Capabilities`` is the immutable capability object a run resolves effects
against. ``bind`` couples a program to one and refuses when the program's
declared requirements are not all provided.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from capfx._vendor import FrozenDict
from capfx.effects.base import Op
from capfx.errors import MissingCapabilityError
from capfx.program import Program

if TYPE_CHECKING:
    from capfx.interpreter import RunHandle

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _public_entries(provider: Any) -> dict[str, Any]:
    if isinstance(provider, Capabilities):
        return dict(provider.entries)
    if isinstance(provider, Mapping):
        return {str(name): value for name, value in provider.items()}
    entries: dict[str, Any] = {}
    for name in dir(provider):
        if name.startswith("_"):
            continue
        entries[name] = getattr(provider, name)
    return entries


class Capabilities:
    """
    Immutable capability object.

    Built from any mix of objects (their public attributes), mappings and
    keyword entries; later providers override earlier ones. Entries are
    reachable both as attributes and as items. Asking for an absent entry
    raises ``MissingCapabilityError``. Item access (``caps["merge"]``) always
    reaches the entry, even when its name matches a method of this class.
    """

    __slots__ = ("_entries",)

    def __init__(self, *providers: Any, **entries: Any) -> None:
        merged: dict[str, Any] = {}
        for provider in providers:
            merged.update(_public_entries(provider))
        merged.update(entries)
        object.__setattr__(self, "_entries", FrozenDict(merged))

    @property
    def entries(self) -> FrozenDict:
        return self._entries

    def missing(self, operations: Iterable[str]) -> frozenset[str]:
        """Return the operations from ``operations`` this object does not provide."""

        return frozenset(name for name in operations if name not in self._entries)

    def merge(self, *providers: Any, **entries: Any) -> Capabilities:
        return Capabilities(self, *providers, **entries)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._entries[name]
        except KeyError:
            raise MissingCapabilityError([name]) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Capabilities are read-only")

    def __getitem__(self, name: str) -> Any:
        try:
            return self._entries[name]
        except KeyError:
            raise MissingCapabilityError([name]) from None

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Capabilities({', '.join(sorted(self._entries))})"


@dataclass(frozen=True)
class BoundProgram(Generic[T]):
    """A program coupled to the capability object it will run against."""

    program: Program[T] | Op[T]
    capabilities: Capabilities

    @property
    def label(self) -> str:
        return getattr(self.program, "label", type(self.program).__name__)

    def run(self, **kwargs: Any) -> RunHandle[T]:
        from capfx.run import run

        return run(self, **kwargs)


def check_requirements(program: Program[Any] | Op[Any], capabilities: Capabilities) -> None:
    """Raise ``MissingCapabilityError`` if ``program`` declared an operation ``capabilities`` lacks."""

    if not isinstance(program, (Program, Op)):
        raise TypeError(f"Can only bind a Program or Op, got {type(program).__name__}")
    required = program.requires
    label = getattr(program, "label", None)
    if required is None:
        logger.debug("bind %s: requirements undeclared, checking on first use", label)
        return
    missing = capabilities.missing(required)
    if missing:
        created_at = getattr(program, "created_at", None)
        raise MissingCapabilityError(missing, program=label, created_at=created_at)
    logger.debug("bind %s: %d declared operation(s) satisfied", label, len(required))


def bind(program: Program[T] | Op[T], *providers: Any, **entries: Any) -> BoundProgram[T]:
    """Couple ``program`` to a capability object built from ``providers`` and ``entries``.

    Performs no execution. Raises ``MissingCapabilityError`` when the program
    declared (directly or through declared sub-programs) an operation that the
    capability object does not provide.

    Example::

        bound = bind(main(), StdConsole(), ThreadedDelay(), min=1, max=5)
        handle = run(bound)
    """

    if isinstance(program, BoundProgram):
        raise TypeError("Program is already bound; bind the inner program instead")
    capabilities = Capabilities(*providers, **entries)
    check_requirements(program, capabilities)
    return BoundProgram(program, capabilities)


use = bind


__all__ = ["BoundProgram", "Capabilities", "bind", "check_requirements", "use"]
