"""Error types raised by the capfx engine."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from capfx.types import EffectCreationContext


class MissingCapabilityError(LookupError, AttributeError):
    """Raised when the capability object lacks an operation a computation needs.

    It is also an ``AttributeError``, so ``hasattr(caps, name)`` and
    ``getattr(caps, name, default)`` work on a ``Capabilities`` object.

    Binding raises it before a single step is taken when the program declares
    its requirements. For undeclared programs the driver raises it on first
    use, right before resolving the descriptor that needs the operation, and
    the run ends with it as its error.

    Attributes:
        missing: Names of the absent operations.
        program: Name of the program being bound or run, when known.
        created_at: Where the program call or descriptor that needed the
            operations was built, when known.

    Example:
        >>> bind(main(), print=...)  # main declared uses=[Print, Read]
        MissingCapabilityError: Missing capability 'read' required by main
    """

    def __init__(
        self,
        missing: Iterable[str],
        program: str | None = None,
        created_at: EffectCreationContext | None = None,
    ) -> None:
        self.missing = frozenset(missing)
        self.program = program
        self.created_at = created_at
        names = ", ".join(repr(name) for name in sorted(self.missing))
        noun = "capability" if len(self.missing) == 1 else "capabilities"
        target = f" required by {program}" if program else ""
        origin = f"\n{created_at.format_full()}" if created_at is not None else ""
        super().__init__(
            f"Missing {noun} {names}{target}{origin}\n"
            f"Hint: Provide them via `bind(program, provider, name=implementation)`"
        )

    def __str__(self) -> str:
        return str(self.args[0])


class RunCancelledError(Exception):
    """Error payload of a run that was cancelled while awaiting a callback."""

    def __init__(self, message: str = "Run was cancelled") -> None:
        super().__init__(message)


class RunPendingError(RuntimeError):
    """Raised when a run's result is read before the run terminated."""


class InvalidYieldError(TypeError):
    """Raised into a computation that yielded something other than an effect or program."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(
            f"Cannot yield {type(value).__name__} {value!r}; "
            "yield an effect descriptor (Op) or a Program"
        )


class ResumptionProtocolError(TypeError):
    """Raised when a resolver or register function breaks the Resume contract."""


__all__ = [
    "InvalidYieldError",
    "MissingCapabilityError",
    "ResumptionProtocolError",
    "RunCancelledError",
    "RunPendingError",
]
