"""
Core types for the capfx engine.

This module holds the value types shared by the descriptor, binding and
driver layers: creation-context metadata, run status and run results.
"""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeAlias, TypeVar

from capfx._vendor import Err, Ok, Result
from capfx.errors import RunCancelledError

if TYPE_CHECKING:
    from capfx.effects.base import Op
    from capfx.program import Program

T = TypeVar("T")

EffectGenerator: TypeAlias = Generator["Op[Any] | Program[Any]", Any, T]


@dataclass(frozen=True)
class EffectCreationContext:
    """Context information about where a descriptor was created."""

    filename: str
    line: int
    function: str
    code: str | None = None
    stack_trace: list[dict[str, Any]] = field(default_factory=list)

    def format_location(self) -> str:
        """Format the creation location as a string."""
        return f"{self.filename}:{self.line} in {self.function}"

    def format_full(self) -> str:
        """Format the full creation context with stack trace."""
        lines = [f"Effect created at {self.format_location()}"]
        if self.code:
            lines.append(f"    {self.code}")
        if self.stack_trace:
            lines.append("\nCreation stack trace:")
            for frame in self.stack_trace:
                lines.append(
                    f'  File "{frame["filename"]}", line {frame["line"]}, in {frame["function"]}'
                )
                if frame.get("code"):
                    lines.append(f"    {frame['code']}")
        return "\n".join(lines)


class RunStatus(Enum):
    """Lifecycle of a single run."""

    RUNNING = "running"
    AWAITING = "awaiting"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.DONE, RunStatus.FAILED, RunStatus.CANCELLED)


@dataclass(frozen=True)
class RunResult(Generic[T]):
    """
    Final outcome of a run.

    ``result`` is ``Ok(value)`` for a normal return and ``Err(error)``
    otherwise; a cancelled run carries ``Err(RunCancelledError)`` and the
    ``CANCELLED`` status so it can be told apart from a failure.
    """

    status: RunStatus
    result: Result[T]
    steps: int = 0

    @property
    def value(self) -> T:
        """Get the successful value or raise the stored error."""
        if isinstance(self.result, Ok):
            return self.result.value
        raise self.result.error

    @property
    def error(self) -> BaseException:
        """Get the stored error or raise ``ValueError`` for a success."""
        if isinstance(self.result, Err):
            return self.result.error
        raise ValueError("Run finished successfully; there is no error")

    def is_ok(self) -> bool:
        return self.status is RunStatus.DONE

    def is_err(self) -> bool:
        return self.status is RunStatus.FAILED

    def is_cancelled(self) -> bool:
        return self.status is RunStatus.CANCELLED

    @classmethod
    def cancelled(cls, steps: int = 0) -> RunResult[Any]:
        return cls(RunStatus.CANCELLED, Err(RunCancelledError()), steps)

    def __repr__(self) -> str:
        if isinstance(self.result, Ok):
            return f"RunResult({self.status.value}, value={self.result.value!r}, steps={self.steps})"
        return f"RunResult({self.status.value}, error={self.result.error!r}, steps={self.steps})"


__all__ = [
    "EffectCreationContext",
    "EffectGenerator",
    "RunResult",
    "RunStatus",
]
