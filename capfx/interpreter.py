"""
Driver for the capfx engine.

``RunHandle`` owns the state of one run and steps the bound program as a
trampoline: the generator stack lives in an explicit list of frames, so long
chains of immediate effects and deeply nested sub-programs never grow the
Python call stack. The run only gives control back to its caller while it
waits on a ``Deferred`` resumption; the continuation handed to ``register``
picks the run up again on whichever thread calls it.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Generator
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from capfx._vendor import Err, Ok
from capfx.effects.base import Op
from capfx.errors import (
    InvalidYieldError,
    MissingCapabilityError,
    ResumptionProtocolError,
    RunPendingError,
)
from capfx.program import Program
from capfx.resume import CancelFn, Deferred, Immediate
from capfx.types import RunResult, RunStatus

if TYPE_CHECKING:
    from capfx.bind import BoundProgram

T = TypeVar("T")

logger = logging.getLogger(__name__)

Frame = Generator[Any, Any, Any]
DoneCallback = Callable[["RunHandle[Any]"], None]


def _perform_once(effect: Op[T]) -> Generator[Op[T], T, T]:
    return (yield effect)


def _origin(effect: Op[Any]) -> str:
    if effect.created_at is None:
        return ""
    return f" (effect created at {effect.created_at.format_location()})"


class _Wait:
    """One outstanding ``Deferred`` wait and the continuation handed to its register."""

    __slots__ = ("handle", "registering", "fired", "arrived", "value")

    def __init__(self, handle: RunHandle[Any]) -> None:
        self.handle = handle
        self.registering = True
        self.fired = False
        self.arrived = False
        self.value: Any = None

    def resume(self, value: Any = None) -> None:
        self.handle._on_resume(self, value)


class RunHandle(Generic[T]):
    """
    Handle on a single run of a bound program.

    The handle reports the run's status, exposes its final ``RunResult`` and
    can cancel the run while it waits on an external callback. It is created
    and started by ``capfx.run.run``.
    """

    def __init__(self, bound: BoundProgram[T], *, name: str | None = None) -> None:
        self._bound = bound
        self._capabilities = bound.capabilities
        self._name = name or bound.label
        self._frames: list[Frame] = []
        self._status = RunStatus.RUNNING
        self._result: RunResult[T] | None = None
        self._wait: _Wait | None = None
        self._cancel_fn: CancelFn | None = None
        self._steps = 0
        self._lock = threading.Lock()
        self._finished = threading.Event()
        self._callbacks: list[DoneCallback] = []
        self._waiters = 0
        self._start_thread: int | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def status(self) -> RunStatus:
        return self._status

    @property
    def done(self) -> bool:
        return self._status.is_terminal

    @property
    def cancelled(self) -> bool:
        return self._status is RunStatus.CANCELLED

    @property
    def steps(self) -> int:
        """Number of effects and sub-programs the computation has yielded so far."""
        return self._steps

    @property
    def result(self) -> RunResult[T]:
        """Final outcome; raises ``RunPendingError`` while the run is still going."""
        if self._result is None:
            raise RunPendingError(f"Run {self._name} has not finished (status: {self._status.value})")
        return self._result

    def unwrap(self) -> T:
        """Return the final value, raising the run's error if it did not succeed."""
        return self.result.value

    def wait(self, timeout: float | None = None) -> RunResult[T]:
        """Block until the run terminates and return its result.

        Raises ``TimeoutError`` if ``timeout`` seconds pass first; the run keeps
        going in that case.
        """
        with self._lock:
            self._waiters += 1
        try:
            finished = self._finished.wait(timeout)
        finally:
            with self._lock:
                self._waiters -= 1
        if not finished:
            raise TimeoutError(f"Run {self._name} did not finish within {timeout}s")
        return self.result

    def add_done_callback(self, callback: DoneCallback) -> None:
        """Call ``callback(handle)`` once the run terminates (now, if it already has)."""
        with self._lock:
            if self._result is None:
                self._callbacks.append(callback)
                return
        self._invoke_callback(callback)

    def cancel(self) -> bool:
        """Cancel the run if it is waiting on an external callback.

        Calls the pending cancel function exactly once, closes the suspended
        generators (their ``finally`` blocks run, nothing after the pending
        ``yield`` does) and marks the run cancelled. Returns ``False`` and does
        nothing when the run is not waiting.
        """
        with self._lock:
            if self._status is not RunStatus.AWAITING:
                logger.debug("%s: cancel ignored in state %s", self._name, self._status.value)
                return False
            cancel_fn = self._cancel_fn
            self._wait = None
            self._cancel_fn = None
            self._status = RunStatus.CANCELLED

        logger.debug("%s: cancelling pending wait", self._name)
        if cancel_fn is not None:
            try:
                cancel_fn()
            except Exception:
                logger.exception("%s: cancel function raised", self._name)
        self._close_frames()
        self._finish(RunResult.cancelled(self._steps))
        return True

    def __repr__(self) -> str:
        return f"RunHandle({self._name}, status={self._status.value}, steps={self._steps})"

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    def _start(self) -> None:
        program = self._bound.program
        logger.debug("%s: starting run", self._name)
        try:
            if isinstance(program, Op):
                root = _perform_once(program)
            else:
                root = program.to_generator()
        except Exception as exc:
            self._finish(RunResult(RunStatus.FAILED, Err(exc), self._steps))
            return
        self._frames.append(root)
        self._start_thread = threading.get_ident()
        try:
            self._drive(None, None)
        finally:
            self._start_thread = None

    def _drive(self, value: Any, error: BaseException | None) -> None:
        """Step the top frame until the run terminates or suspends on a Deferred.

        A ``BaseException`` such as ``KeyboardInterrupt`` escaping the
        computation still terminates the run as failed before it propagates.
        """

        try:
            self._step(value, error)
        except BaseException as exc:
            if self._result is None:
                self._abort(exc)
            raise

    def _step(self, value: Any, error: BaseException | None) -> None:
        frames = self._frames
        capabilities = self._capabilities
        while True:
            frame = frames[-1]
            try:
                if error is not None:
                    pending, error = error, None
                    yielded = frame.throw(pending)
                else:
                    yielded = frame.send(value)
            except StopIteration as stop:
                frames.pop()
                if not frames:
                    self._finish(RunResult(RunStatus.DONE, Ok(stop.value), self._steps))
                    return
                value = stop.value
                continue
            except Exception as exc:
                frames.pop()
                if not frames:
                    logger.debug("%s: failed with %r", self._name, exc)
                    self._finish(RunResult(RunStatus.FAILED, Err(exc), self._steps))
                    return
                error = exc
                continue

            self._steps += 1
            value = None

            if isinstance(yielded, Program):
                logger.debug("%s: entering %s", self._name, yielded.label)
                try:
                    frames.append(yielded.to_generator())
                except Exception as exc:
                    error = exc
                continue

            if not isinstance(yielded, Op):
                error = InvalidYieldError(yielded)
                continue

            logger.debug("effect: %r", yielded)
            missing = capabilities.missing(yielded.requires)
            if missing:
                self._abort(
                    MissingCapabilityError(missing, program=self._name, created_at=yielded.created_at)
                )
                return
            try:
                resumption = yielded.resolve(capabilities)
            except MissingCapabilityError as exc:
                self._abort(
                    MissingCapabilityError(exc.missing, program=self._name, created_at=yielded.created_at)
                )
                return
            except Exception as exc:
                error = exc
                continue

            if isinstance(resumption, Immediate):
                value = resumption.value
                continue
            if not isinstance(resumption, Deferred):
                error = ResumptionProtocolError(
                    f"{yielded!r} resolved to {type(resumption).__name__}; expected Immediate or Deferred"
                    f"{_origin(yielded)}"
                )
                continue

            outcome = self._suspend(yielded, resumption)
            if outcome is None:
                return
            value, error = outcome

    def _suspend(self, effect: Op[Any], deferred: Deferred[Any]) -> tuple[Any, BaseException | None] | None:
        """Register the continuation; return the value if it already arrived, else ``None``."""

        wait = _Wait(self)
        with self._lock:
            self._wait = wait
        try:
            cancel_fn = deferred.register(wait.resume)
        except Exception as exc:
            with self._lock:
                wait.fired = True
                self._wait = None
            return None, exc

        with self._lock:
            wait.registering = False
            if wait.arrived:
                self._wait = None
                logger.debug("%s: continuation fired during register", self._name)
                return wait.value, None
            if cancel_fn is not None and not callable(cancel_fn):
                wait.fired = True
                self._wait = None
                return None, ResumptionProtocolError(
                    f"register must return a cancel function or None, got {type(cancel_fn).__name__}"
                    f"{_origin(effect)}"
                )
            self._cancel_fn = cancel_fn
            self._status = RunStatus.AWAITING
        logger.debug("%s: awaiting external callback", self._name)
        return None

    def _on_resume(self, wait: _Wait, value: Any) -> None:
        with self._lock:
            if wait.fired:
                logger.warning("%s: continuation called more than once; ignoring", self._name)
                return
            wait.fired = True
            if self._wait is not wait:
                logger.warning("%s: continuation arrived after the run stopped waiting; ignoring", self._name)
                return
            if wait.registering:
                wait.arrived = True
                wait.value = value
                return
            self._wait = None
            self._cancel_fn = None
            self._status = RunStatus.RUNNING
        logger.debug("%s: resumed", self._name)
        self._drive(value, None)

    # ------------------------------------------------------------------
    # Termination
    # ------------------------------------------------------------------

    def _abort(self, error: BaseException) -> None:
        logger.debug("%s: aborting with %r", self._name, error)
        self._close_frames()
        self._finish(RunResult(RunStatus.FAILED, Err(error), self._steps))

    def _close_frames(self) -> None:
        while self._frames:
            frame = self._frames.pop()
            try:
                frame.close()
            except Exception:
                logger.exception("%s: error while closing a suspended frame", self._name)

    def _finish(self, result: RunResult[T]) -> None:
        with self._lock:
            self._result = result
            self._status = result.status
            self._frames.clear()
            self._wait = None
            self._cancel_fn = None
            callbacks, self._callbacks = self._callbacks, []
            unobserved = (
                result.status is RunStatus.FAILED
                and not callbacks
                and not self._waiters
                and self._start_thread != threading.get_ident()
            )
        logger.debug("%s: finished %r", self._name, result)
        if unobserved:
            # No callback or waiter will read this failure.
            logger.error(
                "%s: run failed and its result was never retrieved",
                self._name,
                exc_info=result.error,
            )
        self._finished.set()
        for callback in callbacks:
            self._invoke_callback(callback)

    def _invoke_callback(self, callback: DoneCallback) -> None:
        try:
            callback(self)
        except Exception:
            logger.exception("%s: done callback raised", self._name)


__all__ = ["RunHandle"]
