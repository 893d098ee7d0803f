"""
Entry points for running bound programs.

``run`` starts a run and hands back its ``RunHandle`` as soon as the program
terminates or suspends on an external callback. ``run_sync`` and
``run_async`` wait for the outcome in a blocking or asyncio context.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TypeVar

from capfx.bind import BoundProgram, bind
from capfx.effects.base import Op
from capfx.interpreter import DoneCallback, RunHandle
from capfx.program import Program
from capfx.types import RunResult

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _as_bound(program: BoundProgram[T] | Program[T] | Op[T]) -> BoundProgram[T]:
    if isinstance(program, BoundProgram):
        return program
    # Unbound: an empty capability object, so declared needs fail right here
    # and undeclared ones on first use.
    return bind(program)


def run(
    program: BoundProgram[T] | Program[T] | Op[T],
    *,
    on_done: DoneCallback | None = None,
    name: str | None = None,
) -> RunHandle[T]:
    """
    Start running ``program`` and return its handle.

    Everything up to the first ``Deferred`` wait (or to termination) runs
    synchronously inside this call, so a program made only of immediate
    effects is already finished when ``run`` returns.

    Args:
        program: A ``BoundProgram`` from ``bind``; a bare Program or Op is
            bound to an empty capability object first.
        on_done: Optional callback invoked with the handle when the run ends.
        name: Label used in log records; defaults to the program's name.

    Raises:
        MissingCapabilityError: A declared requirement is not provided. The
            run never starts.
    """

    bound = _as_bound(program)
    handle: RunHandle[T] = RunHandle(bound, name=name)
    if on_done is not None:
        handle.add_done_callback(on_done)
    handle._start()
    return handle


def run_sync(
    program: BoundProgram[T] | Program[T] | Op[T],
    *,
    timeout: float | None = None,
    name: str | None = None,
) -> RunResult[T]:
    """Run ``program`` and block until it terminates.

    Deferred effects must be completed from another thread (a timer, a
    worker) for this to return. On timeout the run is cancelled and
    ``TimeoutError`` is raised.
    """

    handle = run(program, name=name)
    try:
        return handle.wait(timeout)
    except TimeoutError:
        handle.cancel()
        raise


async def run_async(
    program: BoundProgram[T] | Program[T] | Op[T],
    *,
    name: str | None = None,
) -> RunResult[T]:
    """Run ``program`` and await its outcome on the running event loop.

    Continuations may fire on the loop or on other threads; completion is
    handed to the loop with ``call_soon_threadsafe``. Cancelling the awaiting
    task cancels the run.
    """

    loop = asyncio.get_running_loop()
    future: asyncio.Future[RunResult[T]] = loop.create_future()

    def _settle(result: RunResult[T]) -> None:
        if not future.done():
            future.set_result(result)

    def _on_done(handle: RunHandle[T]) -> None:
        loop.call_soon_threadsafe(_settle, handle.result)

    handle = run(program, name=name)
    handle.add_done_callback(_on_done)
    try:
        return await future
    except asyncio.CancelledError:
        if handle.cancel():
            logger.debug("%s: cancelled with its awaiting task", handle.name)
        raise


__all__ = ["run", "run_async", "run_sync"]
