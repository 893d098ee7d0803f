"""run_async bridges a run onto the asyncio event loop."""

from __future__ import annotations

import asyncio

import pytest

from capfx import EffectGenerator, RunStatus, bind, do, perform, resume_now, run_async
from capfx.effects import Delay, delay
from capfx.handlers import AsyncioDelay, ThreadedDelay


@do(uses=[Delay])
def sleepy(ms: int) -> EffectGenerator[str]:
    yield delay(ms)
    yield delay(ms)
    return "awake"


@pytest.mark.asyncio
async def test_run_async_with_loop_timers() -> None:
    result = await run_async(bind(sleepy(10), AsyncioDelay()))
    assert result.is_ok()
    assert result.value == "awake"
    assert result.steps == 2


@pytest.mark.asyncio
async def test_run_async_with_thread_timers() -> None:
    delays = ThreadedDelay()
    result = await run_async(bind(sleepy(10), delays))
    assert result.value == "awake"
    assert delays.timers_fired == 2


@pytest.mark.asyncio
async def test_run_async_immediate_program() -> None:
    result = await run_async(bind(perform("x"), x=lambda: resume_now(5)))
    assert result.value == 5


@pytest.mark.asyncio
async def test_run_async_reports_errors_as_result() -> None:
    @do(uses=[Delay])
    def failing() -> EffectGenerator[None]:
        yield delay(1)
        raise ValueError("bad")

    result = await run_async(bind(failing(), AsyncioDelay()))
    assert result.status is RunStatus.FAILED
    assert isinstance(result.error, ValueError)


@pytest.mark.asyncio
async def test_cancelling_task_cancels_run() -> None:
    cleaned: list[str] = []

    @do(uses=[Delay])
    def long_wait() -> EffectGenerator[str]:
        try:
            yield delay(10_000)
            return "finished"
        finally:
            cleaned.append("finally")

    task = asyncio.create_task(run_async(bind(long_wait(), AsyncioDelay())))
    await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert cleaned == ["finally"]
