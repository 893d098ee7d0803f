"""End-to-end runs against real and scripted capability implementations."""

from __future__ import annotations

import time

import pytest

from capfx import EffectGenerator, RunStatus, bind, do, run, run_sync
from capfx.effects import Delay, Read, delay, read
from capfx.handlers import ThreadedDelay
from capfx.handlers.testing import ManualDelay, ScriptedInput


@do(uses=[Delay])
def wait_then_done(ms: int) -> EffectGenerator[str]:
    yield delay(ms)
    return "done"


def test_real_timer_delay_completes_after_duration() -> None:
    delays = ThreadedDelay()
    started = time.monotonic()

    handle = run(bind(wait_then_done(500), delays))
    assert handle.status is RunStatus.AWAITING

    result = handle.wait(timeout=5)
    elapsed = time.monotonic() - started

    assert result.value == "done"
    assert elapsed >= 0.49
    assert delays.timers_started == 1
    assert delays.timers_fired == 1
    assert delays.timers_cancelled == 0
    assert delays.pending == 0


def test_real_timer_is_cleared_on_cancel() -> None:
    delays = ThreadedDelay()

    handle = run(bind(wait_then_done(500), delays))
    assert handle.cancel()

    time.sleep(0.6)
    assert handle.status is RunStatus.CANCELLED
    assert delays.timers_started == 1
    assert delays.timers_cancelled == 1
    assert delays.timers_fired == 0


def test_run_sync_with_real_timer() -> None:
    result = run_sync(bind(wait_then_done(20), ThreadedDelay()), timeout=5)
    assert result.is_ok()
    assert result.value == "done"


def test_run_sync_timeout_cancels_run() -> None:
    delays = ThreadedDelay()
    with pytest.raises(TimeoutError):
        run_sync(bind(wait_then_done(10_000), delays), timeout=0.05)
    assert delays.timers_cancelled == 1


@do(uses=[Read])
def confirm() -> EffectGenerator[bool]:
    while True:
        answer = yield read()
        if answer == "y":
            return True
        if answer == "n":
            return False


def test_read_loop_until_recognised_answer() -> None:
    console = ScriptedInput()
    handle = run(bind(confirm(), console))

    for line in ("x", "q"):
        assert handle.status is RunStatus.AWAITING
        console.feed(line)
    assert not handle.done
    console.feed("y")

    assert handle.unwrap() is True
    assert console.reads == 3


def test_read_loop_with_preloaded_lines() -> None:
    console = ScriptedInput(["x", "q", "n"])
    handle = run(bind(confirm(), console))
    assert handle.done
    assert handle.unwrap() is False
    assert console.reads == 3


def test_cancel_during_pending_delay_skips_remaining_code() -> None:
    delays = ManualDelay()
    reached: list[str] = []

    @do(uses=[Delay])
    def program() -> EffectGenerator[str]:
        reached.append("before")
        yield delay(1_000)
        reached.append("after")
        return "finished"

    handle = run(bind(program(), delays))
    wait = delays.pending[0]
    assert handle.cancel()

    assert wait.cancel_calls == 1
    assert reached == ["before"]
    assert handle.result.is_cancelled()

    wait.resume(None)
    assert reached == ["before"]
    assert handle.status is RunStatus.CANCELLED
