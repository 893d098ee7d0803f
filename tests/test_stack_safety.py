"""
Stack safety of the driver.

Long chains of immediate effects and deep sub-program nesting must finish
without growing the Python call stack.
"""

from __future__ import annotations

import sys

from capfx import EffectGenerator, Program, bind, do, perform, resume_now, run
from capfx.handlers.testing import ManualDelay
from capfx.effects import delay


def test_long_immediate_chain() -> None:
    @do
    def program(n: int) -> EffectGenerator[int]:
        total = 0
        for i in range(n):
            total += yield perform("value", i)
        return total

    n = 20_000
    handle = run(bind(program(n), value=lambda i: resume_now(1)))
    assert handle.unwrap() == n
    assert handle.steps == n


def test_deep_recursive_sub_programs() -> None:
    depth = sys.getrecursionlimit() * 3

    @do
    def countdown(n: int) -> EffectGenerator[int]:
        if n == 0:
            return (yield perform("value", 0))
        below = yield countdown(n - 1)
        return below + 1

    handle = run(bind(countdown(depth), value=lambda i: resume_now(i)))
    assert handle.unwrap() == depth


def test_deep_error_unwinds_every_frame() -> None:
    depth = sys.getrecursionlimit() * 2
    unwound: list[int] = []

    @do
    def dive(n: int) -> EffectGenerator[int]:
        try:
            if n == 0:
                yield perform("value", 0)
                raise LookupError("bottom")
            return (yield dive(n - 1))
        finally:
            unwound.append(n)

    handle = run(bind(dive(depth), value=lambda i: resume_now(i)))
    assert isinstance(handle.result.error, LookupError)
    assert len(unwound) == depth + 1


def test_deep_nesting_survives_suspension() -> None:
    depth = sys.getrecursionlimit() * 2
    delays = ManualDelay()

    @do
    def nested(n: int) -> EffectGenerator[str]:
        if n == 0:
            yield delay(1)
            return "bottom"
        return (yield nested(n - 1))

    handle = run(bind(nested(depth), delays))
    assert not handle.done
    delays.release()
    assert handle.unwrap() == "bottom"


def test_long_map_chain() -> None:
    program: Program[int] = Program.pure(0)
    for _ in range(5_000):
        program = program.map(lambda v: v + 1)
    assert run(program).unwrap() == 5_000


def test_cancel_closes_deep_stack() -> None:
    depth = sys.getrecursionlimit() * 2
    closed: list[int] = []
    delays = ManualDelay()

    @do
    def nested(n: int) -> EffectGenerator[None]:
        try:
            if n == 0:
                yield delay(1)
            else:
                yield nested(n - 1)
        finally:
            closed.append(n)

    handle = run(bind(nested(depth), delays))
    assert handle.cancel()
    assert len(closed) == depth + 1
    assert closed[0] == 0
