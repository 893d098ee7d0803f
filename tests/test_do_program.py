"""Programs built with @do and the Program combinators."""

from __future__ import annotations

import pytest

from capfx import (
    EffectGenerator,
    KleisliProgram,
    Program,
    ProgramCall,
    bind,
    do,
    perform,
    resume_now,
    run,
)


def counter_caps(log: list[int]):
    def tick(n: int):
        log.append(n)
        return resume_now(n * 10)

    return {"tick": tick}


def test_do_returns_kleisli_and_calls_are_lazy() -> None:
    started: list[str] = []

    @do
    def program(x: int) -> EffectGenerator[int]:
        started.append("started")
        value = yield perform("tick", x)
        return value + 1

    assert isinstance(program, KleisliProgram)
    call = program(4)
    assert isinstance(call, ProgramCall)
    assert started == []

    log: list[int] = []
    handle = run(bind(call, counter_caps(log)))
    assert handle.unwrap() == 41
    assert started == ["started"]
    assert log == [4]


def test_do_preserves_metadata() -> None:
    @do
    def documented(x: int) -> EffectGenerator[int]:
        """Documented program."""
        return x
        yield

    assert documented.__name__ == "documented"
    assert documented.__doc__ == "Documented program."
    assert list(documented.__signature__.parameters) == ["x"]
    assert documented(1).label == "documented"


def test_do_with_uses_declares_requirements() -> None:
    @do(uses=["tick"])
    def program() -> EffectGenerator[int]:
        return (yield perform("tick", 1))

    assert program.requires == frozenset({"tick"})
    assert program().requires == frozenset({"tick"})


def test_program_is_rerunnable_with_fresh_generators() -> None:
    @do
    def program() -> EffectGenerator[list[int]]:
        first = yield perform("tick", 1)
        second = yield perform("tick", 2)
        return [first, second]

    call = program()
    log: list[int] = []
    assert run(bind(call, counter_caps(log))).unwrap() == [10, 20]
    assert run(bind(call, counter_caps(log))).unwrap() == [10, 20]
    assert log == [1, 2, 1, 2]


def test_non_generator_function_returns_value() -> None:
    @do
    def plain(x: int) -> int:  # type: ignore[misc]
        return x * 2

    assert run(plain(21)).unwrap() == 42


def test_non_generator_function_returning_program_runs_it() -> None:
    @do
    def inner() -> EffectGenerator[int]:
        return (yield perform("tick", 3))

    @do
    def delegating():  # type: ignore[no-untyped-def]
        return inner()

    log: list[int] = []
    assert run(bind(delegating(), counter_caps(log))).unwrap() == 30


def test_sub_program_return_value_flows_to_parent() -> None:
    @do
    def child(n: int) -> EffectGenerator[int]:
        value = yield perform("tick", n)
        return value + 1

    @do
    def parent() -> EffectGenerator[int]:
        a = yield child(1)
        b = yield child(2)
        return a + b

    log: list[int] = []
    assert run(bind(parent(), counter_caps(log))).unwrap() == 32
    assert log == [1, 2]


def test_yield_from_to_generator_also_composes() -> None:
    @do
    def child() -> EffectGenerator[int]:
        return (yield perform("tick", 5))

    @do
    def parent() -> EffectGenerator[int]:
        value = yield from child().to_generator()
        return value * 2

    assert run(bind(parent(), counter_caps([]))).unwrap() == 100


def test_pure_map_and_then() -> None:
    @do
    def ticked(n: int) -> EffectGenerator[int]:
        return (yield perform("tick", n))

    assert run(Program.pure(7)).unwrap() == 7
    assert Program.pure(7).requires == frozenset()

    log: list[int] = []
    mapped = ticked(2).map(lambda v: v + 1)
    assert run(bind(mapped, counter_caps(log))).unwrap() == 21

    chained = ticked(1) >> (lambda v: ticked(v))
    assert run(bind(chained, counter_caps(log))).unwrap() == 100
    assert log == [2, 1, 10]


def test_map_and_then_reject_non_callables() -> None:
    with pytest.raises(TypeError, match="mapper must be callable"):
        Program.pure(1).map(3)  # type: ignore[arg-type]
    with pytest.raises(TypeError, match="binder must be callable"):
        Program.pure(1).and_then(3)  # type: ignore[arg-type]


def test_and_then_requires_program_result() -> None:
    handle = run(Program.pure(1).and_then(lambda v: v + 1))  # type: ignore[arg-type,return-value]
    assert handle.result.is_err()
    assert isinstance(handle.result.error, TypeError)


def test_do_rejects_non_callables() -> None:
    with pytest.raises(TypeError, match="@do expects"):
        do(3)  # type: ignore[call-overload]


def test_do_on_methods_binds_self() -> None:
    class Greeter:
        def __init__(self, greeting: str) -> None:
            self.greeting = greeting

        @do
        def greet(self, name: str) -> EffectGenerator[str]:
            return f"{self.greeting}, {name}"
            yield

    assert run(Greeter("Hi").greet("bob")).unwrap() == "Hi, bob"


def test_chained_labels_stay_short() -> None:
    program: Program[int] = Program.pure(0)
    for _ in range(100):
        program = program.map(lambda v: v + 1)
    assert program.label == "pure.map"

    chained = program.and_then(lambda v: Program.pure(v)).and_then(lambda v: Program.pure(v))
    assert chained.label == "pure.and_then"
