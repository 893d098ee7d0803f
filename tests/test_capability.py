from __future__ import annotations

from typing import Protocol

import pytest

from capfx import Capability, EffectGenerator, capability, do, operations_of, resume_now
from capfx.effects import Delay, Print, print_
from capfx.resume import Resume


class Storage(Protocol):
    def load(self, key: str) -> Resume[bytes]: ...

    def save(self, key: str, data: bytes) -> Resume[None]: ...

    def _internal(self) -> None: ...


def test_capability_helper_defaults_operation_to_name() -> None:
    assert capability("print").operations == frozenset({"print"})
    assert capability("Console", "print", "read").operations == frozenset({"print", "read"})


def test_capability_requires_operations() -> None:
    with pytest.raises(ValueError, match="at least one operation"):
        Capability("Empty", frozenset())


def test_from_protocol_collects_public_methods() -> None:
    shape = Capability.from_protocol(Storage)
    assert shape.name == "Storage"
    assert shape.operations == frozenset({"load", "save"})


def test_union_of_shapes() -> None:
    combined = Print | Delay
    assert combined.operations == frozenset({"print", "delay"})


def test_operations_of_normalises_mixed_requirements() -> None:
    descriptor = print_("x")
    assert operations_of("a", Print, Storage, descriptor, ["b", ("c",)]) == frozenset(
        {"a", "print", "load", "save", "b", "c"}
    )


def test_operations_of_follows_declared_programs() -> None:
    @do(uses=[Print])
    def inner() -> EffectGenerator[None]:
        yield print_("inner")

    @do(uses=[inner, Delay])
    def outer() -> EffectGenerator[None]:
        yield inner()

    assert operations_of(inner) == frozenset({"print"})
    assert operations_of(outer()) == frozenset({"print", "delay"})


def test_operations_of_skips_undeclared_programs() -> None:
    @do
    def undeclared() -> EffectGenerator[int]:
        return 1
        yield

    assert undeclared.requires is None
    assert operations_of(undeclared) == frozenset()


def test_operations_of_rejects_unknown_values() -> None:
    with pytest.raises(TypeError, match="Cannot derive"):
        operations_of(42)


def test_shapes_are_values() -> None:
    assert capability("print") == Capability("print", frozenset({"print"}))
    assert resume_now(1) == resume_now(1)
