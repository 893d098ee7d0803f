"""Textual output and line input capabilities."""

from __future__ import annotations

from typing import Protocol

from capfx.capability import Capability
from capfx.do import do
from capfx.effects.base import Op, op
from capfx.effects.time import Delay, delay
from capfx.resume import Resume
from capfx.types import EffectGenerator


class PrintOps(Protocol):
    def print(self, text: str) -> Resume[None]: ...


class PrintlnOps(Protocol):
    def println(self, text: str) -> Resume[None]: ...


class ReadOps(Protocol):
    def read(self) -> Resume[str]: ...


Print = Capability.from_protocol(PrintOps, "Print")
Println = Capability.from_protocol(PrintlnOps, "Println")
Read = Capability.from_protocol(ReadOps, "Read")


def print_(text: str) -> Op[None]:
    """Replace the current output with ``text``."""
    return op(lambda caps: caps.print(text), requires=Print, name="print")


def println(text: str) -> Op[None]:
    """Append ``text`` as a new line of output."""
    return op(lambda caps: caps.println(text), requires=Println, name="println")


def read() -> Op[str]:
    """Read one line of input."""
    return op(lambda caps: caps.read(), requires=Read, name="read")


@do(uses=[Print, Read])
def ask(prompt: str) -> EffectGenerator[str]:
    yield print_(prompt)
    return (yield read())


@do(uses=[Println, Read])
def askln(prompt: str) -> EffectGenerator[str]:
    yield println(prompt)
    return (yield read())


@do(uses=[Print, Delay])
def delayed_print(text: str, ms: int = 2000) -> EffectGenerator[None]:
    yield print_(text)
    yield delay(ms)


__all__ = [
    "Print",
    "PrintOps",
    "Println",
    "PrintlnOps",
    "Read",
    "ReadOps",
    "ask",
    "askln",
    "delayed_print",
    "print_",
    "println",
    "read",
]
