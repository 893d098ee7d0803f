"""
Effect descriptors and the sample capability shapes.

``base`` holds the engine's descriptor type; ``console``, ``time`` and
``random`` declare the example capabilities the bundled handlers implement.
"""

from capfx.effects.base import Op, describe, get, op, perform
from capfx.effects.console import (
    Print,
    Println,
    Read,
    ask,
    askln,
    delayed_print,
    print_,
    println,
    read,
)
from capfx.effects.random import RandomInt, random_int
from capfx.effects.time import Delay, delay

__all__ = [
    "Delay",
    "Op",
    "Print",
    "Println",
    "RandomInt",
    "Read",
    "ask",
    "askln",
    "delay",
    "delayed_print",
    "describe",
    "get",
    "op",
    "perform",
    "print_",
    "println",
    "random_int",
    "read",
]
