"""
capfx - effect-capability execution engine.

Computations are generator functions decorated with ``@do`` that yield effect
descriptors. A descriptor names the capability operations it needs; the
capabilities themselves are supplied later with ``bind`` and the bound program
is driven by ``run``::

    from capfx import bind, do, run
    from capfx.effects import Delay, Print, delay, print_
    from capfx.handlers import StdConsole, ThreadedDelay

    @do(uses=[Print, Delay])
    def hello(name: str):
        yield print_(f"Hello, {name}")
        yield delay(500)
        return "done"

    handle = run(bind(hello("world"), StdConsole(), ThreadedDelay()))
    handle.wait().value  # "done"
"""

from capfx._vendor import Err, Ok, Result
from capfx.bind import BoundProgram, Capabilities, bind, use
from capfx.capability import Capability, capability, operations_of
from capfx.do import do
from capfx.effects.base import Op, describe, get, op, perform
from capfx.errors import (
    InvalidYieldError,
    MissingCapabilityError,
    ResumptionProtocolError,
    RunCancelledError,
    RunPendingError,
)
from capfx.interpreter import RunHandle
from capfx.kleisli import KleisliProgram
from capfx.program import GeneratorProgram, Program, ProgramCall
from capfx.resume import Deferred, Immediate, Resume, resume_later, resume_now
from capfx.run import run, run_async, run_sync
from capfx.types import EffectCreationContext, EffectGenerator, RunResult, RunStatus

__version__ = "0.1.0"

__all__ = [
    # Resumptions
    "Resume",
    "Immediate",
    "Deferred",
    "resume_now",
    "resume_later",
    # Descriptors
    "Op",
    "op",
    "describe",
    "perform",
    "get",
    # Capability shapes
    "Capability",
    "capability",
    "operations_of",
    # Programs
    "Program",
    "GeneratorProgram",
    "ProgramCall",
    "KleisliProgram",
    "EffectGenerator",
    "do",
    # Binding
    "Capabilities",
    "BoundProgram",
    "bind",
    "use",
    # Driver
    "RunHandle",
    "RunResult",
    "RunStatus",
    "run",
    "run_sync",
    "run_async",
    # Results
    "Result",
    "Ok",
    "Err",
    "EffectCreationContext",
    # Errors
    "MissingCapabilityError",
    "RunCancelledError",
    "RunPendingError",
    "InvalidYieldError",
    "ResumptionProtocolError",
]
