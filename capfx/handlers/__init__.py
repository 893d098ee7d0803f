"""Sample capability implementations for the shapes in ``capfx.effects``."""

from capfx.handlers.asyncio_loop import AsyncioDelay
from capfx.handlers.standard import StdConsole, SystemRandomInt
from capfx.handlers.threaded import ThreadedDelay

__all__ = ["AsyncioDelay", "StdConsole", "SystemRandomInt", "ThreadedDelay"]
