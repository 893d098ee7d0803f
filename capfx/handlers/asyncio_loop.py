"""Delay capability scheduled on an asyncio event loop."""

from __future__ import annotations

import asyncio

from capfx.resume import CancelFn, Continuation, Resume, resume_later


class AsyncioDelay:
    """Implements ``Delay`` with ``loop.call_later``; the run resumes on the loop thread.

    Without an explicit loop the running loop at registration time is used,
    so the run must be started from inside a coroutine (see ``run_async``).
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def delay(self, ms: float) -> Resume[None]:
        def register(resume: Continuation[None]) -> CancelFn:
            loop = self._loop or asyncio.get_running_loop()
            handle = loop.call_later(max(0.0, ms) / 1000.0, resume, None)
            return handle.cancel

        return resume_later(register)


__all__ = ["AsyncioDelay"]
