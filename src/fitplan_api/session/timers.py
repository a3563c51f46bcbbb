"""
Cancellable repeating ticks for the session engine.

The engine never talks to the event loop directly: it asks a Scheduler for a
TickHandle and cancels that handle when the owning phase ends. Tests inject a
manual scheduler and advance time explicitly.
"""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class TickHandle(ABC):
    """A scheduled repeating callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop the callback. Calling it again is a no-op."""
        ...

    @property
    @abstractmethod
    def active(self) -> bool:
        ...


class Scheduler(ABC):
    """Factory for repeating ticks."""

    @abstractmethod
    def every(self, interval: float, callback: TickCallback) -> TickHandle:
        ...


class AsyncioTickHandle(TickHandle):
    def __init__(self, task: asyncio.Task):
        self._task = task
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True
        if not self._task.done():
            self._task.cancel()

    @property
    def active(self) -> bool:
        return not self._cancelled and not self._task.done()


class AsyncioScheduler(Scheduler):
    """Runs ticks as tasks on the current event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def every(self, interval: float, callback: TickCallback) -> TickHandle:
        loop = self._loop or asyncio.get_running_loop()
        task = loop.create_task(self._run(interval, callback))
        return AsyncioTickHandle(task)

    @staticmethod
    async def _run(interval: float, callback: TickCallback) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                callback()
            except Exception:
                logger.exception("Tick callback failed")
