# server/utils/scheduler.py
"""Cancellable timer handles on top of the asyncio event loop."""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class TimerHandle:
    """A scheduled callback that can be cancelled exactly once."""

    def __init__(self, cancel: Callable[[], None]):
        self._cancel = cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self):
        if self._active:
            self._active = False
            self._cancel()

    def _finish(self):
        self._active = False


class AsyncioScheduler:
    """Schedules delayed and repeating callbacks on the running loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay`` seconds."""
        loop = asyncio.get_running_loop()
        handle: Optional[TimerHandle] = None

        def fire():
            handle._finish()
            callback()

        timer = loop.call_later(delay, fire)
        handle = TimerHandle(timer.cancel)
        return handle

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` every ``interval`` seconds until cancelled.

        A callback that raises is logged and ends the repetition; the handle
        then reports inactive.
        """
        task = asyncio.create_task(self._repeat(interval, callback))
        handle = TimerHandle(task.cancel)
        task.add_done_callback(lambda done: _repeat_finished(handle, done))
        return handle

    async def _repeat(self, interval: float, callback: Callable[[], None]):
        loop = asyncio.get_running_loop()
        next_run = loop.time() + interval

        while True:
            await asyncio.sleep(max(0.0, next_run - loop.time()))
            next_run += interval
            callback()


def _repeat_finished(handle: TimerHandle, task: asyncio.Task):
    handle._finish()
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error("Repeating timer stopped after a crash", exc_info=error)


class TimerSlot:
    """Owns at most one live timer.

    The previous timer is cancelled before the factory for the next one
    runs, so a slot can never leak a duplicate timer.
    """

    def __init__(self):
        self._handle: Optional[TimerHandle] = None

    @property
    def active(self) -> bool:
        return self._handle is not None and self._handle.active

    def start(self, create: Callable[[], TimerHandle]):
        self.cancel()
        self._handle = create()

    def cancel(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
