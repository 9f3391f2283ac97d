"""Last-write-wins debounce timer on the running event loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class Debouncer:
    """Run an async action once input has been quiet for ``delay`` seconds.

    Each ``trigger()`` cancels the pending timer and arms a new one. Actions
    that already started are not cancelled; they are tracked until done.
    """

    def __init__(self, delay: float, action: Callable[[], Awaitable[object]]):
        self.delay = delay
        self._action = action
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def flush(self) -> None:
        """Run a pending action now instead of waiting for the timer."""
        if self._handle is None:
            return
        self.cancel()
        await self._action()

    def _fire(self) -> None:
        self._handle = None
        task = asyncio.ensure_future(self._action())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait(self) -> None:
        """Wait for every started action to finish."""
        while True:
            running = [t for t in self._tasks if not t.done()]
            if not running:
                return
            await asyncio.gather(*running, return_exceptions=True)
