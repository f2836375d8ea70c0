# -*- coding: utf-8 -*-
"""
Debounce scheduler for autosave
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """Runs the last scheduled coroutine once no new call arrived for `delay` seconds"""

    def __init__(self, delay: float):
        self.delay = delay
        self._task: Optional[asyncio.Task] = None
        self._callback: Optional[Callable[[], Awaitable[None]]] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self, callback: Callable[[], Awaitable[None]]) -> None:
        """(Re)start the timer; must be called from a running event loop"""
        self.cancel()
        self._callback = callback
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        await asyncio.sleep(self.delay)
        # detached before firing, the callback may reschedule
        self._task = None
        await self._fire()

    async def _fire(self) -> None:
        callback, self._callback = self._callback, None
        if callback is None:
            return
        try:
            await callback()
        except Exception as e:
            logger.error(f"Debounced call failed: {e}")

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def flush(self) -> None:
        """Run the pending call now"""
        if not self.pending:
            return
        self.cancel()
        await self._fire()
