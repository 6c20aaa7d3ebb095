from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Runs `callback` repeatedly with a fixed delay between the end of one run
    and the start of the next, so runs never overlap or queue up.

    stop() sets the cancellation token and waits for the loop to exit; a run
    already in progress is allowed to finish.
    """

    def __init__(self, callback: Callable[[], Awaitable[None]], interval_sec: float, name: str = "periodic"):
        self.callback = callback
        self.interval_sec = interval_sec
        self.name = name
        self.cycles = 0
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            logger.warning("%s already running", self.name)
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._loop(), name=self.name)

    async def stop(self) -> None:
        self._stop_event.set()
        if self._task is not None:
            await self._task
            self._task = None

    async def _loop(self) -> None:
        logger.debug("%s started (every %.3fs)", self.name, self.interval_sec)
        while not self._stop_event.is_set():
            await self.callback()
            self.cycles += 1
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_sec)
            except asyncio.TimeoutError:
                pass
        logger.debug("%s stopped after %d cycles", self.name, self.cycles)
