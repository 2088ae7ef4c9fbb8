"""Recurring timers as owned, cancellable handles."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Callable, Protocol

from loguru import logger


class TimerHandle(Protocol):
    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


class RepeatingTimer:
    """Calls ``callback`` every ``interval_s`` seconds until cancelled."""

    def __init__(self, interval_s: float, callback: Callable[[], None]) -> None:
        self.interval_s = interval_s
        self._callback = callback
        self._cancelled = False
        self._task: asyncio.Task[None] = asyncio.get_running_loop().create_task(self._loop())

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_s)
            try:
                self._callback()
            except Exception as e:
                logger.exception(f"timer callback failed: {e}")

    def cancel(self) -> None:
        self._cancelled = True
        self._task.cancel()

    def cancelled(self) -> bool:
        return self._cancelled or self._task.done()

    async def wait(self) -> None:
        with contextlib.suppress(asyncio.CancelledError):
            await self._task


def asyncio_scheduler(interval_s: float, callback: Callable[[], None]) -> TimerHandle:
    return RepeatingTimer(interval_s, callback)
