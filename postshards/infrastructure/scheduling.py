"""Last-intent-wins scheduling for bursty user input (search typing).

``Debouncer.schedule`` arms a timer; scheduling again before it fires
disarms the previous timer, so only the final intent runs. Once an action
has fired it is never cancelled, matching the no-abort rule for fetches.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, Set


Action = Callable[[], Awaitable[Any]]


class Debouncer:

    def __init__(self, delay: float = 0.12):
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """True while a timer is armed and has not fired yet"""
        return self._handle is not None

    def schedule(self, action: Action) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, loop, action)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, loop: asyncio.AbstractEventLoop, action: Action) -> None:
        self._handle = None
        task = loop.create_task(action())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait until the armed timer (if any) fires and every fired action finishes."""
        while self._handle is not None or self._tasks:
            if self._tasks:
                await asyncio.gather(*list(self._tasks))
            else:
                await asyncio.sleep(self.delay / 4 or 0)


__all__ = ["Debouncer"]
