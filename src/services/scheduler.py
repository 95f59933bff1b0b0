"""
Delayed callbacks for the live session: bot "thinking" time and the Pong tick loop.
Sessions only depend on the protocols, so tests can drive time by hand.
"""

import asyncio
from typing import Callable, Optional, Protocol


class ScheduledTask(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask: ...


class AsyncioScheduler:
    """Schedules on an asyncio event loop (the running one unless a loop is given)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)
