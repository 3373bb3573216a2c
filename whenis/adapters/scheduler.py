"""
Timer facility backed by an asyncio event loop.
"""

import asyncio
from typing import Callable, Optional


class AsyncioScheduler:
    """
    Schedules one-shot callbacks on an asyncio loop.

    The returned ``asyncio.TimerHandle`` satisfies the session's timer
    protocol (it has ``cancel()``).
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)
