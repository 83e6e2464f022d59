"""
Timer queue adapters.

AsyncioTimers runs callbacks on the loop it was given, else on the running
event loop. ManualTimers is a virtual clock for tests and headless runs:
nothing fires until advance() is called.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Callable
from dataclasses import dataclass, field


class AsyncioTimers:
    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(
        self, delay_seconds: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        return self._get_loop().call_later(delay_seconds, callback)

    def monotonic(self) -> float:
        return self._get_loop().time()


@dataclass(order=True)
class _ManualHandle:
    deadline_ms: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimers:
    # Milliseconds, rounded, so advance(299) + advance(1) lands exactly on 300.
    def __init__(self) -> None:
        self._now_ms = 0.0
        self._queue: list[_ManualHandle] = []
        self._seq = itertools.count()

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> _ManualHandle:
        deadline = round(self._now_ms + delay_seconds * 1000, 6)
        handle = _ManualHandle(deadline, next(self._seq), callback)
        heapq.heappush(self._queue, handle)
        return handle

    def monotonic(self) -> float:
        return self._now_ms / 1000

    def advance(self, ms: float) -> int:
        """Move the clock forward and run everything that came due, in order."""
        target = round(self._now_ms + ms, 6)
        fired = 0
        while self._queue and self._queue[0].deadline_ms <= target:
            handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now_ms = handle.deadline_ms
            handle.callback()
            fired += 1
        self._now_ms = target
        return fired

    @property
    def pending(self) -> int:
        return sum(1 for handle in self._queue if not handle.cancelled)
