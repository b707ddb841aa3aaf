# https_scout/crawler/frontier.py
"""
Breadth-first frontier with a visited set.

Workers share one :class:`Frontier`; all state changes happen under a single
:class:`asyncio.Condition`, so a URL key is admitted at most once no matter how
many pages link to it concurrently.
"""
from __future__ import annotations

import asyncio
from collections import deque
from typing import Deque, Optional, Set

from https_scout.crawler.models import PageTask, TaskState
from https_scout.utils import normalize_url


class Frontier:
    """FIFO queue of :class:`PageTask` plus the set of keys already admitted."""

    def __init__(self, max_depth: int = 0) -> None:
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        self.max_depth = max_depth
        self._queue: Deque[PageTask] = deque()
        self._seen: Set[str] = set()
        self._in_flight = 0
        self._cond = asyncio.Condition()

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def visited_count(self) -> int:
        return len(self._seen)

    def admits_depth(self, depth: int) -> bool:
        return self.max_depth == 0 or depth <= self.max_depth

    async def try_enqueue(self, task: PageTask) -> bool:
        """Admit *task* unless its key was seen before or it is too deep."""
        if not self.admits_depth(task.depth):
            return False
        key = normalize_url(task.url)
        async with self._cond:
            if key in self._seen:
                return False
            self._seen.add(key)
            task.state = TaskState.QUEUED
            self._queue.append(task)
            self._cond.notify()
        return True

    async def dequeue(self) -> Optional[PageTask]:
        """Next task, or ``None`` once nothing is queued and nothing is in flight.

        While the queue is empty but other tasks are still being processed the
        caller waits, since those tasks may enqueue new pages.
        """
        async with self._cond:
            while not self._queue:
                if self._in_flight == 0:
                    self._cond.notify_all()
                    return None
                await self._cond.wait()
            self._in_flight += 1
            return self._queue.popleft()

    async def task_done(self) -> None:
        """Mark a dequeued task as finished, after its links were enqueued."""
        async with self._cond:
            if self._in_flight <= 0:
                raise ValueError("task_done() called more times than dequeue()")
            self._in_flight -= 1
            self._cond.notify_all()
