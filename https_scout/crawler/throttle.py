# https_scout/crawler/throttle.py
"""
Per-host request throttle.

Every host gets its own :class:`HostBudget`: a semaphore bounding the number of
in-flight requests and a lock under which consecutive request starts are spaced
by at least ``delay`` seconds.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, Optional

logger = logging.getLogger(__name__)

__all__ = ("HostBudget", "HostSlot", "HostThrottle")


@dataclass
class HostBudget:
    host: str
    max_concurrent: int
    min_delay: float
    last_request_time: Optional[float] = None
    in_flight: int = 0
    _slots: asyncio.Semaphore = field(init=False, repr=False)
    _start_lock: asyncio.Lock = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._slots = asyncio.Semaphore(self.max_concurrent)
        self._start_lock = asyncio.Lock()


class HostSlot:
    """Release token handed out by :meth:`HostThrottle.acquire`."""

    __slots__ = ("budget", "_released")

    def __init__(self, budget: HostBudget) -> None:
        self.budget = budget
        self._released = False

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self.budget.in_flight -= 1
        self.budget._slots.release()


class HostThrottle:
    """Owns one :class:`HostBudget` per host for the lifetime of a crawl."""

    def __init__(self, parallel: int, delay: float) -> None:
        if parallel < 1:
            raise ValueError("parallel must be >= 1")
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.parallel = parallel
        self.delay = delay
        self._budgets: Dict[str, HostBudget] = {}

    def budget(self, host: str) -> HostBudget:
        budget = self._budgets.get(host)
        if budget is None:
            budget = HostBudget(host, self.parallel, self.delay)
            self._budgets[host] = budget
        return budget

    async def acquire(self, host: str) -> HostSlot:
        """Wait for a free slot on *host* and for the start spacing to pass."""
        budget = self.budget(host)
        await budget._slots.acquire()
        try:
            async with budget._start_lock:
                loop = asyncio.get_running_loop()
                if budget.last_request_time is not None:
                    wait = budget.min_delay - (loop.time() - budget.last_request_time)
                    if wait > 0:
                        logger.debug("Throttling %s for %.3f s", host, wait)
                        await asyncio.sleep(wait)
                budget.last_request_time = loop.time()
                budget.in_flight += 1
        except BaseException:
            budget._slots.release()
            raise
        return HostSlot(budget)

    @asynccontextmanager
    async def slot(self, host: str) -> AsyncIterator[HostSlot]:
        token = await self.acquire(host)
        try:
            yield token
        finally:
            token.release()
