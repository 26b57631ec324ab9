"""Concurrency gate — counting limit on in-flight actions.

Usage::

    gate = ConcurrencyGate(3)
    async with gate.slot():
        await do_work()
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class ConcurrencyGate:
    """asyncio.Semaphore of fixed capacity with in-use bookkeeping."""

    def __init__(self, capacity: int) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            raise TypeError(f"capacity must be an int, got {type(capacity).__name__}")
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._semaphore = asyncio.Semaphore(capacity)
        self._in_use = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def in_use(self) -> int:
        return self._in_use

    @property
    def available(self) -> int:
        return self._capacity - self._in_use

    async def acquire(self) -> None:
        """Wait until a slot is free and take it."""
        await self._semaphore.acquire()
        self._in_use += 1

    def release(self) -> None:
        if self._in_use == 0:
            raise RuntimeError("ConcurrencyGate released more often than acquired")
        self._in_use -= 1
        self._semaphore.release()

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Async context manager that blocks while the gate is at capacity."""
        await self.acquire()
        try:
            yield
        finally:
            self.release()

    def status(self) -> dict[str, int]:
        """Return current gate state for monitoring."""
        return {
            "capacity": self._capacity,
            "available": self.available,
            "in_use": self._in_use,
        }
