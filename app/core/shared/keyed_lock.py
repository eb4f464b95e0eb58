"""
Keyed asyncio lock.

One ``asyncio.Lock`` per key, created on demand and discarded once nobody
holds or waits for it.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)


class KeyedLock:
    """
    Mutual exclusion per key inside one event loop.

    Example:
        ```python
        doctor_locks = KeyedLock("doctor-schedule")

        async with doctor_locks.hold(doctor_id):
            conflicts = await repository.find_conflicts(doctor_id, window)
            ...
        ```
    """

    def __init__(self, name: str = "keyed-lock"):
        self._name = name
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                logger.debug(f"[{self._name}] acquired {key}")
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def is_locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
