"""
Per-entity write serialization.

Recording a transaction reads the entity's full history and writes a new
tail entry, so two writers on the same ledger must never interleave.
Ledgers of different entities are independent.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Dict, Hashable


class EntityLockRegistry:
    """
    Lazily created asyncio.Lock per ledger key.

    Locks stay in the registry for the life of the process; the number of
    customers and parties of a single bakery is small.
    """

    def __init__(self):
        self._locks: Dict[Hashable, asyncio.Lock] = {}

    def get(self, key: Hashable) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, key: Hashable):
        async with self.get(key):
            yield

    def is_locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def clear(self):
        self._locks.clear()


# Global registry shared by every LedgerService instance in the process
ledger_locks = EntityLockRegistry()
