"""
Shared test doubles and constants.
"""

from datetime import date

from redis.exceptions import ConnectionError as RedisConnectionError

# Fixed "today" for service-level tests
TODAY = date(2025, 6, 16)


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False

    async def ping(self):
        return not self._closed

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self._closed:
            return False
        self.store[key] = value
        return True

    async def delete(self, key):
        if key in self.store:
            del self.store[key]
            return 1
        return 0

    async def flushdb(self):
        self.store = {}

    async def aclose(self):
        self._closed = True
        self.store = {}


class BrokenRedis:
    """Redis that is down: every command fails."""

    async def ping(self):
        raise RedisConnectionError("redis unavailable")

    async def get(self, key):
        raise RedisConnectionError("redis unavailable")

    async def set(self, key, value, ex=None):
        raise RedisConnectionError("redis unavailable")

    async def delete(self, key):
        raise RedisConnectionError("redis unavailable")
