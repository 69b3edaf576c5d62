# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Run Locks

Single-runner guarantee for scheduled jobs: two overlapping cleanup runs
must never process the same users at the same time.

- RedisRunLock: SET NX PX across every process sharing the Redis
- InMemoryRunLock: asyncio-only, for a single process and tests

Locks expire after ttl_seconds so a crashed runner cannot block the job
forever.
"""

import asyncio
import logging
import time
import uuid
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)

# Delete the key only if it still holds our token
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class RunLock(ABC):
    """Abstract run-level advisory lock."""

    @abstractmethod
    async def acquire(self, name: str, ttl_seconds: int) -> str | None:
        """Acquire the lock. Returns a token to release, or None if held."""
        pass

    @abstractmethod
    async def release(self, name: str, token: str) -> None:
        """Release the lock if the token still owns it."""
        pass

    @asynccontextmanager
    async def hold(self, name: str, ttl_seconds: int) -> AsyncIterator[bool]:
        """Yield True while holding the lock, False if another runner has it."""
        token = await self.acquire(name, ttl_seconds)
        if token is None:
            yield False
            return
        try:
            yield True
        finally:
            await self.release(name, token)


class RedisRunLock(RunLock):
    """Redis-backed run lock for multi-process deployments."""

    def __init__(self, redis_url: str, max_connections: int = 10, prefix: str = "thrive:lock:"):
        self.redis_url = redis_url
        self.max_connections = max_connections
        self.prefix = prefix
        self._redis = None

    async def _get_redis(self):
        """Lazy Redis connection."""
        if self._redis is None:
            import redis.asyncio as aioredis

            self._redis = aioredis.from_url(
                self.redis_url,
                max_connections=self.max_connections,
                decode_responses=True,
            )
        return self._redis

    async def acquire(self, name: str, ttl_seconds: int) -> str | None:
        redis = await self._get_redis()
        token = uuid.uuid4().hex
        acquired = await redis.set(f"{self.prefix}{name}", token, nx=True, px=ttl_seconds * 1000)
        if not acquired:
            logger.info(f"Run lock {name} is held by another runner")
            return None
        return token

    async def release(self, name: str, token: str) -> None:
        redis = await self._get_redis()
        await redis.eval(_RELEASE_SCRIPT, 1, f"{self.prefix}{name}", token)

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None


class InMemoryRunLock(RunLock):
    """
    In-process run lock.

    WARNING: Only excludes runners inside this process.
    Use Redis when more than one scheduler process can run jobs.
    """

    def __init__(self):
        self._held: dict[str, tuple[str, float]] = {}  # name -> (token, expiry)
        self._lock = asyncio.Lock()

    async def acquire(self, name: str, ttl_seconds: int) -> str | None:
        async with self._lock:
            now = time.monotonic()
            current = self._held.get(name)
            if current is not None and current[1] > now:
                logger.info(f"Run lock {name} is held by another runner")
                return None
            token = uuid.uuid4().hex
            self._held[name] = (token, now + ttl_seconds)
            return token

    async def release(self, name: str, token: str) -> None:
        async with self._lock:
            current = self._held.get(name)
            if current is not None and current[0] == token:
                del self._held[name]

    def is_held(self, name: str) -> bool:
        current = self._held.get(name)
        return current is not None and current[1] > time.monotonic()


def build_run_lock(redis_url: str | None, max_connections: int = 10) -> RunLock:
    """Redis lock when a URL is configured, else process-local."""
    if redis_url:
        return RedisRunLock(redis_url, max_connections=max_connections)
    logger.warning(
        "REDIS_URL not set, using in-memory run lock. "
        "Use Redis when more than one process schedules demo jobs."
    )
    return InMemoryRunLock()


__all__ = [
    "RunLock",
    "RedisRunLock",
    "InMemoryRunLock",
    "build_run_lock",
]
