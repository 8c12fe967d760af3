"""Distributed lock implementations used to serialize teardown runs."""

from __future__ import annotations

import asyncio
import uuid

import redis.asyncio
import structlog

from microdeploy.config import RedisSettings
from microdeploy.domain.ports.services import DistributedLock
from microdeploy.infrastructure.observability.metrics import DISTRIBUTED_LOCK_OPERATIONS


logger = structlog.get_logger(__name__)

_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class InMemoryDistributedLock(DistributedLock):
    """Process-local lock for single-process deployments and tests."""

    def __init__(self) -> None:
        self._held: set[str] = set()
        self._guard = asyncio.Lock()

    async def acquire(self, resource_id: str, ttl_seconds: int = 30) -> bool:  # noqa: ARG002
        async with self._guard:
            if resource_id in self._held:
                DISTRIBUTED_LOCK_OPERATIONS.labels(operation="acquire", result="failure").inc()
                return False
            self._held.add(resource_id)
        DISTRIBUTED_LOCK_OPERATIONS.labels(operation="acquire", result="success").inc()
        return True

    async def release(self, resource_id: str) -> bool:
        async with self._guard:
            if resource_id not in self._held:
                return False
            self._held.discard(resource_id)
        DISTRIBUTED_LOCK_OPERATIONS.labels(operation="release", result="success").inc()
        return True

    async def is_locked(self, resource_id: str) -> bool:
        return resource_id in self._held


class RedisDistributedLock(DistributedLock):
    """Redis implementation of distributed locking using SET NX."""

    def __init__(self, client: redis.asyncio.Redis) -> None:
        self._client = client
        self._lock_values: dict[str, str] = {}

    async def acquire(self, resource_id: str, ttl_seconds: int = 30) -> bool:
        lock_key = f"lock:{resource_id}"
        lock_value = str(uuid.uuid4())

        acquired = await self._client.set(lock_key, lock_value, nx=True, ex=ttl_seconds)
        if acquired:
            self._lock_values[resource_id] = lock_value
            DISTRIBUTED_LOCK_OPERATIONS.labels(operation="acquire", result="success").inc()
            logger.debug("lock_acquired", resource_id=resource_id, ttl=ttl_seconds)
            return True

        DISTRIBUTED_LOCK_OPERATIONS.labels(operation="acquire", result="failure").inc()
        logger.debug("lock_not_acquired", resource_id=resource_id)
        return False

    async def release(self, resource_id: str) -> bool:
        lock_key = f"lock:{resource_id}"
        lock_value = self._lock_values.get(resource_id)
        if lock_value is None:
            return False

        # Atomic check-and-delete
        result = await self._client.eval(_RELEASE_SCRIPT, 1, lock_key, lock_value)
        if result:
            del self._lock_values[resource_id]
            DISTRIBUTED_LOCK_OPERATIONS.labels(operation="release", result="success").inc()
            logger.debug("lock_released", resource_id=resource_id)
            return True
        DISTRIBUTED_LOCK_OPERATIONS.labels(operation="release", result="failure").inc()
        return False

    async def is_locked(self, resource_id: str) -> bool:
        return bool(await self._client.exists(f"lock:{resource_id}"))


def create_redis_client(settings: RedisSettings) -> redis.asyncio.Redis:
    """Factory function to create a Redis client."""
    return redis.asyncio.Redis.from_url(
        settings.url,
        decode_responses=False,
        socket_timeout=5.0,
        socket_connect_timeout=5.0,
    )
