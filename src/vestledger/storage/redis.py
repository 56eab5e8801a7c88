"""
Redis storage.

Shared backend for ledgers running in several processes. Each collection is
one Redis hash (``{prefix}:{collection}``) mapping a key to its JSON
document, so writing or removing a schedule is a single HSET/HDEL and there
is no separate index to keep in step. Schedule locks are plain keys under
``{prefix}:locks:`` taken with SET NX EX.

Requires the ``redis`` extra.
"""

from __future__ import annotations

import json
import os
import uuid
from typing import Any

from vestledger.storage.base import StorageBackend, register_storage_backend

# Both scripts act only while the stored token is ours
_EXTEND_LOCK_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("expire", KEYS[1], ARGV[2])
end
return 0
"""

_RELEASE_LOCK_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class RedisStorage(StorageBackend):
    """Redis-backed schedules, journal and locks."""

    def __init__(self, redis_url: str | None = None, prefix: str = "vestledger") -> None:
        """
        Args:
            redis_url: Connection URL; falls back to VESTLEDGER_REDIS_URL
            prefix: Namespace for every key this backend writes
        """
        self._redis_url = redis_url or os.environ.get(
            "VESTLEDGER_REDIS_URL", "redis://localhost:6379/0"
        )
        self._prefix = prefix
        self._client = None

    def _get_client(self):
        """Lazy-load Redis client."""
        if self._client is None:
            try:
                import redis.asyncio as redis
            except ImportError:
                raise ImportError(
                    "redis package required for RedisStorage. "
                    "Install with: pip install 'vestledger[redis]'"
                ) from None
            self._client = redis.from_url(self._redis_url, decode_responses=True)
        return self._client

    def _hash(self, collection: str) -> str:
        return f"{self._prefix}:{collection}"

    def _lock(self, key: str) -> str:
        return f"{self._prefix}:locks:{key}"

    async def save(self, collection: str, key: str, data: dict[str, Any]) -> None:
        await self._get_client().hset(self._hash(collection), key, json.dumps(data))

    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        raw = await self._get_client().hget(self._hash(collection), key)
        return json.loads(raw) if raw is not None else None

    async def delete(self, collection: str, key: str) -> bool:
        return await self._get_client().hdel(self._hash(collection), key) > 0

    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        filters = filters or {}
        documents = await self._get_client().hgetall(self._hash(collection))

        results = []
        for key in sorted(documents):
            data = json.loads(documents[key])
            if all(data.get(field) == value for field, value in filters.items()):
                data["_key"] = key
                results.append(data)
        return results

    async def update(self, collection: str, key: str, data: dict[str, Any]) -> bool:
        # Callers hold the owning schedule's lock, so read-merge-write is safe
        existing = await self.get(collection, key)
        if existing is None:
            return False
        existing.update(data)
        await self.save(collection, key, existing)
        return True

    async def acquire_lock(self, key: str, ttl: int = 30) -> str | None:
        token = str(uuid.uuid4())
        acquired = await self._get_client().set(self._lock(key), token, nx=True, ex=ttl)
        return token if acquired else None

    async def extend_lock(self, key: str, token: str, ttl: int) -> bool:
        result = await self._get_client().eval(_EXTEND_LOCK_SCRIPT, 1, self._lock(key), token, ttl)
        return int(result) > 0

    async def release_lock(self, key: str, token: str) -> bool:
        result = await self._get_client().eval(_RELEASE_LOCK_SCRIPT, 1, self._lock(key), token)
        return int(result) > 0

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None


register_storage_backend("redis", RedisStorage)
